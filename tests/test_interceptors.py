"""Tests for the interceptor chain."""

import pytest

from kopru import InterceptorChain, InterceptorManager


@pytest.mark.asyncio
async def test_interceptors_run_in_registration_order():
    """Test interceptors run in registration order."""
    chain = InterceptorChain()
    chain.use(lambda value: value + ["a"])
    chain.use(lambda value: value + ["b"])
    chain.use(lambda value: value + ["c"])

    assert await chain.run([]) == ["a", "b", "c"]


@pytest.mark.asyncio
async def test_async_and_sync_handlers_mix():
    """Test async and sync handlers mix."""
    chain = InterceptorChain()

    async def double(value):
        return value * 2

    chain.use(double)
    chain.use(lambda value: value + 1)

    assert await chain.run(5) == 11


@pytest.mark.asyncio
async def test_empty_chain_returns_value():
    """Test empty chain returns value."""
    assert await InterceptorChain().run("value") == "value"


@pytest.mark.asyncio
async def test_interceptor_without_fulfilled_handler_is_skipped():
    """Test interceptor without fulfilled handler is skipped."""
    chain = InterceptorChain()
    chain.use(None, lambda error: "recovered")
    chain.use(lambda value: value + "!")

    assert await chain.run("hi") == "hi!"


@pytest.mark.asyncio
async def test_rejection_handler_recovers_and_chain_continues():
    """Test rejection handler recovers and chain continues."""
    chain = InterceptorChain()
    seen = []

    def explode(value):
        raise ValueError("boom")

    def recover(error):
        seen.append(error)
        return "recovered"

    chain.use(explode, recover)
    chain.use(lambda value: value.upper())

    assert await chain.run("start") == "RECOVERED"
    assert isinstance(seen[0], ValueError)


@pytest.mark.asyncio
async def test_unhandled_failure_short_circuits_remaining_interceptors():
    """Test unhandled failure short circuits remaining interceptors."""
    chain = InterceptorChain()
    calls = []

    def explode(value):
        raise ValueError("boom")

    chain.use(explode)
    chain.use(lambda value: calls.append(value) or value, lambda error: calls.append(error))

    with pytest.raises(ValueError, match="boom"):
        await chain.run("start")

    assert calls == []


@pytest.mark.asyncio
async def test_rejection_handler_can_reraise():
    """Test rejection handler can reraise."""
    chain = InterceptorChain()

    def explode(value):
        raise ValueError("boom")

    async def reraise(error):
        raise RuntimeError("wrapped") from error

    chain.use(explode, reraise)
    chain.use(lambda value: pytest.fail("must not run"))

    with pytest.raises(RuntimeError, match="wrapped"):
        await chain.run("start")


@pytest.mark.asyncio
async def test_handler_returning_none_counts_as_failure():
    """Test handler returning none counts as failure."""
    chain = InterceptorChain("request")
    chain.use(lambda value: None)

    with pytest.raises(TypeError, match="request interceptor returned None"):
        await chain.run("start")


@pytest.mark.asyncio
async def test_recovery_returning_none_counts_as_failure():
    """Test recovery returning none counts as failure."""
    chain = InterceptorChain("request")
    later = []
    chain.use(lambda value: 1 / 0, lambda error: None)
    chain.use(lambda value: later.append(value) or value)

    with pytest.raises(TypeError, match="request interceptor recovery returned None") as exc_info:
        await chain.run("start")

    assert isinstance(exc_info.value.__cause__, ZeroDivisionError)
    assert later == []


@pytest.mark.asyncio
async def test_ejected_interceptor_never_runs():
    """Test ejected interceptor never runs."""
    chain = InterceptorChain()
    calls = []
    handle = chain.use(lambda value: calls.append("ejected") or value)
    chain.use(lambda value: calls.append("kept") or value)

    chain.eject(handle)
    await chain.run("x")

    assert calls == ["kept"]


def test_handles_start_at_zero_and_increase():
    """Test handles start at zero and increase."""
    chain = InterceptorChain()

    assert chain.use(lambda v: v) == 0
    assert chain.use(lambda v: v) == 1
    assert chain.use(lambda v: v) == 2


def test_handles_are_not_reused_after_eject():
    """Test handles are not reused after eject."""
    chain = InterceptorChain()
    first = chain.use(lambda v: v)
    chain.eject(first)

    assert chain.use(lambda v: v) != first


@pytest.mark.asyncio
async def test_out_of_order_ejection_removes_the_right_interceptors():
    """Test out of order ejection removes the right interceptors."""
    chain = InterceptorChain()
    calls = []
    handles = [chain.use(lambda v, n=n: calls.append(n) or v) for n in range(4)]

    chain.eject(handles[1])
    chain.eject(handles[3])
    chain.eject(handles[0])
    await chain.run("x")

    assert calls == [2]


def test_eject_unknown_handle_is_noop():
    """Test eject unknown handle is noop."""
    chain = InterceptorChain()
    chain.use(lambda v: v)

    chain.eject(42)
    chain.eject(-1)

    assert len(chain) == 1


def test_eject_twice_is_noop():
    """Test eject twice is noop."""
    chain = InterceptorChain()
    handle = chain.use(lambda v: v)

    chain.eject(handle)
    chain.eject(handle)

    assert len(chain) == 0


def test_clear_removes_everything():
    """Test clear removes everything."""
    chain = InterceptorChain()
    chain.use(lambda v: v)
    chain.use(lambda v: v)

    chain.clear()

    assert len(chain) == 0
    assert list(chain) == []


def test_manager_chains_are_independent():
    """Test manager chains are independent."""
    first = InterceptorManager()
    second = InterceptorManager()
    first.request.use(lambda v: v)

    assert len(first.request) == 1
    assert len(first.response) == 0
    assert len(second.request) == 0
