"""Tests for the action result adapter."""

from unittest.mock import AsyncMock

import pytest
from fakes import FakeResponse

from kopru import (
    ActionError,
    ActionResult,
    HttpResponse,
    ProtocolError,
    RequestConfig,
    RequestTimeoutError,
    create_action_result,
    execute_action,
)


def _response(data, status=200, status_text="OK"):
    return HttpResponse(
        data=data,
        status=status,
        status_text=status_text,
        headers={"content-type": "application/json"},
        config=RequestConfig(method="GET", url="/test"),
    )


def _protocol_error(status, data=None):
    return ProtocolError(
        RequestConfig(method="GET", url="/test"),
        status=status,
        status_text="Error",
        headers={},
        data=data,
    )


def test_response_becomes_data_result():
    """Test response becomes data result."""
    result = create_action_result(_response({"name": "Test User"}))

    assert result.ok
    assert result.data == {"name": "Test User"}
    assert result.error is None
    assert result.status == 200
    assert result.status_text == "OK"
    assert result.headers == {"content-type": "application/json"}


def test_http_error_becomes_error_result():
    """Test http error becomes error result."""
    result = create_action_result(_protocol_error(404, {"code": "RESOURCE_NOT_FOUND"}))

    assert not result.ok
    assert result.data is None
    assert result.error == ActionError(
        message="Request failed with status 404",
        status=404,
        details={"code": "RESOURCE_NOT_FOUND"},
    )


def test_http_error_without_data():
    """Test http error without data."""
    result = create_action_result(_protocol_error(500))

    assert result.error == ActionError(message="Request failed with status 500", status=500, details=None)


def test_timeout_error_has_no_status():
    """Test timeout error has no status."""
    result = create_action_result(RequestTimeoutError(100, RequestConfig()))

    assert result.error == ActionError(message="Request timeout of 100ms exceeded")


def test_plain_exception_uses_its_message_or_fallback():
    """Test plain exception uses its message or fallback."""
    assert create_action_result(ValueError("bad")).error.message == "bad"
    assert create_action_result(ValueError()).error.message == "Request failed"


def test_unrecognized_value_becomes_unknown_error():
    """Test unrecognized value becomes unknown error."""
    result = create_action_result("Unexpected error")  # type: ignore[arg-type]

    assert result == ActionResult(error=ActionError(message="An unknown error occurred", details={}))


@pytest.mark.asyncio
async def test_execute_action_returns_data_on_success():
    """Test execute action returns data on success."""
    action = AsyncMock(return_value=_response({"id": 1, "name": "Test User"}))

    result = await execute_action(action)

    action.assert_awaited_once()
    assert result.data == {"id": 1, "name": "Test User"}
    assert result.error is None


@pytest.mark.asyncio
async def test_execute_action_captures_http_error():
    """Test execute action captures http error."""
    action = AsyncMock(side_effect=_protocol_error(401, {"message": "Invalid token"}))

    result = await execute_action(action)

    assert result.data is None
    assert result.error == ActionError(
        message="Request failed with status 401",
        status=401,
        details={"message": "Invalid token"},
    )


@pytest.mark.asyncio
async def test_execute_action_captures_unexpected_exception():
    """Test execute action captures unexpected exception."""
    action = AsyncMock(side_effect=KeyError())

    result = await execute_action(action)

    assert result.error.message == "Request failed"


@pytest.mark.asyncio
async def test_execute_action_with_client(client, transport):
    """Test execute action with client."""
    transport.handler = lambda request: FakeResponse(
        422, {"errors": [{"field": "email", "message": "Invalid email"}]}, status_text="Unprocessable Entity"
    )

    result = await execute_action(lambda: client.post("/users", {"name": "Test", "email": "invalid"}))

    assert result.error == ActionError(
        message="Request failed with status 422",
        status=422,
        details={"errors": [{"field": "email", "message": "Invalid email"}]},
    )
