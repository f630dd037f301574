"""Shared test fixtures and utilities."""

import httpx
import pytest
from fakes import RecordingTransport

from kopru import HttpClient, HttpxTransport


@pytest.fixture
def transport():
    """Create a recording transport answering 200 with an empty JSON object."""
    return RecordingTransport()


@pytest.fixture
def client(transport):
    """Create a client on top of the recording transport."""
    return HttpClient(base_url="https://api.example.com", transport=transport)


@pytest.fixture
def mock_http():
    """Build clients whose httpx transport is served by ``handler``."""

    def factory(handler, **options):
        http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return HttpClient(transport=HttpxTransport(http), **options)

    return factory
