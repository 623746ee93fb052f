"""
Pytest configuration and shared fixtures for controller_proxy tests.

This module provides:
- Custom pytest markers for test categorization
- A recording HTTP handler plugged into httpx.MockTransport, so tests can
  inspect every request a dispatch proxy sends and script the responses
- Shared transport fixtures built on it
"""

from __future__ import annotations

from typing import Callable

import httpx
import pytest

from controller_proxy.transport import HttpTransport

BASE_URL = "http://users.test"


def pytest_configure(config: pytest.Config) -> None:
    """
    Register custom pytest markers.

    This function is called during pytest initialization to register
    custom markers that can be used to categorize and filter tests.
    """
    config.addinivalue_line(
        "markers",
        "integration: mark test as integration test (runs a FastAPI app in-process)",
    )


# ============================================================================
# Shared Fixtures
# ============================================================================


class RecordingHandler:
    """
    httpx.MockTransport handler that records requests and replays responses.

    Responses are consumed in order; the last one is repeated once the
    queue is exhausted. A response may be a callable taking the request,
    which lets a test raise transport errors.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._responses: list[httpx.Response | Callable[[httpx.Request], httpx.Response]] = [
            httpx.Response(200, json=None)
        ]

    def respond_with(
        self, *responses: httpx.Response | Callable[[httpx.Request], httpx.Response]
    ) -> None:
        self._responses = list(responses)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self._responses.pop(0) if len(self._responses) > 1 else self._responses[0]
        if callable(response) and not isinstance(response, httpx.Response):
            return response(request)
        # a fresh copy per exchange, the client binds each response to its request
        return httpx.Response(
            response.status_code, headers=response.headers, content=response.content
        )

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def http_recorder() -> RecordingHandler:
    """Create a recording handler with a default ``200 null`` response."""
    return RecordingHandler()


@pytest.fixture
def mock_client(http_recorder: RecordingHandler) -> httpx.Client:
    """Create an httpx client routed to the recording handler."""
    client = httpx.Client(transport=httpx.MockTransport(http_recorder))
    yield client
    client.close()


@pytest.fixture
def transport(mock_client: httpx.Client) -> HttpTransport:
    """Create an HttpTransport sending through the mock client."""
    return HttpTransport(http_client=mock_client)
