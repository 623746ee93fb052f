"""
HTTP transport built on httpx.

Each exchange is scoped to one invocation. Without a caller-supplied client
the transport opens a short-lived ``httpx.Client`` for the exchange and closes
it afterwards; with one, the client is reused and never closed here, so
pooling, TLS and timeouts stay the caller's configuration.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx

from ._internal.transport_retry import TransportRetryManager
from .config import HttpTransportConfig
from .logger import get_logger

if TYPE_CHECKING:
    from .schemas import RemoteRequest

logger = get_logger("transport")


class HttpTransport:
    """
    Blocking HTTP transport executing RemoteRequests.

    Parameters
    ----------
    config : HttpTransportConfig | None
        Settings for the clients this transport creates, and its retry policy.
    http_client : httpx.Client | None
        A long-lived client to send every exchange through. Useful for
        connection pooling, custom auth flows, or for tests
        (``httpx.Client(transport=httpx.MockTransport(...))``, FastAPI's
        ``TestClient``).

    Examples
    --------
    >>> transport = HttpTransport(HttpTransportConfig(timeout=5.0))
    >>> response = transport.exchange(request)
    """

    def __init__(
        self,
        config: HttpTransportConfig | None = None,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._config = config or HttpTransportConfig()
        self._config.validate()
        self._client = http_client
        self._retry = TransportRetryManager(self._config.retry)

    @property
    def config(self) -> HttpTransportConfig:
        return self._config

    def exchange(self, request: RemoteRequest) -> httpx.Response:
        """
        Send the request and return the response.

        Raises
        ------
        httpx.HTTPStatusError
            If the response has a 4xx or 5xx status.
        httpx.TransportError
            If no response could be obtained.
        """
        return self._retry.wrap(lambda: self._exchange_once(request))()

    def _exchange_once(self, request: RemoteRequest) -> httpx.Response:
        if self._client is not None:
            return self._send(self._client, request)
        with httpx.Client(**self._config.client_kwargs()) as client:
            return self._send(client, request)

    def _send(self, client: httpx.Client, request: RemoteRequest) -> httpx.Response:
        kwargs = {}
        if request.has_body:
            kwargs["json"] = request.body
        http_request = client.build_request(
            request.method.value,
            request.url,
            params=request.query_params or None,
            headers=request.headers,
            **kwargs,
        )
        logger.debug(f"Sending {http_request.method} {http_request.url}")
        response = client.send(http_request)
        logger.debug(f"Received HTTP {response.status_code} from {http_request.url}")
        response.raise_for_status()
        return response
