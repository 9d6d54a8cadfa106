"""httpx-backed transport implementation."""

import asyncio
from typing import Optional

import httpx

from restrecord.core.config import Settings, get_settings
from restrecord.core.logging import get_logger
from restrecord.domain.exceptions import TransportError
from restrecord.infrastructure.transport.transport import Transport, TransportResponse

logger = get_logger(__name__)


def _running_loop() -> Optional[asyncio.AbstractEventLoop]:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


class HttpxTransport(Transport):
    """Transport that sends requests through an ``httpx.AsyncClient``.

    Relative URLs are resolved against ``settings.base_url``. The client is
    created lazily and reused within one event loop; its connection pool
    is bound to that loop, so a new client is built when the loop changes
    (for example across ``asyncio.run`` calls).

    Pass ``client`` to supply your own; a supplied client is never rebuilt.
    ``http_transport`` replaces the network layer of the clients this
    transport builds (tests use ``httpx.MockTransport``).
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[httpx.AsyncClient] = None,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.http_transport = http_transport
        self._client = client
        self._owns_client = client is None
        self._client_loop: Optional[asyncio.AbstractEventLoop] = None

    def _build_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.settings.base_url,
            timeout=self.settings.request_timeout,
            verify=self.settings.verify_ssl,
            headers={"User-Agent": self.settings.user_agent},
            transport=self.http_transport,
        )

    @property
    def client(self) -> httpx.AsyncClient:
        loop = _running_loop()
        if self._owns_client and self._client is not None and self._client_loop is not loop:
            # the old pool belongs to another, possibly closed, loop
            logger.debug("Rebuilding HTTP client for new event loop")
            self._client = None
        if self._client is None:
            self._client = self._build_client()
            self._owns_client = True
            self._client_loop = loop
        return self._client

    async def send(
        self,
        method: str,
        url: str,
        body: Optional[str] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> TransportResponse:
        try:
            response = await self.client.request(
                method,
                url,
                content=body.encode("utf-8") if body is not None else None,
                headers=headers,
            )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning("HTTP request failed", method=method, url=url, error=str(e))
            raise TransportError(
                f"{method} {url} failed: {e}",
                method=method,
                url=url,
            ) from e
        except Exception as e:
            logger.error(
                "HTTP request failed unexpectedly",
                method=method,
                url=url,
                error=repr(e),
            )
            raise TransportError(
                f"{method} {url} failed: {e!r}",
                method=method,
                url=url,
            ) from e

        logger.debug(
            "HTTP request completed",
            method=method,
            url=url,
            status_code=response.status_code,
        )
        return TransportResponse(
            status_code=response.status_code,
            headers=dict(response.headers),
            text=response.text,
        )

    async def close(self) -> None:
        if self._client is not None:
            if self._owns_client and self._client_loop is not _running_loop():
                # its loop is gone; nothing left to close cleanly
                self._client = None
                return
            await self._client.aclose()
            self._client = None
