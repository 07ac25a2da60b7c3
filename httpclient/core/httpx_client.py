# httpclient/core/httpx_client.py
import asyncio
from typing import Any, AsyncIterator, Optional

import httpx

from httpclient.core import config
from httpclient.core.exceptions import DispatchError, ResponseReadError
from httpclient.core.http_client import BaseHTTPClient, Headers, QueryParams
from httpclient.core.logger import get_logger

logger = get_logger(__name__)

STREAM_CHUNK_SIZE = 65_536


async def _aiter_stream(stream: Any) -> AsyncIterator[bytes]:
    """Expose un stream synchrone (fichier, BytesIO) comme itérable asynchrone pour httpx.AsyncClient."""
    while True:
        # lecture bloquante (fichier) déportée dans un thread pour ne pas geler la boucle
        chunk = await asyncio.to_thread(stream.read, STREAM_CHUNK_SIZE)
        if not chunk:
            break
        yield chunk


class AsyncHTTPClient(BaseHTTPClient):
    """Client HTTP asynchrone basé sur httpx pour les appels API externes."""

    def __init__(self, base_url: str, transport: Optional[httpx.AsyncBaseTransport] = None,
                 timeout: Optional[float] = None):
        super().__init__(base_url)
        self._timeout = config.DEFAULT_TIMEOUT if timeout is None else timeout
        self._client = self._new_client(transport)

    def _new_client(self, transport: Optional[httpx.AsyncBaseTransport]) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=transport, timeout=self._timeout, follow_redirects=True)

    def _stream_content(self, stream: Any) -> Any:
        return _aiter_stream(stream)

    async def set_transport(self, transport: httpx.AsyncBaseTransport) -> None:
        """Remplace le transport (mock, tests). À faire avant tout usage concurrent."""
        previous = self._client
        self._client = self._new_client(transport)
        await previous.aclose()

    async def execute(self, method: str, path: str, query: Optional[QueryParams] = None,
                      headers: Optional[Headers] = None, body: Any = None,
                      response_target: Any = None, error_target: Any = None,
                      *, timeout: Any = httpx.USE_CLIENT_DEFAULT) -> None:
        prepared = self._prepare(self._client, method, path, query, headers, body, timeout)

        try:
            # Utilisation de 'await' pour un I/O non-bloquant
            response = await self._client.send(prepared.request, stream=True)
        except httpx.HTTPError as e:
            logger.error(f"HTTPX Error on {prepared.safe_url}: {e}")
            raise DispatchError(prepared.safe_url, 0, "http do request failed", e) from e

        try:
            try:
                content = await response.aread()
            except (httpx.HTTPError, httpx.StreamError) as e:
                raise ResponseReadError(prepared.safe_url, response.status_code,
                                        "read response body failed", e) from e
            self._handle_response(prepared, response, content, response_target, error_target)
        finally:
            await response.aclose()

    async def get(self, path: str, query: Optional[QueryParams] = None, headers: Optional[Headers] = None,
                  response_target: Any = None, error_target: Any = None,
                  *, timeout: Any = httpx.USE_CLIENT_DEFAULT) -> None:
        await self.execute("GET", path, query, headers, None, response_target, error_target, timeout=timeout)

    async def post(self, path: str, query: Optional[QueryParams] = None, headers: Optional[Headers] = None,
                   body: Any = None, response_target: Any = None, error_target: Any = None,
                   *, timeout: Any = httpx.USE_CLIENT_DEFAULT) -> None:
        await self.execute("POST", path, query, headers, body, response_target, error_target, timeout=timeout)

    async def patch(self, path: str, query: Optional[QueryParams] = None, headers: Optional[Headers] = None,
                    body: Any = None, response_target: Any = None, error_target: Any = None,
                    *, timeout: Any = httpx.USE_CLIENT_DEFAULT) -> None:
        await self.execute("PATCH", path, query, headers, body, response_target, error_target, timeout=timeout)

    async def delete(self, path: str, query: Optional[QueryParams] = None, headers: Optional[Headers] = None,
                     body: Any = None, response_target: Any = None, error_target: Any = None,
                     *, timeout: Any = httpx.USE_CLIENT_DEFAULT) -> None:
        await self.execute("DELETE", path, query, headers, body, response_target, error_target, timeout=timeout)

    async def aclose(self) -> None:
        await self._client.aclose()

    # Support pour l'utilisation dans un bloc 'async with'
    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Fermeture propre de la connexion."""
        await self._client.aclose()
