# httpclient/core/http_client.py
import re
from typing import Any, Callable, Mapping, NamedTuple, Optional, Sequence, Union
from urllib.parse import quote

import httpx

from httpclient.core import config
from httpclient.core.body import EncodedBody, decode_into, decode_stream_into, encode_body, is_stream
from httpclient.core.drain import DrainError, drain_body
from httpclient.core.dump import dump_request
from httpclient.core.exceptions import (
    ClientError,
    ConstructError,
    DecodeError,
    DispatchError,
    EncodeError,
    ErrorResponseBody,
    HTTPStatusError,
    ResponseReadError,
)
from httpclient.core.logger import get_logger

logger = get_logger(__name__)

HEADER_CONTENT_TYPE = "Content-Type"
MIME_APPLICATION_JSON = "application/json"

# token RFC 7230 : une méthode hors de cet alphabet ne peut pas être envoyée
_METHOD_TOKEN = re.compile(r"^[!#$%&'*+\-.^_`|~0-9A-Za-z]+$")

# caractères laissés tels quels dans le path (RFC 3986 pchar + "/", escapes existants conservés)
_PATH_SAFE = "/:@!$&'()*+,;=-._~%"

Values = Union[str, Sequence[str]]
QueryParams = Mapping[str, Values]
Headers = Mapping[str, Values]
AuthFunction = Callable[[httpx.Request], None]


def is_error_code(status_code: int) -> bool:
    return status_code >= 400


class PreparedRequest(NamedTuple):
    request: httpx.Request
    safe_url: str
    body_snapshot: Optional[bytes]
    dump: bool


class BaseHTTPClient:
    """
    Pipeline commun aux clients synchrone et asynchrone.

    Tout ce qui précède l'envoi (URL, body, auth, headers) et tout ce qui suit la lecture
    de la réponse (dump, statut, décodage) vit ici ; seuls l'envoi et la lecture du body
    diffèrent entre HTTPClient et AsyncHTTPClient.
    """

    def __init__(self, base_url: str):
        try:
            url = httpx.URL(base_url.rstrip("/"))
        except httpx.InvalidURL as e:
            raise ClientError(message="cannot parse url", cause=e) from e
        if not url.scheme or not url.host:
            raise ClientError(message="cannot parse url",
                              cause=ValueError(f"missing scheme or host in {base_url!r}"))

        # seuls scheme + host (+ port) sont conservés, le path est fourni à chaque appel
        self._scheme = url.scheme
        self._host = url.host
        self._port = url.port
        self.base_url = f"{url.scheme}://{url.netloc.decode('ascii')}"
        self._auth_fn: Optional[AuthFunction] = None

    def set_auth_function(self, auth_fn: Optional[AuthFunction]) -> None:
        """
        Hook appelé sur chaque requête construite, avant la fusion des headers de l'appelant.
        À configurer une fois, avant tout usage concurrent du client.
        """
        self._auth_fn = auth_fn

    def _build_url(self, path: str) -> httpx.URL:
        if path and not path.startswith("/"):
            path = "/" + path
        # ? et # font partie du path : ils sont échappés (%3F, %23), jamais interprétés
        path = quote(path, safe=_PATH_SAFE)
        components = {"scheme": self._scheme, "host": self._host, "path": path}
        if self._port is not None:
            components["port"] = self._port
        return httpx.URL(**components)

    def _stream_content(self, stream: Any) -> Any:
        return stream

    def _prepare(self, client: Union[httpx.Client, httpx.AsyncClient], method: str, path: str,
                 query: Optional[QueryParams], headers: Optional[Headers], body: Any,
                 timeout: Any) -> PreparedRequest:
        method = method or "GET"

        try:
            url = self._build_url(path)
        except httpx.InvalidURL as e:
            raise ConstructError(f"{self.base_url}{path}", 0, "create http request failed", e) from e

        # URL sauvegardée sans query : elle peut contenir des credentials
        safe_url = str(url)

        content: Optional[EncodedBody] = None
        if body is not None:
            try:
                content = encode_body(body)
            except (TypeError, ValueError) as e:
                raise EncodeError(safe_url, 0, "encode request body failed", e) from e

        if not _METHOD_TOKEN.match(method):
            raise ConstructError(safe_url, 0, "create http request failed",
                                 ValueError(f"invalid method {method!r}"))

        dump = config.DUMP_REQUEST
        snapshot: Optional[bytes] = None
        if dump and content is not None:
            if is_stream(content):
                try:
                    content, copy = drain_body(content)
                except DrainError as e:
                    raise ResponseReadError(safe_url, 0, "read request body failed", e.cause) from e
                snapshot = copy.read()
            else:
                snapshot = content

        if content is not None and is_stream(content):
            content = self._stream_content(content)

        try:
            request = client.build_request(method, url, params=query, content=content, timeout=timeout)
        except (httpx.InvalidURL, TypeError, ValueError) as e:
            raise ConstructError(safe_url, 0, "create http request failed", e) from e

        if self._auth_fn is not None:
            try:
                self._auth_fn(request)
            except Exception as e:
                raise ConstructError(safe_url, 0, "auth function failed", e) from e

        for key, value in (headers or {}).items():
            request.headers[key] = value if isinstance(value, str) else ", ".join(value)

        if content is not None and HEADER_CONTENT_TYPE not in request.headers:
            request.headers[HEADER_CONTENT_TYPE] = MIME_APPLICATION_JSON

        logger.debug(f"➡️ {request.method} {safe_url}")
        return PreparedRequest(request, safe_url, snapshot, dump)

    def _handle_response(self, prepared: PreparedRequest, response: httpx.Response, content: bytes,
                         response_target: Any, error_target: Any) -> None:
        status_code = response.status_code
        logger.debug(f"⬅️ Response {status_code} | {prepared.safe_url}")

        if prepared.dump:
            dump_request(prepared.request, prepared.body_snapshot, response, content)

        if is_error_code(status_code):
            if error_target is not None:
                try:
                    decode_into(error_target, content)
                except (TypeError, ValueError) as e:
                    raise DecodeError(prepared.safe_url, status_code, "decode response body failed", e) from e

            logger.error(f"API Error {status_code} on {prepared.safe_url}")
            cause = ErrorResponseBody(response.text)
            raise HTTPStatusError(prepared.safe_url, status_code, "http returned error status code", cause) from cause

        if response_target is not None:
            try:
                decode_stream_into(response_target, content)
            except (TypeError, ValueError) as e:
                raise DecodeError(prepared.safe_url, status_code, "decode response body failed", e) from e


class HTTPClient(BaseHTTPClient):
    """Client HTTP synchrone basé sur httpx.Client. Le transport est injectable (tests / mock)."""

    def __init__(self, base_url: str, transport: Optional[httpx.BaseTransport] = None,
                 timeout: Optional[float] = None):
        super().__init__(base_url)
        self._timeout = config.DEFAULT_TIMEOUT if timeout is None else timeout
        self._client = self._new_client(transport)

    def _new_client(self, transport: Optional[httpx.BaseTransport]) -> httpx.Client:
        return httpx.Client(transport=transport, timeout=self._timeout, follow_redirects=True)

    def set_transport(self, transport: httpx.BaseTransport) -> None:
        """Remplace le transport (mock, tests). À faire avant tout usage concurrent."""
        previous = self._client
        self._client = self._new_client(transport)
        previous.close()

    def execute(self, method: str, path: str, query: Optional[QueryParams] = None,
                headers: Optional[Headers] = None, body: Any = None,
                response_target: Any = None, error_target: Any = None,
                *, timeout: Any = httpx.USE_CLIENT_DEFAULT) -> None:
        prepared = self._prepare(self._client, method, path, query, headers, body, timeout)

        try:
            response = self._client.send(prepared.request, stream=True)
        except httpx.HTTPError as e:
            logger.error(f"HTTPX Error on {prepared.safe_url}: {e}")
            raise DispatchError(prepared.safe_url, 0, "http do request failed", e) from e

        try:
            try:
                content = response.read()
            except (httpx.HTTPError, httpx.StreamError) as e:
                raise ResponseReadError(prepared.safe_url, response.status_code,
                                        "read response body failed", e) from e
            self._handle_response(prepared, response, content, response_target, error_target)
        finally:
            response.close()

    def get(self, path: str, query: Optional[QueryParams] = None, headers: Optional[Headers] = None,
            response_target: Any = None, error_target: Any = None,
            *, timeout: Any = httpx.USE_CLIENT_DEFAULT) -> None:
        self.execute("GET", path, query, headers, None, response_target, error_target, timeout=timeout)

    def post(self, path: str, query: Optional[QueryParams] = None, headers: Optional[Headers] = None,
             body: Any = None, response_target: Any = None, error_target: Any = None,
             *, timeout: Any = httpx.USE_CLIENT_DEFAULT) -> None:
        self.execute("POST", path, query, headers, body, response_target, error_target, timeout=timeout)

    def patch(self, path: str, query: Optional[QueryParams] = None, headers: Optional[Headers] = None,
              body: Any = None, response_target: Any = None, error_target: Any = None,
              *, timeout: Any = httpx.USE_CLIENT_DEFAULT) -> None:
        self.execute("PATCH", path, query, headers, body, response_target, error_target, timeout=timeout)

    def delete(self, path: str, query: Optional[QueryParams] = None, headers: Optional[Headers] = None,
               body: Any = None, response_target: Any = None, error_target: Any = None,
               *, timeout: Any = httpx.USE_CLIENT_DEFAULT) -> None:
        self.execute("DELETE", path, query, headers, body, response_target, error_target, timeout=timeout)

    def close(self) -> None:
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
