# httpclient/core/transport.py
import httpx

from httpclient.core.logger import get_logger

logger = get_logger(__name__)


class FakeTransport(httpx.MockTransport):
    """
    Transport factice : répond 200 sans body à toute requête et la trace en debug.
    Utilisable aussi bien par HTTPClient que par AsyncHTTPClient (tests, mode mock, debug).
    """

    def __init__(self):
        super().__init__(self._handle)

    @staticmethod
    def _handle(request: httpx.Request) -> httpx.Response:
        logger.debug(f"🧪 FakeTransport {request.method} {request.url.host}{request.url.path}")
        return httpx.Response(200)
