import httpx
import pytest

from httpclient.core import config
from httpclient.core.http_client import HTTPClient
from httpclient.core.httpx_client import AsyncHTTPClient

BASE_URL = "http://localhost:8080/"


# --- Dump désactivé par défaut : chaque test qui le veut l'active explicitement ---

@pytest.fixture(autouse=True)
def no_dump(monkeypatch):
    monkeypatch.setattr(config, "DUMP_REQUEST", False)


@pytest.fixture
def dump_enabled(monkeypatch):
    """Active le dump des requêtes pour la durée du test."""
    monkeypatch.setattr(config, "DUMP_REQUEST", True)


# --- Fabriques de clients branchés sur un httpx.MockTransport ---

@pytest.fixture
def make_client():
    """Retourne une fabrique HTTPClient(handler) ; les clients sont fermés en fin de test."""
    clients = []

    def _make(handler, base_url=BASE_URL):
        c = HTTPClient(base_url, transport=httpx.MockTransport(handler))
        clients.append(c)
        return c

    yield _make

    for c in clients:
        c.close()


@pytest.fixture
def make_async_client():
    """Même chose pour AsyncHTTPClient (le MockTransport sait répondre en async)."""
    def _make(handler, base_url=BASE_URL):
        return AsyncHTTPClient(base_url, transport=httpx.MockTransport(handler))

    return _make


class Recorder:
    """Handler de MockTransport qui mémorise les requêtes reçues et renvoie une réponse fixe."""

    def __init__(self, status_code=200, content=b"", headers=None):
        self.status_code = status_code
        self.content = content
        self.headers = headers
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, content=self.content, headers=self.headers)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def recorder():
    return Recorder()
