import json
from unittest.mock import AsyncMock

import httpx
import pytest

from httpclient.core.exceptions import DecodeError, HTTPStatusError
from httpclient.hubspot.api_client import HubSpotClient
from httpclient.hubspot.schema import Contact

CONTACT_JSON = {
    "id": "151",
    "archived": False,
    "createdAt": "2024-03-01T10:00:00.000Z",
    "updatedAt": "2024-03-02T11:30:00.000Z",
    "properties": {"email": "jane@example.com", "firstname": "Jane"},
}


def test_missing_api_key(monkeypatch):
    monkeypatch.delenv("HUBSPOT_API_KEY", raising=False)
    with pytest.raises(RuntimeError):
        HubSpotClient()


@pytest.mark.asyncio
async def test_mock_mode_needs_no_api_key(monkeypatch):
    """En mode mock, la clé API est optionnelle"""
    monkeypatch.delenv("HUBSPOT_API_KEY", raising=False)

    client = HubSpotClient(mock=True)
    await client.archive_contact("1")

    assert client.api_key == ""
    await client.aclose()


@pytest.mark.asyncio  # Décorateur pour exécuter la classe de tests en asynchrone
class TestHubSpotClientOffline:

    def setup_method(self):
        """Initialisation du client avec une API Key factice, branché sur un MockTransport"""
        self.requests = []
        self.response = httpx.Response(200, json=CONTACT_JSON)

        def handler(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return self.response

        self.client = HubSpotClient(address="https://api.hubapi.com/", api_key="FAKE_KEY",
                                    transport=httpx.MockTransport(handler))

    async def test_read_contact(self):
        """Lecture d'un contact : query + auth par hapikey, décodage dans le modèle Contact"""
        contact = await self.client.read_contact("151")

        assert isinstance(contact, Contact)
        assert contact.id == "151"
        assert contact.properties["email"] == "jane@example.com"
        assert contact.created_at.day == 1

        request = self.requests[0]
        assert request.method == "GET"
        assert request.url.path == "/crm/v3/objects/contacts/151"
        assert request.url.params["archived"] == "false"
        assert request.url.params["paginateAssociations"] == "false"
        assert request.url.params["hapikey"] == "FAKE_KEY"
        await self.client.aclose()

    async def test_update_contact(self):
        self.response = httpx.Response(200, json=CONTACT_JSON)

        await self.client.update_contact("151", {"firstname": "Janet"})

        request = self.requests[0]
        assert request.method == "PATCH"
        assert request.headers["Content-Type"] == "application/json"
        assert json.loads(request.content) == {"properties": {"firstname": "Janet"}}
        await self.client.aclose()

    async def test_archive_contact(self):
        self.response = httpx.Response(204)

        await self.client.archive_contact("151")

        assert self.requests[0].method == "DELETE"
        assert self.requests[0].content == b""
        await self.client.aclose()

    async def test_not_found_does_not_leak_api_key(self):
        self.response = httpx.Response(404, json={"status": "error", "message": "resource not found"})

        with pytest.raises(HTTPStatusError) as exc:
            await self.client.read_contact("999")

        assert exc.value.status_code == 404
        assert "FAKE_KEY" not in str(exc.value)
        assert exc.value.url == "https://api.hubapi.com/crm/v3/objects/contacts/999"
        await self.client.aclose()

    async def test_read_contact_uses_http_get(self):
        """Le client HTTP est remplaçable : on vérifie l'appel avec un AsyncMock"""
        self.client.http.get = AsyncMock(return_value=None)

        contact = await self.client.read_contact("151")

        assert contact.id is None
        self.client.http.get.assert_called_once()
        path, query = self.client.http.get.call_args.args[:2]
        assert path == "/crm/v3/objects/contacts/151"
        assert query == {"archived": "false", "paginateAssociations": "false"}
        await self.client.aclose()


@pytest.mark.asyncio
async def test_mock_mode_uses_fake_transport():
    """En mode mock, chaque appel reçoit 200 sans body"""
    client = HubSpotClient(api_key="FAKE_KEY", mock=True)

    await client.archive_contact("1")
    await client.update_contact("1", {"email": "a@b.c"})

    # pas de body à décoder : la lecture d'un contact échoue proprement
    with pytest.raises(DecodeError) as exc:
        await client.read_contact("1")
    assert exc.value.status_code == 200
    await client.aclose()
