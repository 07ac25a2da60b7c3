# httpclient/hubspot/api_client.py

from typing import Dict, Optional

import httpx

from httpclient.core.config import get_hubspot_api_key
from httpclient.core.httpx_client import AsyncHTTPClient
from httpclient.core.logger import get_logger
from httpclient.core.transport import FakeTransport
from httpclient.hubspot.schema import Contact

logger = get_logger(__name__)


class HubSpotClient:
    """
    Client pour l'API CRM HubSpot, construit sur AsyncHTTPClient.

    L'authentification passe par la query string (hapikey) via le hook d'auth du client HTTP.
    En mode mock, toutes les requêtes partent vers FakeTransport (200 sans body).

    Fournit les méthodes :
     - read_contact(contact_id)                 https://developers.hubspot.com/docs/api/crm/contacts
     - update_contact(contact_id, properties)
     - archive_contact(contact_id)
    """

    BASE_URL = "https://api.hubapi.com"
    CONTACTS_PATH = "/crm/v3/objects/contacts/{contact_id}"

    def __init__(self, address: str = BASE_URL, api_key: Optional[str] = None, mock: bool = False,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        if api_key is None:
            # en mode mock aucune clé n'est nécessaire
            api_key = "" if mock else get_hubspot_api_key()
        self.api_key = api_key

        if mock and transport is None:
            transport = FakeTransport()

        # AsyncHTTPClient wrapper (testable / injectable)
        self.http = AsyncHTTPClient(base_url=address, transport=transport)
        self.http.set_auth_function(self._add_api_key)

    def _add_api_key(self, request: httpx.Request) -> None:
        request.url = request.url.copy_add_param("hapikey", self.api_key)

    async def read_contact(self, contact_id: str) -> Contact:
        """
        Récupère un contact (non archivé, sans pagination des associations).
        """
        contact = Contact()
        query = {
            "archived": "false",
            "paginateAssociations": "false",
        }
        logger.debug("GET contact | id=%s", contact_id)
        await self.http.get(self.CONTACTS_PATH.format(contact_id=contact_id), query, None, contact)
        return contact

    async def update_contact(self, contact_id: str, properties: Dict[str, str]) -> None:
        """
        Met à jour les propriétés d'un contact.
        """
        data = Contact(properties=properties)
        logger.debug("PATCH contact | id=%s", contact_id)
        await self.http.patch(self.CONTACTS_PATH.format(contact_id=contact_id), body=data)

    async def archive_contact(self, contact_id: str) -> None:
        """
        Archive un contact.
        """
        logger.debug("DELETE contact | id=%s", contact_id)
        await self.http.delete(self.CONTACTS_PATH.format(contact_id=contact_id))

    async def aclose(self) -> None:
        await self.http.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()
