from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime
from typing import Optional, Dict


# --- Schéma d'un contact HubSpot (CRM v3) ---
# Les clés JSON sont en camelCase (createdAt, updatedAt) : alias + populate_by_name

class Contact(BaseModel):
    """Contact HubSpot, utilisé comme body de requête et comme cible de décodage"""
    id: Optional[str]                       = Field(None, description="Identifiant HubSpot du contact")
    archived: Optional[bool]                = Field(None, description="Contact archivé ?")
    created_at: Optional[datetime]          = Field(None, alias="createdAt", description="Date de création")
    updated_at: Optional[datetime]          = Field(None, alias="updatedAt", description="Date de dernière mise à jour")
    properties: Optional[Dict[str, Optional[str]]] = Field(None, description="Propriétés du contact (email, firstname, ...)")

    model_config = ConfigDict(populate_by_name=True)
