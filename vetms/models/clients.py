# vetms/models/clients.py

from typing import Optional

from pydantic import BaseModel, Field

from vetms.models.common import CamelModel


class ClientIn(CamelModel):
    name: str = Field(min_length=1)
    contact_info: Optional[str] = None


class ClientOut(BaseModel):
    id: int
    name: str
    contact_info: Optional[str] = None


class PetOut(BaseModel):
    id: int
    name: str
    species: Optional[str] = None
    client_id: int
