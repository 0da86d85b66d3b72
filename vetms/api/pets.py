# vetms/api/pets.py

from typing import List, Optional

from fastapi import APIRouter, Query
from sqlalchemy import select

from vetms.db.engine import get_engine
from vetms.db.schema import pets
from vetms.errors import ValidationError
from vetms.models.clients import PetOut

router = APIRouter(prefix="/pets", tags=["pets"])


@router.get("", response_model=List[PetOut])
def list_pets(
    client_id: Optional[int] = Query(default=None, alias="clientId"),
) -> List[PetOut]:
    if not client_id:
        raise ValidationError.for_field("clientId", "clientId required")

    with get_engine().connect() as conn:
        stmt = (
            select(pets.c.id, pets.c.name, pets.c.species, pets.c.client_id)
            .where(pets.c.client_id == client_id)
            .order_by(pets.c.name)
        )
        rows = conn.execute(stmt).mappings().all()

    return [PetOut(**row) for row in rows]
