# vetms/services/reconcile.py
"""
Map free-text client and pet names from an invoice draft to stable row ids.

Both resolvers upsert on the natural key and then select the id back on the
same connection, so they must run inside the caller's transaction. Optional
fields are only ever filled in: a missing or blank value keeps what is stored.
"""

from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.engine import Connection

from vetms.db.schema import clients, pets
from vetms.errors import ValidationError


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def resolve_client(
    conn: Connection,
    name: str,
    contact_info: Optional[str] = None,
) -> int:
    name = (name or "").strip()
    if not name:
        raise ValidationError.for_field("clientName", "Client name is required")

    stmt = sqlite_insert(clients).values(name=name, contact_info=_clean(contact_info))
    stmt = stmt.on_conflict_do_update(
        index_elements=[clients.c.name],
        set_={
            "contact_info": func.coalesce(
                stmt.excluded.contact_info, clients.c.contact_info
            ),
        },
    )
    conn.execute(stmt)

    return conn.execute(
        select(clients.c.id).where(clients.c.name == name)
    ).scalar_one()


def resolve_pet(
    conn: Connection,
    name: str,
    species: Optional[str],
    client_id: int,
) -> int:
    name = (name or "").strip()
    if not name:
        raise ValidationError.for_field("petName", "Pet name is required")

    stmt = sqlite_insert(pets).values(
        name=name,
        species=_clean(species),
        client_id=client_id,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=[pets.c.name, pets.c.client_id],
        set_={"species": func.coalesce(stmt.excluded.species, pets.c.species)},
    )
    conn.execute(stmt)

    return conn.execute(
        select(pets.c.id).where(
            pets.c.name == name,
            pets.c.client_id == client_id,
        )
    ).scalar_one()
