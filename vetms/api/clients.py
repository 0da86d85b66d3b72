# vetms/api/clients.py

from typing import List, Optional

from fastapi import APIRouter, Query
from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError

from vetms.db.engine import begin_write, get_engine
from vetms.db.schema import clients, invoices, pets
from vetms.errors import ConflictError, NotFoundError, ValidationError
from vetms.models.clients import ClientIn, ClientOut

router = APIRouter(prefix="/clients", tags=["clients"])


def _clean(value: Optional[str]) -> Optional[str]:
    value = (value or "").strip()
    return value or None


def _require_name(payload: ClientIn) -> str:
    name = payload.name.strip()
    if not name:
        raise ValidationError.for_field("name", "Client name is required")
    return name


@router.get("", response_model=List[ClientOut])
def list_clients(
    query: Optional[str] = Query(
        default=None,
        description="Substring match on the client name",
    ),
) -> List[ClientOut]:
    """
    Clients ordered by name; a query narrows to the first 20 matches.
    """
    stmt = select(clients.c.id, clients.c.name, clients.c.contact_info).order_by(
        clients.c.name
    )
    query = (query or "").strip()
    if query:
        stmt = stmt.where(clients.c.name.like(f"%{query}%")).limit(20)
    else:
        stmt = stmt.limit(200)

    with get_engine().connect() as conn:
        rows = conn.execute(stmt).mappings().all()

    return [ClientOut(**row) for row in rows]


@router.post("", response_model=ClientOut, status_code=201)
def create_client(payload: ClientIn) -> ClientOut:
    name = _require_name(payload)
    contact_info = _clean(payload.contact_info)

    try:
        with begin_write() as conn:
            result = conn.execute(
                clients.insert().values(name=name, contact_info=contact_info)
            )
    except IntegrityError as exc:
        raise ConflictError(f"A client named {name!r} already exists") from exc

    return ClientOut(
        id=result.inserted_primary_key[0],
        name=name,
        contact_info=contact_info,
    )


@router.put("/{client_id}", response_model=ClientOut)
def update_client(client_id: int, payload: ClientIn) -> ClientOut:
    name = _require_name(payload)
    contact_info = _clean(payload.contact_info)

    try:
        with begin_write() as conn:
            result = conn.execute(
                update(clients)
                .where(clients.c.id == client_id)
                .values(name=name, contact_info=contact_info)
            )
            if result.rowcount == 0:
                raise NotFoundError("Client not found")
    except IntegrityError as exc:
        raise ConflictError(f"A client named {name!r} already exists") from exc

    return ClientOut(id=client_id, name=name, contact_info=contact_info)


@router.delete("/{client_id}")
def delete_client(client_id: int) -> dict:
    """
    Delete a client and their pets. Clients with invoices are kept.
    """
    with begin_write() as conn:
        invoice_count = conn.execute(
            select(func.count())
            .select_from(invoices)
            .where(invoices.c.client_id == client_id)
        ).scalar_one()

        if invoice_count > 0:
            raise ValidationError("Client cannot be deleted (has invoices).")

        conn.execute(pets.delete().where(pets.c.client_id == client_id))
        result = conn.execute(clients.delete().where(clients.c.id == client_id))
        if result.rowcount == 0:
            raise NotFoundError("Client not found")

    return {"ok": True}
