# vetms/api/settings.py

from typing import Dict

from fastapi import APIRouter
from sqlalchemy import select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

from vetms.db.engine import begin_write, get_engine
from vetms.db.schema import settings as settings_table
from vetms.models.settings import SettingIn, SettingOut

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("", response_model=Dict[str, str])
def list_settings() -> Dict[str, str]:
    """
    Business settings (clinic name, address, ...) as a flat key/value map.
    """
    with get_engine().connect() as conn:
        rows = conn.execute(
            select(settings_table.c.key, settings_table.c.value)
        ).mappings().all()

    return {row["key"]: row["value"] for row in rows}


@router.put("/{key}", response_model=SettingOut)
def put_setting(key: str, payload: SettingIn) -> SettingOut:
    stmt = sqlite_insert(settings_table).values(key=key, value=payload.value)
    stmt = stmt.on_conflict_do_update(
        index_elements=[settings_table.c.key],
        set_={"value": stmt.excluded.value},
    )

    with begin_write() as conn:
        conn.execute(stmt)

    return SettingOut(key=key, value=payload.value)
