"""Reference-entity lookups (clients, rooms, show catalog, MCs, platforms, users)."""
from typing import Dict, Iterable, Optional, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from schedule_engine.db import Base

M = TypeVar("M", bound=Base)


async def find_ids_by_uids(db: AsyncSession, model: Type[Base], uids: Iterable[str]) -> Dict[str, int]:
    """uid -> internal id for the active (not soft-deleted) rows among `uids`. Missing uids are absent."""
    wanted = sorted({u for u in uids if u})
    if not wanted:
        return {}
    r = await db.execute(
        select(model.uid, model.id).where(
            model.uid.in_(wanted),
            model.deleted_at.is_(None),
        )
    )
    return {uid: id_ for uid, id_ in r.all()}


async def find_by_uid(db: AsyncSession, model: Type[M], uid: str) -> Optional[M]:
    r = await db.execute(
        select(model).where(model.uid == uid, model.deleted_at.is_(None))
    )
    return r.unique().scalar_one_or_none()


async def find_by_id(db: AsyncSession, model: Type[M], id_: int) -> Optional[M]:
    r = await db.execute(
        select(model).where(model.id == id_, model.deleted_at.is_(None))
    )
    return r.unique().scalar_one_or_none()
