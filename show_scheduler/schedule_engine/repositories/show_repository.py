"""Published show rows: replace-on-publish writes and overlap queries for conflict checks."""
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from schedule_engine.models import Show, ShowMc, ShowPlatform


async def soft_delete_by_schedule(db: AsyncSession, schedule_id: int) -> int:
    """Soft-delete the schedule's active shows and their MC/platform rows. Returns the show count."""
    now = datetime.now(timezone.utc)
    r = await db.execute(
        update(Show)
        .where(Show.schedule_id == schedule_id, Show.deleted_at.is_(None))
        .values(deleted_at=now)
        .returning(Show.id)
        .execution_options(synchronize_session=False)
    )
    show_ids = [row[0] for row in r.all()]
    if not show_ids:
        return 0
    await db.execute(
        update(ShowMc)
        .where(ShowMc.show_id.in_(show_ids), ShowMc.deleted_at.is_(None))
        .values(deleted_at=now)
        .execution_options(synchronize_session=False)
    )
    await db.execute(
        update(ShowPlatform)
        .where(ShowPlatform.show_id.in_(show_ids), ShowPlatform.deleted_at.is_(None))
        .values(deleted_at=now)
        .execution_options(synchronize_session=False)
    )
    return len(show_ids)


async def bulk_insert_shows(db: AsyncSession, rows: List[Dict[str, Any]]) -> None:
    if rows:
        await db.execute(insert(Show), rows)


async def bulk_insert_show_mcs(db: AsyncSession, rows: List[Dict[str, Any]]) -> None:
    if rows:
        await db.execute(insert(ShowMc), rows)


async def bulk_insert_show_platforms(db: AsyncSession, rows: List[Dict[str, Any]]) -> None:
    if rows:
        await db.execute(insert(ShowPlatform), rows)


async def find_ids_by_uids(db: AsyncSession, uids: Iterable[str]) -> Dict[str, int]:
    wanted = list(uids)
    if not wanted:
        return {}
    r = await db.execute(select(Show.uid, Show.id).where(Show.uid.in_(wanted)))
    return {uid: id_ for uid, id_ in r.all()}


def _active_overlapping(
    start: datetime,
    end: datetime,
    exclude_schedule_id: Optional[int],
    exclude_show_uid: Optional[str],
) -> list:
    clauses = [
        Show.deleted_at.is_(None),
        Show.start_time < end,
        Show.end_time > start,
    ]
    if exclude_schedule_id is not None:
        clauses.append((Show.schedule_id.is_(None)) | (Show.schedule_id != exclude_schedule_id))
    if exclude_show_uid:
        clauses.append(Show.uid != exclude_show_uid)
    return clauses


async def find_overlapping_in_room(
    db: AsyncSession,
    studio_room_id: int,
    start: datetime,
    end: datetime,
    exclude_schedule_id: Optional[int] = None,
    exclude_show_uid: Optional[str] = None,
) -> List[Show]:
    r = await db.execute(
        select(Show)
        .where(
            Show.studio_room_id == studio_room_id,
            *_active_overlapping(start, end, exclude_schedule_id, exclude_show_uid),
        )
        .order_by(Show.start_time)
    )
    return list(r.scalars().all())


async def find_overlapping_for_mc(
    db: AsyncSession,
    mc_id: int,
    start: datetime,
    end: datetime,
    exclude_schedule_id: Optional[int] = None,
    exclude_show_uid: Optional[str] = None,
) -> List[Show]:
    r = await db.execute(
        select(Show)
        .join(ShowMc, ShowMc.show_id == Show.id)
        .where(
            ShowMc.mc_id == mc_id,
            ShowMc.deleted_at.is_(None),
            *_active_overlapping(start, end, exclude_schedule_id, exclude_show_uid),
        )
        .order_by(Show.start_time)
    )
    return list(r.scalars().unique().all())
