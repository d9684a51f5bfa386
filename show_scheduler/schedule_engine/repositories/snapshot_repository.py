"""Snapshot persistence. Snapshots are inserted and read, never updated."""
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from schedule_engine.models import ScheduleSnapshot


async def create(db: AsyncSession, snapshot: ScheduleSnapshot) -> ScheduleSnapshot:
    db.add(snapshot)
    await db.flush()
    return snapshot


async def find_by_uid(db: AsyncSession, uid: str) -> Optional[ScheduleSnapshot]:
    r = await db.execute(
        select(ScheduleSnapshot)
        .where(ScheduleSnapshot.uid == uid)
        .execution_options(populate_existing=True)
    )
    return r.unique().scalar_one_or_none()


async def find_by_schedule(
    db: AsyncSession,
    schedule_id: int,
    limit: Optional[int] = None,
    order: str = "desc",
) -> List[ScheduleSnapshot]:
    # id breaks ties: snapshots written in one transaction share now().
    if order == "asc":
        ordering = (ScheduleSnapshot.created_at.asc(), ScheduleSnapshot.id.asc())
    else:
        ordering = (ScheduleSnapshot.created_at.desc(), ScheduleSnapshot.id.desc())
    q = (
        select(ScheduleSnapshot)
        .where(ScheduleSnapshot.schedule_id == schedule_id)
        .order_by(*ordering)
    )
    if limit is not None:
        q = q.limit(limit)
    r = await db.execute(q)
    return list(r.unique().scalars().all())
