"""Schedule persistence: lookups, filtered listing, versioned updates, soft delete."""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import set_committed_value

from schedule_engine.models import Client, Schedule

ORDERABLE_COLUMNS = {
    "created_at": Schedule.created_at,
    "updated_at": Schedule.updated_at,
    "start_date": Schedule.start_date,
    "end_date": Schedule.end_date,
    "name": Schedule.name,
}


@dataclass
class ScheduleFilters:
    client_uids: Optional[Sequence[str]] = None
    status: Optional[str] = None
    name: Optional[str] = None
    start_date_from: Optional[datetime] = None
    end_date_to: Optional[datetime] = None
    include_deleted: bool = False


def _where(filters: ScheduleFilters) -> list:
    clauses = []
    if not filters.include_deleted:
        clauses.append(Schedule.deleted_at.is_(None))
    if filters.client_uids:
        clauses.append(Schedule.client_id.in_(select(Client.id).where(Client.uid.in_(list(filters.client_uids)))))
    if filters.status:
        clauses.append(Schedule.status == filters.status)
    if filters.name:
        clauses.append(Schedule.name.ilike(f"%{filters.name}%"))
    if filters.start_date_from is not None:
        clauses.append(Schedule.start_date >= filters.start_date_from)
    if filters.end_date_to is not None:
        clauses.append(Schedule.end_date <= filters.end_date_to)
    return clauses


async def find_by_uid(db: AsyncSession, uid: str, include_deleted: bool = False) -> Optional[Schedule]:
    q = select(Schedule).where(Schedule.uid == uid)
    if not include_deleted:
        q = q.where(Schedule.deleted_at.is_(None))
    r = await db.execute(q.execution_options(populate_existing=True))
    return r.unique().scalar_one_or_none()


async def find_by_id(db: AsyncSession, schedule_id: int) -> Optional[Schedule]:
    r = await db.execute(
        select(Schedule)
        .where(Schedule.id == schedule_id, Schedule.deleted_at.is_(None))
        .execution_options(populate_existing=True)
    )
    return r.unique().scalar_one_or_none()


async def get_version(db: AsyncSession, schedule_id: int) -> Optional[int]:
    r = await db.execute(select(Schedule.version).where(Schedule.id == schedule_id))
    return r.scalar_one_or_none()


async def create(db: AsyncSession, schedule: Schedule) -> Schedule:
    db.add(schedule)
    await db.flush()
    return schedule


async def compare_and_set(
    db: AsyncSession,
    schedule: Schedule,
    expected_version: int,
    values: Dict[str, Any],
) -> bool:
    """
    UPDATE ... WHERE id = :id AND version = :expected_version.
    Returns False (and writes nothing) when another writer got there first.
    On success the in-memory `schedule` reflects `values`.
    """
    r = await db.execute(
        update(Schedule)
        .where(Schedule.id == schedule.id, Schedule.version == expected_version)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    if r.rowcount == 0:
        return False
    for key, value in values.items():
        set_committed_value(schedule, key, value)
    return True


async def soft_delete(db: AsyncSession, schedule: Schedule) -> Schedule:
    now = datetime.now(timezone.utc)
    await db.execute(
        update(Schedule)
        .where(Schedule.id == schedule.id)
        .values(deleted_at=now)
        .execution_options(synchronize_session=False)
    )
    set_committed_value(schedule, "deleted_at", now)
    return schedule


async def find_many(
    db: AsyncSession,
    filters: ScheduleFilters,
    skip: int = 0,
    take: int = 50,
    order_by: str = "created_at",
    order_direction: str = "desc",
) -> List[Schedule]:
    column = ORDERABLE_COLUMNS.get(order_by, Schedule.created_at)
    ordering = column.asc() if order_direction == "asc" else column.desc()
    r = await db.execute(
        select(Schedule).where(*_where(filters)).order_by(ordering).offset(skip).limit(take)
    )
    return list(r.unique().scalars().all())


async def count(db: AsyncSession, filters: ScheduleFilters) -> int:
    r = await db.execute(select(func.count(Schedule.id)).where(*_where(filters)))
    return r.scalar() or 0


async def find_in_range(
    db: AsyncSession,
    start: datetime,
    end: datetime,
    client_uids: Optional[Sequence[str]] = None,
    status: Optional[str] = None,
    include_deleted: bool = False,
) -> List[Schedule]:
    """Schedules whose [start_date, end_date] intersects [start, end], by start date."""
    clauses = _where(ScheduleFilters(client_uids=client_uids, status=status, include_deleted=include_deleted))
    clauses.extend([Schedule.start_date <= end, Schedule.end_date >= start])
    r = await db.execute(select(Schedule).where(*clauses).order_by(Schedule.start_date.asc()))
    return list(r.unique().scalars().all())
