"""
Snapshots of a schedule's draft and restore from them.

A snapshot copies plan_document, version and status at one instant. Restoring always
snapshots the current state first (reason before_restore) in the same transaction.
"""
import copy
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from schedule_engine.config import get_settings
from schedule_engine.db import run_in_transaction
from schedule_engine.errors import BadRequestError, NotFoundError, VersionConflictError
from schedule_engine.identifiers import EntityKind, generate_uid
from schedule_engine.logging_config import get_logger
from schedule_engine.models import Schedule, ScheduleSnapshot
from schedule_engine.models.schedule import SCHEDULE_STATUS_PUBLISHED
from schedule_engine.models.schedule_snapshot import (
    SNAPSHOT_REASON_BEFORE_RESTORE,
    SNAPSHOT_REASON_MANUAL,
)
from schedule_engine.repositories import schedule_repository, snapshot_repository
from schedule_engine.services.reference_lookup_service import resolve_user

logger = get_logger(__name__)


async def create_snapshot(
    db: AsyncSession,
    schedule: Schedule,
    reason: str,
    actor_id: Optional[int],
) -> ScheduleSnapshot:
    snapshot = ScheduleSnapshot(
        uid=generate_uid(EntityKind.SNAPSHOT),
        schedule_id=schedule.id,
        plan_document=copy.deepcopy(schedule.plan_document),
        version=schedule.version,
        status=schedule.status,
        snapshot_reason=reason,
        created_by=actor_id,
    )
    snapshot = await snapshot_repository.create(db, snapshot)
    logger.info(
        "snapshot.created",
        schedule_uid=schedule.uid,
        snapshot_uid=snapshot.uid,
        reason=reason,
        version=schedule.version,
    )
    return snapshot


async def create_manual_snapshot(
    db: AsyncSession,
    schedule_uid: str,
    reason: Optional[str],
    actor_uid: str,
) -> ScheduleSnapshot:
    schedule = await schedule_repository.find_by_uid(db, schedule_uid)
    if schedule is None:
        raise NotFoundError("Schedule", schedule_uid)
    actor = await resolve_user(db, actor_uid)
    reason = (reason or "").strip() or SNAPSHOT_REASON_MANUAL
    return await create_snapshot(db, schedule, reason, actor.id)


async def restore_from_snapshot(
    db: AsyncSession,
    snapshot_uid: str,
    actor_uid: str,
) -> Schedule:
    """Put a snapshot's plan back as the draft. Published schedules must be duplicated instead."""
    snapshot = await snapshot_repository.find_by_uid(db, snapshot_uid)
    if snapshot is None:
        raise NotFoundError("ScheduleSnapshot", snapshot_uid)
    schedule = await schedule_repository.find_by_id(db, snapshot.schedule_id)
    if schedule is None:
        raise NotFoundError("Schedule", snapshot.schedule_id)
    if schedule.status == SCHEDULE_STATUS_PUBLISHED:
        raise BadRequestError(
            "Cannot restore a published schedule. Duplicate it first.",
            code="schedule_published",
        )
    actor = await resolve_user(db, actor_uid)
    current_version = schedule.version

    async def _restore(tx: AsyncSession) -> Schedule:
        await create_snapshot(tx, schedule, SNAPSHOT_REASON_BEFORE_RESTORE, actor.id)
        applied = await schedule_repository.compare_and_set(
            tx,
            schedule,
            current_version,
            {
                "plan_document": copy.deepcopy(snapshot.plan_document),
                "version": current_version + 1,
            },
        )
        if not applied:
            actual = await schedule_repository.get_version(tx, schedule.id)
            raise VersionConflictError(current_version, actual)
        return schedule

    settings = get_settings()
    restored = await run_in_transaction(db, _restore, timeout_seconds=settings.restore_timeout_seconds)
    logger.info(
        "snapshot.restored",
        schedule_uid=restored.uid,
        snapshot_uid=snapshot_uid,
        version=restored.version,
    )
    return restored


async def get_snapshots_by_schedule(
    db: AsyncSession,
    schedule_uid: str,
    limit: Optional[int] = None,
    order: str = "desc",
) -> List[ScheduleSnapshot]:
    schedule = await schedule_repository.find_by_uid(db, schedule_uid)
    if schedule is None:
        raise NotFoundError("Schedule", schedule_uid)
    return await snapshot_repository.find_by_schedule(db, schedule.id, limit=limit, order=order)


async def get_snapshot(db: AsyncSession, snapshot_uid: str) -> ScheduleSnapshot:
    snapshot = await snapshot_repository.find_by_uid(db, snapshot_uid)
    if snapshot is None:
        raise NotFoundError("ScheduleSnapshot", snapshot_uid)
    return snapshot
