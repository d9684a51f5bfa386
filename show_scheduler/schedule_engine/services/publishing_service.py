"""
Publishing: turn a validated draft into normalized Show / ShowMc / ShowPlatform rows.

Publishing replaces everything the schedule published before: the previous shows are
soft-deleted and the draft is materialized again, all in one transaction together with
the status change. Re-publishing an unchanged draft therefore yields the same set of
shows (new uids).
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List

from sqlalchemy.ext.asyncio import AsyncSession

from schedule_engine.config import get_settings
from schedule_engine.db import run_in_transaction
from schedule_engine.errors import (
    BadRequestError,
    MalformedPlanError,
    NotFoundError,
    PlanValidationFailedError,
    VersionConflictError,
)
from schedule_engine.identifiers import EntityKind, generate_uid
from schedule_engine.logging_config import get_logger
from schedule_engine.models import Schedule
from schedule_engine.models.schedule import SCHEDULE_STATUS_PUBLISHED
from schedule_engine.repositories import schedule_repository, show_repository
from schedule_engine.schemas.plan_document import ShowPlanItem
from schedule_engine.services.reference_lookup_service import (
    ReferenceMaps,
    build_reference_maps,
    resolve_user,
)
from schedule_engine.services.validation_service import errors_to_details, plan_shows, validate_plan

logger = get_logger(__name__)


@dataclass
class PublishResult:
    schedule: Schedule
    shows_created: int
    shows_deleted: int


def _show_row(item: ShowPlanItem, uid: str, schedule_id: int, refs: ReferenceMaps) -> Dict[str, Any]:
    return {
        "uid": uid,
        "name": item.name,
        "start_time": item.start_time,
        "end_time": item.end_time,
        "metadata_": item.metadata or {},
        "client_id": refs.clients[item.client_uid],
        "studio_room_id": refs.studio_rooms.get(item.studio_room_uid) if item.studio_room_uid else None,
        "show_type_id": refs.show_types[item.show_type_uid],
        "show_status_id": refs.show_statuses[item.show_status_uid],
        "show_standard_id": refs.show_standards[item.show_standard_uid],
        "schedule_id": schedule_id,
    }


async def _materialize(
    db: AsyncSession,
    schedule: Schedule,
    items: List[ShowPlanItem],
) -> tuple[int, int]:
    """Soft-delete the old shows, insert the new ones. Returns (created, deleted)."""
    deleted = await show_repository.soft_delete_by_schedule(db, schedule.id)
    refs = await build_reference_maps(db, items)

    show_uids = [generate_uid(EntityKind.SHOW) for _ in items]
    await show_repository.bulk_insert_shows(
        db,
        [_show_row(item, uid, schedule.id, refs) for item, uid in zip(items, show_uids)],
    )
    show_ids = await show_repository.find_ids_by_uids(db, show_uids)

    mc_rows: List[Dict[str, Any]] = []
    platform_rows: List[Dict[str, Any]] = []
    for item, uid in zip(items, show_uids):
        show_id = show_ids[uid]
        for mc in item.mcs:
            mc_rows.append(
                {
                    "uid": generate_uid(EntityKind.SHOW_MC),
                    "show_id": show_id,
                    "mc_id": refs.mcs[mc.mc_uid],
                    "note": mc.note,
                    "metadata_": {},
                }
            )
        for platform in item.platforms:
            platform_rows.append(
                {
                    "uid": generate_uid(EntityKind.SHOW_PLATFORM),
                    "show_id": show_id,
                    "platform_id": refs.platforms[platform.platform_uid],
                    "live_stream_link": platform.live_stream_link,
                    "platform_show_id": platform.platform_show_id,
                    "viewer_count": 0,
                    "metadata_": {},
                }
            )
    await show_repository.bulk_insert_show_mcs(db, mc_rows)
    await show_repository.bulk_insert_show_platforms(db, platform_rows)
    return len(show_ids), deleted


async def publish_schedule(
    db: AsyncSession,
    schedule_uid: str,
    expected_version: int,
    actor_uid: str,
) -> PublishResult:
    """
    Preconditions, in order: schedule exists and is not published, version matches,
    draft has a shows list, draft validates. Any failure raises before a write.
    """
    schedule = await schedule_repository.find_by_uid(db, schedule_uid)
    if schedule is None:
        raise NotFoundError("Schedule", schedule_uid)
    if schedule.status == SCHEDULE_STATUS_PUBLISHED:
        raise BadRequestError("Schedule is already published", code="already_published")
    if schedule.version != expected_version:
        raise VersionConflictError(expected_version, schedule.version)
    raw_shows = plan_shows(schedule.plan_document)
    if raw_shows is None:
        raise MalformedPlanError()

    result = await validate_plan(db, schedule)
    if not result.is_valid:
        logger.info(
            "publish.validation_failed",
            schedule_uid=schedule_uid,
            errors=len(result.errors),
        )
        raise PlanValidationFailedError(errors_to_details(result))

    actor = await resolve_user(db, actor_uid)
    items = [ShowPlanItem.model_validate(raw) for raw in raw_shows]

    async def _publish(tx: AsyncSession) -> PublishResult:
        created, deleted = await _materialize(tx, schedule, items)
        applied = await schedule_repository.compare_and_set(
            tx,
            schedule,
            expected_version,
            {
                "status": SCHEDULE_STATUS_PUBLISHED,
                "published_at": datetime.now(timezone.utc),
                "published_by": actor.id,
                "version": expected_version + 1,
            },
        )
        if not applied:
            raise VersionConflictError(expected_version, await schedule_repository.get_version(tx, schedule.id))
        return PublishResult(schedule=schedule, shows_created=created, shows_deleted=deleted)

    settings = get_settings()
    outcome = await run_in_transaction(db, _publish, timeout_seconds=settings.publish_timeout_seconds)
    logger.info(
        "publish.done",
        schedule_uid=schedule_uid,
        version=schedule.version,
        shows_created=outcome.shows_created,
        shows_deleted=outcome.shows_deleted,
    )
    return outcome
