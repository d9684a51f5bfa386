"""
Schedule lifecycle outside publishing: create, read, list, update (optimistic lock),
soft delete, duplicate and the monthly overview.
"""
import copy
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from schedule_engine.errors import (
    BadRequestError,
    MalformedPlanError,
    NotFoundError,
    VersionConflictError,
)
from schedule_engine.identifiers import EntityKind, generate_uid
from schedule_engine.logging_config import get_logger
from schedule_engine.models import Client, Schedule
from schedule_engine.models.schedule import (
    SCHEDULE_STATUS_DRAFT,
    SCHEDULE_STATUS_PUBLISHED,
)
from schedule_engine.models.schedule_snapshot import SNAPSHOT_REASON_AUTO_SAVE
from schedule_engine.repositories import schedule_repository
from schedule_engine.repositories.schedule_repository import ScheduleFilters
from schedule_engine.schemas.plan_document import DateRange, PlanMetadata, UploadProgress
from schedule_engine.schemas.schedule import ScheduleCreateRequest, ScheduleUpdateRequest
from schedule_engine.services.reference_lookup_service import resolve_client, resolve_user
from schedule_engine.services.snapshot_service import create_snapshot
from schedule_engine.utils.time_ranges import as_utc

logger = get_logger(__name__)

UNKNOWN_CLIENT = "Unknown Client"


def _initial_plan(payload: ScheduleCreateRequest, client: Client) -> Dict[str, Any]:
    document = copy.deepcopy(payload.plan_document) if payload.plan_document else {}
    shows = document.get("shows", [])
    if not isinstance(shows, list):
        raise MalformedPlanError()
    try:
        metadata = PlanMetadata.from_document(document.get("metadata"))
    except ValidationError:
        raise MalformedPlanError("Invalid plan metadata") from None
    if metadata.client_name is None:
        metadata.client_name = client.name
    if metadata.date_range is None:
        metadata.date_range = DateRange(start=payload.start_date, end=payload.end_date)
    if payload.expected_chunks:
        shows = []
        metadata.upload_progress = UploadProgress.start(payload.expected_chunks)
    metadata.total_shows = len(shows)
    document["shows"] = shows
    document["metadata"] = metadata.to_document()
    return document


async def get_schedule(db: AsyncSession, schedule_uid: str, include_deleted: bool = False) -> Schedule:
    schedule = await schedule_repository.find_by_uid(db, schedule_uid, include_deleted=include_deleted)
    if schedule is None:
        raise NotFoundError("Schedule", schedule_uid)
    return schedule


async def list_schedules(
    db: AsyncSession,
    filters: ScheduleFilters,
    skip: int = 0,
    take: int = 50,
    order_by: str = "created_at",
    order_direction: str = "desc",
) -> Tuple[List[Schedule], int]:
    schedules = await schedule_repository.find_many(
        db, filters, skip=skip, take=take, order_by=order_by, order_direction=order_direction
    )
    total = await schedule_repository.count(db, filters)
    return schedules, total


async def create_schedule(db: AsyncSession, payload: ScheduleCreateRequest) -> Schedule:
    if payload.end_date <= payload.start_date:
        raise BadRequestError("End date must be after start date", code="invalid_date_range")
    if payload.status == SCHEDULE_STATUS_PUBLISHED:
        raise BadRequestError(
            "A schedule cannot be created as published; publish it instead",
            code="invalid_status",
        )
    client = await resolve_client(db, payload.client_id)
    creator = await resolve_user(db, payload.created_by)

    schedule = Schedule(
        uid=generate_uid(EntityKind.SCHEDULE),
        name=payload.name,
        start_date=payload.start_date,
        end_date=payload.end_date,
        status=payload.status or SCHEDULE_STATUS_DRAFT,
        plan_document=_initial_plan(payload, client),
        version=payload.version or 1,
        metadata_=payload.metadata or {},
        client_id=client.id,
        created_by=creator.id,
    )
    schedule.client = client
    schedule.created_by_user = creator
    schedule = await schedule_repository.create(db, schedule)
    logger.info(
        "schedule.created",
        schedule_uid=schedule.uid,
        client_uid=client.uid,
        expected_chunks=payload.expected_chunks,
    )
    return schedule


async def update_schedule(
    db: AsyncSession,
    schedule_uid: str,
    changes: ScheduleUpdateRequest,
) -> Schedule:
    """
    Apply the fields present in `changes`. A `version` in the request is checked against
    the stored one first. The version goes up by one when plan_document or status change.

    Published schedules only accept a reopen: a new plan_document or status="draft"
    turns them back into a draft and clears the publication stamp.
    """
    schedule = await get_schedule(db, schedule_uid)
    fields = changes.model_dump(exclude_unset=True)
    expected_version = fields.pop("version", None)
    actor_uid = fields.pop("actor_id", None)

    if expected_version is not None and expected_version != schedule.version:
        raise VersionConflictError(expected_version, schedule.version)

    new_status = fields.get("status")
    new_plan = fields.get("plan_document")
    if new_status == SCHEDULE_STATUS_PUBLISHED and schedule.status != SCHEDULE_STATUS_PUBLISHED:
        raise BadRequestError(
            "Use publish to publish a schedule",
            code="invalid_status",
        )

    values: Dict[str, Any] = {}
    if schedule.status == SCHEDULE_STATUS_PUBLISHED:
        if new_plan is None and new_status != SCHEDULE_STATUS_DRAFT:
            raise BadRequestError(
                "Cannot edit published schedule. Duplicate it first.",
                code="schedule_published",
            )
        values.update(status=SCHEDULE_STATUS_DRAFT, published_at=None, published_by=None)
    elif new_status is not None and new_status != schedule.status:
        values["status"] = new_status

    for key in ("name", "start_date", "end_date"):
        if fields.get(key) is not None:
            values[key] = fields[key]
    if "metadata" in fields:
        values["metadata_"] = fields["metadata"] or {}
    start = values.get("start_date", schedule.start_date)
    end = values.get("end_date", schedule.end_date)
    if end <= start:
        raise BadRequestError("End date must be after start date", code="invalid_date_range")

    if new_plan is not None:
        if "shows" in new_plan and not isinstance(new_plan["shows"], list):
            raise MalformedPlanError()
        values["plan_document"] = copy.deepcopy(new_plan)

    if not values:
        return schedule

    current = schedule.version
    if "plan_document" in values or "status" in values:
        values["version"] = current + 1

    actor_id: Optional[int] = None
    if actor_uid:
        actor_id = (await resolve_user(db, actor_uid)).id
    if "plan_document" in values:
        await create_snapshot(db, schedule, SNAPSHOT_REASON_AUTO_SAVE, actor_id or schedule.created_by)

    applied = await schedule_repository.compare_and_set(db, schedule, current, values)
    if not applied:
        raise VersionConflictError(current, await schedule_repository.get_version(db, schedule.id))
    logger.info(
        "schedule.updated",
        schedule_uid=schedule.uid,
        fields=sorted(values),
        version=schedule.version,
        status=schedule.status,
    )
    return schedule


async def delete_schedule(db: AsyncSession, schedule_uid: str) -> Schedule:
    schedule = await get_schedule(db, schedule_uid)
    if schedule.status == SCHEDULE_STATUS_PUBLISHED:
        raise BadRequestError("Cannot delete a published schedule", code="schedule_published")
    schedule = await schedule_repository.soft_delete(db, schedule)
    logger.info("schedule.deleted", schedule_uid=schedule.uid)
    return schedule


def _clone_plan(plan_document: Dict[str, Any]) -> Dict[str, Any]:
    """Deep copy with fresh tempIds and no links to already-published shows."""
    document = copy.deepcopy(plan_document) if isinstance(plan_document, dict) else {}
    shows = document.get("shows", [])
    if not isinstance(shows, list):
        raise MalformedPlanError()
    for show in shows:
        if not isinstance(show, dict):
            raise BadRequestError("Invalid show in plan document", code="invalid_show_item")
        show["tempId"] = f"temp_{uuid.uuid4().hex[:16]}"
        show.pop("existingShowUid", None)
    document["shows"] = shows
    return document


async def duplicate_schedule(
    db: AsyncSession,
    schedule_uid: str,
    new_name: str,
    created_by_uid: str,
) -> Schedule:
    source = await get_schedule(db, schedule_uid)
    creator = await resolve_user(db, created_by_uid)
    duplicate = Schedule(
        uid=generate_uid(EntityKind.SCHEDULE),
        name=new_name,
        start_date=source.start_date,
        end_date=source.end_date,
        status=SCHEDULE_STATUS_DRAFT,
        plan_document=_clone_plan(source.plan_document),
        version=1,
        metadata_=copy.deepcopy(source.metadata_) or {},
        client_id=source.client_id,
        created_by=creator.id,
    )
    duplicate.client = source.client
    duplicate.created_by_user = creator
    duplicate = await schedule_repository.create(db, duplicate)
    logger.info("schedule.duplicated", source_uid=source.uid, schedule_uid=duplicate.uid)
    return duplicate


@dataclass
class ClientScheduleGroup:
    client_id: str
    client_name: str
    schedules: List[Schedule] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.schedules)


@dataclass
class MonthlyOverview:
    start_date: datetime
    end_date: datetime
    schedules: List[Schedule]
    by_client: Dict[str, ClientScheduleGroup]
    by_status: Dict[str, int]

    @property
    def total(self) -> int:
        return len(self.schedules)


async def get_monthly_overview(
    db: AsyncSession,
    start_date: datetime,
    end_date: datetime,
    client_uids: Optional[Sequence[str]] = None,
    status: Optional[str] = None,
    include_deleted: bool = False,
) -> MonthlyOverview:
    """Schedules intersecting [start_date, end_date], grouped by client and counted by status."""
    start_date, end_date = as_utc(start_date), as_utc(end_date)
    if end_date < start_date:
        raise BadRequestError("End date must not be before start date", code="invalid_date_range")
    schedules = await schedule_repository.find_in_range(
        db,
        start_date,
        end_date,
        client_uids=client_uids,
        status=status,
        include_deleted=include_deleted,
    )
    by_client: Dict[str, ClientScheduleGroup] = {}
    by_status: Dict[str, int] = {}
    for schedule in schedules:
        client = schedule.client
        key = client.uid if client is not None else "unknown"
        group = by_client.get(key)
        if group is None:
            group = ClientScheduleGroup(
                client_id=key,
                client_name=client.name if client is not None else UNKNOWN_CLIENT,
            )
            by_client[key] = group
        group.schedules.append(schedule)
        by_status[schedule.status] = by_status.get(schedule.status, 0) + 1
    return MonthlyOverview(
        start_date=start_date,
        end_date=end_date,
        schedules=schedules,
        by_client=by_client,
        by_status=by_status,
    )
