"""
Validation engine: checks a schedule's draft against the schedule itself, the reference
data and already-published shows. Returns every defect found; never writes anything.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from schedule_engine.errors import MalformedPlanError, NotFoundError
from schedule_engine.logging_config import get_logger
from schedule_engine.models import Schedule, Show
from schedule_engine.repositories import schedule_repository, show_repository
from schedule_engine.schemas.plan_document import (
    PlanValidationError,
    ShowPlanItem,
    ValidationErrorType,
    ValidationResult,
)
from schedule_engine.services.reference_lookup_service import ReferenceMaps, build_reference_maps
from schedule_engine.utils.time_ranges import is_valid_range, overlaps, within

logger = get_logger(__name__)


def plan_shows(plan_document: Any) -> Optional[List[Any]]:
    """The raw `shows` list of a draft, or None when the draft has no such list."""
    if not isinstance(plan_document, dict):
        return None
    shows = plan_document.get("shows")
    return shows if isinstance(shows, list) else None


def _error(
    error_type: ValidationErrorType,
    message: str,
    index: Optional[int] = None,
    temp_id: Optional[str] = None,
) -> PlanValidationError:
    return PlanValidationError(type=error_type, message=message, show_index=index, show_temp_id=temp_id)


def parse_show(raw: Any, index: int) -> tuple[Optional[ShowPlanItem], Optional[PlanValidationError]]:
    """Parse one stored draft item; an unusable item yields a single reference_not_found error."""
    try:
        return ShowPlanItem.model_validate(raw), None
    except ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first.get("loc", ())) or "show"
        temp_id = raw.get("tempId") if isinstance(raw, dict) else None
        return None, _error(
            ValidationErrorType.REFERENCE_NOT_FOUND,
            f"Show at index {index} is malformed: {location}: {first.get('msg')}",
            index,
            temp_id,
        )


def check_show(
    show: ShowPlanItem,
    index: int,
    schedule_start: datetime,
    schedule_end: datetime,
    refs: ReferenceMaps,
    schedule_client_id: Optional[int],
) -> List[PlanValidationError]:
    """Time range, references and client consistency for one show."""
    errors: List[PlanValidationError] = []
    temp_id = show.temp_id

    def add(error_type: ValidationErrorType, message: str) -> None:
        errors.append(_error(error_type, message, index, temp_id))

    if not is_valid_range(show.start_time, show.end_time):
        add(ValidationErrorType.TIME_RANGE, f"Show '{show.name}' end time must be after start time")
    if not within(show.start_time, show.end_time, schedule_start, schedule_end):
        add(ValidationErrorType.TIME_RANGE, f"Show '{show.name}' is outside the schedule date range")

    if show.client_uid not in refs.clients:
        add(ValidationErrorType.REFERENCE_NOT_FOUND, f"Client {show.client_uid} not found")
    elif schedule_client_id is not None and refs.clients[show.client_uid] != schedule_client_id:
        add(
            ValidationErrorType.REFERENCE_NOT_FOUND,
            f"Show '{show.name}' client {show.client_uid} does not match the schedule client",
        )
    if show.studio_room_uid and show.studio_room_uid not in refs.studio_rooms:
        add(ValidationErrorType.REFERENCE_NOT_FOUND, f"Studio room {show.studio_room_uid} not found")
    if show.show_type_uid not in refs.show_types:
        add(ValidationErrorType.REFERENCE_NOT_FOUND, f"Show type {show.show_type_uid} not found")
    if show.show_status_uid not in refs.show_statuses:
        add(ValidationErrorType.REFERENCE_NOT_FOUND, f"Show status {show.show_status_uid} not found")
    if show.show_standard_uid not in refs.show_standards:
        add(ValidationErrorType.REFERENCE_NOT_FOUND, f"Show standard {show.show_standard_uid} not found")
    for mc in show.mcs:
        if mc.mc_uid not in refs.mcs:
            add(ValidationErrorType.REFERENCE_NOT_FOUND, f"MC {mc.mc_uid} not found")
    for platform in show.platforms:
        if platform.platform_uid not in refs.platforms:
            add(ValidationErrorType.REFERENCE_NOT_FOUND, f"Platform {platform.platform_uid} not found")
    return errors


def find_internal_conflicts(shows: List[Optional[ShowPlanItem]]) -> List[PlanValidationError]:
    """
    Pairwise room and MC overlaps inside the draft. Each error points at the earlier
    show of the pair (lower index).
    """
    errors: List[PlanValidationError] = []
    for i, first in enumerate(shows):
        if first is None:
            continue
        first_mcs = {mc.mc_uid for mc in first.mcs}
        for second in shows[i + 1:]:
            if second is None:
                continue
            if not overlaps(first.start_time, first.end_time, second.start_time, second.end_time):
                continue
            if first.studio_room_uid and first.studio_room_uid == second.studio_room_uid:
                errors.append(
                    _error(
                        ValidationErrorType.INTERNAL_CONFLICT,
                        f"Shows '{first.name}' and '{second.name}' overlap in studio room {first.studio_room_uid}",
                        i,
                        first.temp_id,
                    )
                )
            for mc_uid in sorted(first_mcs & {mc.mc_uid for mc in second.mcs}):
                errors.append(
                    _error(
                        ValidationErrorType.INTERNAL_CONFLICT,
                        f"MC {mc_uid} is assigned to overlapping shows '{first.name}' and '{second.name}'",
                        i,
                        first.temp_id,
                    )
                )
    return errors


def _describe(shows: List[Show]) -> str:
    return ", ".join(f"'{s.name}' ({s.uid})" for s in shows)


async def find_external_conflicts(
    db: AsyncSession,
    shows: List[Optional[ShowPlanItem]],
    refs: ReferenceMaps,
    schedule_id: Optional[int],
) -> List[PlanValidationError]:
    """
    Room and MC overlaps against active published shows of other schedules.
    The schedule's own published shows are skipped: publishing replaces them.
    """
    errors: List[PlanValidationError] = []
    for index, show in enumerate(shows):
        if show is None or not is_valid_range(show.start_time, show.end_time):
            continue
        room_id = refs.studio_rooms.get(show.studio_room_uid) if show.studio_room_uid else None
        if room_id is not None:
            hits = await show_repository.find_overlapping_in_room(
                db,
                room_id,
                show.start_time,
                show.end_time,
                exclude_schedule_id=schedule_id,
                exclude_show_uid=show.existing_show_uid,
            )
            if hits:
                errors.append(
                    _error(
                        ValidationErrorType.ROOM_CONFLICT,
                        f"Studio room {show.studio_room_uid} is already booked by {_describe(hits)}",
                        index,
                        show.temp_id,
                    )
                )
        for mc_uid in dict.fromkeys(mc.mc_uid for mc in show.mcs):
            mc_id = refs.mcs.get(mc_uid)
            if mc_id is None:
                continue
            hits = await show_repository.find_overlapping_for_mc(
                db,
                mc_id,
                show.start_time,
                show.end_time,
                exclude_schedule_id=schedule_id,
                exclude_show_uid=show.existing_show_uid,
            )
            if hits:
                errors.append(
                    _error(
                        ValidationErrorType.MC_DOUBLE_BOOKING,
                        f"MC {mc_uid} is already booked on {_describe(hits)}",
                        index,
                        show.temp_id,
                    )
                )
    return errors


async def validate_plan(db: AsyncSession, schedule: Schedule) -> ValidationResult:
    """
    Full validation of `schedule.plan_document`. Uses whatever session it is given, so it
    runs the same inside the publish transaction as outside it.
    """
    raw_shows = plan_shows(schedule.plan_document)
    if raw_shows is None:
        return ValidationResult(
            is_valid=False,
            errors=[
                _error(
                    ValidationErrorType.REFERENCE_NOT_FOUND,
                    "Invalid plan document structure: shows must be a list",
                )
            ],
        )

    errors: List[PlanValidationError] = []
    shows: List[Optional[ShowPlanItem]] = []
    for index, raw in enumerate(raw_shows):
        show, parse_error = parse_show(raw, index)
        shows.append(show)
        if parse_error is not None:
            errors.append(parse_error)

    refs = await build_reference_maps(db, [s for s in shows if s is not None])
    for index, show in enumerate(shows):
        if show is not None:
            errors.extend(
                check_show(show, index, schedule.start_date, schedule.end_date, refs, schedule.client_id)
            )
    errors.extend(find_internal_conflicts(shows))
    errors.extend(await find_external_conflicts(db, shows, refs, schedule.id))

    logger.info(
        "validation.done",
        schedule_uid=schedule.uid,
        shows=len(raw_shows),
        errors=len(errors),
    )
    return ValidationResult(is_valid=not errors, errors=errors)


async def validate_schedule(db: AsyncSession, schedule_uid: str) -> ValidationResult:
    schedule = await schedule_repository.find_by_uid(db, schedule_uid)
    if schedule is None:
        raise NotFoundError("Schedule", schedule_uid)
    if plan_shows(schedule.plan_document) is None:
        raise MalformedPlanError()
    return await validate_plan(db, schedule)


def errors_to_details(result: ValidationResult) -> List[Dict[str, Any]]:
    return [e.to_document() for e in result.errors]
