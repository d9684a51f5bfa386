"""
Chunked upload of shows into a draft.

Large drafts arrive as numbered chunks. Progress lives in
plan_document.metadata.uploadProgress and is only read and written through
UploadProgress here. Chunks must arrive strictly in order 1..expected_chunks, each
carrying the schedule version the client last saw.
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from schedule_engine.config import get_settings
from schedule_engine.errors import (
    BadRequestError,
    ConflictError,
    MalformedPlanError,
    NotFoundError,
    VersionConflictError,
)
from schedule_engine.logging_config import get_logger
from schedule_engine.models import Schedule
from schedule_engine.models.schedule import SCHEDULE_STATUS_DRAFT
from schedule_engine.repositories import schedule_repository
from schedule_engine.schemas.plan_document import PlanMetadata, ShowPlanItem, UploadProgress
from schedule_engine.services.reference_lookup_service import resolve_user

logger = get_logger(__name__)

UPLOAD_PROGRESS_KEY = "uploadProgress"


def read_upload_progress(plan_document: Dict[str, Any]) -> Optional[UploadProgress]:
    metadata = plan_document.get("metadata") or {}
    raw = metadata.get(UPLOAD_PROGRESS_KEY) if isinstance(metadata, dict) else None
    if raw is None:
        return None
    try:
        return UploadProgress.model_validate(raw)
    except ValidationError:
        raise MalformedPlanError("Invalid upload progress in plan document") from None


def _with_shows(
    plan_document: Dict[str, Any],
    shows: List[Dict[str, Any]],
    progress: UploadProgress,
    actor_uid: Optional[str] = None,
) -> Dict[str, Any]:
    """New plan_document dict (the stored one is never mutated in place)."""
    raw = plan_document.get("metadata")
    raw = {k: v for k, v in raw.items() if k != UPLOAD_PROGRESS_KEY} if isinstance(raw, dict) else {}
    try:
        metadata = PlanMetadata.from_document(raw)
    except ValidationError:
        raise MalformedPlanError("Invalid plan metadata") from None
    metadata.upload_progress = progress
    metadata.total_shows = len(shows)
    metadata.last_edited_at = datetime.now(timezone.utc)
    if actor_uid:
        metadata.last_edited_by = actor_uid
    document = dict(plan_document)
    document["metadata"] = metadata.to_document()
    document["shows"] = shows
    return document


async def _load_draft(db: AsyncSession, schedule_uid: str, expected_version: int) -> Schedule:
    schedule = await schedule_repository.find_by_uid(db, schedule_uid)
    if schedule is None:
        raise NotFoundError("Schedule", schedule_uid)
    if schedule.status != SCHEDULE_STATUS_DRAFT:
        raise BadRequestError(
            f"Shows can only be uploaded to a draft schedule (status is {schedule.status})",
            code="schedule_not_draft",
        )
    if schedule.version != expected_version:
        raise VersionConflictError(expected_version, schedule.version)
    return schedule


async def _save(db: AsyncSession, schedule: Schedule, plan_document: Dict[str, Any]) -> Schedule:
    current = schedule.version
    applied = await schedule_repository.compare_and_set(
        db,
        schedule,
        current,
        {"plan_document": plan_document, "version": current + 1},
    )
    if not applied:
        raise VersionConflictError(current, await schedule_repository.get_version(db, schedule.id))
    return schedule


async def begin_chunked_upload(
    db: AsyncSession,
    schedule_uid: str,
    expected_chunks: int,
    expected_version: int,
    actor_uid: Optional[str] = None,
) -> Schedule:
    """
    Start (or restart) a chunked upload: empties the draft's shows and installs fresh
    progress. Restarting is how an abandoned upload is recovered.
    """
    settings = get_settings()
    if expected_chunks < 1 or expected_chunks > settings.max_expected_chunks:
        raise BadRequestError(
            f"expected_chunks must be between 1 and {settings.max_expected_chunks}",
            code="invalid_expected_chunks",
        )
    schedule = await _load_draft(db, schedule_uid, expected_version)
    if actor_uid:
        await resolve_user(db, actor_uid)
    document = schedule.plan_document if isinstance(schedule.plan_document, dict) else {}
    plan_document = _with_shows(document, [], UploadProgress.start(expected_chunks), actor_uid)
    schedule = await _save(db, schedule, plan_document)
    logger.info(
        "upload.started",
        schedule_uid=schedule_uid,
        expected_chunks=expected_chunks,
        version=schedule.version,
    )
    return schedule


async def append_shows(
    db: AsyncSession,
    schedule_uid: str,
    shows: List[ShowPlanItem],
    chunk_index: int,
    expected_version: int,
) -> Schedule:
    """Append one chunk. Every check runs before anything is written."""
    schedule = await _load_draft(db, schedule_uid, expected_version)

    progress = read_upload_progress(schedule.plan_document or {})
    if progress is None:
        raise BadRequestError(
            "No chunked upload in progress for this schedule",
            code="upload_not_started",
        )
    if progress.is_complete:
        raise BadRequestError(
            "Upload is already complete. All chunks have been received.",
            code="upload_complete",
            details={"upload_progress": progress.to_document()},
        )
    if chunk_index < 1 or chunk_index > progress.expected_chunks:
        raise BadRequestError(
            f"Invalid chunk index {chunk_index}. Expected a value between 1 and {progress.expected_chunks}",
            code="invalid_chunk_index",
            details={"upload_progress": progress.to_document()},
        )
    if chunk_index != progress.expected_next_chunk:
        raise ConflictError(
            f"Expected chunk {progress.expected_next_chunk}, but received chunk {chunk_index}",
            code="chunk_out_of_order",
            details={
                "expected_chunk_index": progress.expected_next_chunk,
                "received_chunk_index": chunk_index,
            },
        )

    # A draft without a shows key yet starts from an empty list.
    existing = (schedule.plan_document or {}).get("shows", [])
    if not isinstance(existing, list):
        raise MalformedPlanError()
    merged = list(existing) + [show.to_document() for show in shows]
    advanced = progress.advance(chunk_index)
    schedule = await _save(db, schedule, _with_shows(schedule.plan_document, merged, advanced))

    logger.info(
        "upload.chunk_accepted",
        schedule_uid=schedule_uid,
        chunk_index=chunk_index,
        received_chunks=advanced.received_chunks,
        expected_chunks=advanced.expected_chunks,
        shows_in_chunk=len(shows),
        total_shows=len(merged),
        version=schedule.version,
    )
    if advanced.is_complete:
        logger.info("upload.complete", schedule_uid=schedule_uid, total_shows=len(merged))
    return schedule
