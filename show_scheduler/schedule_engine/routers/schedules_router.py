"""
Schedules: CRUD, chunked upload, validate, publish, duplicate, bulk and monthly overview.
Actor identity is a user uid carried in the request body.
"""
from datetime import datetime
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from schedule_engine.db import get_db
from schedule_engine.errors import ScheduleEngineError
from schedule_engine.repositories.schedule_repository import ScheduleFilters
from schedule_engine.routers.errors import ERROR_RESPONSES, http_error
from schedule_engine.schemas.plan_document import ValidationResult
from schedule_engine.schemas.schedule import (
    AppendShowsRequest,
    BeginUploadRequest,
    BulkCreateRequest,
    BulkOperationItemResult,
    BulkOperationResult,
    BulkUpdateRequest,
    ClientScheduleGroup,
    DuplicateRequest,
    MonthlyOverviewResponse,
    PublishRequest,
    PublishResponse,
    ScheduleCreateRequest,
    ScheduleListResponse,
    ScheduleOrderField,
    ScheduleOut,
    ScheduleUpdateRequest,
    schedule_out,
)
from schedule_engine.services import (
    bulk_service,
    publishing_service,
    schedule_service,
    upload_service,
    validation_service,
)
from schedule_engine.utils.time_ranges import as_utc

router = APIRouter(prefix="/api/schedules", tags=["schedules"], responses=ERROR_RESPONSES)


def _bulk_response(outcome: bulk_service.BulkResult) -> BulkOperationResult:
    response = BulkOperationResult(
        total=outcome.total,
        successful=outcome.successful,
        failed=outcome.failed,
        results=[
            BulkOperationItemResult(
                index=r.index,
                schedule_id=r.schedule_id,
                client_id=r.client_id,
                client_name=r.client_name,
                success=r.success,
                error=r.error,
                error_code=r.error_code,
            )
            for r in outcome.results
        ],
    )
    if outcome.successful_schedules:
        response.successful_schedules = [schedule_out(s) for s in outcome.successful_schedules]
    return response


@router.post("/bulk", response_model=BulkOperationResult, response_model_exclude_unset=True)
async def post_bulk_create(
    payload: BulkCreateRequest,
    db: AsyncSession = Depends(get_db),
) -> BulkOperationResult:
    """Create many schedules; each item succeeds or fails on its own."""
    try:
        outcome = await bulk_service.bulk_create_schedules(db, payload.schedules)
    except ScheduleEngineError as e:
        raise http_error(e) from e
    return _bulk_response(outcome)


@router.patch("/bulk", response_model=BulkOperationResult, response_model_exclude_unset=True)
async def patch_bulk_update(
    payload: BulkUpdateRequest,
    db: AsyncSession = Depends(get_db),
) -> BulkOperationResult:
    """Update many schedules; each item succeeds or fails on its own."""
    try:
        outcome = await bulk_service.bulk_update_schedules(db, payload.schedules)
    except ScheduleEngineError as e:
        raise http_error(e) from e
    return _bulk_response(outcome)


@router.get("/overview/monthly", response_model=MonthlyOverviewResponse)
async def get_monthly_overview(
    start_date: datetime = Query(..., description="Range start (inclusive)"),
    end_date: datetime = Query(..., description="Range end (inclusive)"),
    client_id: Optional[List[str]] = Query(None, description="Client uids"),
    status_filter: Optional[str] = Query(None, alias="status"),
    include_deleted: bool = Query(False),
    db: AsyncSession = Depends(get_db),
) -> MonthlyOverviewResponse:
    try:
        overview = await schedule_service.get_monthly_overview(
            db,
            start_date,
            end_date,
            client_uids=client_id,
            status=status_filter,
            include_deleted=include_deleted,
        )
    except ScheduleEngineError as e:
        raise http_error(e) from e
    return MonthlyOverviewResponse(
        start_date=overview.start_date,
        end_date=overview.end_date,
        total_schedules=overview.total,
        schedules_by_client={
            key: ClientScheduleGroup(
                client_id=group.client_id,
                client_name=group.client_name,
                count=group.count,
                schedules=[schedule_out(s, include_plan_document=False) for s in group.schedules],
            )
            for key, group in overview.by_client.items()
        },
        schedules_by_status=overview.by_status,
        schedules=[schedule_out(s, include_plan_document=False) for s in overview.schedules],
    )


@router.post("", response_model=ScheduleOut, status_code=status.HTTP_201_CREATED)
async def post_schedule(
    payload: ScheduleCreateRequest,
    db: AsyncSession = Depends(get_db),
) -> ScheduleOut:
    try:
        schedule = await schedule_service.create_schedule(db, payload)
    except ScheduleEngineError as e:
        raise http_error(e) from e
    return schedule_out(schedule)


@router.get("", response_model=ScheduleListResponse)
async def get_schedules(
    client_id: Optional[List[str]] = Query(None, description="Client uids"),
    status_filter: Optional[str] = Query(None, alias="status"),
    name: Optional[str] = Query(None, description="Name contains (case-insensitive)"),
    start_date: Optional[datetime] = Query(None, description="start_date >= this"),
    end_date: Optional[datetime] = Query(None, description="end_date <= this"),
    include_deleted: bool = Query(False),
    include_plan_document: bool = Query(False),
    order_by: ScheduleOrderField = Query("created_at"),
    order_direction: Literal["asc", "desc"] = Query("desc"),
    skip: int = Query(0, ge=0),
    take: int = Query(50, ge=1, le=200),
    db: AsyncSession = Depends(get_db),
) -> ScheduleListResponse:
    filters = ScheduleFilters(
        client_uids=client_id,
        status=status_filter,
        name=name,
        start_date_from=as_utc(start_date),
        end_date_to=as_utc(end_date),
        include_deleted=include_deleted,
    )
    schedules, total = await schedule_service.list_schedules(
        db,
        filters,
        skip=skip,
        take=take,
        order_by=order_by,
        order_direction=order_direction,
    )
    return ScheduleListResponse(
        data=[schedule_out(s, include_plan_document=include_plan_document) for s in schedules],
        total=total,
        skip=skip,
        take=take,
    )


@router.get("/{schedule_uid}", response_model=ScheduleOut)
async def get_schedule(
    schedule_uid: str,
    include_deleted: bool = Query(False),
    db: AsyncSession = Depends(get_db),
) -> ScheduleOut:
    try:
        schedule = await schedule_service.get_schedule(db, schedule_uid, include_deleted=include_deleted)
    except ScheduleEngineError as e:
        raise http_error(e) from e
    return schedule_out(schedule)


@router.patch("/{schedule_uid}", response_model=ScheduleOut)
async def patch_schedule(
    schedule_uid: str,
    payload: ScheduleUpdateRequest,
    db: AsyncSession = Depends(get_db),
) -> ScheduleOut:
    """
    Partial update. Send `version` to guard against concurrent edits (409 on mismatch).
    A published schedule can only be reopened (new plan_document or status=draft).
    """
    try:
        await schedule_service.update_schedule(db, schedule_uid, payload)
        schedule = await schedule_service.get_schedule(db, schedule_uid)
    except ScheduleEngineError as e:
        raise http_error(e) from e
    return schedule_out(schedule)


@router.delete("/{schedule_uid}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_schedule(
    schedule_uid: str,
    db: AsyncSession = Depends(get_db),
) -> Response:
    try:
        await schedule_service.delete_schedule(db, schedule_uid)
    except ScheduleEngineError as e:
        raise http_error(e) from e
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{schedule_uid}/upload", response_model=ScheduleOut)
async def post_begin_upload(
    schedule_uid: str,
    payload: BeginUploadRequest,
    db: AsyncSession = Depends(get_db),
) -> ScheduleOut:
    """Start (or restart) a chunked upload; the draft's shows are emptied."""
    try:
        schedule = await upload_service.begin_chunked_upload(
            db,
            schedule_uid,
            expected_chunks=payload.expected_chunks,
            expected_version=payload.version,
            actor_uid=payload.actor_id,
        )
    except ScheduleEngineError as e:
        raise http_error(e) from e
    return schedule_out(schedule)


@router.post("/{schedule_uid}/shows/append", response_model=ScheduleOut)
async def post_append_shows(
    schedule_uid: str,
    payload: AppendShowsRequest,
    db: AsyncSession = Depends(get_db),
) -> ScheduleOut:
    """Append one chunk of shows. Chunks must arrive in order 1..expected_chunks."""
    try:
        schedule = await upload_service.append_shows(
            db,
            schedule_uid,
            shows=payload.shows,
            chunk_index=payload.chunk_index,
            expected_version=payload.version,
        )
    except ScheduleEngineError as e:
        raise http_error(e) from e
    return schedule_out(schedule)


@router.post("/{schedule_uid}/validate", response_model=ValidationResult)
async def post_validate(
    schedule_uid: str,
    db: AsyncSession = Depends(get_db),
) -> ValidationResult:
    """Dry run of the publish checks. Content problems come back in `errors`, never as 4xx."""
    try:
        return await validation_service.validate_schedule(db, schedule_uid)
    except ScheduleEngineError as e:
        raise http_error(e) from e


@router.post("/{schedule_uid}/publish", response_model=PublishResponse)
async def post_publish(
    schedule_uid: str,
    payload: PublishRequest,
    db: AsyncSession = Depends(get_db),
) -> PublishResponse:
    try:
        outcome = await publishing_service.publish_schedule(
            db,
            schedule_uid,
            expected_version=payload.version,
            actor_uid=payload.actor_id,
        )
        schedule = await schedule_service.get_schedule(db, schedule_uid)
    except ScheduleEngineError as e:
        raise http_error(e) from e
    return PublishResponse(
        schedule=schedule_out(schedule),
        shows_created=outcome.shows_created,
        shows_deleted=outcome.shows_deleted,
    )


@router.post("/{schedule_uid}/duplicate", response_model=ScheduleOut, status_code=status.HTTP_201_CREATED)
async def post_duplicate(
    schedule_uid: str,
    payload: DuplicateRequest,
    db: AsyncSession = Depends(get_db),
) -> ScheduleOut:
    try:
        schedule = await schedule_service.duplicate_schedule(
            db,
            schedule_uid,
            new_name=payload.name,
            created_by_uid=payload.created_by,
        )
    except ScheduleEngineError as e:
        raise http_error(e) from e
    return schedule_out(schedule)
