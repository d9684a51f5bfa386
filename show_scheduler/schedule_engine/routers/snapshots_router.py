"""Snapshots of a schedule's draft and restore."""
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from schedule_engine.db import get_db
from schedule_engine.errors import ScheduleEngineError
from schedule_engine.routers.errors import ERROR_RESPONSES, http_error
from schedule_engine.schemas.schedule import ScheduleOut, schedule_out
from schedule_engine.schemas.snapshot import (
    RestoreRequest,
    SnapshotCreateRequest,
    SnapshotListResponse,
    SnapshotOut,
    snapshot_out,
)
from schedule_engine.services import schedule_service, snapshot_service

router = APIRouter(prefix="/api", tags=["snapshots"], responses=ERROR_RESPONSES)


@router.get("/schedules/{schedule_uid}/snapshots", response_model=SnapshotListResponse)
async def get_schedule_snapshots(
    schedule_uid: str,
    limit: Optional[int] = Query(None, ge=1, le=500),
    order: Literal["asc", "desc"] = Query("desc"),
    db: AsyncSession = Depends(get_db),
) -> SnapshotListResponse:
    """Snapshots of a schedule, newest first by default."""
    try:
        snapshots = await snapshot_service.get_snapshots_by_schedule(db, schedule_uid, limit=limit, order=order)
    except ScheduleEngineError as e:
        raise http_error(e) from e
    return SnapshotListResponse(
        schedule_id=schedule_uid,
        snapshots=[snapshot_out(s) for s in snapshots],
    )


@router.post(
    "/schedules/{schedule_uid}/snapshots",
    response_model=SnapshotOut,
    status_code=status.HTTP_201_CREATED,
)
async def post_schedule_snapshot(
    schedule_uid: str,
    payload: SnapshotCreateRequest,
    db: AsyncSession = Depends(get_db),
) -> SnapshotOut:
    try:
        snapshot = await snapshot_service.create_manual_snapshot(
            db,
            schedule_uid,
            reason=payload.reason,
            actor_uid=payload.actor_id,
        )
        snapshot = await snapshot_service.get_snapshot(db, snapshot.uid)
    except ScheduleEngineError as e:
        raise http_error(e) from e
    return snapshot_out(snapshot)


@router.get("/snapshots/{snapshot_uid}", response_model=SnapshotOut)
async def get_snapshot(
    snapshot_uid: str,
    db: AsyncSession = Depends(get_db),
) -> SnapshotOut:
    try:
        snapshot = await snapshot_service.get_snapshot(db, snapshot_uid)
    except ScheduleEngineError as e:
        raise http_error(e) from e
    return snapshot_out(snapshot)


@router.post("/snapshots/{snapshot_uid}/restore", response_model=ScheduleOut)
async def post_restore_snapshot(
    snapshot_uid: str,
    payload: RestoreRequest,
    db: AsyncSession = Depends(get_db),
) -> ScheduleOut:
    """Replace the draft with the snapshot's plan. A before_restore snapshot is taken first."""
    try:
        restored = await snapshot_service.restore_from_snapshot(db, snapshot_uid, actor_uid=payload.actor_id)
        schedule = await schedule_service.get_schedule(db, restored.uid)
    except ScheduleEngineError as e:
        raise http_error(e) from e
    return schedule_out(schedule)
