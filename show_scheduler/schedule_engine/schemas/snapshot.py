"""Snapshot request/response schemas."""
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from schedule_engine.identifiers import EntityKind, has_prefix, uid_prefix


def _check_user_uid(v: Optional[str]) -> Optional[str]:
    if v is not None and not has_prefix(EntityKind.USER, v):
        raise ValueError(f"actor_id must start with '{uid_prefix(EntityKind.USER)}_'")
    return v


class SnapshotCreateRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=255, description="Defaults to 'manual'")
    actor_id: str = Field(..., description="User uid")

    @field_validator("actor_id")
    @classmethod
    def _actor_uid(cls, v: str) -> str:
        return _check_user_uid(v)


class RestoreRequest(BaseModel):
    actor_id: str = Field(..., description="User uid")

    @field_validator("actor_id")
    @classmethod
    def _actor_uid(cls, v: str) -> str:
        return _check_user_uid(v)


class SnapshotOut(BaseModel):
    id: str
    schedule_id: Optional[str] = None
    plan_document: Dict[str, Any]
    version: int
    status: str
    snapshot_reason: str
    created_by: Optional[str] = None
    created_by_name: Optional[str] = None
    created_at: Optional[datetime] = None


class SnapshotListResponse(BaseModel):
    schedule_id: str
    snapshots: List[SnapshotOut]


def snapshot_out(snapshot: Any) -> SnapshotOut:
    schedule = snapshot.schedule
    user = snapshot.user if snapshot.created_by is not None else None
    return SnapshotOut(
        id=snapshot.uid,
        schedule_id=schedule.uid if schedule is not None else None,
        plan_document=snapshot.plan_document,
        version=snapshot.version,
        status=snapshot.status,
        snapshot_reason=snapshot.snapshot_reason,
        created_by=user.uid if user is not None else None,
        created_by_name=user.name if user is not None else None,
        created_at=snapshot.created_at,
    )
