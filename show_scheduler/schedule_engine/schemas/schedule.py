"""Schedule request/response schemas (CRUD, upload, publish, bulk, monthly overview)."""
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from schedule_engine.identifiers import EntityKind, has_prefix, uid_prefix
from schedule_engine.models.schedule import SCHEDULE_STATUSES
from schedule_engine.schemas.plan_document import ShowPlanItemIn
from schedule_engine.utils.time_ranges import as_utc


def _check_uid(kind: EntityKind, value: Optional[str], field_name: str) -> Optional[str]:
    if value is not None and not has_prefix(kind, value):
        raise ValueError(f"{field_name} must start with '{uid_prefix(kind)}_'")
    return value


def _check_status(value: Optional[str]) -> Optional[str]:
    if value is not None and value not in SCHEDULE_STATUSES:
        raise ValueError(f"status must be one of {', '.join(SCHEDULE_STATUSES)}")
    return value


class ScheduleCreateRequest(BaseModel):
    """Body for POST /api/schedules (and each item of POST /api/schedules/bulk)."""

    name: str = Field(..., min_length=1, max_length=255)
    start_date: datetime
    end_date: datetime
    status: Optional[str] = Field(None, description="draft | review (publish goes through /publish)")
    plan_document: Optional[Dict[str, Any]] = Field(None, description="Initial draft; defaults to an empty plan")
    version: Optional[int] = Field(None, ge=1)
    metadata: Optional[Dict[str, Any]] = None
    client_id: str = Field(..., description="Client uid")
    created_by: str = Field(..., description="User uid of the creator")
    expected_chunks: Optional[int] = Field(None, ge=1, description="Start a chunked upload of this many chunks")

    @field_validator("client_id")
    @classmethod
    def _client_uid(cls, v: str) -> str:
        return _check_uid(EntityKind.CLIENT, v, "client_id")

    @field_validator("created_by")
    @classmethod
    def _creator_uid(cls, v: str) -> str:
        return _check_uid(EntityKind.USER, v, "created_by")

    @field_validator("start_date", "end_date")
    @classmethod
    def _dates_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return as_utc(v)

    @field_validator("status")
    @classmethod
    def _status(cls, v: Optional[str]) -> Optional[str]:
        return _check_status(v)


class ScheduleUpdateRequest(BaseModel):
    """Body for PATCH /api/schedules/{uid}. Only the fields sent are applied."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    status: Optional[str] = None
    plan_document: Optional[Dict[str, Any]] = None
    version: Optional[int] = Field(None, ge=1, description="Expected current version (optimistic lock)")
    metadata: Optional[Dict[str, Any]] = None
    actor_id: Optional[str] = Field(None, description="User uid making the change")

    @field_validator("start_date", "end_date")
    @classmethod
    def _dates_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return as_utc(v)

    @field_validator("status")
    @classmethod
    def _status(cls, v: Optional[str]) -> Optional[str]:
        return _check_status(v)

    @field_validator("actor_id")
    @classmethod
    def _actor_uid(cls, v: Optional[str]) -> Optional[str]:
        return _check_uid(EntityKind.USER, v, "actor_id")


class BulkUpdateItem(ScheduleUpdateRequest):
    schedule_id: str = Field(..., description="Schedule uid")

    @field_validator("schedule_id")
    @classmethod
    def _schedule_uid(cls, v: str) -> str:
        return _check_uid(EntityKind.SCHEDULE, v, "schedule_id")


class BulkCreateRequest(BaseModel):
    schedules: List[ScheduleCreateRequest] = Field(..., min_length=1)


class BulkUpdateRequest(BaseModel):
    schedules: List[BulkUpdateItem] = Field(..., min_length=1)


class BeginUploadRequest(BaseModel):
    """Body for POST /api/schedules/{uid}/upload."""

    expected_chunks: int = Field(..., ge=1)
    version: int = Field(..., ge=1)
    actor_id: Optional[str] = None

    @field_validator("actor_id")
    @classmethod
    def _actor_uid(cls, v: Optional[str]) -> Optional[str]:
        return _check_uid(EntityKind.USER, v, "actor_id")


class AppendShowsRequest(BaseModel):
    """Body for POST /api/schedules/{uid}/shows/append (one chunk)."""

    shows: List[ShowPlanItemIn] = Field(..., min_length=1)
    chunk_index: int = Field(..., ge=1)
    version: int = Field(..., ge=1)


class PublishRequest(BaseModel):
    version: int = Field(..., ge=1)
    actor_id: str = Field(..., description="User uid publishing the schedule")

    @field_validator("actor_id")
    @classmethod
    def _actor_uid(cls, v: str) -> str:
        return _check_uid(EntityKind.USER, v, "actor_id")


class DuplicateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    created_by: str = Field(..., description="User uid of the new schedule's creator")

    @field_validator("created_by")
    @classmethod
    def _creator_uid(cls, v: str) -> str:
        return _check_uid(EntityKind.USER, v, "created_by")


class ScheduleOut(BaseModel):
    """Schedule as returned by the API. Ids are external uids."""

    id: str
    name: str
    start_date: datetime
    end_date: datetime
    status: str
    published_at: Optional[datetime] = None
    plan_document: Optional[Dict[str, Any]] = None
    version: int
    metadata: Optional[Dict[str, Any]] = None
    client_id: Optional[str] = None
    client_name: Optional[str] = None
    created_by: Optional[str] = None
    created_by_name: Optional[str] = None
    published_by: Optional[str] = None
    published_by_name: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ScheduleListResponse(BaseModel):
    data: List[ScheduleOut]
    total: int
    skip: int
    take: int


class PublishResponse(BaseModel):
    schedule: ScheduleOut
    shows_created: int
    shows_deleted: int


class BulkOperationItemResult(BaseModel):
    index: int
    schedule_id: Optional[str] = None
    client_id: Optional[str] = None
    client_name: Optional[str] = None
    success: bool
    error: Optional[str] = None
    error_code: Optional[str] = None


class BulkOperationResult(BaseModel):
    """successful_schedules is left unset (and so omitted) when nothing succeeded."""

    total: int
    successful: int
    failed: int
    results: List[BulkOperationItemResult]
    successful_schedules: Optional[List[ScheduleOut]] = None


class ClientScheduleGroup(BaseModel):
    client_id: str
    client_name: str
    count: int
    schedules: List[ScheduleOut]


class MonthlyOverviewResponse(BaseModel):
    start_date: datetime
    end_date: datetime
    total_schedules: int
    schedules_by_client: Dict[str, ClientScheduleGroup]
    schedules_by_status: Dict[str, int]
    schedules: List[ScheduleOut]


ScheduleOrderField = Literal["created_at", "updated_at", "start_date", "end_date", "name"]


def schedule_out(schedule: Any, include_plan_document: bool = True) -> ScheduleOut:
    """ORM Schedule -> ScheduleOut, replacing internal ids with uids."""
    client = schedule.client
    creator = schedule.created_by_user if schedule.created_by is not None else None
    publisher = schedule.published_by_user if schedule.published_by is not None else None
    return ScheduleOut(
        id=schedule.uid,
        name=schedule.name,
        start_date=schedule.start_date,
        end_date=schedule.end_date,
        status=schedule.status,
        published_at=schedule.published_at,
        plan_document=schedule.plan_document if include_plan_document else None,
        version=schedule.version,
        metadata=schedule.metadata_,
        client_id=client.uid if client is not None else None,
        client_name=client.name if client is not None else None,
        created_by=creator.uid if creator is not None else None,
        created_by_name=creator.name if creator is not None else None,
        published_by=publisher.uid if publisher is not None else None,
        published_by_name=publisher.name if publisher is not None else None,
        created_at=schedule.created_at,
        updated_at=schedule.updated_at,
    )
