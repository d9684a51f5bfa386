"""Pydantic request/response schemas."""
from schedule_engine.schemas.common import ErrorDetail, ErrorResponse
from schedule_engine.schemas.plan_document import (
    PlanMetadata,
    PlanValidationError,
    ShowPlanItem,
    ShowPlanItemIn,
    UploadProgress,
    ValidationErrorType,
    ValidationResult,
)
from schedule_engine.schemas.schedule import (
    AppendShowsRequest,
    BeginUploadRequest,
    BulkCreateRequest,
    BulkOperationItemResult,
    BulkOperationResult,
    BulkUpdateItem,
    BulkUpdateRequest,
    DuplicateRequest,
    MonthlyOverviewResponse,
    PublishRequest,
    PublishResponse,
    ScheduleCreateRequest,
    ScheduleListResponse,
    ScheduleOut,
    ScheduleUpdateRequest,
    schedule_out,
)
from schedule_engine.schemas.snapshot import (
    RestoreRequest,
    SnapshotCreateRequest,
    SnapshotListResponse,
    SnapshotOut,
    snapshot_out,
)

__all__ = [
    "ErrorDetail",
    "ErrorResponse",
    "PlanMetadata",
    "PlanValidationError",
    "ShowPlanItem",
    "ShowPlanItemIn",
    "UploadProgress",
    "ValidationErrorType",
    "ValidationResult",
    "AppendShowsRequest",
    "BeginUploadRequest",
    "BulkCreateRequest",
    "BulkOperationItemResult",
    "BulkOperationResult",
    "BulkUpdateItem",
    "BulkUpdateRequest",
    "DuplicateRequest",
    "MonthlyOverviewResponse",
    "PublishRequest",
    "PublishResponse",
    "ScheduleCreateRequest",
    "ScheduleListResponse",
    "ScheduleOut",
    "ScheduleUpdateRequest",
    "RestoreRequest",
    "SnapshotCreateRequest",
    "SnapshotListResponse",
    "SnapshotOut",
    "schedule_out",
    "snapshot_out",
]
