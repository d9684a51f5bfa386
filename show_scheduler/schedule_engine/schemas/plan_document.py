"""
Typed view of a schedule's draft (plan_document JSON) and of validation results.

The draft is stored as camelCase JSON; the models expose snake_case attributes and
dump with `by_alias=True`.
"""
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from schedule_engine.identifiers import EntityKind, has_prefix, uid_prefix
from schedule_engine.utils.time_ranges import as_utc


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ShowPlanItemMc(CamelModel):
    mc_uid: str
    note: Optional[str] = None


class ShowPlanItemPlatform(CamelModel):
    platform_uid: str
    live_stream_link: Optional[str] = None
    platform_show_id: Optional[str] = None


class ShowPlanItem(CamelModel):
    """
    One show in a draft. References are external uids; they are resolved on validate
    and publish. end_time > start_time is checked by the validation engine, not here,
    so an inverted range is reported together with every other defect.
    """

    temp_id: Optional[str] = None
    existing_show_uid: Optional[str] = None
    name: str = Field(..., min_length=1, max_length=255)
    start_time: datetime
    end_time: datetime
    client_uid: str
    studio_room_uid: Optional[str] = None
    show_type_uid: str
    show_status_uid: str
    show_standard_uid: str
    mcs: List[ShowPlanItemMc] = Field(default_factory=list)
    platforms: List[ShowPlanItemPlatform] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("start_time", "end_time")
    @classmethod
    def _assume_utc(cls, v: datetime) -> datetime:
        return as_utc(v)

    @field_validator("studio_room_uid")
    @classmethod
    def _blank_room_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v

    def to_document(self) -> Dict[str, Any]:
        """JSON-ready camelCase dict as stored inside plan_document.shows."""
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


_REFERENCE_PREFIXES = (
    ("client_uid", EntityKind.CLIENT),
    ("studio_room_uid", EntityKind.STUDIO_ROOM),
    ("show_type_uid", EntityKind.SHOW_TYPE),
    ("show_status_uid", EntityKind.SHOW_STATUS),
    ("show_standard_uid", EntityKind.SHOW_STANDARD),
)


class ShowPlanItemIn(ShowPlanItem):
    """Incoming show: same shape, plus external id prefix checks."""

    @model_validator(mode="after")
    def _check_prefixes(self) -> "ShowPlanItemIn":
        for field_name, kind in _REFERENCE_PREFIXES:
            value = getattr(self, field_name)
            if value is not None and not has_prefix(kind, value):
                raise ValueError(f"{field_name} must start with '{uid_prefix(kind)}_'")
        for mc in self.mcs:
            if not has_prefix(EntityKind.MC, mc.mc_uid):
                raise ValueError(f"mc_uid must start with '{uid_prefix(EntityKind.MC)}_'")
        for platform in self.platforms:
            if not has_prefix(EntityKind.PLATFORM, platform.platform_uid):
                raise ValueError(f"platform_uid must start with '{uid_prefix(EntityKind.PLATFORM)}_'")
        return self


class UploadProgress(CamelModel):
    """
    Chunked-upload tracker embedded in plan_document.metadata.uploadProgress.
    Chunks are accepted strictly in order starting at 1, so received_chunks == last_chunk_index.
    """

    expected_chunks: int = Field(..., ge=1)
    received_chunks: int = Field(0, ge=0)
    last_chunk_index: Optional[int] = None
    is_complete: bool = False

    @classmethod
    def start(cls, expected_chunks: int) -> "UploadProgress":
        return cls(expected_chunks=expected_chunks, received_chunks=0, last_chunk_index=None, is_complete=False)

    @property
    def expected_next_chunk(self) -> int:
        return (self.last_chunk_index or 0) + 1

    def advance(self, chunk_index: int) -> "UploadProgress":
        received = self.received_chunks + 1
        return UploadProgress(
            expected_chunks=self.expected_chunks,
            received_chunks=received,
            last_chunk_index=chunk_index,
            is_complete=received == self.expected_chunks,
        )

    def to_document(self) -> Dict[str, Any]:
        # lastChunkIndex is kept even when null so clients can see "nothing received yet".
        return self.model_dump(by_alias=True, mode="json")


class DateRange(CamelModel):
    start: datetime
    end: datetime


class PlanMetadata(CamelModel):
    """
    plan_document.metadata. Known keys are typed; unknown keys are carried through
    from_document / to_document untouched.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    last_edited_by: Optional[str] = None
    last_edited_at: Optional[datetime] = None
    total_shows: int = 0
    client_name: Optional[str] = None
    date_range: Optional[DateRange] = None
    upload_progress: Optional[UploadProgress] = None

    @classmethod
    def from_document(cls, raw: Any) -> "PlanMetadata":
        return cls.model_validate(raw if isinstance(raw, dict) else {})

    def to_document(self) -> Dict[str, Any]:
        document = self.model_dump(by_alias=True, mode="json", exclude_none=True, exclude={"upload_progress"})
        document.update(self.model_extra or {})
        if self.upload_progress is not None:
            document["uploadProgress"] = self.upload_progress.to_document()
        return document


class ValidationErrorType(str, Enum):
    TIME_RANGE = "time_range"
    ROOM_CONFLICT = "room_conflict"
    MC_DOUBLE_BOOKING = "mc_double_booking"
    REFERENCE_NOT_FOUND = "reference_not_found"
    INTERNAL_CONFLICT = "internal_conflict"


class PlanValidationError(CamelModel):
    type: ValidationErrorType
    message: str
    show_index: Optional[int] = None
    show_temp_id: Optional[str] = None

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


class ValidationResult(CamelModel):
    is_valid: bool
    errors: List[PlanValidationError] = Field(default_factory=list)
