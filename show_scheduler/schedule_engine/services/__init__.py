"""Business logic services."""
from schedule_engine.services.bulk_service import bulk_create_schedules, bulk_update_schedules
from schedule_engine.services.publishing_service import publish_schedule
from schedule_engine.services.schedule_service import get_monthly_overview
from schedule_engine.services.snapshot_service import create_manual_snapshot, restore_from_snapshot
from schedule_engine.services.upload_service import append_shows
from schedule_engine.services.validation_service import validate_schedule

__all__ = [
    "validate_schedule",
    "publish_schedule",
    "append_shows",
    "restore_from_snapshot",
    "create_manual_snapshot",
    "bulk_create_schedules",
    "bulk_update_schedules",
    "get_monthly_overview",
]
