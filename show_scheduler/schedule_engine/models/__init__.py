"""SQLAlchemy models for the schedule engine."""
from schedule_engine.models.user import User
from schedule_engine.models.client import Client
from schedule_engine.models.studio import Studio, StudioRoom
from schedule_engine.models.show_catalog import ShowStandard, ShowStatus, ShowType
from schedule_engine.models.talent import Mc, Platform
from schedule_engine.models.membership import StudioMembership
from schedule_engine.models.schedule import Schedule
from schedule_engine.models.schedule_snapshot import ScheduleSnapshot
from schedule_engine.models.show import Show, ShowMc, ShowPlatform

__all__ = [
    "User",
    "Client",
    "Studio",
    "StudioRoom",
    "ShowType",
    "ShowStatus",
    "ShowStandard",
    "Mc",
    "Platform",
    "StudioMembership",
    "Schedule",
    "ScheduleSnapshot",
    "Show",
    "ShowMc",
    "ShowPlatform",
]
