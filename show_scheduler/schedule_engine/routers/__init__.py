"""API routers."""
from schedule_engine.routers.health_router import router as health_router
from schedule_engine.routers.schedules_router import router as schedules_router
from schedule_engine.routers.snapshots_router import router as snapshots_router

__all__ = [
    "health_router",
    "schedules_router",
    "snapshots_router",
]
