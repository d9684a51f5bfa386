"""FastAPI application entrypoint."""
from contextlib import asynccontextmanager

from fastapi import FastAPI

from schedule_engine import __version__
from schedule_engine.logging_config import configure_logging, get_logger
from schedule_engine.middleware.correlation_id import CorrelationIdMiddleware
from schedule_engine.routers import health_router, schedules_router, snapshots_router

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown: logging."""
    configure_logging()
    logger.info("app_started", version=__version__)
    yield
    logger.info("app_shutdown")


app = FastAPI(
    title="Show Scheduler",
    version=__version__,
    lifespan=lifespan,
)
app.add_middleware(CorrelationIdMiddleware)

app.include_router(health_router)
app.include_router(schedules_router)
app.include_router(snapshots_router)


@app.get("/")
def root() -> dict[str, str]:
    """Root endpoint: app name and version."""
    return {"name": "show_scheduler", "version": __version__}
