"""
Bulk create / update of schedules.

Items run in index order, each through the single-item path inside its own savepoint,
so one failing item neither stops nor rolls back the others. This is the only place
where engine errors are caught; they become per-item result records.
"""
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from schedule_engine.config import get_settings
from schedule_engine.db import run_in_transaction
from schedule_engine.errors import BadRequestError, ScheduleEngineError, classify_error
from schedule_engine.logging_config import get_logger
from schedule_engine.models import Schedule
from schedule_engine.schemas.schedule import BulkUpdateItem, ScheduleCreateRequest
from schedule_engine.services.schedule_service import create_schedule, update_schedule

logger = get_logger(__name__)


@dataclass
class BulkItemResult:
    index: int
    success: bool
    schedule_id: Optional[str] = None
    client_id: Optional[str] = None
    client_name: Optional[str] = None
    error: Optional[str] = None
    error_code: Optional[str] = None


@dataclass
class BulkResult:
    results: List[BulkItemResult] = field(default_factory=list)
    schedules: List[Schedule] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def successful(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failed(self) -> int:
        return self.total - self.successful

    @property
    def successful_schedules(self) -> Optional[List[Schedule]]:
        return self.schedules or None


def _check_size(count: int) -> None:
    limit = get_settings().bulk_max_items
    if count > limit:
        raise BadRequestError(
            f"Too many items: {count} (max {limit})",
            code="bulk_too_large",
            details={"max_items": limit, "received": count},
        )


def _message(exc: Exception) -> str:
    if isinstance(exc, ScheduleEngineError):
        return exc.message
    return str(exc) or exc.__class__.__name__


def _success(index: int, schedule: Schedule) -> BulkItemResult:
    client = schedule.client
    return BulkItemResult(
        index=index,
        success=True,
        schedule_id=schedule.uid,
        client_id=client.uid if client is not None else None,
        client_name=client.name if client is not None else None,
    )


async def bulk_create_schedules(
    db: AsyncSession,
    items: Sequence[ScheduleCreateRequest],
) -> BulkResult:
    _check_size(len(items))
    outcome = BulkResult()
    for index, item in enumerate(items):

        async def _create(tx: AsyncSession, item: ScheduleCreateRequest = item) -> Schedule:
            return await create_schedule(tx, item)

        try:
            schedule = await run_in_transaction(db, _create)
        except Exception as e:
            code = classify_error(e)
            logger.warning("bulk.item_failed", operation="create", index=index, error_code=code, error=_message(e))
            outcome.results.append(
                BulkItemResult(
                    index=index,
                    success=False,
                    client_id=item.client_id,
                    error=_message(e),
                    error_code=code,
                )
            )
            continue
        outcome.results.append(_success(index, schedule))
        outcome.schedules.append(schedule)

    logger.info("bulk.create_done", total=outcome.total, successful=outcome.successful, failed=outcome.failed)
    return outcome


async def bulk_update_schedules(
    db: AsyncSession,
    items: Sequence[BulkUpdateItem],
) -> BulkResult:
    _check_size(len(items))
    outcome = BulkResult()
    for index, item in enumerate(items):

        async def _update(tx: AsyncSession, item: BulkUpdateItem = item) -> Schedule:
            return await update_schedule(tx, item.schedule_id, item)

        try:
            schedule = await run_in_transaction(db, _update)
        except Exception as e:
            code = classify_error(e)
            logger.warning(
                "bulk.item_failed",
                operation="update",
                index=index,
                schedule_uid=item.schedule_id,
                error_code=code,
                error=_message(e),
            )
            outcome.results.append(
                BulkItemResult(
                    index=index,
                    success=False,
                    schedule_id=item.schedule_id,
                    error=_message(e),
                    error_code=code,
                )
            )
            continue
        outcome.results.append(_success(index, schedule))
        outcome.schedules.append(schedule)

    logger.info("bulk.update_done", total=outcome.total, successful=outcome.successful, failed=outcome.failed)
    return outcome
