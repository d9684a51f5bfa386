"""Immutable point-in-time copy of a schedule's draft."""
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import BigInteger, DateTime, ForeignKey, Integer, String, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from schedule_engine.db import Base

SNAPSHOT_REASON_MANUAL = "manual"
SNAPSHOT_REASON_AUTO_SAVE = "auto_save"
SNAPSHOT_REASON_BEFORE_RESTORE = "before_restore"


class ScheduleSnapshot(Base):
    """Created, never updated. snapshot_reason: manual | auto_save | before_restore | <free text>."""

    __tablename__ = "schedule_snapshots"
    __mapper_args__ = {"eager_defaults": True}

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    uid: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    schedule_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("schedules.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    plan_document: Mapped[Dict[str, Any]] = mapped_column(JSONB, nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String(32), nullable=False)
    snapshot_reason: Mapped[str] = mapped_column(String(255), nullable=False)
    created_by: Mapped[Optional[int]] = mapped_column(
        BigInteger,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    schedule = relationship("Schedule", back_populates="snapshots", lazy="joined")
    user = relationship("User", lazy="joined")
