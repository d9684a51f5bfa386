"""Schedule model: the draft plan document plus its publication state."""
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import BigInteger, DateTime, ForeignKey, Integer, String, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from schedule_engine.db import Base

SCHEDULE_STATUS_DRAFT = "draft"
SCHEDULE_STATUS_REVIEW = "review"
SCHEDULE_STATUS_PUBLISHED = "published"
SCHEDULE_STATUSES = (SCHEDULE_STATUS_DRAFT, SCHEDULE_STATUS_REVIEW, SCHEDULE_STATUS_PUBLISHED)


class Schedule(Base):
    """
    One schedule per client and date range.
    plan_document: {"metadata": {...}, "shows": [ShowPlanItem, ...]} (camelCase keys).
    version: optimistic-lock token, +1 on every accepted change of plan_document or status.
    """

    __tablename__ = "schedules"
    __mapper_args__ = {"eager_defaults": True}

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    uid: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    status: Mapped[str] = mapped_column(String(32), default=SCHEDULE_STATUS_DRAFT, nullable=False)
    published_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    plan_document: Mapped[Dict[str, Any]] = mapped_column(JSONB, nullable=False, default=dict)
    version: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    metadata_: Mapped[Optional[dict]] = mapped_column("metadata", JSONB, nullable=True)
    client_id: Mapped[Optional[int]] = mapped_column(
        BigInteger,
        ForeignKey("clients.id", ondelete="SET NULL"),
        nullable=True,
    )
    created_by: Mapped[Optional[int]] = mapped_column(
        BigInteger,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    published_by: Mapped[Optional[int]] = mapped_column(
        BigInteger,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )
    deleted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    client = relationship("Client", lazy="joined")
    created_by_user = relationship("User", foreign_keys=[created_by], lazy="joined")
    published_by_user = relationship("User", foreign_keys=[published_by], lazy="joined")
    snapshots = relationship("ScheduleSnapshot", back_populates="schedule")
    shows = relationship("Show", back_populates="schedule")
