"""Published, normalized shows and their MC / platform assignments."""
from datetime import datetime
from typing import Optional

from sqlalchemy import BigInteger, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from schedule_engine.db import Base


class Show(Base):
    """
    Materialized from a ShowPlanItem on publish. Owned by exactly one schedule and
    replaced wholesale (soft delete + insert) every time that schedule is published.
    """

    __tablename__ = "shows"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    uid: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    start_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    end_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    metadata_: Mapped[Optional[dict]] = mapped_column("metadata", JSONB, nullable=True)
    client_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("clients.id"), nullable=False)
    studio_room_id: Mapped[Optional[int]] = mapped_column(
        BigInteger,
        ForeignKey("studio_rooms.id"),
        nullable=True,
        index=True,
    )
    show_type_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("show_types.id"), nullable=False)
    show_status_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("show_statuses.id"), nullable=False)
    show_standard_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("show_standards.id"), nullable=False)
    schedule_id: Mapped[Optional[int]] = mapped_column(
        BigInteger,
        ForeignKey("schedules.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )
    deleted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    schedule = relationship("Schedule", back_populates="shows")
    show_mcs = relationship("ShowMc", back_populates="show")
    show_platforms = relationship("ShowPlatform", back_populates="show")


class ShowMc(Base):
    __tablename__ = "show_mcs"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    uid: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    show_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("shows.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    mc_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("mcs.id"), nullable=False, index=True)
    note: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    metadata_: Mapped[Optional[dict]] = mapped_column("metadata", JSONB, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    deleted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    show = relationship("Show", back_populates="show_mcs")


class ShowPlatform(Base):
    __tablename__ = "show_platforms"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    uid: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    show_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("shows.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    platform_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("platforms.id"), nullable=False)
    live_stream_link: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    platform_show_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    viewer_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    metadata_: Mapped[Optional[dict]] = mapped_column("metadata", JSONB, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    deleted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    show = relationship("Show", back_populates="show_platforms")
