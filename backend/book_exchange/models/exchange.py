# backend/book_exchange/models/exchange.py

import uuid
import datetime as dt
from datetime import time, datetime
from typing import List, Optional
from sqlalchemy import (
    String,
    Integer,
    Date,
    DateTime,
    Time,
    Boolean,
    ForeignKey,
    Text,
    func,
    UniqueConstraint,
    CheckConstraint,
    Index,
    Enum as SAEnum,
)
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import relationship, Mapped, mapped_column

from .base import Base, TimestampMixin
from .enums import MatchStatus, TimeSlotPeriod
from .academic import _enum_values


class ExchangeLocation(Base):
    __tablename__ = "exchange_locations"

    id: Mapped[uuid.UUID] = mapped_column(
        PG_UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    time_slots: Mapped[List["ExchangeTimeSlot"]] = relationship(
        back_populates="location"
    )


class ExchangeTimeSlot(Base):
    """A bounded-capacity (date, period, location) window for physical exchanges."""

    __tablename__ = "exchange_time_slots"

    id: Mapped[uuid.UUID] = mapped_column(
        PG_UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    period: Mapped[TimeSlotPeriod] = mapped_column(
        SAEnum(TimeSlotPeriod, name="time_slot_period", values_callable=_enum_values),
        nullable=False,
    )
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)
    location_id: Mapped[uuid.UUID | None] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("exchange_locations.id", ondelete="SET NULL"),
        nullable=True,
    )
    current_exchanges: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    max_exchanges: Mapped[int] = mapped_column(Integer, nullable=False, default=10)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    location: Mapped[Optional["ExchangeLocation"]] = relationship(
        back_populates="time_slots"
    )

    __table_args__ = (
        UniqueConstraint("date", "period", name="uq_exchange_time_slots_date_period"),
        CheckConstraint(
            "current_exchanges >= 0 AND current_exchanges <= max_exchanges",
            name="capacity_bound",
        ),
        CheckConstraint(
            "EXTRACT(ISODOW FROM date) < 6", name="weekday_only"
        ),
    )


class ExchangeMatch(Base, TimestampMixin):
    """A pairing of one slot-1 student with one slot-2 student for a term."""

    __tablename__ = "exchange_matches"

    id: Mapped[uuid.UUID] = mapped_column(
        PG_UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    student_1_id: Mapped[uuid.UUID] = mapped_column(PG_UUID(as_uuid=True), nullable=False)
    student_2_id: Mapped[uuid.UUID] = mapped_column(PG_UUID(as_uuid=True), nullable=False)
    time_slot_id: Mapped[uuid.UUID | None] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("exchange_time_slots.id", ondelete="SET NULL"),
    )
    location_id: Mapped[uuid.UUID | None] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("exchange_locations.id", ondelete="SET NULL"),
    )
    match_status: Mapped[MatchStatus] = mapped_column(
        SAEnum(MatchStatus, name="match_status", values_callable=_enum_values),
        nullable=False,
        default=MatchStatus.MATCHED,
    )
    student_1_confirmed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    student_2_confirmed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    admin_approved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    semester: Mapped[str] = mapped_column(String, nullable=False)
    academic_year: Mapped[str] = mapped_column(String, nullable=False)
    matched_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    confirmed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    time_slot: Mapped[Optional["ExchangeTimeSlot"]] = relationship()

    __table_args__ = (
        CheckConstraint("student_1_id <> student_2_id", name="distinct_students"),
        Index("ix_exchange_matches_term", "semester", "academic_year"),
    )
