# backend/book_exchange/models/academic.py

import uuid
from typing import List
from sqlalchemy import (
    String,
    Integer,
    Boolean,
    ARRAY,
    CheckConstraint,
    Enum as SAEnum,
)
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin
from .enums import Branch, ExchangeStatus


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class StudentAcademicInfo(Base, TimestampMixin):
    """Academic profile of a student taking part in the book exchange.

    Owned by the student-profile flows; the matching engine only reads the
    pairing attributes and moves ``exchange_status`` from pending to matched.
    """

    __tablename__ = "student_academic_info"

    id: Mapped[uuid.UUID] = mapped_column(
        PG_UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        PG_UUID(as_uuid=True), unique=True, nullable=False
    )
    slot: Mapped[int] = mapped_column(Integer, nullable=False)
    branch: Mapped[Branch] = mapped_column(
        SAEnum(Branch, name="branch", values_callable=_enum_values), nullable=False
    )
    division: Mapped[str] = mapped_column(String, nullable=False)
    roll_number: Mapped[int] = mapped_column(Integer, nullable=False)
    exchange_status: Mapped[ExchangeStatus] = mapped_column(
        SAEnum(ExchangeStatus, name="exchange_status", values_callable=_enum_values),
        nullable=False,
        default=ExchangeStatus.PENDING,
        index=True,
    )
    books_owned: Mapped[List[str]] = mapped_column(
        ARRAY(String), nullable=False, default=list
    )
    books_required: Mapped[List[str]] = mapped_column(
        ARRAY(String), nullable=False, default=list
    )
    academic_info_completed: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )

    __table_args__ = (
        CheckConstraint("slot IN (1, 2)", name="slot_range"),
        CheckConstraint("roll_number > 0", name="roll_number_positive"),
    )
