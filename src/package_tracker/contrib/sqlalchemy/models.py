"""SQLAlchemy package/recipient models."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import (
    BigInteger,
    DateTime,
    Float,
    Integer,
    LargeBinary,
    String,
    Text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator


class Base(DeclarativeBase):
    """SQLAlchemy declarative base."""


class UTCDateTime(TypeDecorator[datetime]):
    """Timestamp stored as naive UTC and read back as aware UTC.

    SQLite keeps no offset, so values are converted to UTC on the way in.
    Naive input is taken to be UTC already.
    """

    impl = DateTime
    cache_ok = True

    def process_bind_param(
        self, value: datetime | None, dialect: Any
    ) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is not None:
            value = value.astimezone(UTC)
        return value.replace(tzinfo=None)

    def process_result_value(
        self, value: datetime | None, dialect: Any
    ) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)


def _new_id() -> str:
    return str(uuid.uuid4())


class IDProofColumns:
    """ID proof attachment stored inline on the owning row."""

    id_proof_data: Mapped[bytes | None] = mapped_column(
        LargeBinary, default=None
    )
    id_proof_content_type: Mapped[str | None] = mapped_column(
        String(64), default=None
    )
    id_proof_size: Mapped[int | None] = mapped_column(Integer, default=None)


class RecipientModel(IDProofColumns, Base):
    __tablename__ = "recipients"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=_new_id
    )
    recipient_name: Mapped[str] = mapped_column(String(128))
    recipient_email: Mapped[str] = mapped_column(String(254))
    recipient_contact: Mapped[int] = mapped_column(
        BigInteger, unique=True, index=True
    )
    address: Mapped[str] = mapped_column(String(100))


class PackageModel(IDProofColumns, Base):
    """Package row.

    ``recipient_id`` is a plain column rather than a foreign key: deleting
    a recipient leaves its packages in place.
    """

    __tablename__ = "packages"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=_new_id
    )
    tracking_number: Mapped[int] = mapped_column(
        Integer, unique=True, index=True
    )
    status: Mapped[str] = mapped_column(String(32), default="pending")
    send_date: Mapped[datetime] = mapped_column(
        UTCDateTime(), default=lambda: datetime.now(tz=UTC)
    )
    sender_name: Mapped[str] = mapped_column(String(128))
    recipient_id: Mapped[str] = mapped_column(String(36), index=True)
    origin: Mapped[str] = mapped_column(String(128))
    destination: Mapped[str] = mapped_column(String(128))
    description: Mapped[str | None] = mapped_column(Text, default=None)
    package_weight: Mapped[float] = mapped_column(Float)
    price: Mapped[float] = mapped_column(Float)
