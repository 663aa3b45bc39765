"""Declarative base and mixins for SQLAlchemy models."""

from __future__ import annotations

from datetime import datetime, timezone
import re
import uuid

from sqlalchemy import DateTime, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, declared_attr, mapped_column


_CAMEL_PATTERN = re.compile(r"(?<!^)(?=[A-Z])")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    """Root declarative base."""

    @declared_attr.directive
    def __tablename__(cls) -> str:  # type: ignore[override]
        return _CAMEL_PATTERN.sub("_", cls.__name__).lower()


class UUIDMixin:
    """String UUID primary key generated on the Python side."""

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)


class TimestampMixin:
    """Adds created/updated timestamp columns."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        server_default=func.now(),
        nullable=False,
    )
