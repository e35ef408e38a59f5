"""ORM base class, shared column types and mixins — all models inherit from Base."""

from datetime import UTC, datetime

from sqlalchemy import JSON, DateTime, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

# JSONB on PostgreSQL, plain JSON elsewhere (the SQLite test database).
JSONType = JSON().with_variant(JSONB(), "postgresql")


def utcnow() -> datetime:
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """Declarative base — shared MetaData registry for all models."""

    pass


class UpdatedAtMixin:
    """Adds an ``updated_at`` audit column to tables with mutable rows.

    Immutable ledger rows (recommendations, feedback) do not use it; their
    own timestamp columns are the record time.
    """

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        server_default=func.now(),
        nullable=False,
    )
