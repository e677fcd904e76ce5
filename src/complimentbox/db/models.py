"""SQLAlchemy ORM models — single source of truth for the database schema.

Declarative ORM mapping with SQLAlchemy 2.0 style (Mapped[] + mapped_column).
Alembic generates migrations by comparing these models to the actual DB.

Compliments are append-only: rows are inserted once and never updated or
deleted. The integer primary key doubles as the insertion order, which is
what "newest first" sorts on.
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, Index, Integer, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Compliment(Base):
    """One anonymous message addressed to a recipient code."""

    __tablename__ = "compliments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # Codes are only checked for non-emptiness, so no length limit.
    recipient_code: Mapped[str] = mapped_column(Text, nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    __table_args__ = (
        Index("ix_compliments_recipient_code_id", "recipient_code", "id"),
    )

    def __repr__(self) -> str:
        return f"<Compliment {self.id} code={self.recipient_code}>"
