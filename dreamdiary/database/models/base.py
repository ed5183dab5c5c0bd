"""
Base Classes and Mixins
------------------------

Foundational ORM classes for the dream diary database.

Classes:
    - Base: Declarative base for all SQLAlchemy models
    - TimestampMixin: created_at / updated_at bookkeeping
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from datetime import datetime, timezone

# --- Third party ---
from sqlalchemy import DateTime
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# --- Base ORM class ---
class Base(DeclarativeBase):
    """
    Base class for all ORM models.

    Serves as the declarative base and provides access to the metadata
    object used for table creation.
    """

    pass


# --- Timestamps ---
class TimestampMixin:
    """
    Mixin adding creation and modification timestamps.

    Attributes:
        created_at: When the row was inserted
        updated_at: When the row was last modified
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False
    )
