"""
Core Models
------------

The Dream model: one recorded dream and its tags.

Content is stored as plain text; markup is stripped by the DreamManager
before it reaches this model.
"""
from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, List

from sqlalchemy import Boolean, CheckConstraint, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dreamdiary.core.enums import EmotionColor
from .associations import dream_tags
from .base import Base, TimestampMixin

if TYPE_CHECKING:
    from .entities import Tag, User

TITLE_MAX_LENGTH = 15
CONTENT_MAX_LENGTH = 10_000


class Dream(Base, TimestampMixin):
    """
    A single dream diary entry.

    Attributes:
        id: Primary key
        user_id: Owning user
        title: Short title (1-15 characters)
        content: Plain-text body (1-10,000 characters)
        emotion_color: Emotional tone (enum)
        lucid_dream_flag: Whether the dreamer knew they were dreaming
        dreamed_at: When the dream happened

    Relationships:
        user: Many-to-one with User
        tags: Many-to-many with Tag (through dream_tags)
    """

    __tablename__ = "dreams"
    __table_args__ = (
        CheckConstraint("title != ''", name="ck_dream_non_empty_title"),
        CheckConstraint("content != ''", name="ck_dream_non_empty_content"),
        Index("ix_dreams_user_dreamed_at", "user_id", "dreamed_at"),
        Index("ix_dreams_user_emotion_color", "user_id", "emotion_color"),
        Index("ix_dreams_user_title", "user_id", "title"),
    )

    # ---- Primary fields ----
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(TITLE_MAX_LENGTH), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    emotion_color: Mapped[EmotionColor] = mapped_column(
        SQLEnum(EmotionColor, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
    )
    lucid_dream_flag: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    dreamed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    # ---- Relationships ----
    user: Mapped["User"] = relationship("User", back_populates="dreams")
    tags: Mapped[List["Tag"]] = relationship(
        "Tag", secondary=dream_tags, back_populates="dreams", order_by="Tag.yomi"
    )

    # ---- Computed properties ----
    @property
    def tag_ids(self) -> List[int]:
        return [tag.id for tag in self.tags]

    @property
    def people(self) -> List["Tag"]:
        """Tags naming people."""
        return [tag for tag in self.tags if tag.is_person]

    @property
    def places(self) -> List["Tag"]:
        """Tags naming places."""
        return [tag for tag in self.tags if tag.is_place]

    def __repr__(self) -> str:
        return f"<Dream(id={self.id}, title='{self.title}', dreamed_at={self.dreamed_at})>"
