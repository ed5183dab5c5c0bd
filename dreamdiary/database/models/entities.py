"""
Entity Models
--------------

Owners and labels of the dream diary.

Models:
    - User: Account owning dreams and tags
    - Tag: Recurring person or place, filed under a syllabary index

Every Tag belongs to exactly one User; tag names are unique per user,
so two users may both have a tag called "母".
"""

# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from typing import TYPE_CHECKING, List, Optional

# --- Third party imports ---
from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.ext.hybrid import hybrid_property
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

# --- Local imports ---
from dreamdiary.core.enums import TagCategory, YomiIndex
from dreamdiary.utils.yomi import classify_yomi
from .associations import dream_tags
from .base import Base, TimestampMixin

if TYPE_CHECKING:
    from .core import Dream


class User(Base, TimestampMixin):
    """
    Account that owns dreams and tags.

    Login lookups match email or username exactly; nothing is
    case-folded.

    Attributes:
        id: Primary key
        email: Unique email address
        username: Unique display/login name

    Relationships:
        dreams: One-to-many with Dream (deleted with the user)
        tags: One-to-many with Tag (deleted with the user)
    """

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("email != ''", name="ck_user_non_empty_email"),
        CheckConstraint("username != ''", name="ck_user_non_empty_username"),
    )

    # ---- Primary fields ----
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    username: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)

    # ---- Relationships ----
    dreams: Mapped[List["Dream"]] = relationship(
        "Dream",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    tags: Mapped[List["Tag"]] = relationship(
        "Tag",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}')>"


class Tag(Base, TimestampMixin):
    """
    A recurring person or place tagged on dreams.

    The syllabary index is never assigned directly: setting ``yomi``
    recomputes it, and ``yomi_index`` is read-only, so a tag's index always
    agrees with its reading.

    Attributes:
        id: Primary key
        user_id: Owning user
        name: Display name, unique per user
        yomi: Hiragana reading used for sorting and indexing
        yomi_index: Derived syllabary bucket (read-only)
        category: person or place

    Relationships:
        user: Many-to-one with User
        dreams: Many-to-many with Dream
    """

    __tablename__ = "tags"
    __table_args__ = (
        UniqueConstraint("user_id", "name", name="uq_tags_user_name"),
        CheckConstraint("name != ''", name="ck_tag_non_empty_name"),
        CheckConstraint("yomi != ''", name="ck_tag_non_empty_yomi"),
        Index("ix_tags_user_category", "user_id", "category"),
        Index("ix_tags_user_yomi", "user_id", "yomi"),
        Index("ix_tags_user_yomi_index", "user_id", "yomi_index"),
    )

    # ---- Primary fields ----
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    yomi: Mapped[str] = mapped_column(String(255), nullable=False)
    _yomi_index: Mapped[YomiIndex] = mapped_column(
        "yomi_index",
        SQLEnum(YomiIndex, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
    )
    category: Mapped[TagCategory] = mapped_column(
        SQLEnum(TagCategory, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
    )

    # ---- Relationships ----
    user: Mapped["User"] = relationship("User", back_populates="tags")
    dreams: Mapped[List["Dream"]] = relationship(
        "Dream", secondary=dream_tags, back_populates="tags"
    )

    # ---- Classification ----
    @validates("yomi")
    def _classify_yomi(self, key: str, value: Optional[str]) -> Optional[str]:
        if value:
            self._yomi_index = classify_yomi(value)
        return value

    @hybrid_property
    def yomi_index(self) -> YomiIndex:
        """Syllabary bucket of the reading; filterable in queries."""
        return self._yomi_index

    # ---- Computed properties ----
    @property
    def usage_count(self) -> int:
        """Number of dreams carrying this tag."""
        return len(self.dreams)

    @property
    def is_person(self) -> bool:
        return self.category == TagCategory.PERSON

    @property
    def is_place(self) -> bool:
        return self.category == TagCategory.PLACE

    def __repr__(self) -> str:
        return f"<Tag(id={self.id}, name='{self.name}', yomi_index='{self._yomi_index}')>"
