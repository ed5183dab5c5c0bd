#!/usr/bin/env python3
"""
tag_manager.py
--------------------
Manages Tag entities: the people and places recurring across a user's
dreams.

Tags are scoped per user. A tag's name is unique for its owner, and its
syllabary index is derived from its reading by the Tag model itself.

Key Features:
    - Get-or-create by (user, name) with race handling
    - Strict creation with per-field validation messages
    - Ownership-scoped lookup and deletion
    - Listing by category / syllabary index
    - Name-or-reading suggestions

Usage:
    tag_mgr = TagManager(session, logger)

    # Create or reuse a tag
    tag = tag_mgr.find_or_create(user, "母", "はは", "person")

    # Browse the "は" row
    tags = tag_mgr.list_for_user(user, yomi_index="は")

    # Autocomplete
    suggestions = tag_mgr.suggest(user, "は", category="person")
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError

from dreamdiary.core.enums import TagCategory, YomiIndex
from dreamdiary.core.exceptions import ValidationError
from dreamdiary.core.logging_manager import safe_logger
from dreamdiary.core.validators import DataValidator
from dreamdiary.database.decorators import handle_db_errors, log_database_operation
from dreamdiary.database.models import Tag, User
from .base_manager import BaseManager

SUGGESTION_LIMIT = 10
NAME_TAKEN = "Name has already been taken"


class TagManager(BaseManager):
    """
    Manages Tag table operations.

    Every query is restricted to a single user's tags.
    """

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    @handle_db_errors
    @log_database_operation("get_tag")
    def get(self, user: User, name: Optional[str]) -> Optional[Tag]:
        """
        Retrieve one of the user's tags by name.

        Returns:
            Tag if found, None otherwise
        """
        normalized = DataValidator.normalize_string(name)
        if not normalized:
            return None

        stmt = select(Tag).where(Tag.user_id == user.id, Tag.name == normalized)
        return self.session.execute(stmt).scalars().first()

    def exists(self, user: User, name: Optional[str]) -> bool:
        """Check if the user has a tag with this name."""
        return self.get(user, name) is not None

    @handle_db_errors
    @log_database_operation("get_tag_by_id")
    def get_for_user(self, user: User, tag_id: Any) -> Tag:
        """
        Retrieve one of the user's tags by id.

        Raises:
            NotFoundError: Missing, or belongs to another user
        """
        return self._get_owned(Tag, user, tag_id)

    # -------------------------------------------------------------------------
    # Creation
    # -------------------------------------------------------------------------

    @handle_db_errors
    @log_database_operation("create_tag")
    def create(self, user: User, metadata: Dict[str, Any]) -> Tag:
        """
        Create a new tag.

        Args:
            user: Owner
            metadata: Dictionary with required keys:
                - name: Display name
                - yomi: Hiragana reading
                - category: "person" or "place"

        Returns:
            Created Tag, with its syllabary index computed

        Raises:
            ValidationError: If a field is invalid or the name is taken
        """
        name, yomi, category = self._validate(
            metadata.get("name"), metadata.get("yomi"), metadata.get("category")
        )

        if self.get(user, name) is not None:
            raise ValidationError(NAME_TAKEN)

        tag = self._insert(user, name, yomi, category)
        if tag is None:
            raise ValidationError(NAME_TAKEN)
        return tag

    @handle_db_errors
    @log_database_operation("find_or_create_tag")
    def find_or_create(
        self,
        user: User,
        name: Optional[str],
        yomi: Optional[str],
        category: Any,
    ) -> Tag:
        """
        Get the user's tag with this name, creating it if needed.

        The lookup key is the name alone: an existing tag is returned as
        is, even when the given reading or category differ from its own.

        Args:
            user: Owner
            name: Tag name
            yomi: Reading, used only when creating
            category: person/place, used only when creating

        Returns:
            Existing or newly created Tag

        Raises:
            ValidationError: If the name is blank, or a new tag would be
                invalid, or a concurrent writer won and cannot be re-read
        """
        normalized = DataValidator.normalize_string(name)
        if not normalized:
            # Reports every failing field, not only the name
            self._validate(name, yomi, category)

        existing = self.get(user, normalized)
        if existing is not None:
            return existing

        name, yomi, category = self._validate(normalized, yomi, category)

        tag = self._insert(user, name, yomi, category)
        if tag is not None:
            return tag

        # Lost a race against a concurrent insert of the same name
        existing = self.get(user, name)
        if existing is not None:
            return existing
        raise ValidationError(NAME_TAKEN)

    # -------------------------------------------------------------------------
    # Deletion
    # -------------------------------------------------------------------------

    @handle_db_errors
    @log_database_operation("delete_tag")
    def delete(self, tag: Tag) -> None:
        """
        Delete a tag.

        Notes:
            - Associations with dreams are removed
            - The dreams themselves are kept
        """
        safe_logger(self.logger).log_debug(
            f"Deleting tag: {tag.name}",
            {"tag_id": tag.id, "usage_count": tag.usage_count},
        )

        self.session.delete(tag)
        self.session.flush()

    # -------------------------------------------------------------------------
    # Query Methods
    # -------------------------------------------------------------------------

    @handle_db_errors
    @log_database_operation("list_tags")
    def list_for_user(
        self,
        user: User,
        category: Any = None,
        yomi_index: Any = None,
    ) -> List[Tag]:
        """
        List the user's tags, optionally filtered.

        Args:
            user: Owner
            category: person/place filter (blank = all)
            yomi_index: Syllabary index label filter (blank = all)

        Returns:
            Tags ordered by reading

        Raises:
            ValidationError: If a filter value is not a known label
        """
        stmt = select(Tag).where(Tag.user_id == user.id)

        category_filter = self._filter_value(category, TagCategory, "Category")
        if category_filter is not None:
            stmt = stmt.where(Tag.category == category_filter)

        index_filter = self._filter_value(yomi_index, YomiIndex, "Yomi index")
        if index_filter is not None:
            stmt = stmt.where(Tag.yomi_index == index_filter)

        stmt = stmt.order_by(Tag.yomi, Tag.id)
        return list(self.session.execute(stmt).scalars().all())

    @handle_db_errors
    @log_database_operation("suggest_tags")
    def suggest(
        self,
        user: User,
        query: Optional[str],
        category: Any = None,
        limit: int = SUGGESTION_LIMIT,
    ) -> List[Tag]:
        """
        Suggest tags whose name or reading contains the query.

        Wildcard characters in the query match literally.

        Args:
            user: Owner
            query: Free text (blank matches every tag)
            category: Optional person/place filter
            limit: Maximum number of suggestions

        Returns:
            Up to ``limit`` tags ordered by reading
        """
        stmt = select(Tag).where(Tag.user_id == user.id)

        text = DataValidator.normalize_string(query)
        if text:
            stmt = stmt.where(
                or_(
                    Tag.name.contains(text, autoescape=True),
                    Tag.yomi.contains(text, autoescape=True),
                )
            )

        category_filter = self._filter_value(category, TagCategory, "Category")
        if category_filter is not None:
            stmt = stmt.where(Tag.category == category_filter)

        stmt = stmt.order_by(Tag.yomi, Tag.id).limit(limit)
        return list(self.session.execute(stmt).scalars().all())

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _validate(
        name: Any, yomi: Any, category: Any
    ) -> Tuple[str, str, TagCategory]:
        normalized_name = DataValidator.normalize_string(name)
        normalized_yomi = DataValidator.normalize_string(yomi)
        normalized_category = DataValidator.normalize_enum(category, TagCategory)

        errors: List[str] = []
        if not normalized_name:
            errors.append("Name can't be blank")
        if not normalized_yomi:
            errors.append("Yomi can't be blank")
        if DataValidator.is_blank(category):
            errors.append("Category can't be blank")
        elif normalized_category is None:
            errors.append("Category is not included in the list")

        if errors:
            raise ValidationError(errors)

        return normalized_name, normalized_yomi, normalized_category  # type: ignore[return-value]

    @staticmethod
    def _filter_value(value: Any, enum_class, label: str):
        if DataValidator.is_blank(value):
            return None
        member = DataValidator.normalize_enum(value, enum_class)
        if member is None:
            raise ValidationError(f"{label} is not included in the list")
        return member

    def _insert(
        self, user: User, name: str, yomi: str, category: TagCategory
    ) -> Optional[Tag]:
        """
        Insert a tag inside a SAVEPOINT.

        Returns:
            The new Tag, or None when the (user, name) constraint rejected it

        Raises:
            IntegrityError: For any other constraint violation
        """
        try:
            with self.session.begin_nested():
                tag = Tag(user_id=user.id, name=name, yomi=yomi, category=category)
                self.session.add(tag)
                self.session.flush()
        except IntegrityError as e:
            if not _is_name_conflict(e):
                raise
            safe_logger(self.logger).log_warning(
                "Tag insert hit the unique constraint",
                {"user_id": user.id, "name": name},
            )
            return None

        safe_logger(self.logger).log_debug(
            f"Created tag: {name}",
            {"tag_id": tag.id, "yomi_index": tag.yomi_index.value},
        )
        return tag


def _is_name_conflict(error: IntegrityError) -> bool:
    """True when ``error`` is the (user_id, name) unique violation."""
    message = str(error.orig)
    # SQLite names the columns; other backends name the constraint
    return "tags.user_id, tags.name" in message or "uq_tags_user_name" in message
