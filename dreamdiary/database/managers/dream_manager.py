#!/usr/bin/env python3
"""
dream_manager.py
--------------------
Manager for Dream CRUD operations.

Tag associations are not handled here; the TagReconciler attaches or
replaces them inside the same transaction.

Key Features:
    - Per-field validation with full, user-facing messages
    - Markup stripping of dream content before it is stored
    - Partial updates (only supplied fields change)
    - Ownership-scoped lookup and newest-first pagination
    - Random sampling for the overflow view

Usage:
    dream_mgr = DreamManager(session, logger)
    dream = dream_mgr.create(user, {
        "title": "古びた洋館",
        "content": "長い廊下を歩いていた。",
        "emotion_color": "fear",
        "dreamed_at": "2024-01-15",
    })
"""
from __future__ import annotations

from typing import Any, Dict, List, Tuple

from sqlalchemy import func, select
from sqlalchemy.orm import selectinload

from dreamdiary.core.enums import EmotionColor
from dreamdiary.core.exceptions import ValidationError
from dreamdiary.core.logging_manager import safe_logger
from dreamdiary.core.results import Page
from dreamdiary.core.validators import DataValidator
from dreamdiary.database.decorators import handle_db_errors, log_database_operation
from dreamdiary.database.models import CONTENT_MAX_LENGTH, TITLE_MAX_LENGTH, Dream, User
from dreamdiary.utils.text import strip_markup
from .base_manager import DEFAULT_PER_PAGE, BaseManager

DREAM_FIELDS = ("title", "content", "emotion_color", "lucid_dream_flag", "dreamed_at")
REQUIRED_FIELDS = ("title", "content", "emotion_color", "dreamed_at")


class DreamManager(BaseManager):
    """
    Manager for Dream table operations.

    Every lookup is restricted to the dreams of a single user.
    """

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    @handle_db_errors
    @log_database_operation("get_dream")
    def get_for_user(self, user: User, dream_id: Any) -> Dream:
        """
        Retrieve one of the user's dreams.

        Raises:
            NotFoundError: Missing, or belongs to another user
        """
        return self._get_owned(Dream, user, dream_id)

    # -------------------------------------------------------------------------
    # CRUD Operations
    # -------------------------------------------------------------------------

    @handle_db_errors
    @log_database_operation("create_dream")
    def create(self, user: User, fields: Dict[str, Any]) -> Dream:
        """
        Create a new dream.

        Args:
            user: Owner
            fields: Dream attributes.
                Required keys:
                    - title (str, at most 15 characters)
                    - content (str, markup is stripped)
                    - emotion_color (str | EmotionColor)
                    - dreamed_at (datetime | date | ISO 8601 str)
                Optional keys:
                    - lucid_dream_flag (bool, default False)

        Returns:
            The new Dream, flushed so it has an id

        Raises:
            ValidationError: Listing every invalid field
        """
        values = self._clean(fields, partial=False)
        values.setdefault("lucid_dream_flag", False)

        def _do_create():
            dream = Dream(user_id=user.id, **values)
            self.session.add(dream)
            self.session.flush()
            return dream

        dream = self._execute_with_retry(_do_create)

        safe_logger(self.logger).log_debug(
            f"Created dream: {dream.title}",
            {"dream_id": dream.id, "user_id": user.id},
        )
        return dream

    @handle_db_errors
    @log_database_operation("update_dream")
    def update(self, dream: Dream, fields: Dict[str, Any]) -> Dream:
        """
        Update a dream with the supplied fields only.

        Keys missing from ``fields`` keep their current values; supplied
        keys are validated exactly as on creation.

        Raises:
            ValidationError: Listing every invalid supplied field
        """
        values = self._clean(fields, partial=True)

        def _do_update():
            for name, value in values.items():
                setattr(dream, name, value)
            self.session.flush()
            return dream

        return self._execute_with_retry(_do_update)

    @handle_db_errors
    @log_database_operation("delete_dream")
    def delete(self, dream: Dream) -> None:
        """
        Delete a dream and its tag associations.

        Tags themselves are kept, even when no other dream uses them.
        """

        def _do_delete():
            self.session.delete(dream)
            self.session.flush()

        safe_logger(self.logger).log_info(
            f"Deleting dream: {dream.title}", {"dream_id": dream.id}
        )
        self._execute_with_retry(_do_delete)

    # -------------------------------------------------------------------------
    # Query Methods
    # -------------------------------------------------------------------------

    @handle_db_errors
    @log_database_operation("list_dreams")
    def list_for_user(
        self, user: User, page: Any = 1, per_page: Any = DEFAULT_PER_PAGE
    ) -> Page:
        """
        One page of the user's dreams, newest first, tags preloaded.
        """
        stmt = (
            select(Dream)
            .where(Dream.user_id == user.id)
            .options(selectinload(Dream.tags))
            .order_by(Dream.dreamed_at.desc(), Dream.id.desc())
        )
        return self._paginate(stmt, page=page, per_page=per_page)

    @handle_db_errors
    @log_database_operation("random_dreams")
    def random_sample(self, user: User, limit: int) -> List[Dream]:
        """Up to ``limit`` of the user's dreams in random order."""
        stmt = (
            select(Dream)
            .where(Dream.user_id == user.id)
            .order_by(func.random())
            .limit(limit)
        )
        return list(self.session.execute(stmt).scalars().all())

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    def _clean(self, fields: Dict[str, Any], partial: bool) -> Dict[str, Any]:
        """
        Normalize and validate dream attributes.

        Args:
            fields: Raw attributes; unknown keys are ignored
            partial: When True, only the supplied keys are checked

        Returns:
            Normalized values keyed by column name

        Raises:
            ValidationError: Listing every invalid field
        """
        values: Dict[str, Any] = {}
        errors: List[str] = []

        for name in DREAM_FIELDS:
            if name not in fields:
                if not partial and name in REQUIRED_FIELDS:
                    errors.append(f"{_label(name)} can't be blank")
                continue

            value, error = _CLEANERS[name](fields[name])
            if error:
                errors.append(error)
            else:
                values[name] = value

        if errors:
            raise ValidationError(errors)
        return values


# -------------------------------------------------------------------------
# Field cleaners: each returns (value, error message or None)
# -------------------------------------------------------------------------


def _label(name: str) -> str:
    return name.replace("_", " ").capitalize()


def _clean_title(raw: Any) -> Tuple[Any, Any]:
    title = DataValidator.normalize_string(raw)
    if not title:
        return None, "Title can't be blank"
    if len(title) > TITLE_MAX_LENGTH:
        return None, f"Title is too long (maximum is {TITLE_MAX_LENGTH} characters)"
    return title, None


def _clean_content(raw: Any) -> Tuple[Any, Any]:
    content = strip_markup(raw) if isinstance(raw, str) else raw
    content = DataValidator.normalize_string(content)
    if not content:
        return None, "Content can't be blank"
    if len(content) > CONTENT_MAX_LENGTH:
        return None, f"Content is too long (maximum is {CONTENT_MAX_LENGTH} characters)"
    return content, None


def _clean_emotion_color(raw: Any) -> Tuple[Any, Any]:
    if DataValidator.is_blank(raw):
        return None, "Emotion color can't be blank"
    color = DataValidator.normalize_enum(raw, EmotionColor)
    if color is None:
        return None, "Emotion color is not included in the list"
    return color, None


def _clean_lucid_dream_flag(raw: Any) -> Tuple[Any, Any]:
    try:
        flag = DataValidator.normalize_bool(raw)
    except ValidationError:
        return None, "Lucid dream flag is not included in the list"
    return bool(flag), None


def _clean_dreamed_at(raw: Any) -> Tuple[Any, Any]:
    try:
        dreamed_at = DataValidator.normalize_datetime(raw)
    except ValidationError as e:
        return None, str(e)
    if dreamed_at is None:
        return None, "Dreamed at can't be blank"
    return dreamed_at, None


_CLEANERS = {
    "title": _clean_title,
    "content": _clean_content,
    "emotion_color": _clean_emotion_color,
    "lucid_dream_flag": _clean_lucid_dream_flag,
    "dreamed_at": _clean_dreamed_at,
}
