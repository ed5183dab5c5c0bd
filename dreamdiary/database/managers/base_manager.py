#!/usr/bin/env python3
"""
base_manager.py
--------------------
Base manager providing common persistence helpers.
All entity managers inherit from this class.

Key Features:
    - Retry logic for database lock handling
    - Ownership-scoped lookups that report NotFoundError
    - Pagination of ordered select statements
    - Shared session and optional logger

Usage:
    class TagManager(BaseManager):
        def get_for_user(self, user: User, tag_id: int) -> Tag:
            return self._get_owned(Tag, user, tag_id)
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import time
from abc import ABC
from typing import Any, Callable, Optional, Protocol, Type, TypeVar

# --- Third party imports ---
from sqlalchemy import Select, func, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Mapped, Session

# --- Local imports ---
from dreamdiary.core.exceptions import DatabaseError, NotFoundError
from dreamdiary.core.logging_manager import DreamDiaryLogger, safe_logger
from dreamdiary.core.results import Page
from dreamdiary.core.validators import DataValidator
from dreamdiary.database.models import User

DEFAULT_PER_PAGE = 12


class HasId(Protocol):
    """Protocol for objects that have an id attribute."""

    id: Mapped[int]


class OwnedById(HasId, Protocol):
    """Protocol for user-owned objects."""

    user_id: Mapped[int]


O = TypeVar("O", bound=OwnedById)


class BaseManager(ABC):
    """
    Abstract base manager with shared persistence helpers.

    Attributes:
        session: SQLAlchemy session for database operations
        logger: Optional logger for operation tracking
    """

    def __init__(self, session: Session, logger: Optional[DreamDiaryLogger] = None):
        """
        Initialize the base manager.

        Args:
            session: SQLAlchemy session
            logger: Optional logger for operation tracking
        """
        self.session = session
        self.logger = logger

    # -------------------------------------------------------------------------
    # Core Helper Methods
    # -------------------------------------------------------------------------

    def _execute_with_retry(
        self,
        operation: Callable[[], Any],
        max_retries: int = 3,
        retry_delay: float = 0.1,
    ) -> Any:
        """
        Execute a database operation, retrying while the database is locked.

        Args:
            operation: Callable that performs the operation
            max_retries: Maximum number of attempts
            retry_delay: Base delay between retries (exponential backoff)

        Raises:
            OperationalError: If the error is not a lock or retries are exhausted
        """
        for attempt in range(max_retries):
            try:
                return operation()
            except OperationalError as e:
                error_msg = str(e).lower()

                if (
                    "locked" in error_msg or "busy" in error_msg
                ) and attempt < max_retries - 1:
                    wait_time = retry_delay * (2**attempt)

                    safe_logger(self.logger).log_debug(
                        f"Database locked, retrying in {wait_time}s",
                        {"attempt": attempt + 1, "max_retries": max_retries},
                    )

                    time.sleep(wait_time)
                    continue

                raise

        raise DatabaseError("Retry loop completed without success")

    def _get_owned(self, model_class: Type[O], user: User, entity_id: Any) -> O:
        """
        Fetch an entity by id, only if it belongs to the user.

        Args:
            model_class: ORM model with a user_id column
            user: Owner
            entity_id: Primary key (int or numeric string)

        Raises:
            NotFoundError: Missing, malformed id, or owned by someone else
        """
        normalized_id = DataValidator.normalize_int(entity_id)
        if normalized_id is None:
            raise NotFoundError()

        entity = self.session.get(model_class, normalized_id)
        if entity is None or entity.user_id != user.id:
            raise NotFoundError()
        return entity

    def _paginate(
        self,
        stmt: Select,
        page: Any = 1,
        per_page: Any = DEFAULT_PER_PAGE,
    ) -> Page:
        """
        Run an ordered select statement one page at a time.

        Args:
            stmt: Select statement, already ordered
            page: 1-based page number; invalid values mean page 1
            per_page: Page size; invalid values mean the default

        Returns:
            Page with the rows for the requested page and the total count
        """
        page_number = DataValidator.normalize_int(page) or 1
        page_number = max(page_number, 1)
        page_size = DataValidator.normalize_int(per_page) or DEFAULT_PER_PAGE
        page_size = max(page_size, 1)

        count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
        total_count = self.session.execute(count_stmt).scalar_one()

        items = (
            self.session.execute(
                stmt.limit(page_size).offset((page_number - 1) * page_size)
            )
            .scalars()
            .unique()
            .all()
        )

        return Page(
            items=list(items),
            page=page_number,
            per_page=page_size,
            total_count=total_count,
        )
