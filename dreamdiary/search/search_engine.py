#!/usr/bin/env python3
"""
search_engine.py
----------------
Keyword and tag search over a user's dreams.

Query semantics:
    "森 洋館"        # every word must appear in the title or the content
    tag_ids=[3, 7]   # the dream must carry every one of the tags

Both filters combine with AND. Words are separated by whitespace only;
quotes have no special meaning. Matching is a case-sensitive substring
test with LIKE wildcards escaped, so "%" or "_" in a keyword match
literally and "alice" does not match "Alice".

Usage:
    query = DreamSearchQuery.from_params("森 洋館", "3,7")
    page = DreamSearch(session).search(user, query)

    for dream in page:
        print(dream.dreamed_at, dream.title)
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from dataclasses import dataclass, field
from typing import Any, List, Optional

# --- Third party imports ---
from sqlalchemy import Select, and_, distinct, func, or_, select
from sqlalchemy.orm import selectinload

# --- Local imports ---
from dreamdiary.core.exceptions import ValidationError
from dreamdiary.core.results import Page
from dreamdiary.database.decorators import handle_db_errors, log_database_operation
from dreamdiary.database.managers import DEFAULT_PER_PAGE, BaseManager
from dreamdiary.database.models import Dream, User, dream_tags


@dataclass
class DreamSearchQuery:
    """Represents a parsed dream search."""

    keyword: Optional[str] = None
    tag_ids: List[int] = field(default_factory=list)

    # Pagination
    page: int = 1
    per_page: int = DEFAULT_PER_PAGE

    @property
    def keywords(self) -> List[str]:
        """Whitespace-separated words of the keyword, blanks dropped."""
        return self.keyword.split() if self.keyword else []

    @property
    def is_empty(self) -> bool:
        return not self.keywords and not self.tag_ids

    @classmethod
    def from_params(
        cls,
        keyword: Optional[str] = None,
        tag_ids: Any = None,
        page: Any = 1,
        per_page: Any = DEFAULT_PER_PAGE,
    ) -> "DreamSearchQuery":
        """
        Build a query from raw request parameters.

        Args:
            keyword: Free text, possibly several words
            tag_ids: Comma-separated ids ("3,7"), or an iterable of ids
            page: Page number
            per_page: Page size

        Raises:
            ValidationError: If a tag id is not an integer
        """
        return cls(
            keyword=keyword.strip() if keyword and keyword.strip() else None,
            tag_ids=cls.parse_tag_ids(tag_ids),
            page=page,
            per_page=per_page,
        )

    @staticmethod
    def parse_tag_ids(raw: Any) -> List[int]:
        """
        Parse tag ids, ignoring blank pieces and repeated ids.

        Examples:
            >>> DreamSearchQuery.parse_tag_ids("3, 7,,3")
            [3, 7]
        """
        if raw is None:
            return []
        pieces = raw.split(",") if isinstance(raw, str) else list(raw)

        ids: List[int] = []
        for piece in pieces:
            text = str(piece).strip()
            if not text:
                continue
            try:
                tag_id = int(text)
            except ValueError:
                raise ValidationError(f"Tag ids must be integers, got '{text}'")
            if tag_id not in ids:
                ids.append(tag_id)
        return ids


class DreamSearch(BaseManager):
    """Execute dream searches scoped to a single user."""

    @handle_db_errors
    @log_database_operation("search_dreams")
    def search(self, user: User, query: DreamSearchQuery) -> Page:
        """
        Execute a search and return one page of matching dreams.

        Args:
            user: Owner whose dreams are searched
            query: Keyword, tag ids and pagination

        Returns:
            Page of dreams, newest first, tags preloaded
        """
        stmt = self.build_statement(user, query)
        return self._paginate(stmt, page=query.page, per_page=query.per_page)

    def build_statement(self, user: User, query: DreamSearchQuery) -> Select:
        """Compose the ordered select statement for a query."""
        stmt = (
            select(Dream)
            .where(Dream.user_id == user.id)
            .options(selectinload(Dream.tags))
        )

        if not query.is_empty:
            stmt = stmt.where(and_(*self._conditions(query)))

        return stmt.order_by(Dream.dreamed_at.desc(), Dream.id.desc())

    def _conditions(self, query: DreamSearchQuery) -> List[Any]:
        conditions = [self._keyword_condition(word) for word in query.keywords]
        if query.tag_ids:
            conditions.append(Dream.id.in_(self._tagged_with_all(query.tag_ids)))
        return conditions

    @staticmethod
    def _keyword_condition(word: str):
        return or_(
            Dream.title.contains(word, autoescape=True),
            Dream.content.contains(word, autoescape=True),
        )

    @staticmethod
    def _tagged_with_all(tag_ids: List[int]) -> Select:
        """Ids of dreams associated with every tag in ``tag_ids``."""
        unique_ids = set(tag_ids)
        return (
            select(dream_tags.c.dream_id)
            .where(dream_tags.c.tag_id.in_(unique_ids))
            .group_by(dream_tags.c.dream_id)
            .having(func.count(distinct(dream_tags.c.tag_id)) == len(unique_ids))
        )
