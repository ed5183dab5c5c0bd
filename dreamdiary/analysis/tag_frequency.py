#!/usr/bin/env python3
"""
tag_frequency.py
------------------
Recurring tags among a user's most recent dreams.

A tag is "frequent" when it appears on at least FREQUENCY_THRESHOLD of the
user's RECENT_DREAMS_LIMIT newest dreams. Older dreams never count,
however often they carry a tag.
"""
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from dreamdiary.core.logging_manager import DreamDiaryLogger
from dreamdiary.database.decorators import handle_db_errors, log_database_operation
from dreamdiary.database.models import Dream, Tag, User, dream_tags

RECENT_DREAMS_LIMIT = 10
FREQUENCY_THRESHOLD = 2


class TagFrequencyAnalyzer:
    """
    Sliding-window tag frequency over the newest dreams.

    The window is the user's newest dreams by dream date, ties broken by
    id, both descending.
    """

    def __init__(
        self,
        logger: Optional[DreamDiaryLogger] = None,
        window: int = RECENT_DREAMS_LIMIT,
        threshold: int = FREQUENCY_THRESHOLD,
    ) -> None:
        """
        Initialize the analyzer.

        Args:
            logger: Optional logger for query operations
            window: Number of recent dreams considered
            threshold: Minimum occurrences within the window
        """
        self.logger = logger
        self.window = window
        self.threshold = threshold

    @handle_db_errors
    @log_database_operation("frequent_tag_ids")
    def frequent_tag_ids(self, session: Session, user: User) -> List[int]:
        """
        Ids of the tags used at least ``threshold`` times in the window.

        Args:
            session: SQLAlchemy session
            user: Owner of the dreams

        Returns:
            Tag ids, most used first (ties by ascending id); empty when the
            user has no dreams or nothing recurs
        """
        recent = (
            select(Dream.id)
            .where(Dream.user_id == user.id)
            .order_by(Dream.dreamed_at.desc(), Dream.id.desc())
            .limit(self.window)
        )

        usage = func.count(dream_tags.c.dream_id)
        stmt = (
            select(dream_tags.c.tag_id)
            .where(dream_tags.c.dream_id.in_(recent))
            .group_by(dream_tags.c.tag_id)
            .having(usage >= self.threshold)
            .order_by(usage.desc(), dream_tags.c.tag_id)
        )
        return list(session.execute(stmt).scalars().all())

    def frequent_tags(self, session: Session, user: User) -> List[Tag]:
        """Tag objects for :meth:`frequent_tag_ids`, in the same order."""
        tag_ids = self.frequent_tag_ids(session, user)
        if not tag_ids:
            return []
        tags = {
            tag.id: tag
            for tag in session.execute(select(Tag).where(Tag.id.in_(tag_ids))).scalars()
        }
        return [tags[tag_id] for tag_id in tag_ids]
