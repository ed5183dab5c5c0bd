#!/usr/bin/env python3
"""
manager.py
--------------------
Database manager for the dream diary.

Provides the DreamDiaryDB class: the SQLite engine, the session factory,
and the user-scoped operations the outer layers (HTTP handlers, the CLI)
call.

Key Features:
    - Transaction management with automatic rollback
    - Each session scope carries its own entity managers (scope.users, ...)
    - Every operation returns a ServiceResult instead of raising domain errors
    - A failed tag reconciliation rolls back the whole write
    - Rotating-file logging when a log directory is given

Core Operations:
    Dreams:
        - list_dreams / search_dreams: Newest-first pages
        - create_dream / update_dream / delete_dream / get_dream
        - frequent_tags: Recurring tags among recent dreams
        - overflow / sample_overflow: Random sentence fragments

    Tags:
        - list_tags: Filter by category and syllabary index
        - suggest_tags: Name-or-reading autocomplete
        - delete_tag

    Users:
        - create_user / find_user

Notes
==============
- Schema is created from the ORM models; there are no migrations
- Every operation takes the acting user's id and never touches another
  user's records; foreign records are reported as "Not found"
- Retry logic handles SQLite lock contention
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import random
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Iterator, Optional, Union

# --- Third party imports ---
from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import Session, sessionmaker

# --- Local imports ---
from dreamdiary.analysis.overflow import OverflowFragmentSampler
from dreamdiary.analysis.tag_frequency import TagFrequencyAnalyzer
from dreamdiary.core.config import DEFAULT_OVERFLOW_POOL_SIZE, DiaryConfig
from dreamdiary.core.exceptions import DatabaseError, DreamDiaryError, NotFoundError
from dreamdiary.core.logging_manager import DreamDiaryLogger, safe_logger
from dreamdiary.core.results import ServiceResult
from dreamdiary.search.search_engine import DreamSearch, DreamSearchQuery
from .managers import DEFAULT_PER_PAGE, DreamManager, TagManager, UserManager
from .models import Base, User
from .tag_reconciler import TagReconciler


# ----- Main Database Manager -----
class DreamDiaryDB:
    """
    Main database manager for the dream diary.

    Attributes:
        - db_path (Path): Filesystem path to the SQLite database file.
        - engine (Engine): SQLAlchemy engine instance.
        - SessionLocal (sessionmaker): SQLAlchemy session factory.
        - logger (DreamDiaryLogger | None): Logger, when log_dir was given.

    Usage:
        db = DreamDiaryDB("~/dreams/dreamdiary.db", log_dir="~/dreams/logs")
        result = db.create_dream(user_id, fields, [{"name": "母", ...}])

        with db.session_scope() as scope:
            tags = scope.tags.list_for_user(user, category="person")
    """

    # ---- Initialization ----
    def __init__(
        self,
        db_path: Union[str, Path],
        log_dir: Optional[Union[str, Path]] = None,
        per_page: int = DEFAULT_PER_PAGE,
        overflow_pool_size: int = DEFAULT_OVERFLOW_POOL_SIZE,
        rng: Optional[random.Random] = None,
    ) -> None:
        """
        Initialize database engine and session factory.

        Args:
            db_path (str | Path): Path to the SQLite file.
            log_dir (str | Path): Directory for log files (optional)
            per_page (int): Default page size for dream listings
            overflow_pool_size (int): Dreams drawn for the overflow sampler
            rng (random.Random): Random source for the sampler (optional)
        """
        self.db_path = Path(db_path).expanduser().resolve()
        self.per_page = per_page
        self.overflow_pool_size = overflow_pool_size

        # --- Logging ---
        if log_dir:
            self.log_dir = Path(log_dir).expanduser().resolve()
            self.logger: Optional[DreamDiaryLogger] = DreamDiaryLogger(
                self.log_dir, component_name="database"
            )
        else:
            self.logger = None

        # Session-independent services
        self.analyzer = TagFrequencyAnalyzer(self.logger)
        self.sampler = OverflowFragmentSampler(rng=rng, logger=self.logger)

        self._setup_engine()

    @classmethod
    def from_config(cls, config: DiaryConfig, **kwargs: Any) -> "DreamDiaryDB":
        """Build a manager from a loaded DiaryConfig."""
        return cls(
            config.db_path,
            log_dir=config.log_dir,
            per_page=config.per_page,
            overflow_pool_size=config.overflow_pool_size,
            **kwargs,
        )

    def _setup_engine(self) -> None:
        """Initialize database engine and session factory."""
        try:
            safe_logger(self.logger).log_operation(
                "database_init_start", {"db_path": str(self.db_path)}
            )

            self.db_path.parent.mkdir(parents=True, exist_ok=True)

            self.engine: Engine = create_engine(
                f"sqlite:///{self.db_path}",
                echo=False,
                pool_pre_ping=True,
            )
            _configure_sqlite(self.engine)

            self.SessionLocal: sessionmaker = sessionmaker(
                bind=self.engine,
                autoflush=True,
                expire_on_commit=False,
            )

            self.create_schema()

            safe_logger(self.logger).log_operation(
                "database_init_complete", {"success": True}
            )

        except Exception as e:
            safe_logger(self.logger).log_error(e, {"operation": "database_init"})
            raise DatabaseError(f"Database initialization failed: {e}")

    def create_schema(self) -> None:
        """Create any missing tables from the ORM models."""
        Base.metadata.create_all(bind=self.engine)

    def dispose(self) -> None:
        """Release pooled connections."""
        self.engine.dispose()

    # ---- Session Management ----
    @contextmanager
    def session_scope(self) -> Iterator["DiaryScope"]:
        """
        Provide a transactional scope around operations with logging.

        Each scope gets its own session and its own entity managers, so
        scopes opened concurrently (other threads) or nested inside one
        another never share state.

        Usage:
            with db.session_scope() as scope:
                user = scope.users.get_by_id(1)
                dream = scope.dreams.create(user, fields)
        """
        session = self.SessionLocal()
        session_id = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
        scope = DiaryScope.bind(session, self.logger)

        safe_logger(self.logger).log_debug("session_start", {"session_id": session_id})

        try:
            yield scope
            session.commit()
            safe_logger(self.logger).log_debug(
                "session_commit", {"session_id": session_id}
            )

        except Exception as e:
            session.rollback()
            safe_logger(self.logger).log_error(
                e, {"operation": "session_rollback", "session_id": session_id}
            )
            raise
        finally:
            session.close()
            safe_logger(self.logger).log_debug(
                "session_close", {"session_id": session_id}
            )

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    def _run(
        self, operation: str, work: Callable[["DiaryScope"], Any]
    ) -> ServiceResult:
        """
        Run ``work`` in its own transaction and wrap the outcome.

        Domain errors roll the transaction back and become failure
        results; anything else propagates after the rollback.
        """
        try:
            with self.session_scope() as scope:
                value = work(scope)
        except DreamDiaryError as e:
            safe_logger(self.logger).log_warning(
                f"{operation} failed", {"errors": e.errors}
            )
            return ServiceResult.from_exception(e)
        return ServiceResult.ok(value)

    @staticmethod
    def _user(scope: "DiaryScope", user_id: Any) -> User:
        return scope.users.get_by_id(user_id)

    # ---- Dreams ----
    def list_dreams(
        self, user_id: Any, page: Any = 1, per_page: Any = None
    ) -> ServiceResult:
        """
        One page of the user's dreams, newest first.

        Returns:
            ServiceResult wrapping a Page of dreams with their tags loaded
        """

        def work(scope: DiaryScope):
            user = self._user(scope, user_id)
            return scope.dreams.list_for_user(
                user, page=page, per_page=per_page or self.per_page
            )

        return self._run("list_dreams", work)

    def search_dreams(
        self,
        user_id: Any,
        keyword: Optional[str] = None,
        tag_ids: Any = None,
        page: Any = 1,
        per_page: Any = None,
    ) -> ServiceResult:
        """
        Search the user's dreams by keywords and/or tags.

        Args:
            user_id: Acting user
            keyword: Whitespace-separated words, all required
            tag_ids: Ids ("3,7" or an iterable), all required
            page: Page number
            per_page: Page size (defaults to the configured size)

        Returns:
            ServiceResult wrapping a Page of dreams
        """

        def work(scope: DiaryScope):
            user = self._user(scope, user_id)
            query = DreamSearchQuery.from_params(
                keyword, tag_ids, page=page, per_page=per_page or self.per_page
            )
            return scope.search.search(user, query)

        return self._run("search_dreams", work)

    def get_dream(self, user_id: Any, dream_id: Any) -> ServiceResult:
        """One of the user's dreams, tags loaded."""

        def work(scope: DiaryScope):
            dream = scope.dreams.get_for_user(self._user(scope, user_id), dream_id)
            _ = dream.tags  # load before the session closes
            return dream

        return self._run("get_dream", work)

    def create_dream(
        self,
        user_id: Any,
        fields: Dict[str, Any],
        tag_descriptors: Optional[Iterable[Any]] = None,
    ) -> ServiceResult:
        """
        Create a dream and attach its tags in one transaction.

        Args:
            user_id: Acting user
            fields: title, content, emotion_color, dreamed_at,
                lucid_dream_flag
            tag_descriptors: Mappings/TagDescriptors with name, yomi and
                category

        Returns:
            ServiceResult wrapping the new Dream; on failure nothing is
            saved, not even tags created along the way
        """

        def work(scope: DiaryScope):
            user = self._user(scope, user_id)
            dream = scope.dreams.create(user, fields)
            scope.reconciler.attach(dream, tag_descriptors).unwrap()
            return dream

        return self._run("create_dream", work)

    def update_dream(
        self,
        user_id: Any,
        dream_id: Any,
        fields: Optional[Dict[str, Any]] = None,
        tag_descriptors: Optional[Iterable[Any]] = None,
    ) -> ServiceResult:
        """
        Update a dream's fields and, optionally, replace its tags.

        Args:
            user_id: Acting user
            dream_id: Dream to update
            fields: Attributes to change; others keep their values
            tag_descriptors: None leaves the tags untouched; a list
                (even an empty one) becomes the dream's complete tag set

        Returns:
            ServiceResult wrapping the updated Dream
        """

        def work(scope: DiaryScope):
            dream = scope.dreams.get_for_user(self._user(scope, user_id), dream_id)
            if fields:
                scope.dreams.update(dream, fields)
            if tag_descriptors is not None:
                scope.reconciler.replace(dream, tag_descriptors).unwrap()
            _ = dream.tags  # load before the session closes
            return dream

        return self._run("update_dream", work)

    def delete_dream(self, user_id: Any, dream_id: Any) -> ServiceResult:
        """Delete one of the user's dreams; its tags are kept."""

        def work(scope: DiaryScope):
            dream = scope.dreams.get_for_user(self._user(scope, user_id), dream_id)
            deleted_id = dream.id
            scope.dreams.delete(dream)
            return deleted_id

        return self._run("delete_dream", work)

    def frequent_tags(self, user_id: Any) -> ServiceResult:
        """Ids of tags used at least twice among the user's 10 newest dreams."""

        def work(scope: DiaryScope):
            return self.analyzer.frequent_tag_ids(
                scope.session, self._user(scope, user_id)
            )

        return self._run("frequent_tags", work)

    def recurring_tags(self, user_id: Any) -> ServiceResult:
        """Same as frequent_tags, but the Tag records rather than their ids."""

        def work(scope: DiaryScope):
            return self.analyzer.frequent_tags(
                scope.session, self._user(scope, user_id)
            )

        return self._run("recurring_tags", work)

    def sample_overflow(self, dreams: Iterable[Any]) -> ServiceResult:
        """Sample 5 to 8 sentence fragments from the given dreams."""
        return self.sampler.sample(dreams)

    def overflow(self, user_id: Any) -> ServiceResult:
        """Sample fragments from a random handful of the user's dreams."""

        def work(scope: DiaryScope):
            return scope.dreams.random_sample(
                self._user(scope, user_id), self.overflow_pool_size
            )

        picked = self._run("overflow", work)
        if picked.failed:
            return picked
        return self.sample_overflow(picked.value)

    # ---- Tags ----
    def list_tags(
        self, user_id: Any, category: Any = None, yomi_index: Any = None
    ) -> ServiceResult:
        """The user's tags, optionally filtered by category and index label."""

        def work(scope: DiaryScope):
            return scope.tags.list_for_user(
                self._user(scope, user_id), category=category, yomi_index=yomi_index
            )

        return self._run("list_tags", work)

    def suggest_tags(
        self, user_id: Any, query: Optional[str], category: Any = None
    ) -> ServiceResult:
        """Up to 10 tags whose name or reading contains ``query``."""

        def work(scope: DiaryScope):
            return scope.tags.suggest(self._user(scope, user_id), query, category=category)

        return self._run("suggest_tags", work)

    def delete_tag(self, user_id: Any, tag_id: Any) -> ServiceResult:
        """Delete one of the user's tags; dreams that carried it are kept."""

        def work(scope: DiaryScope):
            tag = scope.tags.get_for_user(self._user(scope, user_id), tag_id)
            deleted_id = tag.id
            scope.tags.delete(tag)
            return deleted_id

        return self._run("delete_tag", work)

    # ---- Users ----
    def create_user(self, email: Optional[str], username: Optional[str]) -> ServiceResult:
        """Register a new account."""

        def work(scope: DiaryScope):
            return scope.users.create({"email": email, "username": username})

        return self._run("create_user", work)

    def find_user(self, login: Optional[str]) -> ServiceResult:
        """
        Find a user by exact email or username.

        Returns:
            ServiceResult wrapping the User, or a "Not found" failure
        """

        def work(scope: DiaryScope):
            user = scope.users.find_by_login(login)
            if user is None:
                raise NotFoundError()
            return user

        return self._run("find_user", work)

    # ---- Context manager ----
    def __enter__(self) -> "DreamDiaryDB":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.dispose()


# ----- Per-scope Managers -----
@dataclass(frozen=True)
class DiaryScope:
    """
    One session and the entity managers bound to it.

    Attributes:
        - session (Session): The scope's SQLAlchemy session
        - users (UserManager): Account operations
        - dreams (DreamManager): Dream operations
        - tags (TagManager): Tag operations
        - search (DreamSearch): Keyword and tag search
        - reconciler (TagReconciler): Attaches descriptor tags to dreams
    """

    session: Session
    users: UserManager
    dreams: DreamManager
    tags: TagManager
    search: DreamSearch
    reconciler: TagReconciler

    @classmethod
    def bind(
        cls, session: Session, logger: Optional[DreamDiaryLogger] = None
    ) -> "DiaryScope":
        tags = TagManager(session, logger)
        return cls(
            session=session,
            users=UserManager(session, logger),
            dreams=DreamManager(session, logger),
            tags=tags,
            search=DreamSearch(session, logger),
            reconciler=TagReconciler(tags, logger),
        )


def _configure_sqlite(engine: Engine) -> None:
    """
    Enable foreign keys, case-sensitive LIKE and working SAVEPOINTs on
    pysqlite connections.

    pysqlite's own transaction handling breaks SAVEPOINT; it is turned off
    and SQLAlchemy emits BEGIN itself.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.execute("PRAGMA case_sensitive_like=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


