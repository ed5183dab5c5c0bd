"""
conftest.py
-----------
Shared pytest fixtures for dream diary tests.

Provides fixtures for:
- Temporary database setup and teardown
- Entity managers bound to a session
- User, dream and tag factories
"""
import random
from datetime import datetime, timedelta, timezone
from pathlib import Path
from tempfile import TemporaryDirectory

import pytest


# ----- Path Fixtures -----

@pytest.fixture
def tmp_dir():
    """Create a temporary directory for test file operations."""
    with TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def test_db_path(tmp_dir):
    """Create temporary test database path."""
    return tmp_dir / "test.db"


# ----- Database Fixtures -----

@pytest.fixture
def test_db(test_db_path):
    """
    Create test database instance with schema.

    The overflow sampler uses a seeded random source so sampled sizes are
    repeatable.
    """
    from dreamdiary.database.manager import DreamDiaryDB

    db = DreamDiaryDB(test_db_path, rng=random.Random(1234))
    yield db
    db.dispose()


@pytest.fixture
def db_session(test_db):
    """
    Create a database session for tests.

    Commits when the test finishes without error.
    """
    with test_db.session_scope() as scope:
        yield scope.session


@pytest.fixture
def user_manager(db_session):
    """Create UserManager instance for testing."""
    from dreamdiary.database.managers.user_manager import UserManager
    return UserManager(db_session)


@pytest.fixture
def tag_manager(db_session):
    """Create TagManager instance for testing."""
    from dreamdiary.database.managers.tag_manager import TagManager
    return TagManager(db_session)


@pytest.fixture
def dream_manager(db_session):
    """Create DreamManager instance for testing."""
    from dreamdiary.database.managers.dream_manager import DreamManager
    return DreamManager(db_session)


@pytest.fixture
def reconciler(tag_manager):
    """Create TagReconciler instance for testing."""
    from dreamdiary.database.tag_reconciler import TagReconciler
    return TagReconciler(tag_manager)


# ----- Sample Data Factory Functions -----

BASE_TIME = datetime(2024, 1, 1, 22, 0, tzinfo=timezone.utc)


def dream_fields(**overrides):
    """Factory for valid dream attributes."""
    fields = {
        "title": "夢",
        "content": "不思議な夢を見た。",
        "emotion_color": "peace",
        "dreamed_at": BASE_TIME,
        "lucid_dream_flag": False,
    }
    fields.update(overrides)
    return fields


def tag_fields(name="母", yomi="はは", category="person"):
    """Factory for tag descriptors."""
    return {"name": name, "yomi": yomi, "category": category}


@pytest.fixture
def user(user_manager):
    """A registered user."""
    return user_manager.create({"email": "yume@example.com", "username": "yume"})


@pytest.fixture
def other_user(user_manager):
    """A second user, for ownership checks."""
    return user_manager.create({"email": "other@example.com", "username": "other"})


@pytest.fixture
def make_dream(dream_manager, user):
    """
    Factory fixture creating dreams for ``user``.

    Each call defaults to a dream one day later than the previous one.
    """
    created = []

    def _make(owner=None, **overrides):
        overrides.setdefault("dreamed_at", BASE_TIME + timedelta(days=len(created)))
        dream = dream_manager.create(owner or user, dream_fields(**overrides))
        created.append(dream)
        return dream

    return _make


@pytest.fixture
def registered_user_id(test_db):
    """Id of a user registered through the facade."""
    return test_db.create_user("yume@example.com", "yume").unwrap().id


@pytest.fixture
def fields_for():
    """The dream_fields factory, for tests that build their own attributes."""
    return dream_fields


@pytest.fixture
def tag_for():
    """The tag_fields factory."""
    return tag_fields
