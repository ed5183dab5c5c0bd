"""
test_user_manager.py
--------------------
Unit tests for UserManager.
"""
import pytest

from dreamdiary.core.exceptions import NotFoundError, ValidationError


class TestUserManagerCreate:
    """Test UserManager.create() method."""

    def test_create_user(self, user_manager):
        """Test a valid account is created with normalized fields."""
        user = user_manager.create({"email": " yume@example.com ", "username": "yume"})

        assert user.id is not None
        assert user.email == "yume@example.com"
        assert user.username == "yume"

    def test_blank_fields(self, user_manager):
        """Test both blank fields are reported together."""
        with pytest.raises(ValidationError) as exc_info:
            user_manager.create({"email": "", "username": "  "})

        assert exc_info.value.errors == ["Email can't be blank", "Username can't be blank"]

    def test_invalid_email(self, user_manager):
        """Test malformed emails are rejected."""
        with pytest.raises(ValidationError) as exc_info:
            user_manager.create({"email": "not-an-email", "username": "yume"})

        assert exc_info.value.errors == ["Email is invalid"]

    def test_duplicates(self, user_manager, user):
        """Test email and username must both be unique."""
        with pytest.raises(ValidationError) as exc_info:
            user_manager.create({"email": user.email, "username": user.username})

        assert exc_info.value.errors == [
            "Email has already been taken",
            "Username has already been taken",
        ]


class TestUserManagerLookup:
    """Test UserManager lookups."""

    def test_get_by_id(self, user_manager, user):
        assert user_manager.get_by_id(user.id) is user

    def test_get_by_id_missing(self, user_manager):
        with pytest.raises(NotFoundError, match="Not found"):
            user_manager.get_by_id(999)

    def test_get_by_id_malformed(self, user_manager):
        with pytest.raises(NotFoundError):
            user_manager.get_by_id("abc")

    def test_find_by_email_or_username(self, user_manager, user):
        """Test either column matches."""
        assert user_manager.find_by_login("yume@example.com") is user
        assert user_manager.find_by_login("yume") is user

    def test_find_is_exact(self, user_manager, user):
        """Test no case folding or trimming happens."""
        assert user_manager.find_by_login("YUME") is None
        assert user_manager.find_by_login(" yume") is None
        assert user_manager.find_by_login("") is None


class TestUserManagerDelete:
    """Test UserManager.delete() method."""

    def test_delete_cascades_to_dreams_and_tags(
        self, user_manager, tag_manager, make_dream, user, db_session
    ):
        """Test a user's dreams and tags go with the account."""
        from dreamdiary.database.models import Dream, Tag

        make_dream()
        tag_manager.find_or_create(user, "母", "はは", "person")

        user_manager.delete(user)
        db_session.expire_all()

        assert db_session.query(Dream).count() == 0
        assert db_session.query(Tag).count() == 0
