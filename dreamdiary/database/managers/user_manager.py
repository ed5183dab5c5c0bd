#!/usr/bin/env python3
"""
user_manager.py
--------------------
Manages User accounts.

Credentials are handled by the authentication layer; this manager only
owns the identity columns the rest of the core scopes by.

Usage:
    user_mgr = UserManager(session, logger)
    user = user_mgr.create({"email": "yume@example.com", "username": "yume"})
    same = user_mgr.find_by_login("yume")
"""
from __future__ import annotations

import re
from typing import Any, Dict, List, Optional

from sqlalchemy import or_, select

from dreamdiary.core.exceptions import NotFoundError, ValidationError
from dreamdiary.core.logging_manager import safe_logger
from dreamdiary.core.validators import DataValidator
from dreamdiary.database.decorators import handle_db_errors, log_database_operation
from dreamdiary.database.models import User
from .base_manager import BaseManager

EMAIL_PATTERN = re.compile(r"\A[^@\s]+@[^@\s]+\Z")


class UserManager(BaseManager):
    """Manages User table operations."""

    @handle_db_errors
    @log_database_operation("get_user")
    def get_by_id(self, user_id: Any) -> User:
        """
        Retrieve a user by ID.

        Raises:
            NotFoundError: If no user has that id
        """
        normalized_id = DataValidator.normalize_int(user_id)
        user = self.session.get(User, normalized_id) if normalized_id is not None else None
        if user is None:
            raise NotFoundError()
        return user

    @handle_db_errors
    @log_database_operation("find_user_by_login")
    def find_by_login(self, login: Optional[str]) -> Optional[User]:
        """
        Find a user whose email or username equals the login exactly.

        Args:
            login: Email address or username; not normalized

        Returns:
            Matching User, or None
        """
        if not login:
            return None

        stmt = select(User).where(or_(User.email == login, User.username == login))
        return self.session.execute(stmt).scalars().first()

    @handle_db_errors
    @log_database_operation("create_user")
    def create(self, metadata: Dict[str, Any]) -> User:
        """
        Create a new user.

        Args:
            metadata: Dictionary with required keys:
                - email: Unique email address
                - username: Unique username

        Returns:
            Created User

        Raises:
            ValidationError: Listing every invalid or duplicate field
        """
        email = DataValidator.normalize_string(metadata.get("email"))
        username = DataValidator.normalize_string(metadata.get("username"))

        errors: List[str] = []
        if not email:
            errors.append("Email can't be blank")
        elif not EMAIL_PATTERN.match(email):
            errors.append("Email is invalid")
        elif self._taken(User.email, email):
            errors.append("Email has already been taken")

        if not username:
            errors.append("Username can't be blank")
        elif self._taken(User.username, username):
            errors.append("Username has already been taken")

        if errors:
            raise ValidationError(errors)

        user = User(email=email, username=username)
        self.session.add(user)
        self.session.flush()

        safe_logger(self.logger).log_debug(
            f"Created user: {username}", {"user_id": user.id}
        )
        return user

    @handle_db_errors
    @log_database_operation("delete_user")
    def delete(self, user: User) -> None:
        """
        Delete a user together with all of their dreams and tags.
        """
        safe_logger(self.logger).log_info(
            f"Deleting user: {user.username}", {"user_id": user.id}
        )
        self.session.delete(user)
        self.session.flush()

    def _taken(self, column, value: str) -> bool:
        return self.session.execute(select(User.id).where(column == value)).first() is not None
