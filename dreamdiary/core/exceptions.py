#!/usr/bin/env python3
"""
exceptions.py
--------------------
Custom exception classes for the dream diary.

Exception Hierarchy:
    Exception (built-in)
    └── DreamDiaryError - Base for every domain error
        ├── DatabaseError - Store failures (integrity, connection, locks)
        │   └── ReconciliationError - Unexpected failure while attaching tags
        ├── ValidationError - One or more fields failed a constraint
        ├── NotFoundError - Record missing or owned by another user
        ├── SamplingError - Overflow fragment extraction failures
        └── ConfigError - Unreadable or invalid configuration file

Usage:
    from dreamdiary.core.exceptions import ValidationError, NotFoundError

    try:
        dream = dream_mgr.create(user, fields)
    except ValidationError as e:
        for message in e.errors:
            click.echo(message)
"""
from __future__ import annotations

from typing import Iterable, List, Union


class DreamDiaryError(Exception):
    """
    Base exception for all dream diary errors.

    Catch this to handle any domain failure raised by the core. Facade
    operations convert instances of this class into failure results.
    """

    @property
    def errors(self) -> List[str]:
        """Messages suitable for showing to the user."""
        return [str(self)]


class DatabaseError(DreamDiaryError):
    """
    Exception for database-related errors.

    Raised when store operations fail due to integrity violations,
    connection issues or exhausted lock retries.

    Examples:
        >>> raise DatabaseError("Data integrity violation: FOREIGN KEY constraint failed")
    """

    pass


class ValidationError(DreamDiaryError):
    """
    Exception for field validation failures.

    Carries one full message per violated field so callers can list every
    problem at once instead of fixing them one by one.

    Attributes:
        errors: List of field-level messages

    Examples:
        >>> raise ValidationError("Name can't be blank")
        >>> raise ValidationError(["Title can't be blank", "Content can't be blank"])
    """

    def __init__(self, errors: Union[str, Iterable[str]]) -> None:
        if isinstance(errors, str):
            messages = [errors]
        else:
            messages = list(errors)
        self._errors = messages
        super().__init__("; ".join(messages))

    @property
    def errors(self) -> List[str]:
        return list(self._errors)


class NotFoundError(DreamDiaryError):
    """
    Exception for missing records.

    The message never says whether the record does not exist or belongs to
    someone else; both report the same generic text.
    """

    def __init__(self, message: str = "Not found") -> None:
        super().__init__(message)


class ReconciliationError(DatabaseError):
    """
    Exception for unexpected failures while attaching tags to a dream.

    Always aborts the enclosing write transaction.

    Examples:
        >>> raise ReconciliationError("Failed to attach tags: database is locked")
    """

    pass


class SamplingError(DreamDiaryError):
    """
    Exception for overflow fragment extraction failures.

    Examples:
        >>> raise SamplingError("Failed to sample overflow fragments: 'NoneType' object ...")
    """

    pass


class ConfigError(DreamDiaryError):
    """
    Exception for configuration loading failures.

    Examples:
        >>> raise ConfigError("Unknown config key: 'per_pgae'")
    """

    pass
