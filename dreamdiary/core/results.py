#!/usr/bin/env python3
"""
results.py
--------------------
Explicit success/failure values returned across the core boundary.

Usage:
    result = db.create_dream(user_id, fields, tags)
    if result.success:
        dream = result.value
    else:
        for message in result.errors:
            click.echo(message, err=True)
"""
from __future__ import annotations

from dataclasses import dataclass, field
from math import ceil
from typing import Any, Generic, Iterable, List, Optional, TypeVar, Union

from .exceptions import DreamDiaryError

T = TypeVar("T")


@dataclass
class ServiceResult(Generic[T]):
    """
    Outcome of a domain operation.

    Attributes:
        success: Whether the operation succeeded
        value: Payload on success
        errors: User-facing messages on failure
        error: The exception behind a failure, if any
    """

    success: bool
    value: Optional[T] = None
    errors: List[str] = field(default_factory=list)
    error: Optional[Exception] = None

    @classmethod
    def ok(cls, value: Optional[T] = None) -> "ServiceResult[T]":
        return cls(success=True, value=value)

    @classmethod
    def failure(
        cls,
        errors: Union[str, Iterable[str]],
        error: Optional[Exception] = None,
    ) -> "ServiceResult[T]":
        messages = [errors] if isinstance(errors, str) else list(errors)
        return cls(success=False, errors=messages, error=error)

    @classmethod
    def from_exception(cls, error: DreamDiaryError) -> "ServiceResult[T]":
        return cls.failure(error.errors, error=error)

    @property
    def failed(self) -> bool:
        return not self.success

    def unwrap(self) -> Optional[T]:
        """
        Return the value, or raise the error behind a failure.

        Raises:
            DreamDiaryError: The stored error (or a generic one built from
                the messages) when the result is a failure
        """
        if self.success:
            return self.value
        if self.error is not None:
            raise self.error
        raise DreamDiaryError("; ".join(self.errors))


@dataclass
class Page(Generic[T]):
    """One page of an ordered query result."""

    items: List[T]
    page: int
    per_page: int
    total_count: int

    @property
    def total_pages(self) -> int:
        if self.total_count == 0:
            return 0
        return ceil(self.total_count / self.per_page)

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self):
        return iter(self.items)
