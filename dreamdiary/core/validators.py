#!/usr/bin/env python3
"""
validators.py
--------------------
Data validation and normalization utilities.

Provides type-safe conversion and normalization used by the entity
managers before values reach the ORM models.
"""
from __future__ import annotations

from datetime import date, datetime, time, timezone
from enum import Enum
from typing import Any, Optional, Type, TypeVar

from .exceptions import ValidationError

E = TypeVar("E", bound=Enum)


class DataValidator:
    """Centralized data validation for database operations."""

    @staticmethod
    def is_blank(value: Any) -> bool:
        """True for None, empty collections and whitespace-only strings."""
        if value is None:
            return True
        if isinstance(value, str):
            return not value.strip()
        if isinstance(value, (list, tuple, set, dict)):
            return len(value) == 0
        return False

    @staticmethod
    def normalize_string(value: Any) -> Optional[str]:
        """
        Strip surrounding whitespace.

        Returns:
            Stripped string, or None for None/blank input
        """
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @staticmethod
    def normalize_datetime(value: Any) -> Optional[datetime]:
        """
        Normalize datetime inputs to a timezone-aware datetime.

        Accepts datetime, date (midnight) and ISO 8601 strings. Naive
        values are assumed to be UTC; aware values are converted to UTC.

        Raises:
            ValidationError: If a string cannot be parsed
        """
        if value is None or (isinstance(value, str) and not value.strip()):
            return None

        if isinstance(value, datetime):
            parsed = value
        elif isinstance(value, date):
            parsed = datetime.combine(value, time.min)
        elif isinstance(value, str):
            try:
                parsed = datetime.fromisoformat(value.strip())
            except ValueError:
                raise ValidationError(f"Dreamed at is not a valid date: '{value}'")
        else:
            raise ValidationError(f"Dreamed at is not a valid date: '{value}'")

        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=timezone.utc)
        return parsed.astimezone(timezone.utc)

    @staticmethod
    def normalize_bool(value: Any) -> Optional[bool]:
        """
        Convert various inputs to boolean.

        Raises:
            ValidationError: If conversion fails
        """
        if isinstance(value, bool):
            return value
        elif isinstance(value, (int, float)):
            if value == 0:
                return False
            elif value == 1:
                return True
            raise ValidationError(f"Cannot convert numeric '{value}' to boolean")
        elif isinstance(value, str):
            if value.lower() in ("true", "1", "yes", "on"):
                return True
            elif value.lower() in ("false", "0", "no", "off"):
                return False
            raise ValidationError(f"Cannot convert '{value}' to boolean")
        elif value is not None:
            return bool(value)
        return None

    @staticmethod
    def normalize_int(value: Any) -> Optional[int]:
        """Convert value to integer, returning None when impossible."""
        if value is None or isinstance(value, bool):
            return None
        try:
            return int(str(value).strip())
        except ValueError:
            return None

    @staticmethod
    def normalize_enum(value: Any, enum_class: Type[E]) -> Optional[E]:
        """
        Resolve a member of a str-valued enum from a member or its value.

        Returns:
            Enum member, or None when the value is not in the enum
        """
        if isinstance(value, enum_class):
            return value
        if isinstance(value, str):
            try:
                return enum_class(value.strip())
            except ValueError:
                return None
        return None
