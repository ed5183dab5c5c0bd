"""
Database Models Package
------------------------

SQLAlchemy ORM models for the dream diary database.

- base: Base class and mixins
- associations: dream_tags join table
- core: Dream
- entities: User, Tag

Usage:
    from dreamdiary.database.models import Dream, Tag, User
"""
# Base classes
from .base import Base, TimestampMixin

# Enumerations
from dreamdiary.core.enums import EmotionColor, TagCategory, YomiIndex

# Association tables
from .associations import dream_tags

# Core models
from .core import CONTENT_MAX_LENGTH, TITLE_MAX_LENGTH, Dream

# Entity models
from .entities import Tag, User

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    # Enums
    "EmotionColor",
    "TagCategory",
    "YomiIndex",
    # Association tables
    "dream_tags",
    # Core
    "Dream",
    "TITLE_MAX_LENGTH",
    "CONTENT_MAX_LENGTH",
    # Entities
    "User",
    "Tag",
]
