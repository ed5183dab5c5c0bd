#!/usr/bin/env python3
"""
managers package
--------------------
Entity managers for the dream diary database.

Each manager handles persistence for one entity type and inherits from
BaseManager.

Available Managers:
    BaseManager: Abstract base class with common utilities
    UserManager: Manages User accounts
    DreamManager: Manages Dream entries
    TagManager: Manages per-user person/place tags

Usage:
    from dreamdiary.database.managers import DreamManager, TagManager

    dream_mgr = DreamManager(session, logger)
    tag_mgr = TagManager(session, logger)
"""
from .base_manager import DEFAULT_PER_PAGE, BaseManager
from .user_manager import UserManager
from .tag_manager import TagManager
from .dream_manager import DreamManager

__all__ = [
    "DEFAULT_PER_PAGE",
    "BaseManager",
    "UserManager",
    "TagManager",
    "DreamManager",
]
