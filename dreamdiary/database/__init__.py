#!/usr/bin/env python3
"""
Dream Diary Database Package
----------------------------
Persistence layer for the dream diary.

Modules:
- manager: DreamDiaryDB, engine, sessions and the user-scoped operations
- managers: Entity managers for users, dreams and tags
- tag_reconciler: Attach/replace a dream's tags from raw descriptors
- decorators: Logging and error translation for manager methods

Usage:
    from dreamdiary.database.manager import DreamDiaryDB
"""

from .decorators import handle_db_errors, log_database_operation

__all__ = [
    "handle_db_errors",
    "log_database_operation",
]
