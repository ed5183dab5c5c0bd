"""
Dream search: keyword AND search and tag-intersection search.
"""
from .search_engine import DreamSearch, DreamSearchQuery

__all__ = ["DreamSearch", "DreamSearchQuery"]
