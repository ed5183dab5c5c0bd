"""
Association Tables
-------------------

Many-to-many relationship tables for the dream diary database.

- dream_tags: Dreams with the people/places tagged in them

The composite primary key makes each (dream, tag) pairing unique, and
both foreign keys cascade so the pairing disappears with either parent.
"""
# --- Third party imports ---
from sqlalchemy import Column, ForeignKey, Integer, Table

# --- Local imports ---
from .base import Base

dream_tags = Table(
    "dream_tags",
    Base.metadata,
    Column(
        "dream_id",
        Integer,
        ForeignKey("dreams.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "tag_id",
        Integer,
        ForeignKey("tags.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    ),
)
