"""
Enumeration Types
------------------

Closed value sets shared by the models, managers and classifiers.

Enums:
    - EmotionColor: Emotional tone recorded for a dream
    - TagCategory: Whether a tag names a person or a place
    - YomiIndex: Syllabary bucket a tag reading is filed under

Values are what the database stores and what callers pass in.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from enum import Enum
from typing import List


class EmotionColor(str, Enum):
    """
    Emotional coloring of a dream.
    - PEACE: Calm, restful dreams
    - CHAOS: Confused or turbulent dreams
    - FEAR: Nightmares and anxious dreams
    - ELATION: Joyful, exhilarating dreams
    """

    PEACE = "peace"
    CHAOS = "chaos"
    FEAR = "fear"
    ELATION = "elation"

    @classmethod
    def choices(cls) -> List[str]:
        """Get all available emotion color choices."""
        return [color.value for color in cls]


class TagCategory(str, Enum):
    """
    Kind of recurring element a tag names.
    - PERSON: Someone appearing in dreams
    - PLACE: Somewhere dreams take place
    """

    PERSON = "person"
    PLACE = "place"

    @classmethod
    def choices(cls) -> List[str]:
        """Get all available tag category choices."""
        return [category.value for category in cls]


class YomiIndex(str, Enum):
    """
    Syllabary index buckets for tag readings.

    The ten gojūon rows, plus ALNUM for readings starting with an ASCII
    letter or digit and OTHER for everything else.
    """

    A = "あ"
    KA = "か"
    SA = "さ"
    TA = "た"
    NA = "な"
    HA = "は"
    MA = "ま"
    YA = "や"
    RA = "ら"
    WA = "わ"
    ALNUM = "英数字"
    OTHER = "他"

    @classmethod
    def choices(cls) -> List[str]:
        """Get all index labels in display order."""
        return [index.value for index in cls]

    @classmethod
    def kana_rows(cls) -> List["YomiIndex"]:
        """The ten syllabary rows, without the catch-all buckets."""
        return [index for index in cls if index not in (cls.ALNUM, cls.OTHER)]
