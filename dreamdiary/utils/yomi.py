#!/usr/bin/env python3
"""
yomi.py
-------------------
Japanese syllabary index for tag readings.

A tag's yomi (hiragana reading) is filed under one of twelve index
buckets by its first character: the ten gojūon rows, an alphanumeric
bucket and a catch-all.

Usage:
    >>> classify_yomi("きつね")
    <YomiIndex.KA: 'か'>
    >>> classify_yomi("Alice")
    <YomiIndex.ALNUM: '英数字'>
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from typing import Tuple

# --- Local imports ---
from dreamdiary.core.enums import YomiIndex

# Inclusive code-point ranges in row order, voiced and small kana included.
# や starts after small ゃ and わ after small ゎ.
_ROW_BOUNDS = (
    ("あ", "お"),
    ("か", "ご"),
    ("さ", "ぞ"),
    ("た", "ど"),
    ("な", "の"),
    ("は", "ぽ"),
    ("ま", "も"),
    ("や", "よ"),
    ("ら", "ろ"),
    ("わ", "ん"),
)

YOMI_INDEX_RANGES: Tuple[Tuple[YomiIndex, str, str], ...] = tuple(
    (index, start, end)
    for index, (start, end) in zip(YomiIndex.kana_rows(), _ROW_BOUNDS)
)


def _is_ascii_alnum(char: str) -> bool:
    return char.isascii() and char.isalnum()


def classify_yomi(yomi: str) -> YomiIndex:
    """
    Classify a reading into its syllabary index bucket.

    Only the first character is inspected.

    Args:
        yomi: Non-empty phonetic reading

    Returns:
        The matching YomiIndex; YomiIndex.OTHER when no row matches

    Raises:
        ValueError: If yomi is empty
    """
    if not yomi:
        raise ValueError("Cannot classify an empty reading")

    first_char = yomi[0]
    if _is_ascii_alnum(first_char):
        return YomiIndex.ALNUM

    for index, start, end in YOMI_INDEX_RANGES:
        if start <= first_char <= end:
            return index

    return YomiIndex.OTHER
