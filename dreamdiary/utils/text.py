#!/usr/bin/env python3
"""
text.py
-------------------
Plain-text helpers for dream content.

Functions:
    - strip_markup: Remove every HTML tag and attribute, keeping text
    - split_sentences: Break text on Japanese sentence terminators
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import re
from typing import List, Optional

# --- Third party imports ---
from bs4 import BeautifulSoup

SENTENCE_TERMINATORS = "。！？"
_SENTENCE_SPLIT = re.compile(f"[{SENTENCE_TERMINATORS}]")


def strip_markup(text: Optional[str]) -> Optional[str]:
    """
    Remove all markup from text.

    Script and style elements are dropped with their contents; every other
    tag is unwrapped so only its text remains. Entity-encoded markup
    ("&lt;b&gt;") decodes into tags, so stripping repeats until the text
    stops changing and the result never carries markup.

    Args:
        text: Possibly HTML-bearing text

    Returns:
        Plain text, or the input unchanged when None/empty
    """
    if not text:
        return text

    while True:
        stripped = _strip_once(text)
        if stripped == text:
            return stripped
        text = stripped


def _strip_once(text: str) -> str:
    soup = BeautifulSoup(text, "html.parser")
    for element in soup(["script", "style"]):
        element.decompose()

    return soup.get_text()


def split_sentences(text: Optional[str]) -> List[str]:
    """
    Split text on 。！？ and discard blank pieces.

    Pieces keep their original spacing; only whitespace-only pieces are
    dropped.

    Examples:
        >>> split_sentences("森を歩いた。誰かがいた！")
        ['森を歩いた', '誰かがいた']
    """
    if not text:
        return []
    return [piece for piece in _SENTENCE_SPLIT.split(text) if piece.strip()]
