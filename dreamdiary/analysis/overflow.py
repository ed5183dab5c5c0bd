#!/usr/bin/env python3
"""
overflow.py
------------------
Sentence fragments sampled from dream texts for the "overflow" view.

Each dream's content is cut on 。！？ into fragments. When the dreams
yield fewer than MIN_FRAGMENTS fragments, a fixed set of fallback
fragments is mixed in. Between MIN_FRAGMENTS and MAX_FRAGMENTS of them
are then picked at random.

Usage:
    sampler = OverflowFragmentSampler()
    result = sampler.sample(dreams)
    if result.success:
        for fragment in result.value:
            print(fragment)
"""
from __future__ import annotations

import random
from typing import Any, Iterable, List, Optional

from dreamdiary.core.exceptions import SamplingError
from dreamdiary.core.logging_manager import DreamDiaryLogger, safe_logger
from dreamdiary.core.results import ServiceResult
from dreamdiary.utils.text import split_sentences

MIN_FRAGMENTS = 5
MAX_FRAGMENTS = 8

FALLBACK_FRAGMENTS = (
    "遠くで鐘が鳴っている",
    "鍵は開いたままだ",
    "古びた本棚に埃が積もっている",
    "森の奥から誰かが呼んでいる",
    "月が二つ見える",
    "時計の針が逆回りしている",
    "窓の外に誰かの影が見える",
)


class OverflowFragmentSampler:
    """
    Random fragment picker.

    Attributes:
        rng: Random source; pass a seeded ``random.Random`` for repeatable
            samples
        logger: Optional logger
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        logger: Optional[DreamDiaryLogger] = None,
    ) -> None:
        self.rng = rng or random.Random()
        self.logger = logger

    def sample(self, dreams: Iterable[Any]) -> ServiceResult[List[str]]:
        """
        Pick 5 to 8 fragments from the dreams' contents.

        Args:
            dreams: Objects with a ``content`` attribute (usually Dreams)

        Returns:
            Success with the fragments, or a failure wrapping a
            SamplingError when extraction blows up
        """
        try:
            fragments = self.extract_fragments(dreams)
            fragments = self.add_fallback_if_needed(fragments)

            self.rng.shuffle(fragments)
            count = self.rng.randint(MIN_FRAGMENTS, MAX_FRAGMENTS)
            selected = fragments[:count]

        except Exception as e:
            error = SamplingError(f"Failed to sample overflow fragments: {e}")
            safe_logger(self.logger).log_error(e, {"operation": "sample_overflow"})
            return ServiceResult.from_exception(error)

        safe_logger(self.logger).log_debug(
            "Sampled overflow fragments", {"count": len(selected)}
        )
        return ServiceResult.ok(selected)

    @staticmethod
    def extract_fragments(dreams: Iterable[Any]) -> List[str]:
        """All non-blank sentences of every dream, in order."""
        fragments: List[str] = []
        for dream in dreams:
            fragments.extend(split_sentences(dream.content))
        return fragments

    @staticmethod
    def add_fallback_if_needed(fragments: List[str]) -> List[str]:
        if len(fragments) >= MIN_FRAGMENTS:
            return fragments
        return fragments + list(FALLBACK_FRAGMENTS)
