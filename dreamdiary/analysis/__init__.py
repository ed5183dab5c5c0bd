"""
Read-side analysis of a user's dreams: recurring tags and overflow
fragments.
"""
from .overflow import FALLBACK_FRAGMENTS, MAX_FRAGMENTS, MIN_FRAGMENTS, OverflowFragmentSampler
from .tag_frequency import FREQUENCY_THRESHOLD, RECENT_DREAMS_LIMIT, TagFrequencyAnalyzer

__all__ = [
    "FALLBACK_FRAGMENTS",
    "FREQUENCY_THRESHOLD",
    "MAX_FRAGMENTS",
    "MIN_FRAGMENTS",
    "OverflowFragmentSampler",
    "RECENT_DREAMS_LIMIT",
    "TagFrequencyAnalyzer",
]
