"""Keyword heuristic that picks the reply language for a prompt.

Words are counted as substrings of the lower-cased prompt, so a marker
embedded in a longer word ("sasa" in "nasasa") still counts. Changing that
to word-boundary matching would change classifications.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from assistant.core.prompt import TONE_INSTRUCTIONS


SWAHILI_WORDS = (
    "habari", "sasa", "niko", "kwani", "basi", "ndio",
    "karibu", "asante", "mambo", "poa", "sawa",
)
SHENG_WORDS = (
    "bro", "maze", "manze", "noma", "fiti", "safi",
    "buda", "msee", "mwana", "poa", "vibe",
)

MIXED_THRESHOLD = 1
SWAHILI_THRESHOLD = 3


class Language(str, Enum):
    ENGLISH = "english"
    MIXED = "mixed"
    SWAHILI = "swahili"


def count_hits(text: str) -> int:
    lower = text.lower()
    swahili = sum(1 for word in SWAHILI_WORDS if word in lower)
    sheng = sum(1 for word in SHENG_WORDS if word in lower)
    # "poa" is in both lists and counts once per list
    return swahili + sheng


def detect_language(text: Any) -> Language:
    if not text or not isinstance(text, str):
        return Language.ENGLISH
    hits = count_hits(text)
    if hits >= SWAHILI_THRESHOLD:
        return Language.SWAHILI
    if hits >= MIXED_THRESHOLD:
        return Language.MIXED
    return Language.ENGLISH


def tone_instruction(language: Language) -> str:
    return TONE_INSTRUCTIONS[language.value]
