"""Hard exclusion of retail sporting-goods chains.

A denylist, not a heuristic: a match drops the place regardless of its score.
"""
from __future__ import annotations

from typing import List, Optional

from . import config

RETAIL_CHAIN_KEYWORDS: List[str] = [
    "academy sports",
    "academy sports + outdoors",
    "academy sports and outdoors",
    "dick's sporting goods",
    "dicks sporting goods",
    "dicks",
    "scheels",
    "big 5 sporting goods",
    "big 5",
    "sportsman's warehouse",
    "sportsmans warehouse",
    "rei",
    "bass pro",
    "cabela",
    "cabelas",
    "fleet feet",
    "foot locker",
    "champs sports",
    "finish line",
    "modell's",
    "modells",
    "sports authority",
    "play it again sports",
]


def retail_keywords() -> List[str]:
    return RETAIL_CHAIN_KEYWORDS + list(config.RETAIL_EXCLUSIONS_EXTRA)


def matched_keyword(name: Optional[str], website: Optional[str] = None) -> Optional[str]:
    haystack = " ".join(part for part in (name or "", website or "") if part).casefold()
    if not haystack:
        return None
    for keyword in retail_keywords():
        if keyword and keyword.casefold() in haystack:
            return keyword
    return None


def is_excluded(name: Optional[str], website: Optional[str] = None) -> bool:
    return matched_keyword(name, website) is not None
