from __future__ import annotations

import re
from typing import Iterable, Sequence

_GAP_TOKEN_SPLIT = re.compile(r"[\s,]+")


def skills_overlap(left: str, right: str) -> bool:
    """True when either skill contains the other, ignoring case."""
    left_norm = left.strip().lower()
    right_norm = right.strip().lower()
    if not left_norm or not right_norm:
        return False
    return left_norm in right_norm or right_norm in left_norm


def filter_new_skills(existing: Sequence[str], candidates: Iterable[str]) -> list[str]:
    """Keep candidates that neither contain nor are contained by an existing or already kept skill.

    Candidate order is preserved.
    """
    kept: list[str] = []
    for candidate in candidates:
        cleaned = candidate.strip()
        if not cleaned:
            continue
        if any(skills_overlap(cleaned, other) for other in existing):
            continue
        if any(skills_overlap(cleaned, other) for other in kept):
            continue
        kept.append(cleaned)
    return kept


def gap_keywords(gaps: Sequence[str], min_length: int = 3) -> list[str]:
    keywords: list[str] = []
    for gap in gaps:
        for token in _GAP_TOKEN_SPLIT.split(gap):
            if len(token) > min_length:
                keywords.append(token)
    return keywords
