from __future__ import annotations

import re
from typing import Iterable

_WS_RE = re.compile(r"\s+")
_SLUG_STRIP_RE = re.compile(r"[^a-z0-9-]")


def team_name_to_slug(name: str) -> str:
    """
    URL-safe slug for a school name: lowercase, whitespace -> hyphen, then drop
    anything that is not a-z, 0-9 or hyphen.

    >>> team_name_to_slug("Texas A&M")
    'texas-am'
    """
    s = (name or "").lower()
    s = _WS_RE.sub("-", s)
    return _SLUG_STRIP_RE.sub("", s)


def slug_to_team_name(slug: str) -> str:
    # Approximate only; the real school is resolved by matching slugs.
    return " ".join(w[:1].upper() + w[1:] for w in (slug or "").split("-") if w)


def find_slug_collisions(names: Iterable[str]) -> dict[str, list[str]]:
    """Slugs shared by more than one distinct name (e.g. names differing only by punctuation)."""
    by_slug: dict[str, list[str]] = {}
    for name in names:
        if not name:
            continue
        bucket = by_slug.setdefault(team_name_to_slug(name), [])
        if name not in bucket:
            bucket.append(name)
    return {slug: sorted(group) for slug, group in by_slug.items() if len(group) > 1}


def format_percent(value: float) -> str:
    return f"{value * 100:.1f}%"


def format_rank(rank: int) -> str:
    if 11 <= rank % 100 <= 13:
        return f"{rank}th"
    suffix = {1: "st", 2: "nd", 3: "rd"}.get(rank % 10, "th")
    return f"{rank}{suffix}"
