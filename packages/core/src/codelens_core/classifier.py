"""Improvement classification and code-block splitting.

The model is asked to start improvement items with "Bug Fix:", "Refactor:"
or "Performance:". That prefix is a convention, not a guarantee, so the
matching policy lives in one pure function: case-insensitive, checked in
the order below, first match wins, anything else is OTHER.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum


class ImprovementCategory(str, Enum):
    BUG_FIX = "bug_fix"
    REFACTOR = "refactor"
    PERFORMANCE = "performance"
    OTHER = "other"


_PREFIX_ORDER = (
    ("bug fix", ImprovementCategory.BUG_FIX),
    ("refactor", ImprovementCategory.REFACTOR),
    ("performance", ImprovementCategory.PERFORMANCE),
)

CATEGORY_TITLES = {
    ImprovementCategory.BUG_FIX: "Bug Fixes",
    ImprovementCategory.REFACTOR: "Refactors",
    ImprovementCategory.PERFORMANCE: "Performance",
    ImprovementCategory.OTHER: "Other Suggestions",
}

_FENCE = "```"
_LANGUAGE_TAG_RE = re.compile(r"^[a-zA-Z]+\s*")


def classify_improvement(text: str) -> ImprovementCategory:
    lowered = text.lower()
    for prefix, category in _PREFIX_ORDER:
        if lowered.startswith(prefix):
            return category
    return ImprovementCategory.OTHER


@dataclass(frozen=True)
class ClassifiedImprovements:
    bug_fixes: tuple[str, ...] = ()
    refactors: tuple[str, ...] = ()
    performance: tuple[str, ...] = ()
    other: tuple[str, ...] = ()

    def __len__(self) -> int:
        return len(self.bug_fixes) + len(self.refactors) + len(self.performance) + len(self.other)

    def by_category(self) -> dict[ImprovementCategory, tuple[str, ...]]:
        return {
            ImprovementCategory.BUG_FIX: self.bug_fixes,
            ImprovementCategory.REFACTOR: self.refactors,
            ImprovementCategory.PERFORMANCE: self.performance,
            ImprovementCategory.OTHER: self.other,
        }


def classify_improvements(items: Iterable[str]) -> ClassifiedImprovements:
    """Partition items into the four categories, keeping input order in each."""
    buckets: dict[ImprovementCategory, list[str]] = {c: [] for c in ImprovementCategory}
    for item in items:
        buckets[classify_improvement(item)].append(item)
    return ClassifiedImprovements(
        bug_fixes=tuple(buckets[ImprovementCategory.BUG_FIX]),
        refactors=tuple(buckets[ImprovementCategory.REFACTOR]),
        performance=tuple(buckets[ImprovementCategory.PERFORMANCE]),
        other=tuple(buckets[ImprovementCategory.OTHER]),
    )


@dataclass(frozen=True)
class ImprovementParts:
    before: str
    code: str | None
    after: str


def split_code_fence(text: str) -> ImprovementParts:
    """Split one improvement into prose, a single fenced code block, and trailing prose.

    Only the first fenced block is recognised. Without a closing fence the
    whole item is plain text.
    """
    first = text.find(_FENCE)
    if first == -1:
        return ImprovementParts(before=text, code=None, after="")
    second = text.find(_FENCE, first + len(_FENCE))
    if second == -1:
        return ImprovementParts(before=text, code=None, after="")

    inside = _LANGUAGE_TAG_RE.sub("", text[first + len(_FENCE) : second], count=1)
    code = inside.strip()
    return ImprovementParts(
        before=text[:first].strip(),
        code=code or None,
        after=text[second + len(_FENCE) :].strip(),
    )
