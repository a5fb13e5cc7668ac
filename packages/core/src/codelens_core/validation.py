"""Review schema validation.

Nothing downstream of this module sees the model's raw dict: check_review
either builds a frozen Review or explains why it could not.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from typing import Any, Union

from codelens_core.errors import InvalidReviewShape


@dataclass(frozen=True)
class Review:
    score: float
    strengths: tuple[str, ...]
    improvements: tuple[str, ...]

    def to_dict(self) -> dict:
        return {
            "score": self.score,
            "strengths": list(self.strengths),
            "improvements": list(self.improvements),
        }


@dataclass(frozen=True)
class ShapeViolation:
    reason: str


ReviewCheck = Union[Review, ShapeViolation]


def check_review(value: Any) -> ReviewCheck:
    # The score is not range-checked: out-of-range values pass through as-is.
    if not isinstance(value, dict):
        return ShapeViolation(f"expected a JSON object, got {type(value).__name__}")
    score = value.get("score")
    if isinstance(score, bool) or not isinstance(score, (int, float)):
        return ShapeViolation("score must be a number")
    if isinstance(score, float) and not math.isfinite(score):
        return ShapeViolation("score must be finite")
    for key in ("strengths", "improvements"):
        if not isinstance(value.get(key), list):
            return ShapeViolation(f"{key} must be an array")
    return Review(
        score=score,
        strengths=tuple(_as_text(item) for item in value["strengths"]),
        improvements=tuple(_as_text(item) for item in value["improvements"]),
    )


def validate_review(value: Any) -> Review:
    """Return a Review or raise InvalidReviewShape."""
    result = check_review(value)
    if isinstance(result, ShapeViolation):
        raise InvalidReviewShape("Model JSON shape invalid", payload=value, reason=result.reason)
    return result


def _as_text(item: Any) -> str:
    return item if isinstance(item, str) else json.dumps(item)
