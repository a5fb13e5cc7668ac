"""Task and payment data models.

Decoupled from codelens_core so the store layer can be used independently.
Evaluation fields are kept as JSON text, the same shape the relational
tables hold, and decoded on read.
"""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone

STATUS_PENDING = "pending"
STATUS_EVALUATED = "evaluated"

PAYMENT_CREATED = "created"
PAYMENT_SUCCESS = "success"


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class StoredEvaluation:
    """Decoded evaluation fields of a task."""

    score: float
    strengths: list[str]
    improvements: list[str]


@dataclass
class TaskRecord:
    """A submitted code sample with its evaluation and entitlement state."""

    title: str
    description: str
    code: str
    user_id: str
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    status: str = STATUS_PENDING
    ai_score: float | None = None
    ai_strengths: str | None = None  # JSON-encoded list[str]
    ai_improvements: str | None = None  # JSON-encoded list[str]
    is_report_unlocked: bool = False
    created_at: str = field(default_factory=_utcnow)

    def evaluation(self) -> StoredEvaluation | None:
        return decode_evaluation(self.status, self.ai_score, self.ai_strengths, self.ai_improvements)


@dataclass
class PaymentRecord:
    """One payment attempt. Inserted, never updated."""

    user_id: str
    task_id: str
    amount: int  # minor currency units
    currency: str
    status: str
    provider_order_id: str | None = None
    provider_payment_id: str | None = None
    created_at: str = field(default_factory=_utcnow)


def encode_evaluation(strengths, improvements) -> tuple[str, str]:
    return json.dumps(list(strengths)), json.dumps(list(improvements))


def decode_evaluation(
    status: str,
    score: float | None,
    strengths_json: str | None,
    improvements_json: str | None,
) -> StoredEvaluation | None:
    """Return the stored evaluation, or None when none is (validly) present.

    Corrupt JSON decodes as "not evaluated"; it never raises.
    """
    if status != STATUS_EVALUATED or score is None or not strengths_json or not improvements_json:
        return None
    try:
        strengths = json.loads(strengths_json)
        improvements = json.loads(improvements_json)
    except (TypeError, ValueError):
        return None
    if not isinstance(strengths, list) or not isinstance(improvements, list):
        return None
    return StoredEvaluation(score=score, strengths=strengths, improvements=improvements)
