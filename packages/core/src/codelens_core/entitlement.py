"""Report entitlement: a two-state machine with one irreversible edge.

    LOCKED ──(owner + payment success callback)──▶ UNLOCKED

"Already unlocked" and "just unlocked" resolve to the same success result,
so a retried unlock after a network hiccup is harmless. The flip itself is
a conditional update inside the store; two concurrent unlocks cannot both
transition, and only the one that does records a payment.

Trust boundary: the payment callback is accepted as reported by the client.
The provider order and payment ids go into the payment record. The signature
is NOT verified and the order status is not re-queried.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from codelens_core.classifier import ClassifiedImprovements, classify_improvements
from codelens_core.errors import Forbidden, InputValidation, PersistenceFailure
from codelens_store.base import StoreError
from codelens_store.models import PAYMENT_SUCCESS, PaymentRecord, TaskRecord

if TYPE_CHECKING:
    from codelens_store.base import BaseStore

logger = logging.getLogger(__name__)

_DENIED = "You are not allowed to unlock this task."


class EntitlementState(str, Enum):
    LOCKED = "locked"
    UNLOCKED = "unlocked"


def state_of(task: TaskRecord) -> EntitlementState:
    return EntitlementState.UNLOCKED if task.is_report_unlocked else EntitlementState.LOCKED


def load_owned_task(store: BaseStore, task_id: str, actor_id: str, denial: str = _DENIED) -> TaskRecord:
    """Return the task if actor_id owns it.

    A missing task and someone else's task produce the same Forbidden, so the
    response never tells a non-owner whether the id exists.
    """
    try:
        task = store.get_task(task_id)
    except StoreError as e:
        logger.error("Could not load task %s: %s", task_id, e)
        raise PersistenceFailure("Failed to load task") from e
    if task is None or task.user_id != actor_id:
        logger.warning("Denied access to task %s for user %s", task_id, actor_id)
        raise Forbidden(denial)
    return task


@dataclass(frozen=True)
class PaymentCallback:
    """Fields the hosted checkout hands back to the client on success."""

    order_id: str | None = None
    payment_id: str | None = None
    signature: str | None = None


@dataclass(frozen=True)
class UnlockResult:
    task_id: str
    state: EntitlementState
    transitioned: bool


@dataclass(frozen=True)
class ReportView:
    """What the owner may see. Gated fields are None while LOCKED."""

    task_id: str
    title: str
    status: str
    score: float | None
    state: EntitlementState
    strengths: tuple[str, ...] | None = None
    improvements: ClassifiedImprovements | None = None

    @property
    def is_unlocked(self) -> bool:
        return self.state is EntitlementState.UNLOCKED


class EntitlementGate:
    def __init__(self, store: BaseStore, amount: int = 9900, currency: str = "INR"):
        self.store = store
        self.amount = amount
        self.currency = currency

    def unlock(self, task_id: str, actor_id: str, callback: PaymentCallback | None = None) -> UnlockResult:
        if not task_id or not actor_id:
            raise InputValidation("Missing taskId or userId")
        task = load_owned_task(self.store, task_id, actor_id)

        if task.is_report_unlocked:
            logger.info("Task %s already unlocked; nothing to do", task_id)
            return UnlockResult(task_id, EntitlementState.UNLOCKED, transitioned=False)

        callback = callback or PaymentCallback()
        payment = PaymentRecord(
            user_id=actor_id,
            task_id=task_id,
            amount=self.amount,
            currency=self.currency,
            status=PAYMENT_SUCCESS,
            provider_order_id=callback.order_id,
            provider_payment_id=callback.payment_id,
        )
        try:
            transitioned = self.store.unlock_task(task_id, actor_id, payment)
        except StoreError as e:
            logger.error("Failed to unlock task %s (order=%s): %s", task_id, callback.order_id, e)
            raise PersistenceFailure("Failed to unlock report") from e

        if transitioned:
            logger.info("Report unlocked for task %s (order=%s)", task_id, callback.order_id)
        else:
            # Lost a race with a concurrent unlock; the other call recorded the payment.
            logger.info("Task %s was unlocked concurrently; nothing to do", task_id)
        return UnlockResult(task_id, EntitlementState.UNLOCKED, transitioned=transitioned)

    def report(self, task_id: str, actor_id: str) -> ReportView:
        """Return the owner's view of a task, with gated fields only when unlocked."""
        if not task_id or not actor_id:
            raise InputValidation("Missing taskId or userId")
        task = load_owned_task(self.store, task_id, actor_id, denial="You are not allowed to view this task.")
        evaluation = task.evaluation()
        state = state_of(task)
        view = ReportView(
            task_id=task.id,
            title=task.title,
            status=task.status,
            score=evaluation.score if evaluation else None,
            state=state,
        )
        if evaluation is None or state is EntitlementState.LOCKED:
            return view
        return dataclasses.replace(
            view,
            strengths=tuple(str(s) for s in evaluation.strengths),
            improvements=classify_improvements(str(i) for i in evaluation.improvements),
        )
