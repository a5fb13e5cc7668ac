"""Abstract store interface.

Any storage backend (SQLite, in-memory, a hosted Postgres client) implements
this interface. codelens_core depends on BaseStore, not on a concrete
backend, so backends are swappable without touching the review or
entitlement logic.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from codelens_store.models import PaymentRecord, TaskRecord


class StoreError(Exception):
    """Raised by a backend when a read or write could not be completed."""


class BaseStore(ABC):
    """Persistence layer for tasks and payment attempts.

    Every mutating method is a single atomic unit: it either applies fully or
    not at all. Conditional updates are keyed by task id and evaluated by the
    backend, never as a read-modify-write in application memory.
    """

    @abstractmethod
    def create_task(self, task: TaskRecord) -> TaskRecord:
        """Insert a new task and return it."""

    @abstractmethod
    def get_task(self, task_id: str) -> TaskRecord | None:
        """Return the task, or None if it does not exist."""

    @abstractmethod
    def list_tasks(
        self,
        user_id: str,
        status: str | None = None,
        unlocked: bool | None = None,
    ) -> list[TaskRecord]:
        """Return a user's tasks, newest first, optionally filtered.

        Returns an empty list if there are none.
        """

    @abstractmethod
    def save_evaluation(self, task_id: str, score: float, strengths_json: str, improvements_json: str) -> bool:
        """Store the evaluation fields and mark the task evaluated.

        Returns False if no task with that id exists.
        """

    @abstractmethod
    def unlock_task(self, task_id: str, user_id: str, payment: PaymentRecord | None = None) -> bool:
        """Flip is_report_unlocked to true for an owned, still-locked task.

        The payment record is inserted in the same transaction, and only when
        this call performed the transition. Returns True if it did, False if
        the task was already unlocked (or not owned by user_id).
        """

    @abstractmethod
    def add_payment(self, payment: PaymentRecord) -> None:
        """Insert a payment attempt."""

    @abstractmethod
    def list_payments(self, task_id: str) -> list[PaymentRecord]:
        """Return the payment attempts for a task in insertion order."""

    def close(self) -> None:
        """Release any resources held by the store (connections, file handles).

        Optional. Default is a no-op so callers can always call close() safely.
        """
