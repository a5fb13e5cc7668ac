"""In-memory store: zero-configuration backend for tests and dry runs.

Nothing survives the process. A single lock makes every method atomic, which
gives the same conditional-update guarantees as SQLiteStore for callers that
share one instance across threads.
"""

from __future__ import annotations

import dataclasses
import threading

from codelens_store.base import BaseStore, StoreError
from codelens_store.models import STATUS_EVALUATED, PaymentRecord, TaskRecord


class MemoryStore(BaseStore):
    """Keeps tasks and payments in process memory.

    Records are copied on the way in and out so callers can never mutate
    stored state behind the store's back.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._tasks: dict[str, TaskRecord] = {}
        self._payments: list[PaymentRecord] = []

    def create_task(self, task: TaskRecord) -> TaskRecord:
        with self._lock:
            if task.id in self._tasks:
                raise StoreError(f"task {task.id} already exists")
            self._tasks[task.id] = dataclasses.replace(task)
        return task

    def get_task(self, task_id: str) -> TaskRecord | None:
        with self._lock:
            task = self._tasks.get(task_id)
            return dataclasses.replace(task) if task else None

    def list_tasks(
        self,
        user_id: str,
        status: str | None = None,
        unlocked: bool | None = None,
    ) -> list[TaskRecord]:
        with self._lock:
            tasks = [dataclasses.replace(t) for t in self._tasks.values() if t.user_id == user_id]
        if status is not None:
            tasks = [t for t in tasks if t.status == status]
        if unlocked is not None:
            tasks = [t for t in tasks if t.is_report_unlocked == unlocked]
        return sorted(tasks, key=lambda t: t.created_at, reverse=True)

    def save_evaluation(self, task_id: str, score: float, strengths_json: str, improvements_json: str) -> bool:
        with self._lock:
            task = self._tasks.get(task_id)
            if task is None:
                return False
            self._tasks[task_id] = dataclasses.replace(
                task,
                ai_score=score,
                ai_strengths=strengths_json,
                ai_improvements=improvements_json,
                status=STATUS_EVALUATED,
            )
            return True

    def unlock_task(self, task_id: str, user_id: str, payment: PaymentRecord | None = None) -> bool:
        with self._lock:
            task = self._tasks.get(task_id)
            if task is None or task.user_id != user_id or task.is_report_unlocked:
                return False
            self._tasks[task_id] = dataclasses.replace(task, is_report_unlocked=True)
            if payment is not None:
                self._payments.append(dataclasses.replace(payment))
            return True

    def add_payment(self, payment: PaymentRecord) -> None:
        with self._lock:
            self._payments.append(dataclasses.replace(payment))

    def list_payments(self, task_id: str) -> list[PaymentRecord]:
        with self._lock:
            return [dataclasses.replace(p) for p in self._payments if p.task_id == task_id]
