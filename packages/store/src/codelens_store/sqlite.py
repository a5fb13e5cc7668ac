"""SQLiteStore: file-based relational store for tasks and payments.

The conditional unlock update and its payment insert commit in one
transaction. Concurrent writers serialize on the database lock.

Schema:
  tasks   : one row per submission; evaluation lists are JSON text columns.
  payments: append-only payment attempts, one row per order or success.
"""

from __future__ import annotations

import logging
import sqlite3
import threading

from codelens_store.base import BaseStore, StoreError
from codelens_store.models import STATUS_EVALUATED, PaymentRecord, TaskRecord

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS tasks (
    id                  TEXT PRIMARY KEY,
    title               TEXT NOT NULL,
    description         TEXT NOT NULL,
    code                TEXT NOT NULL,
    status              TEXT NOT NULL DEFAULT 'pending',
    ai_score            NUMERIC,
    ai_strengths        TEXT,
    ai_improvements     TEXT,
    is_report_unlocked  INTEGER NOT NULL DEFAULT 0,
    user_id             TEXT NOT NULL,
    created_at          TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_tasks_user ON tasks (user_id);

CREATE TABLE IF NOT EXISTS payments (
    id                   INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id              TEXT NOT NULL,
    task_id              TEXT NOT NULL,
    amount               INTEGER NOT NULL,
    currency             TEXT NOT NULL,
    status               TEXT NOT NULL,
    provider_order_id    TEXT,
    provider_payment_id  TEXT,
    created_at           TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_payments_task ON payments (task_id);
"""

_INSERT_PAYMENT = """
    INSERT INTO payments
      (user_id, task_id, amount, currency, status,
       provider_order_id, provider_payment_id, created_at)
    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
"""


class SQLiteStore(BaseStore):
    """Stores tasks and payments in a local SQLite database file.

    The database file path defaults to `.codelens.db` in the current working
    directory. Configure via .codelens.yml: `store_path: /path/to/codelens.db`.
    Several SQLiteStore instances (or processes) may share one file; writes
    wait up to `timeout` seconds for the database lock.
    """

    def __init__(self, db_path: str = ".codelens.db", timeout: float = 10.0):
        try:
            self._conn = sqlite3.connect(db_path, timeout=timeout, check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            self._conn.executescript(_SCHEMA)
            self._conn.commit()
        except sqlite3.Error as e:
            raise StoreError(f"could not open {db_path}: {e}") from e
        self._lock = threading.Lock()
        logger.debug("Opened SQLite store at %s", db_path)

    def create_task(self, task: TaskRecord) -> TaskRecord:
        self._write(
            """
            INSERT INTO tasks
              (id, title, description, code, status, ai_score, ai_strengths,
               ai_improvements, is_report_unlocked, user_id, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                task.id,
                task.title,
                task.description,
                task.code,
                task.status,
                task.ai_score,
                task.ai_strengths,
                task.ai_improvements,
                int(task.is_report_unlocked),
                task.user_id,
                task.created_at,
            ),
        )
        return task

    def get_task(self, task_id: str) -> TaskRecord | None:
        rows = self._read("SELECT * FROM tasks WHERE id=?", (task_id,))
        return self._row_to_task(rows[0]) if rows else None

    def list_tasks(
        self,
        user_id: str,
        status: str | None = None,
        unlocked: bool | None = None,
    ) -> list[TaskRecord]:
        query = "SELECT * FROM tasks WHERE user_id=?"
        params: list = [user_id]
        if status is not None:
            query += " AND status=?"
            params.append(status)
        if unlocked is not None:
            query += " AND is_report_unlocked=?"
            params.append(int(unlocked))
        query += " ORDER BY created_at DESC"
        return [self._row_to_task(r) for r in self._read(query, tuple(params))]

    def save_evaluation(self, task_id: str, score: float, strengths_json: str, improvements_json: str) -> bool:
        # One statement: the four columns land together or not at all.
        rowcount = self._write(
            """
            UPDATE tasks
               SET ai_score=?, ai_strengths=?, ai_improvements=?, status=?
             WHERE id=?
            """,
            (score, strengths_json, improvements_json, STATUS_EVALUATED, task_id),
        )
        return rowcount == 1

    def unlock_task(self, task_id: str, user_id: str, payment: PaymentRecord | None = None) -> bool:
        with self._lock:
            try:
                with self._conn:
                    cursor = self._conn.execute(
                        """
                        UPDATE tasks SET is_report_unlocked=1
                         WHERE id=? AND user_id=? AND is_report_unlocked=0
                        """,
                        (task_id, user_id),
                    )
                    transitioned = cursor.rowcount == 1
                    if transitioned and payment is not None:
                        self._conn.execute(_INSERT_PAYMENT, self._payment_params(payment))
            except sqlite3.Error as e:
                raise StoreError(f"unlock of task {task_id} failed: {e}") from e
        return transitioned

    def add_payment(self, payment: PaymentRecord) -> None:
        self._write(_INSERT_PAYMENT, self._payment_params(payment))

    def list_payments(self, task_id: str) -> list[PaymentRecord]:
        rows = self._read("SELECT * FROM payments WHERE task_id=? ORDER BY id", (task_id,))
        return [self._row_to_payment(r) for r in rows]

    def close(self) -> None:
        self._conn.close()

    def _read(self, query: str, params: tuple) -> list[sqlite3.Row]:
        with self._lock:
            try:
                return self._conn.execute(query, params).fetchall()
            except sqlite3.Error as e:
                raise StoreError(str(e)) from e

    def _write(self, query: str, params: tuple) -> int:
        with self._lock:
            try:
                with self._conn:
                    return self._conn.execute(query, params).rowcount
            except sqlite3.Error as e:
                raise StoreError(str(e)) from e

    @staticmethod
    def _payment_params(payment: PaymentRecord) -> tuple:
        return (
            payment.user_id,
            payment.task_id,
            payment.amount,
            payment.currency,
            payment.status,
            payment.provider_order_id,
            payment.provider_payment_id,
            payment.created_at,
        )

    @staticmethod
    def _row_to_task(row: sqlite3.Row) -> TaskRecord:
        return TaskRecord(
            id=row["id"],
            title=row["title"],
            description=row["description"],
            code=row["code"],
            status=row["status"],
            ai_score=row["ai_score"],
            ai_strengths=row["ai_strengths"],
            ai_improvements=row["ai_improvements"],
            is_report_unlocked=bool(row["is_report_unlocked"]),
            user_id=row["user_id"],
            created_at=row["created_at"],
        )

    @staticmethod
    def _row_to_payment(row: sqlite3.Row) -> PaymentRecord:
        return PaymentRecord(
            user_id=row["user_id"],
            task_id=row["task_id"],
            amount=row["amount"],
            currency=row["currency"],
            status=row["status"],
            provider_order_id=row["provider_order_id"],
            provider_payment_id=row["provider_payment_id"],
            created_at=row["created_at"],
        )
