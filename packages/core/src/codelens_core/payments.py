"""Payment order creation for report unlocks.

The hosted checkout widget needs a provider order id before it can open.
Orders are created server-side with the key pair; the resulting attempt is
recorded with status "created" and is never updated afterwards. The unlock
itself happens later through EntitlementGate.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

import httpx

from codelens_core.entitlement import load_owned_task
from codelens_core.errors import ConfigurationMissing, InputValidation, PersistenceFailure, ProviderFailure
from codelens_store.base import StoreError
from codelens_store.models import PAYMENT_CREATED, PaymentRecord

if TYPE_CHECKING:
    from codelens_store.base import BaseStore

logger = logging.getLogger(__name__)

RAZORPAY_ORDERS_URL = "https://api.razorpay.com/v1/orders"
_RECEIPT_MAX_LEN = 40
_RECEIPT_TASK_CHARS = 16


@dataclass(frozen=True)
class Order:
    id: str
    amount: int
    currency: str
    receipt: str

    def to_dict(self) -> dict:
        return {"id": self.id, "amount": self.amount, "currency": self.currency, "receipt": self.receipt}


def build_receipt(task_id: str, now_ms: int | None = None) -> str:
    """Receipt ids are capped at 40 characters by the provider."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"t_{str(task_id)[:_RECEIPT_TASK_CHARS]}_{now_ms}"[:_RECEIPT_MAX_LEN]


class RazorpayClient:
    def __init__(self, key_id: str | None, key_secret: str | None, timeout: float = 30):
        if not key_id or not key_secret:
            logger.error(
                "Razorpay keys not configured (key_id present: %s, key_secret present: %s)",
                bool(key_id),
                bool(key_secret),
            )
            raise ConfigurationMissing("Razorpay keys not configured")
        self._auth = (key_id, key_secret)
        self._timeout = timeout

    def create_order(self, amount: int, currency: str, receipt: str) -> Order:
        try:
            with httpx.Client(timeout=self._timeout, auth=self._auth) as client:
                response = client.post(
                    RAZORPAY_ORDERS_URL,
                    json={"amount": amount, "currency": currency, "receipt": receipt},
                )
            response.raise_for_status()
            data = response.json()
            order = Order(
                id=data["id"],
                amount=data.get("amount", amount),
                currency=data.get("currency", currency),
                receipt=data.get("receipt", receipt),
            )
        except httpx.TimeoutException as e:
            logger.error("Razorpay order request timed out: %s", e)
            raise ProviderFailure("Failed to create order") from e
        except httpx.HTTPStatusError as e:
            logger.error("Razorpay order request rejected (%s): %s", e.response.status_code, e.response.text)
            raise ProviderFailure("Failed to create order") from e
        except httpx.RequestError as e:
            logger.error("Razorpay order request failed: %s", e)
            raise ProviderFailure("Failed to create order") from e
        except (KeyError, ValueError) as e:
            logger.error("Unexpected Razorpay order response: %s", e)
            raise ProviderFailure("Failed to create order") from e

        logger.info("Razorpay order created: %s", order.id)
        return order


class CheckoutService:
    def __init__(self, store: BaseStore, client: RazorpayClient, amount: int = 9900, currency: str = "INR"):
        self.store = store
        self.client = client
        self.amount = amount
        self.currency = currency

    def create_order(self, task_id: str, actor_id: str) -> Order:
        if not task_id:
            raise InputValidation("taskId missing")
        task = load_owned_task(self.store, task_id, actor_id)
        if task.is_report_unlocked:
            raise InputValidation("Report already unlocked")

        order = self.client.create_order(self.amount, self.currency, build_receipt(task_id))
        try:
            self.store.add_payment(
                PaymentRecord(
                    user_id=actor_id,
                    task_id=task_id,
                    amount=order.amount,
                    currency=order.currency,
                    status=PAYMENT_CREATED,
                    provider_order_id=order.id,
                )
            )
        except StoreError as e:
            logger.error("Order %s created but could not be recorded: %s", order.id, e)
            raise PersistenceFailure("Failed to create order") from e
        return order
