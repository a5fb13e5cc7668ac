"""Request/response actions: the boundary between a transport and the core.

Each action takes a decoded JSON body and returns an ActionResponse with an
HTTP status and a JSON-serialisable body. Whatever goes wrong inside is
caught here and turned into a typed response; no action raises.

    evaluate  POST {title, description, code}
              → 200 {score, strengths, improvements} | 400 | 500
    order     POST {taskId, userId}
              → 200 {order: {...}} | 400 | 403 | 500
    unlock    POST {taskId, userId, razorpay_order_id, razorpay_payment_id, razorpay_signature}
              → 200 {success: true} | 400 | 403 | 500
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Dict

from codelens_core.entitlement import PaymentCallback
from codelens_core.errors import CodelensError
from codelens_core.service import ReviewService, require_fields

if TYPE_CHECKING:
    from codelens_core.entitlement import EntitlementGate
    from codelens_core.payments import CheckoutService
    from codelens_core.providers.base import BaseProvider

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActionResponse:
    status: int
    body: Dict[str, Any]

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


def _error_response(action: str, err: CodelensError) -> ActionResponse:
    log = logger.info if err.status_code < 500 else logger.error
    log("%s action failed with %s (%d): %s", action, type(err).__name__, err.status_code, err.message)
    return ActionResponse(err.status_code, {"error": err.message})


def _body(raw: Any) -> Dict[str, Any]:
    return raw if isinstance(raw, dict) else {}


def evaluate_action(body: Any, provider_factory: Callable[[], BaseProvider]) -> ActionResponse:
    """Review a code sample without persisting anything.

    Field checks run before the provider is built, so a bad request never
    costs a model call or reports a configuration problem.
    """
    body = _body(body)
    try:
        title, description, code = body.get("title"), body.get("description"), body.get("code")
        require_fields(title, description, code)
        service = ReviewService(provider_factory())
        review = service.review_code(title, description, code)
        return ActionResponse(200, review.to_dict())
    except CodelensError as e:
        return _error_response("evaluate", e)
    except Exception:
        logger.exception("evaluate action failed unexpectedly")
        return ActionResponse(500, {"error": "Failed to evaluate task"})


def order_action(body: Any, checkout_factory: Callable[[], CheckoutService]) -> ActionResponse:
    body = _body(body)
    try:
        task_id, user_id = body.get("taskId"), body.get("userId")
        if not task_id or not user_id:
            logger.info("order action missing taskId or userId: %r", body)
            return ActionResponse(400, {"error": "taskId missing" if not task_id else "userId missing"})
        order = checkout_factory().create_order(str(task_id), str(user_id))
        return ActionResponse(200, {"order": order.to_dict()})
    except CodelensError as e:
        return _error_response("order", e)
    except Exception:
        logger.exception("order action failed unexpectedly")
        return ActionResponse(500, {"error": "Failed to create order"})


def unlock_action(body: Any, gate: EntitlementGate) -> ActionResponse:
    """Unlock the full report after a client-reported payment success.

    Idempotent: repeating the call on an unlocked task returns success again.
    """
    body = _body(body)
    try:
        task_id, user_id = body.get("taskId"), body.get("userId")
        if not task_id or not user_id:
            logger.info("unlock action missing taskId or userId: %r", body)
            return ActionResponse(400, {"error": "Missing taskId or userId"})
        callback = PaymentCallback(
            order_id=body.get("razorpay_order_id"),
            payment_id=body.get("razorpay_payment_id"),
            signature=body.get("razorpay_signature"),
        )
        gate.unlock(str(task_id), str(user_id), callback)
        return ActionResponse(200, {"success": True})
    except CodelensError as e:
        return _error_response("unlock", e)
    except Exception:
        logger.exception("unlock action failed unexpectedly")
        return ActionResponse(500, {"error": "Verification failed"})
