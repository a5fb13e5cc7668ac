"""checkout and unlock commands: pay for and unlock a task's full report."""

from __future__ import annotations

import click
from rich.console import Console

from codelens_cli.auth import require_user
from codelens_core.actions import order_action, unlock_action
from codelens_core.entitlement import EntitlementGate
from codelens_core.payments import CheckoutService, RazorpayClient

console = Console()


@click.command("checkout")
@click.argument("task_id")
@click.pass_context
def checkout_cmd(ctx, task_id: str):
    """Create a payment order for TASK_ID's full report.

    Pass the printed order id to the hosted checkout. After the payment
    succeeds, run `codelens unlock` with the ids it hands back.

    \b
    Required environment variables:
      RAZORPAY_KEY_ID      Razorpay key id
      RAZORPAY_KEY_SECRET  Razorpay key secret
    """
    user_id = require_user(ctx)
    config = ctx.obj["config"]

    def _checkout() -> CheckoutService:
        client = RazorpayClient(
            config.get("razorpay_key_id"),
            config.get("razorpay_key_secret"),
            timeout=config.get("order_timeout", 30),
        )
        return CheckoutService(
            ctx.obj["store"],
            client,
            amount=config.get("unlock_amount", 9900),
            currency=config.get("currency", "INR"),
        )

    response = order_action({"taskId": task_id, "userId": user_id}, _checkout)
    if not response.ok:
        raise click.ClickException(response.body["error"])

    order = response.body["order"]
    console.print(f"[green]Order created:[/green] {order['id']}")
    console.print(f"Amount: {order['amount'] / 100:.2f} {order['currency']}   Receipt: {order['receipt']}")


@click.command("unlock")
@click.argument("task_id")
@click.option("--order-id", default=None, help="razorpay_order_id from the checkout callback.")
@click.option("--payment-id", default=None, help="razorpay_payment_id from the checkout callback.")
@click.option("--signature", default=None, help="razorpay_signature from the checkout callback.")
@click.pass_context
def unlock_cmd(ctx, task_id: str, order_id: str | None, payment_id: str | None, signature: str | None):
    """Unlock TASK_ID's full report after a successful payment.

    Running it again on an unlocked task is harmless.
    """
    user_id = require_user(ctx)
    config = ctx.obj["config"]
    gate = EntitlementGate(
        ctx.obj["store"],
        amount=config.get("unlock_amount", 9900),
        currency=config.get("currency", "INR"),
    )
    body = {
        "taskId": task_id,
        "userId": user_id,
        "razorpay_order_id": order_id,
        "razorpay_payment_id": payment_id,
        "razorpay_signature": signature,
    }

    response = unlock_action(body, gate)
    if not response.ok:
        raise click.ClickException(response.body["error"])

    console.print(f"[green]Report unlocked for task {task_id}.[/green] Run `codelens report {task_id}`.")
