"""Tests for the CLI entry point."""

import json
from unittest.mock import MagicMock

from click.testing import CliRunner

from codelens_cli.cli import _build_store, main
from codelens_core.payments import Order
from codelens_store.memory import MemoryStore
from codelens_store.models import PAYMENT_CREATED, STATUS_EVALUATED, TaskRecord, encode_evaluation
from codelens_store.sqlite import SQLiteStore

REVIEW_JSON = json.dumps(
    {
        "score": 64,
        "strengths": ["Readable names"],
        "improvements": [
            "Bug Fix: guard against an empty list",
            "Refactor: split the loop\n```python\nfor x in xs:\n    handle(x)\n```",
            "Performance: cache the lookup",
            "Add type hints",
        ],
    }
)


def _make_config(model="gemini", gemini_key="gem", razorpay=True):
    return {
        "model": model,
        "store": "memory",
        "store_path": ".codelens.db",
        "unlock_amount": 9900,
        "currency": "INR",
        "order_timeout": 30,
        "gemini_api_key": gemini_key,
        "anthropic_api_key": None,
        "openai_api_key": None,
        "razorpay_key_id": "rzp_test" if razorpay else None,
        "razorpay_key_secret": "secret" if razorpay else None,
    }


def _patch_common(mocker, config=None, store=None):
    """Patch load_config and _build_store; returns the shared in-memory store."""
    cfg = config or _make_config()
    store = store or MemoryStore()
    mocker.patch("codelens_core.config.load_config", return_value=cfg)
    mocker.patch("codelens_cli.cli._build_store", return_value=store)
    return cfg, store


def _invoke(args, user="owner", **kwargs):
    prefix = ["--user", user] if user else []
    return CliRunner().invoke(main, prefix + args, env={"CODELENS_USER_ID": None}, **kwargs)


def _add_task(store, user_id="owner", evaluated=False, unlocked=False):
    task = store.create_task(TaskRecord(title="Two sum", description="desc", code="def f(): pass", user_id=user_id))
    if evaluated:
        review = json.loads(REVIEW_JSON)
        strengths, improvements = encode_evaluation(review["strengths"], review["improvements"])
        store.save_evaluation(task.id, review["score"], strengths, improvements)
    if unlocked:
        store.unlock_task(task.id, user_id)
    return task


def _stub_provider(mocker, text=REVIEW_JSON):
    provider = MagicMock()
    provider.generate.return_value = text
    mocker.patch("codelens_cli.commands.review.build_provider", return_value=provider)
    return provider


# ---------------------------------------------------------------------------
# Store factory and identity
# ---------------------------------------------------------------------------


class TestBuildStore:
    def test_memory_store(self):
        assert isinstance(_build_store({"store": "memory"}), MemoryStore)

    def test_sqlite_store(self, tmp_path):
        store = _build_store({"store": "sqlite", "store_path": str(tmp_path / "db.sqlite")})
        assert isinstance(store, SQLiteStore)
        store.close()

    def test_unknown_store_falls_back_to_sqlite(self, tmp_path):
        store = _build_store({"store": "redis", "store_path": str(tmp_path / "db.sqlite")})
        assert isinstance(store, SQLiteStore)
        store.close()


class TestUserResolution:
    def test_missing_user_is_usage_error(self, mocker):
        _patch_common(mocker)
        result = _invoke(["tasks"], user=None)
        assert result.exit_code == 2
        assert "CODELENS_USER_ID" in result.output

    def test_user_from_env(self, mocker):
        _, store = _patch_common(mocker)
        _add_task(store, user_id="env-user")
        result = CliRunner().invoke(main, ["tasks"], env={"CODELENS_USER_ID": "env-user"})
        assert result.exit_code == 0
        assert "Two sum" in result.output


# ---------------------------------------------------------------------------
# submit / tasks
# ---------------------------------------------------------------------------


class TestSubmitAndTasks:
    def test_submit_reads_code_from_stdin(self, mocker):
        _, store = _patch_common(mocker)
        result = _invoke(["submit", "--title", "Two sum", "--description", "desc"], input="print(1)\n")
        assert result.exit_code == 0, result.output
        assert "Task created" in result.output
        (task,) = store.list_tasks("owner")
        assert task.code == "print(1)\n"
        assert task.is_report_unlocked is False

    def test_submit_reads_code_file(self, mocker, tmp_path):
        _, store = _patch_common(mocker)
        code_file = tmp_path / "solution.py"
        code_file.write_text("def f():\n    return 1\n")
        result = _invoke(["submit", "--title", "T", "--description", "D", "--code-file", str(code_file)])
        assert result.exit_code == 0
        assert store.list_tasks("owner")[0].code == "def f():\n    return 1\n"

    def test_submit_empty_code_rejected(self, mocker):
        _, store = _patch_common(mocker)
        result = _invoke(["submit", "--title", "T", "--description", "D"], input="")
        assert result.exit_code == 2
        assert "Missing title, description, or code" in result.output
        assert store.list_tasks("owner") == []

    def test_tasks_empty(self, mocker):
        _patch_common(mocker)
        result = _invoke(["tasks"])
        assert result.exit_code == 0
        assert "No tasks found" in result.output

    def test_tasks_only_lists_own_tasks(self, mocker):
        _, store = _patch_common(mocker)
        _add_task(store)
        store.create_task(TaskRecord(title="Someone else", description="d", code="c", user_id="other"))
        result = _invoke(["tasks"])
        assert "Two sum" in result.output
        assert "Someone else" not in result.output

    def test_tasks_unlocked_filter(self, mocker):
        _, store = _patch_common(mocker)
        _add_task(store, evaluated=True)
        result = _invoke(["tasks", "--unlocked"])
        assert "No tasks found" in result.output


# ---------------------------------------------------------------------------
# review / evaluate
# ---------------------------------------------------------------------------


class TestReview:
    def test_json_output(self, mocker):
        _patch_common(mocker)
        provider = _stub_provider(mocker)
        result = _invoke(["review", "--title", "T", "--description", "D", "--json"], input="code")
        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["score"] == 64
        provider.generate.assert_called_once()

    def test_rendered_output_groups_improvements(self, mocker):
        _patch_common(mocker)
        _stub_provider(mocker)
        result = _invoke(["review", "--title", "T", "--description", "D"], input="code")
        assert result.exit_code == 0
        assert "Bug Fixes" in result.output
        assert "Refactors" in result.output
        assert "Other Suggestions" in result.output

    def test_missing_api_key(self, mocker):
        _patch_common(mocker, config=_make_config(gemini_key=None))
        result = _invoke(["review", "--title", "T", "--description", "D"], input="code")
        assert result.exit_code == 1
        assert "GEMINI_API_KEY not configured" in result.output

    def test_model_override_names_its_key(self, mocker):
        _patch_common(mocker)
        result = _invoke(["review", "--title", "T", "--description", "D", "--model", "openai"], input="code")
        assert result.exit_code == 1
        assert "OPENAI_API_KEY not configured" in result.output

    def test_invalid_model_output(self, mocker):
        _patch_common(mocker)
        _stub_provider(mocker, text="I think the code is fine.")
        result = _invoke(["review", "--title", "T", "--description", "D"], input="code")
        assert result.exit_code == 1
        assert "Model returned invalid JSON" in result.output

    def test_review_stores_nothing(self, mocker):
        _, store = _patch_common(mocker)
        _stub_provider(mocker)
        _invoke(["review", "--title", "T", "--description", "D"], input="code")
        assert store.list_tasks("owner") == []


class TestEvaluate:
    def test_persists_evaluation(self, mocker):
        _, store = _patch_common(mocker)
        task = _add_task(store)
        _stub_provider(mocker)
        result = _invoke(["evaluate", task.id])
        assert result.exit_code == 0, result.output
        assert "64" in result.output
        saved = store.get_task(task.id)
        assert saved.status == STATUS_EVALUATED
        assert saved.ai_score == 64

    def test_non_owner_forbidden(self, mocker):
        _, store = _patch_common(mocker)
        task = _add_task(store)
        provider = _stub_provider(mocker)
        result = _invoke(["evaluate", task.id], user="intruder")
        assert result.exit_code == 1
        assert "not allowed" in result.output
        provider.generate.assert_not_called()

    def test_shape_failure_leaves_task_pending(self, mocker):
        _, store = _patch_common(mocker)
        task = _add_task(store)
        _stub_provider(mocker, text='{"score": "high"}')
        result = _invoke(["evaluate", task.id])
        assert result.exit_code == 1
        assert "Model JSON shape invalid" in result.output
        assert store.get_task(task.id).ai_score is None


# ---------------------------------------------------------------------------
# checkout / unlock / report
# ---------------------------------------------------------------------------


class TestCheckout:
    def test_creates_order(self, mocker):
        _, store = _patch_common(mocker)
        task = _add_task(store, evaluated=True)
        client_cls = mocker.patch("codelens_cli.commands.payment.RazorpayClient")
        client_cls.return_value.create_order.return_value = Order(
            id="order_abc", amount=9900, currency="INR", receipt="t_x_1"
        )
        result = _invoke(["checkout", task.id])
        assert result.exit_code == 0, result.output
        assert "order_abc" in result.output
        assert "99.00 INR" in result.output
        client_cls.assert_called_once_with("rzp_test", "secret", timeout=30)
        (payment,) = store.list_payments(task.id)
        assert payment.status == PAYMENT_CREATED

    def test_missing_razorpay_keys(self, mocker):
        _, store = _patch_common(mocker, config=_make_config(razorpay=False))
        task = _add_task(store)
        result = _invoke(["checkout", task.id])
        assert result.exit_code == 1
        assert "Razorpay keys not configured" in result.output


class TestUnlock:
    def test_unlocks_and_is_idempotent(self, mocker):
        _, store = _patch_common(mocker)
        task = _add_task(store, evaluated=True)
        args = ["unlock", task.id, "--order-id", "order_1", "--payment-id", "pay_1", "--signature", "sig"]
        first = _invoke(args)
        second = _invoke(args)
        assert first.exit_code == 0, first.output
        assert second.exit_code == 0
        assert "Report unlocked" in second.output
        assert store.get_task(task.id).is_report_unlocked is True
        assert len(store.list_payments(task.id)) == 1

    def test_non_owner_forbidden(self, mocker):
        _, store = _patch_common(mocker)
        task = _add_task(store, evaluated=True)
        result = _invoke(["unlock", task.id], user="intruder")
        assert result.exit_code == 1
        assert "You are not allowed to unlock this task." in result.output
        assert store.get_task(task.id).is_report_unlocked is False


class TestReport:
    def test_locked_report_shows_score_only(self, mocker):
        _, store = _patch_common(mocker)
        task = _add_task(store, evaluated=True)
        result = _invoke(["report", task.id])
        assert result.exit_code == 0, result.output
        assert "64" in result.output
        assert "locked" in result.output
        assert "Readable names" not in result.output
        assert "Bug Fixes" not in result.output

    def test_unlocked_report_shows_details(self, mocker):
        _, store = _patch_common(mocker)
        task = _add_task(store, evaluated=True, unlocked=True)
        result = _invoke(["report", task.id])
        assert result.exit_code == 0, result.output
        assert "Readable names" in result.output
        assert "Bug Fixes" in result.output
        assert "handle(x)" in result.output

    def test_unevaluated_report(self, mocker):
        _, store = _patch_common(mocker)
        task = _add_task(store)
        result = _invoke(["report", task.id])
        assert "Not evaluated yet" in result.output

    def test_non_owner_cannot_view(self, mocker):
        _, store = _patch_common(mocker)
        task = _add_task(store, evaluated=True, unlocked=True)
        result = _invoke(["report", task.id], user="intruder")
        assert result.exit_code == 1
        assert "Readable names" not in result.output
