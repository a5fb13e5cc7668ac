from __future__ import annotations

import json

import pytest

from codelens_core.providers.base import BaseProvider
from codelens_store.memory import MemoryStore
from codelens_store.models import TaskRecord

GOOD_REVIEW = {
    "score": 72,
    "strengths": ["Clear naming"],
    "improvements": [
        "Bug Fix: handle empty input",
        "Refactor: extract a helper\n```python\ndef helper():\n    return 1\n```\nThen call it.",
        "Performance: avoid the nested loop",
        "Add docstrings",
    ],
}


class StubProvider(BaseProvider):
    """Returns canned text and counts calls."""

    NAME = "Stub"

    def __init__(self, response: str | None = None, error: Exception | None = None):
        self.response = json.dumps(GOOD_REVIEW) if response is None else response
        self.error = error
        self.prompts: list[str] = []

    def _call_api(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def task(store):
    return store.create_task(
        TaskRecord(
            title="Two sum",
            description="Return indices of the two numbers adding up to target.",
            code="def two_sum(nums, target):\n    pass\n",
            user_id="owner",
        )
    )


@pytest.fixture
def stub_provider():
    return StubProvider()


@pytest.fixture
def make_provider():
    return StubProvider
