"""Core review orchestration."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from codelens_core.config import PROVIDER_KEY_ENV
from codelens_core.entitlement import load_owned_task
from codelens_core.errors import (
    ConfigurationMissing,
    InputValidation,
    InvalidReviewShape,
    MalformedModelOutput,
    PersistenceFailure,
)
from codelens_core.extraction import parse_model_output
from codelens_core.prompts import build_review_prompt
from codelens_core.validation import Review, validate_review
from codelens_store.base import StoreError
from codelens_store.models import encode_evaluation

if TYPE_CHECKING:
    from codelens_core.providers.base import BaseProvider
    from codelens_store.base import BaseStore

logger = logging.getLogger(__name__)

_MISSING_FIELDS = "Missing title, description, or code"


def build_provider(config: dict) -> BaseProvider:
    """Instantiate the configured model provider.

    Raises ConfigurationMissing naming the exact environment variable when
    the provider's key is absent, before any SDK is touched.
    """
    model = config.get("model", "gemini")
    if model not in PROVIDER_KEY_ENV:
        raise ValueError(f"Unknown model provider: {model!r}. Choose one of {sorted(PROVIDER_KEY_ENV)}.")
    api_key = config.get(f"{model}_api_key")
    if not api_key:
        env_var = PROVIDER_KEY_ENV[model]
        logger.error("%s is not set; cannot build the %s provider", env_var, model)
        raise ConfigurationMissing(f"{env_var} not configured")

    if model == "gemini":
        from codelens_core.providers.gemini import GeminiProvider

        return GeminiProvider(api_key=api_key)
    if model == "anthropic":
        from codelens_core.providers.anthropic import AnthropicProvider

        return AnthropicProvider(api_key=api_key)
    from codelens_core.providers.openai import OpenAIProvider

    return OpenAIProvider(api_key=api_key)


def require_fields(title: str | None, description: str | None, code: str | None) -> None:
    if not title or not description or not code:
        raise InputValidation(_MISSING_FIELDS)


class ReviewService:
    """Prompt → one model call → extraction → validation → (optional) persistence.

    Nothing is written until validation has succeeded, and the write is a
    single store call, so a failed or abandoned review leaves the task as it
    was.
    """

    def __init__(self, provider: BaseProvider, store: BaseStore | None = None):
        self.provider = provider
        self.store = store

    def review_code(self, title: str, description: str, code: str) -> Review:
        require_fields(title, description, code)
        prompt = build_review_prompt(title, description, code)
        raw = self.provider.generate(prompt.text)

        try:
            value = parse_model_output(raw)
        except MalformedModelOutput as e:
            logger.error("Model JSON parse failed; raw_text=%r errors=%s", e.raw_text, list(e.errors))
            raise

        try:
            return validate_review(value)
        except InvalidReviewShape as e:
            logger.error("Model JSON shape invalid (%s): %r", e.reason, e.payload)
            raise

    def evaluate(self, task_id: str, actor_id: str) -> Review:
        """Review a stored task and persist the result on it."""
        if self.store is None:
            raise RuntimeError("ReviewService.evaluate() needs a store")
        if not task_id or not actor_id:
            raise InputValidation("Missing taskId or userId")
        task = load_owned_task(self.store, task_id, actor_id, denial="You are not allowed to evaluate this task.")

        review = self.review_code(task.title, task.description, task.code)

        strengths_json, improvements_json = encode_evaluation(review.strengths, review.improvements)
        try:
            saved = self.store.save_evaluation(task.id, review.score, strengths_json, improvements_json)
        except StoreError as e:
            logger.error("Failed to persist evaluation for task %s: %s; review=%r", task.id, e, review.to_dict())
            raise PersistenceFailure("Failed to save evaluation") from e
        if not saved:
            logger.error("Task %s disappeared before its evaluation was saved", task.id)
            raise PersistenceFailure("Failed to save evaluation")

        logger.info("Task %s evaluated (score=%s)", task.id, review.score)
        return review
