from __future__ import annotations

import logging

try:
    from openai import OpenAI as _OpenAI
except ImportError:
    _OpenAI = None  # type: ignore[assignment,misc]

from codelens_core.providers.base import BaseProvider

logger = logging.getLogger(__name__)


class OpenAIProvider(BaseProvider):
    NAME = "OpenAI"
    MODEL = "gpt-4o"

    def __init__(self, api_key: str):
        if _OpenAI is None:
            raise ImportError("Install the OpenAI SDK to use this provider: pip install 'codelens[openai]'")
        self.client = _OpenAI(api_key=api_key)

    def _call_api(self, prompt: str) -> str:
        # JSON mode guarantees a syntactically valid object, not the review shape.
        response = self.client.chat.completions.create(
            model=self.MODEL,
            temperature=self.TEMPERATURE,
            max_tokens=self.MAX_TOKENS,
            response_format={"type": "json_object"},
            messages=[{"role": "user", "content": prompt}],
        )
        choice = response.choices[0]
        if choice.finish_reason == "length":
            logger.warning("OpenAI review stopped at max_tokens (%d); the JSON is probably cut off", self.MAX_TOKENS)
        return choice.message.content or ""
