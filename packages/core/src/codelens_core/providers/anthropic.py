from __future__ import annotations

import logging

from codelens_core.providers.base import BaseProvider

logger = logging.getLogger(__name__)

# The reply continues from this assistant prefill, so it starts inside the object.
_JSON_PREFILL = "{"


class AnthropicProvider(BaseProvider):
    NAME = "Anthropic"
    MODEL = "claude-sonnet-4-20250514"

    def __init__(self, api_key: str):
        try:
            import anthropic
        except ImportError:
            raise ImportError(
                "The 'anthropic' package is required for this provider. "
                "Install it with: pip install 'codelens[anthropic]'"
            )
        self.client = anthropic.Anthropic(api_key=api_key)

    def _call_api(self, prompt: str) -> str:
        response = self.client.messages.create(
            model=self.MODEL,
            max_tokens=self.MAX_TOKENS,
            temperature=self.TEMPERATURE,
            messages=[
                {"role": "user", "content": prompt},
                {"role": "assistant", "content": _JSON_PREFILL},
            ],
        )
        if response.stop_reason == "max_tokens":
            logger.warning("Anthropic review hit max_tokens (%d); the JSON is probably cut off", self.MAX_TOKENS)
        text = "".join(block.text for block in response.content if block.type == "text")
        if not text.strip():
            return ""
        # A reply that reopens the object or starts a fence ignored the prefill.
        if text.lstrip().startswith((_JSON_PREFILL, "```")):
            return text
        return _JSON_PREFILL + text
