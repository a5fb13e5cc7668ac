from __future__ import annotations

try:
    from google import genai as _genai
    from google.genai import types as _types
except ImportError:
    _genai = None  # type: ignore[assignment]
    _types = None  # type: ignore[assignment]

from codelens_core.providers.base import BaseProvider


class GeminiProvider(BaseProvider):
    NAME = "Gemini"
    MODEL = "gemini-2.5-flash"
    # Low temperature plus a JSON response MIME type: the response is
    # usually clean JSON, and the extractor handles the times it is not.
    TEMPERATURE = 0.2

    def __init__(self, api_key: str):
        if _genai is None:
            raise ImportError(
                "The 'google-genai' package is required for this provider. "
                "Install it with: pip install 'codelens[gemini]'"
            )
        self.client = _genai.Client(api_key=api_key)

    def _call_api(self, prompt: str) -> str:
        response = self.client.models.generate_content(
            model=self.MODEL,
            contents=prompt,
            config=_types.GenerateContentConfig(
                temperature=self.TEMPERATURE,
                max_output_tokens=self.MAX_TOKENS,
                response_mime_type="application/json",
            ),
        )
        return response.text or ""
