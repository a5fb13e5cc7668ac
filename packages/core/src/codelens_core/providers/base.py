"""Base provider implementing the Template Method pattern.

All providers share the same call contract:
    generate(prompt) → _call_api(prompt)   ← only this differs per provider
                     → non-empty text or ProviderFailure

Subclasses implement two things only:
  - __init__: validate and store the SDK client
  - _call_api: make one raw API call and return the text response

There is no retry loop. A review is one model call; when it fails the
caller sees a ProviderFailure and decides whether to run the review again.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from codelens_core.errors import ProviderFailure

logger = logging.getLogger(__name__)

_MAX_TOKENS = 8192


class BaseProvider(ABC):
    NAME: str = "base"
    MODEL: str = ""
    TEMPERATURE: float = 0.2
    MAX_TOKENS: int = _MAX_TOKENS

    # ------------------------------------------------------------------ #
    # Public interface                                                     #
    # ------------------------------------------------------------------ #

    def generate(self, prompt: str) -> str:
        """Run the prompt through the model once and return the trimmed text.

        Any SDK exception, and an empty response, become ProviderFailure so
        the orchestrator only has to handle one error type per provider.
        """
        try:
            text = self._call_api(prompt)
        except Exception as e:
            logger.error("%s API call failed (%s): %s", self.__class__.__name__, type(e).__name__, e)
            raise ProviderFailure(f"Failed to evaluate task using {self.NAME}") from e
        if not text or not text.strip():
            logger.error("%s API returned an empty response", self.__class__.__name__)
            raise ProviderFailure(f"Failed to evaluate task using {self.NAME}")
        return text.strip()

    # ------------------------------------------------------------------ #
    # Abstract: implement in each provider                                #
    # ------------------------------------------------------------------ #

    @abstractmethod
    def _call_api(self, prompt: str) -> str:
        """Make a single API call and return the raw text response.

        This is the only method subclasses must implement. It should raise
        on failure; generate() turns the exception into ProviderFailure.
        """
