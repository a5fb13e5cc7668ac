"""Error taxonomy for the review pipeline and the entitlement gate.

Every error carries the HTTP-style status it maps to at the action boundary
and a message that is safe to show the caller. Diagnostic detail (raw model
text, parse errors, payloads) lives in attributes and goes to the log only.
"""

from __future__ import annotations

from typing import Any


class CodelensError(Exception):
    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InputValidation(CodelensError):
    """A required request field is missing. Client error, never retried."""

    status_code = 400


class Forbidden(CodelensError):
    """The actor does not own the task.

    Also raised for unknown task ids so a non-owner cannot probe for existence.
    """

    status_code = 403


class ConfigurationMissing(CodelensError):
    """A required secret or key is absent from the environment."""


class ProviderFailure(CodelensError):
    """An external provider call raised, timed out, or returned nothing."""


class MalformedModelOutput(CodelensError):
    """No extraction strategy produced parsable JSON."""

    def __init__(self, message: str, raw_text: str, errors: tuple[str, ...]):
        super().__init__(message)
        self.raw_text = raw_text
        self.errors = errors


class InvalidReviewShape(CodelensError):
    """The model output parsed as JSON but does not match the review schema."""

    def __init__(self, message: str, payload: Any, reason: str):
        super().__init__(message)
        self.payload = payload
        self.reason = reason


class PersistenceFailure(CodelensError):
    """The store rejected an update. Nothing was partially applied."""
