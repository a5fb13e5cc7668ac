"""Recover a JSON payload from raw model text.

Models asked for "JSON only" still wrap it in markdown fences or chat around
it. Strategies run in a fixed order and the first parse that succeeds wins:

    direct   : the whole trimmed text is JSON
    fenced   : text starts with ``` (optional language tag); parse the inside
    braces   : otherwise, first '{' through last '}'

`fenced` and `braces` are alternatives: the fence rule only fires when the
text visibly starts with a fence, so valid JSON whose string values contain
backticks never reaches it, and the permissive brace scan stays last.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Union

from codelens_core.errors import MalformedModelOutput

logger = logging.getLogger(__name__)

_FENCE = "```"
_OPENING_FENCE_RE = re.compile(r"^```[a-zA-Z]*\s*")


def _reject_constant(name: str):
    # NaN, Infinity and -Infinity are Python extensions, not JSON.
    raise ValueError(f"non-standard JSON constant {name!r}")


def _loads(text: str) -> Any:
    return json.loads(text, parse_constant=_reject_constant)


@dataclass(frozen=True)
class Parsed:
    value: Any
    strategy: str  # "direct" | "fenced" | "braces"


@dataclass(frozen=True)
class Failed:
    raw_text: str
    errors: tuple[str, ...]


ParseOutcome = Union[Parsed, Failed]


def extract_json(raw: str) -> ParseOutcome:
    text = raw.strip()
    try:
        return Parsed(_loads(text), "direct")
    except ValueError as e:
        first_error = f"direct: {e}"

    if text.startswith(_FENCE):
        strategy, candidate = "fenced", _strip_fences(text)
    else:
        strategy, candidate = "braces", _brace_span(text)
        if candidate is None:
            return Failed(raw_text=raw, errors=(first_error, "braces: no JSON object delimiters found"))

    try:
        value = _loads(candidate)
    except ValueError as e:
        return Failed(raw_text=raw, errors=(first_error, f"{strategy}: {e}"))
    logger.debug("Recovered model JSON with the %s strategy", strategy)
    return Parsed(value, strategy)


def parse_model_output(raw: str) -> Any:
    """Return the parsed JSON value or raise MalformedModelOutput."""
    outcome = extract_json(raw)
    if isinstance(outcome, Failed):
        raise MalformedModelOutput("Model returned invalid JSON", raw_text=outcome.raw_text, errors=outcome.errors)
    return outcome.value


def _strip_fences(text: str) -> str:
    inner = _OPENING_FENCE_RE.sub("", text, count=1)
    # The last fence closes the block; earlier ones may sit inside JSON strings.
    end = inner.rfind(_FENCE)
    if end != -1:
        inner = inner[:end]
    return inner.strip()


def _brace_span(text: str) -> str | None:
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1 or end <= start:
        return None
    return text[start : end + 1]
