"""Review prompt rendering.

The prompt is the output contract the model has to satisfy: a single JSON
object with a numeric score and two string lists. Title, description and
code are embedded verbatim. Nothing is escaped, so user text can talk to
the model directly; that injection surface is accepted, not overlooked.
"""

from __future__ import annotations

from dataclasses import dataclass, field

# Machine-readable form of the contract spelled out in the prompt text.
REVIEW_SCHEMA: dict = {
    "type": "object",
    "properties": {
        "score": {"type": "number", "minimum": 0, "maximum": 100},
        "strengths": {"type": "array", "items": {"type": "string"}},
        "improvements": {"type": "array", "items": {"type": "string"}},
    },
    "required": ["score", "strengths", "improvements"],
}

CATEGORY_PREFIXES = ("Bug Fix:", "Refactor:", "Performance:")


@dataclass(frozen=True)
class ReviewPrompt:
    text: str
    schema: dict = field(default_factory=lambda: REVIEW_SCHEMA)


def build_review_prompt(title: str, description: str, code: str) -> ReviewPrompt:
    """Render the review request for one task.

    Callers must reject empty fields first; this function assumes all three
    are present.
    """
    bug, refactor, perf = CATEGORY_PREFIXES
    text = f"""You are a strict senior software engineer reviewing a coding task.

Task Title: {title}
Task Description: {description}

Code:
{code}

Your job:
1. Identify concrete **bugs** and correctness issues.
2. Suggest **refactors** to improve readability, structure, and maintainability.
3. Give the entire refactored code with the bug fixes.
4. Suggest **performance / efficiency improvements** (time / space complexity, unnecessary work, etc.).

Respond ONLY with JSON that can be parsed by a strict JSON parser.

The JSON shape MUST be exactly:

{{
  "score": number,          // from 0 to 100
  "strengths": string[],    // list of positive points
  "improvements": string[]  // list of concrete improvements
}}

In "improvements", include AT LEAST one item for each of these categories (if applicable):
- Start bug-related items with "{bug}"
- Start refactor-related items with "{refactor}"
- Start performance-related items with "{perf}"

Do not include any explanations, markdown, comments, or text outside the JSON object.
Return a single JSON object only."""
    return ReviewPrompt(text=text)
