"""System prompts and templates for the review agent."""

SYSTEM_PROMPT = """\
You are an expert code reviewer for pull requests. You receive the unified diff \
of a single file and decide whether it needs feedback.

## Review Guidelines

1. **Focus on Changed Code**: Only review the lines that have been added or modified.
2. **Be Brief**: Point out bug risks and concrete improvement suggestions.
3. **Be Constructive**: Offer solutions or alternatives when pointing out issues.

## Response Format

Answer with a single JSON object and nothing else:

{"lgtm": <boolean>, "review_comment": "<markdown review, empty if lgtm>"}

Set "lgtm" to true only when the patch needs no changes.
"""

DEFAULT_REVIEW_INSTRUCTION = (
    "Below is a code patch, please help me do a brief code review on it. "
    "Any bug risks and/or improvement suggestions are welcome"
)

REVIEW_PROMPT_TEMPLATE = """\
{instruction}{language_hint}:

```diff
{patch}
```
"""


def build_system_prompt() -> str:
    """Build the system prompt for the review agent."""
    return SYSTEM_PROMPT


def build_review_prompt(
    patch: str,
    instruction: str | None = None,
    language: str | None = None,
) -> str:
    """Build the review prompt for one file's patch.

    Args:
        patch: The unified diff for the file.
        instruction: Custom review instruction replacing the default one.
        language: Natural language the review should be written in.

    Returns:
        Complete review prompt.
    """
    language_hint = f", answer me in {language}" if language else ""

    return REVIEW_PROMPT_TEMPLATE.format(
        instruction=instruction or DEFAULT_REVIEW_INSTRUCTION,
        language_hint=language_hint,
        patch=patch,
    )
