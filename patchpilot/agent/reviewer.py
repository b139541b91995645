"""Review agent backed by the Strands SDK."""

from __future__ import annotations

import json
import re
from typing import TYPE_CHECKING, Any

from strands import Agent
from strands.models.openai import OpenAIModel

from patchpilot.agent.prompts import build_review_prompt, build_system_prompt
from patchpilot.models.verdict import ChangesRequested, ReviewVerdict, verdict_from_response
from patchpilot.utils.logging import get_logger

if TYPE_CHECKING:
    from patchpilot.models.config import ReviewConfig

logger = get_logger("agent.reviewer")

# Models often wrap JSON answers in a fenced code block
FENCED_JSON_PATTERN = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


class ReviewServiceError(Exception):
    """Raised when the review service cannot produce a verdict."""

    pass


def parse_review_response(text: str) -> ReviewVerdict:
    """Parse the model's answer into a verdict.

    The model is asked for ``{"lgtm": bool, "review_comment": str}``. Answers
    that are not valid JSON are treated as a review comment in full.

    Args:
        text: Raw response text.

    Returns:
        The parsed verdict.
    """
    text = text.strip()
    fenced = FENCED_JSON_PATTERN.match(text)
    if fenced:
        text = fenced.group(1)

    try:
        data: Any = json.loads(text)
    except json.JSONDecodeError:
        data = None

    if not isinstance(data, dict):
        return verdict_from_response(False, text)

    return verdict_from_response(
        bool(data.get("lgtm", False)),
        str(data.get("review_comment") or ""),
    )


class ReviewAgent:
    """AI agent that reviews one patch at a time."""

    def __init__(self, config: ReviewConfig, api_key: str) -> None:
        """Initialize the review agent.

        Args:
            config: Review configuration.
            api_key: Credential for the model provider.
        """
        self.config = config

        client_args: dict[str, Any] = {"api_key": api_key}
        if config.api_endpoint:
            client_args["base_url"] = config.api_endpoint

        self.model = OpenAIModel(
            client_args=client_args,
            model_id=config.model_id,
            params=config.sampling_params(),
        )

        self.agent = Agent(
            model=self.model,
            system_prompt=build_system_prompt(),
            callback_handler=None,
        )

        logger.info(
            "ReviewAgent initialized",
            extra={
                "model_id": config.model_id,
                "has_custom_prompt": config.prompt is not None,
            },
        )

    def code_review(self, patch: str) -> ReviewVerdict:
        """Review a single patch.

        Args:
            patch: Unified diff text of one file.

        Returns:
            Approved, or ChangesRequested with the review comment.

        Raises:
            ReviewServiceError: If the model call fails.
        """
        prompt = build_review_prompt(
            patch=patch,
            instruction=self.config.prompt,
            language=self.config.language,
        )

        # Patches are reviewed independently, never as one conversation
        self.agent.messages = []

        try:
            response = self.agent(prompt)
        except Exception as e:
            raise ReviewServiceError(f"Review request failed: {e}") from e

        verdict = parse_review_response(str(response))

        logger.debug(
            "Review response parsed",
            extra={
                "changes_requested": isinstance(verdict, ChangesRequested),
                "patch_length": len(patch),
            },
        )

        return verdict
