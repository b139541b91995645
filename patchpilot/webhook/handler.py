"""Webhook event handler and dispatcher."""

from __future__ import annotations

import json
import os
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, ClassVar

from patchpilot.models.config import ConfigurationError
from patchpilot.models.outcome import ReviewOutcome
from patchpilot.models.pull_request import PullRequest
from patchpilot.utils.logging import get_logger
from patchpilot.webhook.validators import WebhookSignatureError, verify_webhook_signature

logger = get_logger("webhook.handler")

ReviewTrigger = Callable[[PullRequest], ReviewOutcome]


class WebhookParseError(Exception):
    """Raised when webhook payload parsing fails."""

    pass


@dataclass
class WebhookResponse:
    """HTTP-agnostic answer to a webhook delivery."""

    status_code: int
    body: dict[str, Any] = field(default_factory=dict)


def parse_pr_event(payload: dict[str, Any]) -> PullRequest:
    """Parse a pull_request webhook event.

    Args:
        payload: The webhook payload.

    Returns:
        PullRequest instance.

    Raises:
        WebhookParseError: If required fields are missing or invalid.
    """
    try:
        if "pull_request" not in payload:
            raise WebhookParseError("Missing 'pull_request' in payload")

        if "installation" not in payload:
            raise WebhookParseError("Missing 'installation' in payload")

        return PullRequest.from_webhook_payload(payload)

    except (KeyError, TypeError) as e:
        raise WebhookParseError(f"Missing required field: {e}") from e
    except ValueError as e:
        raise WebhookParseError(f"Invalid field value: {e}") from e


class WebhookHandler:
    """Handles and dispatches GitHub webhook events."""

    # Actions that should trigger a review
    REVIEW_ACTIONS: ClassVar[set[str]] = {"opened", "synchronize"}

    def dispatch(self, event_type: str, payload: dict[str, Any]) -> dict[str, Any]:
        """Dispatch a webhook event to the appropriate handler.

        Args:
            event_type: The X-GitHub-Event header value.
            payload: The webhook payload.

        Returns:
            Dictionary with dispatch result.
        """
        logger.info(
            "Dispatching webhook event",
            extra={"event_type": event_type, "action": payload.get("action")},
        )

        if event_type == "pull_request":
            return self._handle_pull_request(payload)
        elif event_type == "ping":
            return {"event_type": "ping", "status": "ok", "zen": payload.get("zen", "")}
        elif event_type == "installation":
            return {
                "event_type": "installation",
                "status": "ok",
                "action": payload.get("action", ""),
                "installation_id": payload.get("installation", {}).get("id"),
            }

        logger.info("Ignoring unsupported event type", extra={"event_type": event_type})
        return {"event_type": event_type, "status": "ignored"}

    def _handle_pull_request(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Handle a pull_request event.

        Args:
            payload: The webhook payload.

        Returns:
            Dictionary with handling result.
        """
        action = payload.get("action", "")
        result: dict[str, Any] = {
            "event_type": "pull_request",
            "action": action,
            "should_review": action in self.REVIEW_ACTIONS,
        }

        if not result["should_review"]:
            logger.info("PR action does not require review", extra={"action": action})
            return result

        try:
            pr = parse_pr_event(payload)
        except WebhookParseError as e:
            logger.error("Failed to parse PR event", extra={"error": str(e)})
            result["should_review"] = False
            result["error"] = str(e)
            return result

        logger.debug(
            "PR event parsed for review",
            extra={"pr_number": pr.number, "repository": pr.repository, "action": action},
        )
        result["pull_request"] = pr
        return result


def handle_webhook(  # noqa: PLR0911
    body: bytes,
    signature: str,
    event_type: str,
    delivery_id: str,
    trigger_review: ReviewTrigger,
) -> WebhookResponse:
    """Verify, parse and act on one webhook delivery.

    Args:
        body: Raw request body bytes.
        signature: X-Hub-Signature-256 header value.
        event_type: X-GitHub-Event header value.
        delivery_id: X-GitHub-Delivery header value.
        trigger_review: Runs the review for a parsed pull request.

    Returns:
        The response to send back to GitHub.
    """
    logger.info(
        "Received webhook",
        extra={"event_type": event_type, "delivery_id": delivery_id},
    )

    webhook_secret = os.environ.get("GITHUB_WEBHOOK_SECRET", "")
    if not webhook_secret:
        logger.error("GITHUB_WEBHOOK_SECRET not configured")
        return WebhookResponse(
            500,
            {"error": "configuration_error", "message": "Webhook secret not configured"},
        )

    try:
        verify_webhook_signature(body, signature, webhook_secret)
    except WebhookSignatureError as e:
        logger.warning("Signature verification failed", extra={"error": str(e)})
        return WebhookResponse(403, {"error": "invalid_signature", "message": str(e)})

    try:
        payload = json.loads(body)
    except json.JSONDecodeError as e:
        logger.warning("Invalid JSON payload", extra={"error": str(e)})
        return WebhookResponse(400, {"error": "invalid_payload", "message": f"Invalid JSON: {e}"})

    if not isinstance(payload, dict):
        return WebhookResponse(
            400, {"error": "invalid_payload", "message": "Payload must be a JSON object"}
        )

    result = WebhookHandler().dispatch(event_type, payload)

    if "error" in result:
        return WebhookResponse(400, {"error": "invalid_payload", "message": result["error"]})

    if result.get("should_review"):
        pr = result["pull_request"]
        try:
            outcome = trigger_review(pr)
        except ConfigurationError as e:
            logger.error("Invalid review configuration", extra={"error": str(e)})
            return WebhookResponse(500, {"error": "configuration_error", "message": str(e)})
        except Exception as e:
            logger.error(
                "Review failed",
                extra={"pr_number": pr.number, "error": str(e)},
                exc_info=True,
            )
            return WebhookResponse(500, {"error": "internal_error", "message": "Review failed"})

        return WebhookResponse(
            200,
            {"status": outcome.value, "message": f"Handled PR #{pr.number}"},
        )

    if result.get("event_type") == "ping":
        return WebhookResponse(200, {"status": "ok", "message": f"Pong! {result['zen']}"})

    if result.get("event_type") == "installation":
        return WebhookResponse(
            200,
            {"status": "ok", "message": f"Installation event processed: {result['action']}"},
        )

    if result.get("status") == "ignored":
        return WebhookResponse(
            200,
            {"status": "ignored", "message": f"Event type '{event_type}' not handled"},
        )

    return WebhookResponse(
        200,
        {
            "status": "ignored",
            "message": f"Action '{result.get('action', '')}' does not trigger review",
        },
    )
