"""Amazon Bedrock AgentCore Runtime entrypoint for patchpilot.

Lets the bot run on AgentCore instead of Lambda. The invocation payload
carries the raw webhook delivery, or a direct review request naming a
repository and pull request number.
"""

from __future__ import annotations

from typing import Any

from bedrock_agentcore.runtime import BedrockAgentCoreApp, PingStatus

from patchpilot.main import trigger_review
from patchpilot.models.pull_request import PullRequest
from patchpilot.tools.github import create_github_client, get_repository
from patchpilot.utils.logging import configure_logging, get_logger
from patchpilot.webhook.handler import handle_webhook

configure_logging()
logger = get_logger("agentcore")

app = BedrockAgentCoreApp()


def review_by_number(repository: str, pr_number: int, installation_id: int) -> dict[str, Any]:
    """Review a pull request fetched by number, as if it had just been opened.

    Args:
        repository: Repository in owner/repo format.
        pr_number: Pull request number.
        installation_id: GitHub App installation ID.

    Returns:
        Dictionary with the review outcome.
    """
    client = create_github_client(installation_id)
    pull = get_repository(client, repository).get_pull(pr_number)

    pr = PullRequest(
        number=pr_number,
        action="opened",
        state=pull.state,
        locked=pull.locked,
        base_sha=pull.base.sha,
        head_sha=pull.head.sha,
        repository=repository,
        installation_id=installation_id,
        html_url=pull.html_url,
        labels=tuple(label.name for label in pull.labels),
        title=pull.title,
        body=pull.body,
    )

    outcome = trigger_review(pr)
    return {"status_code": 200, "status": outcome.value, "result": outcome.value}


@app.entrypoint
def invoke(payload: dict[str, Any]) -> dict[str, Any]:
    """Main entrypoint for AgentCore invocations.

    Args:
        payload: Request payload containing either:
            - webhook_body, webhook_signature, webhook_event_type,
              webhook_delivery_id: a raw GitHub webhook delivery
            - repository, pr_number, installation_id: a direct review request

    Returns:
        Dictionary with the status code and response body fields.
    """
    webhook_body = payload.get("webhook_body")
    if webhook_body:
        body_bytes = webhook_body.encode() if isinstance(webhook_body, str) else webhook_body
        response = handle_webhook(
            body=body_bytes,
            signature=payload.get("webhook_signature", ""),
            event_type=payload.get("webhook_event_type", ""),
            delivery_id=payload.get("webhook_delivery_id", ""),
            trigger_review=trigger_review,
        )
        return {"status_code": response.status_code, **response.body}

    repository = payload.get("repository")
    pr_number = payload.get("pr_number")
    installation_id = payload.get("installation_id")

    logger.info(
        "Received invocation",
        extra={
            "has_repository": bool(repository),
            "has_pr_number": bool(pr_number),
            "has_installation_id": bool(installation_id),
        },
    )

    if not (repository and pr_number and installation_id):
        return {
            "status_code": 400,
            "error": "invalid_payload",
            "message": "Expected a webhook delivery or repository, pr_number and installation_id",
        }

    try:
        return review_by_number(repository, int(pr_number), int(installation_id))
    except Exception as e:
        logger.error("Invocation failed", extra={"error": str(e)}, exc_info=True)
        return {
            "status_code": 500,
            "error": "internal_error",
            "message": str(e),
        }


@app.ping
def ping() -> PingStatus:
    """Health check endpoint for AgentCore Runtime."""
    return PingStatus.HEALTHY


# For local development and testing
if __name__ == "__main__":
    app.run()
