"""Lambda entry point for the patchpilot webhook handler."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from patchpilot import __version__
from patchpilot.models.config import ReviewConfig
from patchpilot.review.runner import review_pull_request
from patchpilot.tools.github import create_github_client
from patchpilot.utils.logging import configure_logging, get_logger
from patchpilot.webhook.handler import handle_webhook

if TYPE_CHECKING:
    from patchpilot.models.outcome import ReviewOutcome
    from patchpilot.models.pull_request import PullRequest

# Configure logging on module load
configure_logging()
logger = get_logger("main")


def trigger_review(pr: PullRequest) -> ReviewOutcome:
    """Review the given pull request with configuration read from the environment.

    Args:
        pr: The pull request to review.

    Returns:
        The outcome of the review run.
    """
    logger.info(
        "Review triggered",
        extra={
            "pr_number": pr.number,
            "repository": pr.repository,
            "head_sha": pr.head_sha,
        },
    )

    config = ReviewConfig.from_env()
    client = create_github_client(pr.installation_id)
    return review_pull_request(pr, config, client)


def _create_response(status_code: int, body: dict[str, Any]) -> dict[str, Any]:
    """Create a Lambda response.

    Args:
        status_code: HTTP status code.
        body: Response body dictionary.

    Returns:
        Lambda response dictionary.
    """
    return {
        "statusCode": status_code,
        "headers": {
            "Content-Type": "application/json",
        },
        "body": json.dumps(body),
    }


def _handle_webhook(event: dict[str, Any]) -> dict[str, Any]:
    """Handle a webhook request from API Gateway."""
    # Get headers (case-insensitive)
    headers = {k.lower(): v for k, v in (event.get("headers") or {}).items()}

    body = event.get("body") or ""
    body_bytes = body.encode() if isinstance(body, str) else body

    response = handle_webhook(
        body=body_bytes,
        signature=headers.get("x-hub-signature-256", ""),
        event_type=headers.get("x-github-event", ""),
        delivery_id=headers.get("x-github-delivery", ""),
        trigger_review=trigger_review,
    )
    return _create_response(response.status_code, response.body)


def _handle_health() -> dict[str, Any]:
    """Handle health check request."""
    return _create_response(
        200,
        {
            "status": "healthy",
            "version": __version__,
        },
    )


def lambda_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:  # noqa: ARG001
    """AWS Lambda handler for webhook requests.

    Args:
        event: Lambda event from API Gateway.
        context: Lambda context (unused but required by AWS Lambda).

    Returns:
        Lambda response dictionary.
    """
    path = event.get("path", "")
    method = event.get("httpMethod", "")

    logger.info(
        "Request received",
        extra={"path": path, "method": method},
    )

    if path == "/health" and method == "GET":
        return _handle_health()
    elif path == "/webhook" and method == "POST":
        return _handle_webhook(event)
    else:
        return _create_response(
            404,
            {
                "error": "not_found",
                "message": f"Path not found: {method} {path}",
            },
        )


# For local development
if __name__ == "__main__":
    import uvicorn
    from starlette.applications import Starlette
    from starlette.requests import Request  # noqa: TC002
    from starlette.responses import JSONResponse
    from starlette.routing import Route

    async def webhook_route(request: Request) -> JSONResponse:
        """Handle webhook requests for local development."""
        body = await request.body()
        event = {
            "httpMethod": "POST",
            "path": "/webhook",
            "headers": dict(request.headers),
            "body": body.decode(),
        }
        response = lambda_handler(event, None)
        return JSONResponse(
            content=json.loads(response["body"]),
            status_code=response["statusCode"],
        )

    async def health_route(request: Request) -> JSONResponse:
        """Handle health check requests for local development."""
        del request  # unused but required by Starlette routing
        response = lambda_handler({"httpMethod": "GET", "path": "/health"}, None)
        return JSONResponse(
            content=json.loads(response["body"]),
            status_code=response["statusCode"],
        )

    app = Starlette(
        routes=[
            Route("/webhook", webhook_route, methods=["POST"]),
            Route("/health", health_route, methods=["GET"]),
        ]
    )

    print(f"Starting patchpilot v{__version__} on http://localhost:8000")
    uvicorn.run(app, host="0.0.0.0", port=8000)
