"""Webhook signature validation."""

import hashlib
import hmac

SIGNATURE_PREFIX = "sha256="


class WebhookSignatureError(Exception):
    """Raised when webhook signature verification fails."""

    pass


def compute_signature(payload: bytes, secret: str) -> str:
    """Compute the ``X-Hub-Signature-256`` value GitHub sends for a payload."""
    return SIGNATURE_PREFIX + hmac.new(secret.encode(), payload, hashlib.sha256).hexdigest()


def verify_webhook_signature(payload: bytes, signature: str, secret: str) -> None:
    """Verify the HMAC-SHA256 signature of a webhook delivery.

    Args:
        payload: The raw request body bytes.
        signature: The X-Hub-Signature-256 header value.
        secret: The webhook secret configured in the GitHub App.

    Raises:
        WebhookSignatureError: If signature is invalid or missing.
    """
    if not signature:
        raise WebhookSignatureError("Missing signature header")

    if not signature.startswith(SIGNATURE_PREFIX):
        raise WebhookSignatureError(f"Invalid signature format: must start with '{SIGNATURE_PREFIX}'")

    if not hmac.compare_digest(signature, compute_signature(payload, secret)):
        raise WebhookSignatureError("Signature verification failed")
