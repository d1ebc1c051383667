"""Slack request signature verification (v0 HMAC-SHA256 scheme)."""

import hmac
import hashlib
import time
from typing import Optional

from jira_relay.models.slack_request import InboundRequest
from jira_relay.utils.logging import get_structured_logger

logger = get_structured_logger(__name__)

SIGNATURE_VERSION = "v0"
MAX_CLOCK_SKEW_SECONDS = 300


def compute_slack_signature(secret: str, timestamp: str, body: bytes) -> str:
    """Return the `v0=<hex>` tag Slack would send for this body."""
    sig_basestring = f"{SIGNATURE_VERSION}:{timestamp}:".encode("utf-8") + body
    digest = hmac.new(
        secret.encode("utf-8"),
        sig_basestring,
        hashlib.sha256
    ).hexdigest()
    return f"{SIGNATURE_VERSION}={digest}"


def verify_slack_signature(
    secret: str,
    timestamp: Optional[str],
    body: bytes,
    signature: Optional[str],
    now: Optional[float] = None,
    max_skew: int = MAX_CLOCK_SKEW_SECONDS
) -> bool:
    """
    Verify a Slack request signature over the raw body bytes.

    Rejects missing headers, timestamps outside the replay window and
    mismatching tags. Never raises.
    """
    if not secret or not timestamp or not signature:
        return False

    try:
        ts = int(timestamp)
    except ValueError:
        return False

    current_time = int(time.time() if now is None else now)
    if abs(current_time - ts) > max_skew:
        logger.warning(
            "Slack request timestamp outside replay window",
            skew_seconds=current_time - ts
        )
        return False

    try:
        expected_signature = compute_slack_signature(secret, timestamp, body)
        return hmac.compare_digest(
            expected_signature.encode("ascii"),
            signature.encode("ascii")
        )
    except Exception as e:
        # Malformed signature encoding counts as a mismatch
        logger.warning("Slack signature comparison failed", error_type=type(e).__name__)
        return False


def verify_slack_request(
    request: InboundRequest,
    secret: str,
    max_skew: int = MAX_CLOCK_SKEW_SECONDS
) -> bool:
    """Verify an inbound request; logs the outcome without secret material."""
    result = verify_slack_signature(
        secret,
        request.timestamp,
        request.raw_body,
        request.signature,
        max_skew=max_skew
    )
    if not result:
        logger.warning(
            "Slack signature verification failed",
            surface=request.surface.value,
            has_timestamp=bool(request.timestamp),
            has_signature=bool(request.signature),
            body_length=len(request.raw_body)
        )
    return result
