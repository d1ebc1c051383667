"""Health check endpoint."""

from jira_relay.api.handler import RelayRequestHandler


def handle_health(handler: RelayRequestHandler) -> None:
    """Fixed 200 "ok" with no side effects."""
    handler.send_text(200, "ok")
