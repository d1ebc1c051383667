"""Threaded HTTP server entry point."""

from http.server import ThreadingHTTPServer
from typing import Optional

from jira_relay.api.handler import RelayRequestHandler
from jira_relay.api.health import handle_health
from jira_relay.api.slack.commands import handle_slash_command
from jira_relay.api.slack.events import handle_slack_events
from jira_relay.services.dispatcher import Dispatcher
from jira_relay.utils.errors import ConfigurationError
from jira_relay.utils.logging import get_structured_logger
from jira_relay.utils.logging_config import LoggingConfig
from jira_relay.utils.settings import Settings

logger = get_structured_logger(__name__)


class SlackRelayHandler(RelayRequestHandler):
    get_routes = {
        "/": handle_health,
        "/health": handle_health,
    }
    post_routes = {
        "/slack/events": handle_slack_events,
        "/slack/commands": handle_slash_command,
    }


class RelayHTTPServer(ThreadingHTTPServer):
    """One thread per request; the dispatcher is shared read-only."""

    daemon_threads = True

    def __init__(self, address: tuple[str, int], dispatcher: Dispatcher):
        self.dispatcher = dispatcher
        super().__init__(address, SlackRelayHandler)


def create_server(settings: Settings, host: str = "0.0.0.0", dispatcher: Optional[Dispatcher] = None) -> RelayHTTPServer:
    dispatcher = dispatcher or Dispatcher.from_settings(settings)
    return RelayHTTPServer((host, settings.port), dispatcher)


def main() -> int:
    LoggingConfig.setup_logging()

    try:
        settings = Settings.from_env()
    except ConfigurationError as e:
        logger.error(f"Refusing to start: {e}")
        return 1

    server = create_server(settings)
    logger.info(
        f"Slack Jira relay listening on port {server.server_address[1]}",
        allowed_channels=sorted(settings.allowed_channels),
        commands=sorted(server.dispatcher.registry.tokens)
    )
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("Shutting down")
    finally:
        server.server_close()
    return 0
