"""Slack slash command endpoint."""

from pydantic import ValidationError

from jira_relay.api.handler import RelayRequestHandler, decode_form_body, run_async
from jira_relay.models.slack_request import InboundRequest, SlashCommandRequest, SurfaceKind
from jira_relay.services.dispatcher import DECLINE_TEXT
from jira_relay.utils.errors import MalformedRequestError
from jira_relay.utils.logging import get_structured_logger

logger = get_structured_logger(__name__)


def handle_slash_command(handler: RelayRequestHandler) -> None:
    """
    Verify and ACK a slash command, then answer through its response_url.

    Channels outside the allow-list get the decline notice in the HTTP
    response itself, since Slack shows the user whatever we reply with.
    """
    dispatcher = handler.dispatcher
    inbound = InboundRequest.from_headers(handler.headers, handler.read_raw_body(), SurfaceKind.COMMANDS)

    if not dispatcher.verify(inbound):
        handler.send_json(401, {"error": "invalid signature"})
        return

    try:
        command = SlashCommandRequest.model_validate(decode_form_body(inbound.raw_body))
    except (MalformedRequestError, ValidationError) as e:
        logger.warning("Rejecting malformed slash command", error_type=type(e).__name__)
        handler.send_json(400, {"error": "malformed body"})
        return

    if not dispatcher.is_authorized(command.channel_id):
        logger.info("Slash command declined", channel=command.channel_id, command=command.command)
        handler.send_json(200, {"response_type": "ephemeral", "text": DECLINE_TEXT})
        return

    # Empty ACK; the real answer is posted to response_url
    handler.send_text(200, "")

    outcome = run_async(dispatcher.handle_slash_command(command))
    logger.info(
        "Slash command handled",
        state=outcome.state.value,
        token=outcome.token,
        delivered=outcome.delivered
    )
