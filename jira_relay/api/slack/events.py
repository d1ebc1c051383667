"""Slack Events API endpoint (free-text `#command` messages)."""

from jira_relay.api.handler import RelayRequestHandler, decode_json_body, run_async
from jira_relay.models.slack_request import InboundRequest, SurfaceKind
from jira_relay.utils.errors import MalformedRequestError
from jira_relay.utils.logging import get_structured_logger

logger = get_structured_logger(__name__)


def handle_slack_events(handler: RelayRequestHandler) -> None:
    """
    Verify, answer URL verification or ACK, then dispatch the event.

    The signature is checked before anything else, including the
    url_verification handshake. The 200 ACK is flushed before the Jira
    query runs so Slack's short delivery timeout is never hit.
    """
    dispatcher = handler.dispatcher
    inbound = InboundRequest.from_headers(handler.headers, handler.read_raw_body(), SurfaceKind.EVENTS)

    if not dispatcher.verify(inbound):
        handler.send_json(401, {"error": "invalid signature"})
        return

    try:
        payload = decode_json_body(inbound.raw_body)
    except MalformedRequestError as e:
        logger.warning("Rejecting malformed Slack event body", error=str(e))
        handler.send_json(400, {"error": "malformed body"})
        return

    if payload.get("type") == "url_verification":
        logger.info("URL verification handshake")
        handler.send_text(200, str(payload.get("challenge", "")))
        return

    # ACK immediately; the answer is posted in the message thread
    handler.send_text(200, "ok")

    outcome = run_async(dispatcher.handle_event(payload))
    logger.info(
        "Slack event handled",
        state=outcome.state.value,
        token=outcome.token,
        delivered=outcome.delivered
    )
