"""Command dispatch pipeline shared by the event and slash command surfaces."""

import asyncio
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ValidationError

from jira_relay.models.command import CommandDefinition, ResponseStrategy
from jira_relay.models.slack_request import (
    DeliveryTarget,
    EventCallback,
    InboundRequest,
    SlashCommandRequest,
)
from jira_relay.services.command_parser import parse_message_command, parse_slash_command
from jira_relay.services.command_registry import CommandRegistry, build_default_registry
from jira_relay.services.formatter import format_search_result, truncate_message
from jira_relay.services.jira_client import JiraClient
from jira_relay.services.slack_responder import SlackResponder
from jira_relay.services.slack_verifier import verify_slack_request
from jira_relay.utils.errors import JiraQueryError, SlackDeliveryError
from jira_relay.utils.logging import get_structured_logger
from jira_relay.utils.settings import Settings

logger = get_structured_logger(__name__)

DECLINE_TEXT = "Este comando no está habilitado en este canal."


class DispatchState(str, Enum):
    """Pipeline states; REJECTED, DROPPED, DECLINED, NO_COMMAND and RESPONDED are terminal."""
    RECEIVED = "received"
    VERIFIED = "verified"
    AUTHORIZED = "authorized"
    PARSED = "parsed"
    NO_COMMAND = "no_command"
    UNKNOWN_COMMAND = "unknown_command"
    EXECUTING = "executing"
    RESPONDED = "responded"
    REJECTED = "rejected"
    DROPPED = "dropped"
    DECLINED = "declined"


class DispatchOutcome(BaseModel):
    """Result of running one request through the pipeline."""
    state: DispatchState
    token: Optional[str] = None
    command: Optional[str] = None
    text: Optional[str] = None
    delivered: bool = False


def unknown_command_text(token: str, registry: CommandRegistry) -> str:
    return f"Comando `#{token}` no reconocido.\n\n{registry.help_text()}"


class Dispatcher:
    """
    Verify, authorize, parse, look up, execute, format and deliver.

    Holds only read-only collaborators, so one instance serves all
    request threads.
    """

    def __init__(
        self,
        settings: Settings,
        registry: CommandRegistry,
        jira_client: JiraClient,
        responder: SlackResponder
    ):
        self.settings = settings
        self.registry = registry
        self.jira_client = jira_client
        self.responder = responder

    @classmethod
    def from_settings(cls, settings: Settings, registry: Optional[CommandRegistry] = None) -> "Dispatcher":
        return cls(
            settings,
            registry or build_default_registry(),
            JiraClient.from_settings(settings),
            SlackResponder.from_settings(settings),
        )

    def verify(self, request: InboundRequest) -> bool:
        """RECEIVED -> VERIFIED."""
        return verify_slack_request(
            request,
            self.settings.slack_signing_secret,
            max_skew=self.settings.max_clock_skew_seconds
        )

    def is_authorized(self, channel_id: Optional[str]) -> bool:
        """VERIFIED -> AUTHORIZED."""
        return bool(channel_id) and channel_id in self.settings.allowed_channels

    async def handle_event(self, payload: dict[str, Any]) -> DispatchOutcome:
        """
        Handle a verified Events API payload.

        Anything that is not a plain user message in an allowed channel is
        dropped silently, as is a message without a `#command`.
        """
        try:
            envelope = EventCallback.model_validate(payload)
        except ValidationError:
            logger.info("Ignoring payload without a valid event envelope")
            return DispatchOutcome(state=DispatchState.DROPPED)

        event = envelope.event
        if envelope.type != "event_callback" or event is None or not event.is_user_message:
            return DispatchOutcome(state=DispatchState.DROPPED)

        if not self.is_authorized(event.channel):
            logger.info("Ignoring message from channel outside allow-list", channel=event.channel)
            return DispatchOutcome(state=DispatchState.DROPPED)

        token = parse_message_command(event.text)
        if token is None:
            return DispatchOutcome(state=DispatchState.NO_COMMAND)

        logger.info("Message command parsed", token=token, channel=event.channel, event_id=envelope.event_id)
        return await self._respond(token, DeliveryTarget.thread(event.channel, event.ts))

    async def handle_slash_command(self, command: SlashCommandRequest) -> DispatchOutcome:
        """Handle a verified slash command; the answer goes to its response_url."""
        target = DeliveryTarget.callback(command.response_url)

        if not self.is_authorized(command.channel_id):
            logger.info("Declining slash command outside allow-list", channel=command.channel_id)
            delivered = await self._deliver(target, DECLINE_TEXT)
            return DispatchOutcome(state=DispatchState.DECLINED, text=DECLINE_TEXT, delivered=delivered)

        token = parse_slash_command(command.command)
        if token is None:
            return DispatchOutcome(state=DispatchState.NO_COMMAND)

        logger.info("Slash command parsed", token=token, channel=command.channel_id)
        return await self._respond(token, target)

    async def render(self, token: str) -> tuple[DispatchState, Optional[CommandDefinition], str]:
        """PARSED -> UNKNOWN_COMMAND | EXECUTING; returns the text to deliver."""
        definition = self.registry.get(token)
        if definition is None:
            return DispatchState.UNKNOWN_COMMAND, None, unknown_command_text(token, self.registry)

        if definition.strategy == ResponseStrategy.HELP:
            return DispatchState.EXECUTING, definition, self.registry.help_text()

        return DispatchState.EXECUTING, definition, await self._run_query(definition)

    async def _run_query(self, definition: CommandDefinition) -> str:
        try:
            result = await asyncio.wait_for(
                self.jira_client.search(definition.jql),
                timeout=self.settings.jira_timeout_seconds
            )
        except asyncio.TimeoutError:
            logger.warning("Jira query exceeded timeout", command=definition.token)
            return JiraQueryError("timeout").user_message
        except JiraQueryError as e:
            logger.warning("Jira query failed", command=definition.token, status=e.status, detail=e.detail)
            return e.user_message

        return format_search_result(definition.title, result, self.settings.jira_base_url)

    async def _respond(self, token: str, target: DeliveryTarget) -> DispatchOutcome:
        state, definition, text = await self.render(token)
        if state == DispatchState.UNKNOWN_COMMAND:
            logger.info("Unknown command", token=token)

        text = truncate_message(text)
        delivered = await self._deliver(target, text)
        return DispatchOutcome(
            state=DispatchState.RESPONDED,
            token=token,
            command=definition.token if definition else None,
            text=text,
            delivered=delivered,
        )

    async def _deliver(self, target: DeliveryTarget, text: str) -> bool:
        try:
            await self.responder.deliver(target, text)
        except SlackDeliveryError as e:
            logger.error("Failed to deliver Slack response", status=e.status, detail=e.detail)
            return False
        return True
