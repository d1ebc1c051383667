"""Outbound delivery of answers to Slack."""

from typing import Optional

import httpx

from jira_relay.models.slack_request import DeliveryTarget
from jira_relay.utils.errors import SlackDeliveryError
from jira_relay.utils.logging import get_structured_logger
from jira_relay.utils.settings import Settings

logger = get_structured_logger(__name__)

SLACK_API_URL = "https://slack.com/api"


class SlackResponder:
    """Posts threaded replies (chat.postMessage) and response_url callbacks."""

    def __init__(
        self,
        bot_token: str,
        timeout_s: float = 10.0,
        api_url: str = SLACK_API_URL,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self._bot_token = bot_token
        self.timeout_s = timeout_s
        self.api_url = api_url.rstrip("/")
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "SlackResponder":
        return cls(settings.slack_bot_token, timeout_s=settings.slack_timeout_seconds)

    async def deliver(self, target: DeliveryTarget, text: str) -> None:
        if target.is_callback:
            await self.post_to_response_url(target.response_url, text)
        else:
            await self.post_message(target.channel, text, thread_ts=target.thread_ts)

    async def post_message(self, channel: str, text: str, thread_ts: Optional[str] = None) -> None:
        payload = {"channel": channel, "text": text}
        if thread_ts:
            payload["thread_ts"] = thread_ts

        response = await self._post(
            f"{self.api_url}/chat.postMessage",
            payload,
            headers={"Authorization": f"Bearer {self._bot_token}"}
        )
        try:
            data = response.json()
        except ValueError as e:
            raise SlackDeliveryError("unreadable chat.postMessage response", status=response.status_code) from e

        # Slack reports API errors with HTTP 200 and ok=false
        if not data.get("ok"):
            raise SlackDeliveryError(data.get("error", "unknown_error"), status=response.status_code)

        logger.info("Posted threaded reply", channel=channel, thread_ts=thread_ts)

    async def post_to_response_url(self, response_url: str, text: str) -> None:
        await self._post(response_url, {"response_type": "in_channel", "text": text})
        logger.info("Posted slash command response")

    async def _post(self, url: str, payload: dict, headers: Optional[dict] = None) -> httpx.Response:
        try:
            async with httpx.AsyncClient(timeout=self.timeout_s, transport=self._transport) as client:
                response = await client.post(url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            raise SlackDeliveryError(f"{type(e).__name__} posting to Slack") from e

        if response.is_error:
            raise SlackDeliveryError(f"Slack responded {response.status_code}", status=response.status_code)
        return response
