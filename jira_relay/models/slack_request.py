"""Slack inbound request models."""

from enum import Enum
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

TIMESTAMP_HEADER = "X-Slack-Request-Timestamp"
SIGNATURE_HEADER = "X-Slack-Signature"


class SurfaceKind(str, Enum):
    """Entry surface a request arrived on."""
    EVENTS = "events"
    COMMANDS = "commands"


class InboundRequest(BaseModel):
    """Raw request as received, before any body decoding."""
    model_config = ConfigDict(frozen=True)

    raw_body: bytes = Field(..., description="Exact body bytes Slack signed")
    timestamp: Optional[str] = Field(None, description="Claimed request timestamp")
    signature: Optional[str] = Field(None, description="Claimed v0= signature")
    surface: SurfaceKind

    @classmethod
    def from_headers(
        cls,
        headers: Mapping[str, str],
        raw_body: bytes,
        surface: SurfaceKind
    ) -> "InboundRequest":
        """Capture the Slack auth headers (lookup is case-insensitive on HTTP messages)."""
        return cls(
            raw_body=raw_body,
            timestamp=headers.get(TIMESTAMP_HEADER) or None,
            signature=headers.get(SIGNATURE_HEADER) or None,
            surface=surface,
        )


class SlackMessageEvent(BaseModel):
    """Inner `event` object of an event_callback payload."""
    model_config = ConfigDict(extra="ignore")

    type: str = ""
    channel: str = ""
    text: Optional[str] = None
    ts: str = ""
    user: Optional[str] = None
    bot_id: Optional[str] = None
    subtype: Optional[str] = None
    thread_ts: Optional[str] = None

    @property
    def is_user_message(self) -> bool:
        """Plain human message: not a bot post, edit, join or other subtype."""
        return self.type == "message" and not self.bot_id and not self.subtype


class EventCallback(BaseModel):
    """Events API envelope."""
    model_config = ConfigDict(extra="ignore")

    type: str
    event_id: Optional[str] = None
    event: Optional[SlackMessageEvent] = None


class SlashCommandRequest(BaseModel):
    """URL-encoded slash command form."""
    model_config = ConfigDict(extra="ignore")

    command: str = Field(..., min_length=1)
    channel_id: str = ""
    response_url: str = Field(..., min_length=1)
    text: Optional[str] = None
    user_id: Optional[str] = None


class DeliveryTarget(BaseModel):
    """Where the answer to a command is posted."""
    model_config = ConfigDict(frozen=True)

    channel: Optional[str] = None
    thread_ts: Optional[str] = None
    response_url: Optional[str] = None

    @classmethod
    def thread(cls, channel: str, thread_ts: str) -> "DeliveryTarget":
        return cls(channel=channel, thread_ts=thread_ts)

    @classmethod
    def callback(cls, response_url: str) -> "DeliveryTarget":
        return cls(response_url=response_url)

    @property
    def is_callback(self) -> bool:
        return self.response_url is not None
