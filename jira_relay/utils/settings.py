"""Process-wide configuration loaded once from environment variables."""

import os
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from jira_relay.utils.errors import ConfigurationError

# Channel enabled when ALLOWED_CHANNELS is not set
DEFAULT_ALLOWED_CHANNELS = frozenset({"C099W0T9R2P"})

REQUIRED_VARIABLES = (
    "SLACK_SIGNING_SECRET",
    "SLACK_BOT_TOKEN",
    "JIRA_BASE_URL",
    "JIRA_EMAIL",
    "JIRA_API_TOKEN",
)


class Settings(BaseModel):
    """Immutable relay configuration."""

    model_config = ConfigDict(frozen=True)

    slack_signing_secret: str = Field(..., min_length=1, repr=False)
    slack_bot_token: str = Field(..., min_length=1, repr=False)
    jira_base_url: str = Field(..., min_length=1)
    jira_email: str = Field(..., min_length=1)
    jira_api_token: str = Field(..., min_length=1, repr=False)
    allowed_channels: frozenset[str] = DEFAULT_ALLOWED_CHANNELS
    port: int = Field(3000, ge=0, le=65535)
    jira_timeout_seconds: float = Field(10.0, gt=0)
    slack_timeout_seconds: float = Field(10.0, gt=0)
    max_clock_skew_seconds: int = 300

    @field_validator("jira_base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from the environment.

        Raises ConfigurationError naming every missing or invalid variable.
        """
        env = os.environ if environ is None else environ

        def read(name: str) -> str:
            # Strip to remove trailing newlines from secrets stored in env files
            return (env.get(name) or "").strip()

        missing = [name for name in REQUIRED_VARIABLES if not read(name)]
        if missing:
            raise ConfigurationError(f"Missing required environment variables: {', '.join(missing)}")

        values = {
            "slack_signing_secret": read("SLACK_SIGNING_SECRET"),
            "slack_bot_token": read("SLACK_BOT_TOKEN"),
            "jira_base_url": read("JIRA_BASE_URL"),
            "jira_email": read("JIRA_EMAIL"),
            "jira_api_token": read("JIRA_API_TOKEN"),
        }

        channels = parse_channel_list(read("ALLOWED_CHANNELS"))
        if channels:
            values["allowed_channels"] = channels
        if read("PORT"):
            values["port"] = read("PORT")
        if read("JIRA_TIMEOUT_SECONDS"):
            values["jira_timeout_seconds"] = read("JIRA_TIMEOUT_SECONDS")
        if read("SLACK_TIMEOUT_SECONDS"):
            values["slack_timeout_seconds"] = read("SLACK_TIMEOUT_SECONDS")

        try:
            return cls(**values)
        except ValidationError as e:
            fields = sorted({str(err["loc"][0]).upper() for err in e.errors() if err.get("loc")})
            raise ConfigurationError(f"Invalid environment variables: {', '.join(fields)}") from e


def parse_channel_list(raw: str) -> frozenset[str]:
    """Parse a comma-separated channel list, ignoring blanks."""
    return frozenset(part.strip() for part in raw.split(",") if part.strip())
