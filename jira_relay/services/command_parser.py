"""Command token extraction from message text and slash commands."""

import re
from typing import Optional

from jira_relay.models.command import normalize_token

# '#' must start the text or follow whitespace, so "issue#123" or URL fragments never match
COMMAND_PATTERN = re.compile(r"(?:^|\s)#([A-Za-z0-9_]+)")


def parse_message_command(text: Optional[str]) -> Optional[str]:
    """Return the first `#token` in free text, lowercased, or None."""
    if not text:
        return None
    match = COMMAND_PATTERN.search(text)
    return match.group(1).lower() if match else None


def parse_slash_command(command: Optional[str]) -> Optional[str]:
    """Strip the leading '/' from a slash command name."""
    if not command:
        return None
    token = normalize_token(command).lstrip("/")
    return token or None
