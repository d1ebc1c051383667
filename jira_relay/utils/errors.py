"""Error handling utilities."""

from typing import Optional


class RelayError(Exception):
    """Base exception for the Jira relay."""
    pass


class ConfigurationError(RelayError):
    """Required configuration is missing or invalid."""
    pass


class SlackVerificationError(RelayError):
    """Slack signature verification failed."""
    pass


class MalformedRequestError(RelayError):
    """Inbound request body could not be decoded."""
    pass


class JiraQueryError(RelayError):
    """Jira search failed (non-success status, network error or timeout)."""

    def __init__(self, detail: str, status: Optional[int] = None):
        super().__init__(detail)
        self.status = status
        self.detail = detail

    @property
    def user_message(self) -> str:
        """Short notice safe to show in Slack."""
        reason = str(self.status) if self.status is not None else self.detail
        return f"Error consultando Jira ({reason})"


class SlackDeliveryError(RelayError):
    """Posting a message back to Slack failed."""

    def __init__(self, detail: str, status: Optional[int] = None):
        super().__init__(detail)
        self.status = status
        self.detail = detail


class PayloadTooLargeError(MalformedRequestError):
    """Declared request body exceeds the accepted size."""
    pass
