"""Read-only Jira Cloud search client."""

import base64
from typing import Optional

import httpx

from jira_relay.models.jira import JiraSearchResult
from jira_relay.utils.errors import JiraQueryError
from jira_relay.utils.logging import get_structured_logger, log_timing, mask_sensitive_data
from jira_relay.utils.settings import Settings

logger = get_structured_logger(__name__)

SEARCH_PATH = "/rest/api/3/search"
SEARCH_FIELDS = "summary,issuetype,status"
MAX_RESULTS = 50


class JiraClient:
    """
    Runs JQL searches against Jira.

    A new httpx.AsyncClient is opened per search because every request
    thread drives its own event loop.
    """

    def __init__(
        self,
        base_url: str,
        email: str,
        api_token: str,
        timeout_s: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.base_url = base_url.rstrip("/")
        self.email = email
        self._api_token = api_token
        self.timeout_s = timeout_s
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "JiraClient":
        return cls(
            settings.jira_base_url,
            settings.jira_email,
            settings.jira_api_token,
            timeout_s=settings.jira_timeout_seconds,
        )

    def _auth_header(self) -> str:
        token = base64.b64encode(f"{self.email}:{self._api_token}".encode("utf-8")).decode("ascii")
        return f"Basic {token}"

    async def search(self, jql: str) -> JiraSearchResult:
        """
        Run a JQL search.

        Raises JiraQueryError on network failure, non-2xx status or an
        unreadable response body.
        """
        params = {
            "jql": jql,
            "fields": SEARCH_FIELDS,
            "maxResults": str(MAX_RESULTS),
        }
        headers = {
            "Authorization": self._auth_header(),
            "Accept": "application/json",
        }

        with log_timing("jira_search", logger=logger):
            try:
                async with httpx.AsyncClient(timeout=self.timeout_s, transport=self._transport) as client:
                    response = await client.get(f"{self.base_url}{SEARCH_PATH}", params=params, headers=headers)
            except httpx.TimeoutException as e:
                logger.warning("Jira search timed out", error_type=type(e).__name__)
                raise JiraQueryError("timeout") from e
            except httpx.HTTPError as e:
                logger.warning("Jira search request failed", error=mask_sensitive_data(str(e)))
                raise JiraQueryError("sin conexión") from e

        if response.is_error:
            logger.warning(
                "Jira search returned an error status",
                status_code=response.status_code,
                body_preview=mask_sensitive_data(response.text[:200])
            )
            raise JiraQueryError(response.reason_phrase or "error", status=response.status_code)

        try:
            result = JiraSearchResult.from_api(response.json())
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning("Jira search response could not be parsed", error_type=type(e).__name__)
            raise JiraQueryError("respuesta inválida") from e

        logger.info("Jira search completed", total=result.total, returned=len(result.issues))
        return result
