"""Jira search result models."""

from typing import Any, Optional

from pydantic import BaseModel, Field


def _named(value: Any, field: str) -> str:
    """Name of a Jira `{"name": ...}` object such as issuetype or status."""
    if value is None:
        return ""
    if not isinstance(value, dict):
        raise ValueError(f"Jira field '{field}' is not an object")
    return value.get("name") or ""


class JiraIssue(BaseModel):
    """Projection of a Jira issue (summary, issuetype, status fields)."""
    key: str
    summary: str = ""
    issue_type: str = ""
    status: str = ""

    @classmethod
    def from_api(cls, data: Any) -> "JiraIssue":
        if not isinstance(data, dict):
            raise ValueError("Jira issue is not an object")
        fields = data.get("fields") or {}
        if not isinstance(fields, dict):
            raise ValueError("Jira issue fields are not an object")
        return cls(
            key=data["key"],
            summary=fields.get("summary") or "",
            issue_type=_named(fields.get("issuetype"), "issuetype"),
            status=_named(fields.get("status"), "status"),
        )

    def browse_url(self, base_url: str) -> str:
        return f"{base_url.rstrip('/')}/browse/{self.key}"


class JiraSearchResult(BaseModel):
    """Issues returned by a search plus the total Jira reports."""
    total: int = Field(0, ge=0)
    issues: list[JiraIssue] = Field(default_factory=list)

    @classmethod
    def from_api(cls, data: Any) -> "JiraSearchResult":
        if not isinstance(data, dict):
            raise ValueError("Jira search response is not an object")
        raw_issues = data.get("issues") or []
        if not isinstance(raw_issues, list):
            raise ValueError("Jira search 'issues' is not a list")
        issues = [JiraIssue.from_api(item) for item in raw_issues]
        total: Optional[int] = data.get("total")
        if total is None:
            total = len(issues)
        return cls(total=total, issues=issues)
