"""Slack message formatting for Jira search results."""

from jira_relay.models.jira import JiraIssue, JiraSearchResult

MAX_LISTED_ISSUES = 25
MAX_MESSAGE_LENGTH = 3800
NO_RESULTS_LINE = "No hay issues registradas."


def format_issue_line(issue: JiraIssue, base_url: str) -> str:
    return (
        f"• <{issue.browse_url(base_url)}|{issue.key}> — *{issue.issue_type}* — "
        f"{issue.status} — {issue.summary}"
    )


def format_search_result(title: str, result: JiraSearchResult, base_url: str) -> str:
    """
    Render a search result as a Slack message.

    The header carries Jira's total; the body lists at most
    MAX_LISTED_ISSUES issues.
    """
    header = f"*{title}* — Total: *{result.total}*"
    if not result.issues:
        body = [NO_RESULTS_LINE]
    else:
        body = [format_issue_line(issue, base_url) for issue in result.issues[:MAX_LISTED_ISSUES]]
    return truncate_message("\n".join([header] + body))


def truncate_message(text: str, limit: int = MAX_MESSAGE_LENGTH) -> str:
    return text[:limit]
