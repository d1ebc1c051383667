"""Slack to Jira notification relay."""

__version__ = "0.1.0"
