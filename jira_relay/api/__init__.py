"""HTTP surfaces for Slack webhooks and health checks."""
