"""Configuration management."""

from jiracap.config.auth import AuthError, get_api_token, get_jira_email, get_jira_url
from jiracap.config.defaults import bootstrap_snapshot
from jiracap.config.settings import Settings, get_settings

__all__ = [
    "AuthError",
    "Settings",
    "bootstrap_snapshot",
    "get_settings",
    "get_api_token",
    "get_jira_email",
    "get_jira_url",
]
