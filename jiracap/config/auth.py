"""Credentials for the Jira Cloud REST API."""

import os


class AuthError(Exception):
    """Raised when credentials are missing or unusable."""


def get_jira_url() -> str:
    """Get the Jira site URL from environment.

    Returns:
        The site URL (e.g., 'https://your-domain.atlassian.net')

    Raises:
        AuthError: If JIRA_URL is not set
    """
    url = os.environ.get("JIRA_URL")
    if not url:
        raise AuthError(
            "JIRA_URL environment variable not set.\n"
            "Set it to your Jira site URL, e.g.:\n"
            "  export JIRA_URL='https://your-domain.atlassian.net'"
        )
    return url.rstrip("/")


def get_jira_email() -> str:
    """Get the account e-mail used for basic authentication.

    Raises:
        AuthError: If JIRA_EMAIL is not set
    """
    email = os.environ.get("JIRA_EMAIL")
    if not email:
        raise AuthError(
            "JIRA_EMAIL environment variable not set.\n"
            "  export JIRA_EMAIL='you@company.com'"
        )
    return email


def get_api_token() -> str:
    """Get the Jira API token from environment.

    Returns:
        The API token

    Raises:
        AuthError: If JIRA_TOKEN is not set
    """
    token = os.environ.get("JIRA_TOKEN")
    if not token:
        raise AuthError(
            "JIRA_TOKEN environment variable not set.\n"
            "Create an API token for your Atlassian account:\n"
            "  1. Go to https://id.atlassian.com/manage-profile/security/api-tokens\n"
            "  2. Create a new API token\n"
            "  3. Set: export JIRA_TOKEN='your-token-here'"
        )
    return token


def get_verify_ssl() -> bool:
    """Get SSL verification setting from environment.

    Set JIRA_VERIFY_SSL=false to disable certificate verification, e.g. behind
    a corporate proxy with a custom CA.
    """
    value = os.environ.get("JIRA_VERIFY_SSL", "true").lower()
    return value not in ("false", "0", "no", "off")
