"""jiracap - capacity planning over Jira data."""

__version__ = "0.1.0"
