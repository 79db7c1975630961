"""Jira API client and models."""

from jiracap.api.models import Issue, ImportBatch, Snapshot, Sprint, TeamMember
from jiracap.api.client import JiraAPIError, JiraClient

__all__ = [
    "JiraClient",
    "JiraAPIError",
    "Issue",
    "ImportBatch",
    "Snapshot",
    "Sprint",
    "TeamMember",
]
