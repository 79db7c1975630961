"""Import of a project from a live Jira connection."""

import asyncio
import logging

from jiracap.api.client import ISSUE_FIELDS, JiraClient, build_project_jql
from jiracap.api.models import ImportBatch
from jiracap.config.settings import Settings
from jiracap.ingest.normalizer import build_batch

logger = logging.getLogger(__name__)


async def fetch_project(
    client: JiraClient,
    project_key: str,
    settings: Settings | None = None,
    include_done: bool = False,
) -> ImportBatch:
    """Fetch and normalize the team, sprints and issues of one project.

    Credentials are validated first so that auth problems surface before
    the data requests.

    Args:
        client: An entered JiraClient
        project_key: Jira project key
        settings: Field mapping and page size (defaults used when omitted)
        include_done: Include issues in the Done status category
    """
    settings = settings or Settings()
    await client.validate_credentials()

    jql = build_project_jql(project_key, include_done=include_done)
    fields = [*ISSUE_FIELDS, settings.story_points_field, settings.sprint_field]
    users, sprints, issues = await asyncio.gather(
        client.get_assignable_users(project_key),
        client.get_sprints(project_key),
        client.search_issues(jql, fields=fields, max_results=settings.max_results),
    )
    logger.info(
        "Fetched %s: %d users, %d sprints, %d issues",
        project_key,
        len(users),
        len(sprints),
        len(issues),
    )
    return build_batch(
        users,
        sprints,
        issues,
        story_points_field=settings.story_points_field,
        sprint_field=settings.sprint_field,
    )
