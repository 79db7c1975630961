"""Manual import of pasted or exported JSON."""

import json
import logging
from typing import Any

from jiracap.api.models import ImportBatch
from jiracap.ingest.normalizer import ImportValidationError, build_batch

logger = logging.getLogger(__name__)


def _assignees(issues: list[Any]) -> list[dict[str, Any]]:
    """Collect the Jira assignee objects referenced by issue records."""
    users: dict[str, dict[str, Any]] = {}
    for raw in issues:
        fields = raw.get("fields") if isinstance(raw, dict) else None
        assignee = fields.get("assignee") if isinstance(fields, dict) else None
        account_id = assignee.get("accountId") if isinstance(assignee, dict) else None
        if account_id and isinstance(account_id, str):
            users.setdefault(account_id, assignee)
    return list(users.values())


def _embedded_sprints(issues: list[Any], sprint_field: str) -> list[dict[str, Any]]:
    """Collect sprint objects embedded in Jira issue records."""
    sprints: dict[str, dict[str, Any]] = {}
    for raw in issues:
        fields = raw.get("fields") if isinstance(raw, dict) else None
        if not isinstance(fields, dict):
            continue
        candidates = [fields.get("sprint")]
        custom = fields.get(sprint_field)
        if isinstance(custom, list):
            candidates.extend(custom)
        for sprint in candidates:
            if isinstance(sprint, dict) and sprint.get("id") is not None:
                sprints.setdefault(str(sprint["id"]), sprint)
    return list(sprints.values())


def parse_export(
    text: str,
    story_points_field: str = "customfield_10016",
    sprint_field: str = "customfield_10020",
) -> ImportBatch:
    """Parse a pasted JSON blob into an ImportBatch.

    The blob is either an object with an ``issues`` array (and optional
    ``team`` and ``sprints`` arrays) or a bare array of issue records. Issue
    records may be Jira search results or flat exported issues.

    Raises:
        ImportValidationError: If the text is not JSON or has no issues array
        NoIssuesFoundError: If no issue could be normalized
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ImportValidationError(f"Invalid JSON: {e.msg} (line {e.lineno})") from e

    if isinstance(data, list):
        issues, team, sprints = data, [], []
    elif isinstance(data, dict) and isinstance(data.get("issues"), list):
        issues = data["issues"]
        team = data.get("team") if isinstance(data.get("team"), list) else []
        sprints = data.get("sprints") if isinstance(data.get("sprints"), list) else []
    else:
        raise ImportValidationError(
            "Expected a JSON array of issues or an object with an 'issues' array."
        )

    # Explicit team entries come last so they win over assignee stubs
    users = _assignees(issues) + list(team)
    sprints = _embedded_sprints(issues, sprint_field) + list(sprints)
    logger.debug("Parsed export with %d issue records", len(issues))

    batch = build_batch(users, sprints, issues, story_points_field, sprint_field)
    return ImportBatch(
        team=_dedupe(batch.team),
        issues=batch.issues,
        sprints=_dedupe(batch.sprints),
    )


def _dedupe(entities: list[Any]) -> list[Any]:
    """Keep one entity per id, the last one seen winning."""
    by_id = {}
    for entity in entities:
        by_id[entity.id] = entity
    return list(by_id.values())
