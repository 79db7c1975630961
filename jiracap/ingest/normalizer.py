"""Normalization of raw tracker records into canonical entities.

Records arrive in two shapes:

* Jira REST shape: issues carry their data under ``fields`` (``fields.status.name``,
  ``fields.assignee.accountId``, ...), users carry ``accountId``/``displayName``.
* Flat shape: the camelCase layout of :mod:`jiracap.api.models`, as found in
  exported workspaces and generated sample data.

The mapping helpers never fail; the record-level functions raise
:class:`RecordError` for records that cannot be identified, and the batch
helpers skip those records.
"""

import logging
import math
from datetime import date, timedelta
from typing import Any, Iterable

from pydantic import ValidationError

from jiracap.api.models import (
    ImportBatch,
    Issue,
    IssueStatus,
    IssueType,
    Priority,
    Sprint,
    SprintState,
    TeamMember,
)

logger = logging.getLogger(__name__)

DEFAULT_ROLE = "Developer"
DEFAULT_CAPACITY = 10
HUMAN_ACCOUNT_TYPE = "atlassian"
DEFAULT_SPRINT_LENGTH = timedelta(days=14)


class IngestError(Exception):
    """Base class for user-facing import failures."""


class ImportValidationError(IngestError):
    """The import payload is malformed."""


class NoIssuesFoundError(IngestError):
    """The import produced no usable issues."""


class RecordError(ValueError):
    """A single record cannot be normalized."""


def normalize_issue_type(raw: str | None) -> IssueType:
    """Map a free-form issue type name to an IssueType."""
    lower = (raw or "").lower()
    if "bug" in lower:
        return IssueType.BUG
    if "task" in lower:
        return IssueType.TASK
    if "epic" in lower:
        return IssueType.EPIC
    return IssueType.STORY


def normalize_priority(raw: str | None) -> Priority:
    """Map a free-form priority name to a Priority."""
    lower = (raw or "").lower()
    if "highest" in lower or "blocker" in lower:
        return Priority.HIGHEST
    if "high" in lower or "critical" in lower:
        return Priority.HIGH
    if "low" in lower or "minor" in lower:
        return Priority.LOW
    return Priority.MEDIUM


def normalize_status(raw_status: str | None, raw_category: str | None = None) -> IssueStatus:
    """Map a status name and optional status category to an IssueStatus.

    Args:
        raw_status: Workflow status name, e.g. 'Code Review'
        raw_category: Status category name or key, e.g. 'In Progress' or 'indeterminate'
    """
    lower = (raw_status or "").lower()
    category = (raw_category or "").lower()

    if category == "done" or "done" in lower or "closed" in lower:
        return IssueStatus.DONE
    if category in ("in progress", "indeterminate") or "progress" in lower:
        return IssueStatus.IN_PROGRESS
    if "review" in lower or "qa" in lower:
        return IssueStatus.IN_REVIEW
    return IssueStatus.TO_DO


def _name(value: Any) -> str:
    """Return the name of a Jira reference object or the value itself."""
    if isinstance(value, dict):
        return str(value.get("name") or "")
    return str(value) if value is not None else ""


def _number(value: Any) -> float:
    """Coerce to a finite non-negative number, 0 when not numeric."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    if not math.isfinite(value):
        return 0
    return value if value > 0 else 0


def _seconds(value: Any) -> int:
    return int(_number(value))


def normalize_team_member(raw: dict[str, Any]) -> TeamMember | None:
    """Normalize a user record.

    Returns:
        The member, or None for Jira accounts that are not human users
        (apps, bots, customer accounts).

    Raises:
        RecordError: If the record has no identity
    """
    if not isinstance(raw, dict):
        raise RecordError(f"Expected an object, got {type(raw).__name__}")

    if "accountId" in raw:
        if raw.get("accountType") != HUMAN_ACCOUNT_TYPE:
            logger.debug("Skipping non-user account %s", raw.get("accountId"))
            return None
        member_id = raw.get("accountId")
        avatars = raw.get("avatarUrls") or {}
        return TeamMember(
            id=str(member_id),
            name=raw.get("displayName") or "",
            role=DEFAULT_ROLE,
            avatar=avatars.get("48x48", "") if isinstance(avatars, dict) else "",
            capacity_per_sprint=DEFAULT_CAPACITY,
            skills=[],
        )

    member_id = raw.get("id")
    if not member_id:
        raise RecordError("User record has no id")

    capacity = raw.get("capacityPerSprint")
    skills = raw.get("skills") or []
    return TeamMember(
        id=str(member_id),
        name=raw.get("name") or raw.get("displayName") or "",
        role=raw.get("role") or DEFAULT_ROLE,
        avatar=raw.get("avatar") or "",
        capacity_per_sprint=_number(capacity) if capacity is not None else DEFAULT_CAPACITY,
        skills=[str(s) for s in skills] if isinstance(skills, list) else [],
    )


def _sprint_id_from_fields(fields: dict[str, Any], sprint_field: str) -> str | None:
    """Return the sprint id only when the record names exactly one sprint."""
    sprint = fields.get("sprint")
    if isinstance(sprint, dict) and sprint.get("id") is not None:
        return str(sprint["id"])

    sprints = fields.get(sprint_field)
    if isinstance(sprints, list) and len(sprints) == 1:
        only = sprints[0]
        if isinstance(only, dict) and only.get("id") is not None:
            return str(only["id"])
    return None


def normalize_issue(
    raw: dict[str, Any],
    story_points_field: str = "customfield_10016",
    sprint_field: str = "customfield_10020",
) -> Issue:
    """Normalize an issue record.

    Args:
        raw: Jira-shaped or flat issue record
        story_points_field: Custom field holding story points
        sprint_field: Custom field holding the sprint list

    Raises:
        RecordError: If the record has no id or key, or carries invalid values
    """
    try:
        return _build_issue(raw, story_points_field, sprint_field)
    except ValidationError as e:
        raise RecordError(str(e)) from e


def _build_issue(raw: Any, story_points_field: str, sprint_field: str) -> Issue:
    if not isinstance(raw, dict):
        raise RecordError(f"Expected an object, got {type(raw).__name__}")

    issue_id = raw.get("id")
    key = raw.get("key")
    if issue_id is None or not key:
        raise RecordError("Issue record has no id or key")

    fields = raw.get("fields")
    if isinstance(fields, dict):
        status = fields.get("status") or {}
        category = status.get("statusCategory") if isinstance(status, dict) else None
        assignee = fields.get("assignee")
        parent = fields.get("parent")
        parent_fields = parent.get("fields") if isinstance(parent, dict) else None
        estimate = fields.get("timeoriginalestimate")
        if estimate is None:
            estimate = fields.get("timeestimate")

        return Issue(
            id=str(issue_id),
            key=str(key),
            summary=fields.get("summary") or "",
            type=normalize_issue_type(_name(fields.get("issuetype"))),
            priority=normalize_priority(_name(fields.get("priority"))),
            status=normalize_status(_name(status), _name(category) or None),
            assignee_id=assignee.get("accountId") if isinstance(assignee, dict) else None,
            story_points=_number(fields.get(story_points_field)),
            sprint_id=_sprint_id_from_fields(fields, sprint_field),
            time_spent_seconds=_seconds(fields.get("timespent")),
            time_estimate_seconds=_seconds(estimate),
            parent_key=parent.get("key") if isinstance(parent, dict) else None,
            parent_summary=parent_fields.get("summary") if isinstance(parent_fields, dict) else None,
            due_date=fields.get("duedate"),
        )

    sprint_id = raw.get("sprintId")
    return Issue(
        id=str(issue_id),
        key=str(key),
        summary=raw.get("summary") or "",
        type=normalize_issue_type(_name(raw.get("type"))),
        priority=normalize_priority(_name(raw.get("priority"))),
        status=normalize_status(_name(raw.get("status"))),
        assignee_id=str(raw["assigneeId"]) if raw.get("assigneeId") else None,
        story_points=_number(raw.get("storyPoints")),
        sprint_id=str(sprint_id) if sprint_id is not None else None,
        time_spent_seconds=_seconds(raw.get("timeSpentSeconds")),
        time_estimate_seconds=_seconds(raw.get("timeEstimateSeconds")),
        parent_key=raw.get("parentKey"),
        parent_summary=raw.get("parentSummary"),
        due_date=raw.get("dueDate"),
    )


def _parse_date(value: Any) -> date | None:
    """Parse the date part of an ISO date or datetime string."""
    if not isinstance(value, str) or len(value) < 10:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def normalize_sprint(raw: dict[str, Any], today: date | None = None) -> Sprint:
    """Normalize a sprint record.

    Missing dates default to today and a two week sprint.

    Raises:
        RecordError: If the record has no id or inconsistent dates
    """
    if not isinstance(raw, dict) or raw.get("id") is None:
        raise RecordError("Sprint record has no id")

    today = today or date.today()
    start = _parse_date(raw.get("startDate")) or today
    end = _parse_date(raw.get("endDate")) or start + DEFAULT_SPRINT_LENGTH

    try:
        state = SprintState(str(raw.get("state", "")).lower())
    except ValueError:
        state = SprintState.FUTURE

    try:
        return Sprint(
            id=str(raw["id"]),
            name=raw.get("name") or f"Sprint {raw['id']}",
            start_date=start,
            end_date=end,
            state=state,
        )
    except ValidationError as e:
        raise RecordError(str(e)) from e


def _normalize_all(records: Iterable[Any], normalize: Any, kind: str) -> list[Any]:
    """Apply a normalizer to each record, skipping the malformed ones."""
    results = []
    for index, raw in enumerate(records):
        try:
            entity = normalize(raw)
        except (RecordError, ValidationError) as e:
            logger.warning("Skipping %s record #%d: %s", kind, index, e)
            continue
        if entity is not None:
            results.append(entity)
    return results


def normalize_team(records: Iterable[Any]) -> list[TeamMember]:
    """Normalize user records, dropping non-human and malformed ones."""
    return _normalize_all(records, normalize_team_member, "user")


def normalize_issues(
    records: Iterable[Any],
    story_points_field: str = "customfield_10016",
    sprint_field: str = "customfield_10020",
) -> list[Issue]:
    """Normalize issue records, dropping malformed ones."""
    return _normalize_all(
        records,
        lambda raw: normalize_issue(raw, story_points_field, sprint_field),
        "issue",
    )


def normalize_sprints(records: Iterable[Any]) -> list[Sprint]:
    """Normalize sprint records, dropping malformed ones."""
    return _normalize_all(records, normalize_sprint, "sprint")


def build_batch(
    users: Iterable[Any],
    sprints: Iterable[Any],
    issues: Iterable[Any],
    story_points_field: str = "customfield_10016",
    sprint_field: str = "customfield_10020",
) -> ImportBatch:
    """Normalize one delivery of raw records into an ImportBatch.

    Raises:
        NoIssuesFoundError: If no issue survives normalization
    """
    batch = ImportBatch(
        team=normalize_team(users),
        issues=normalize_issues(issues, story_points_field, sprint_field),
        sprints=normalize_sprints(sprints),
    )
    if not batch.issues:
        raise NoIssuesFoundError("No issues found. Check the project key or the pasted data.")

    logger.info(
        "Normalized %d members, %d issues, %d sprints",
        len(batch.team),
        len(batch.issues),
        len(batch.sprints),
    )
    return batch
