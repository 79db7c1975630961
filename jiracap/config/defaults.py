"""Bootstrap workspace shown before any real source is connected."""

from datetime import date

from jiracap.api.models import (
    Issue,
    IssueStatus,
    IssueType,
    Priority,
    Snapshot,
    Sprint,
    SprintState,
    TeamMember,
)

HOUR = 3600

INITIAL_TEAM: list[TeamMember] = [
    TeamMember(
        id="u1",
        name="Alice Chen",
        role="Senior Frontend Dev",
        avatar="https://picsum.photos/32/32?random=1",
        capacity_per_sprint=20,
        skills=["React", "TypeScript", "CSS"],
    ),
    TeamMember(
        id="u2",
        name="Bob Smith",
        role="Backend Engineer",
        avatar="https://picsum.photos/32/32?random=2",
        capacity_per_sprint=18,
        skills=["Node.js", "PostgreSQL", "Redis"],
    ),
    TeamMember(
        id="u3",
        name="Charlie Kim",
        role="DevOps Engineer",
        avatar="https://picsum.photos/32/32?random=3",
        capacity_per_sprint=15,
        skills=["AWS", "Terraform", "CI/CD"],
    ),
    TeamMember(
        id="u4",
        name="Dana Scully",
        role="Full Stack Dev",
        avatar="https://picsum.photos/32/32?random=4",
        capacity_per_sprint=25,
        skills=["React", "Python", "Go"],
    ),
]

INITIAL_SPRINTS: list[Sprint] = [
    Sprint(
        id="s1",
        name="Sprint 24",
        start_date=date(2023, 10, 1),
        end_date=date(2023, 10, 14),
        state=SprintState.ACTIVE,
    ),
    Sprint(
        id="s2",
        name="Sprint 25",
        start_date=date(2023, 10, 15),
        end_date=date(2023, 10, 28),
        state=SprintState.FUTURE,
    ),
    Sprint(
        id="s3",
        name="Sprint 26",
        start_date=date(2023, 10, 29),
        end_date=date(2023, 11, 11),
        state=SprintState.FUTURE,
    ),
]

MOCK_ISSUES: list[Issue] = [
    Issue(
        id="i1",
        key="PROJ-101",
        summary="Implement Authentication Flow",
        type=IssueType.STORY,
        priority=Priority.HIGH,
        status=IssueStatus.IN_PROGRESS,
        assignee_id="u1",
        story_points=8,
        sprint_id="s1",
        time_spent_seconds=4 * HOUR,
        time_estimate_seconds=8 * HOUR,
        parent_key="PROJ-99",
        parent_summary="User Security Overhaul",
    ),
    Issue(
        id="i2",
        key="PROJ-102",
        summary="Database Schema Migration",
        type=IssueType.TASK,
        priority=Priority.HIGHEST,
        status=IssueStatus.TO_DO,
        assignee_id="u2",
        story_points=5,
        sprint_id="s1",
        time_estimate_seconds=5 * HOUR,
        parent_key="PROJ-90",
        parent_summary="Backend Modernization",
    ),
    Issue(
        id="i3",
        key="PROJ-103",
        summary="Fix memory leak in worker",
        type=IssueType.BUG,
        priority=Priority.HIGH,
        status=IssueStatus.TO_DO,
        assignee_id="u2",
        story_points=3,
        sprint_id="s1",
        time_estimate_seconds=2 * HOUR,
        parent_key="PROJ-90",
        parent_summary="Backend Modernization",
    ),
    Issue(
        id="i4",
        key="PROJ-104",
        summary="Setup Kubernetes Cluster",
        type=IssueType.TASK,
        priority=Priority.MEDIUM,
        status=IssueStatus.IN_PROGRESS,
        assignee_id="u3",
        story_points=13,
        sprint_id="s1",
        time_spent_seconds=10 * HOUR,
        time_estimate_seconds=8 * HOUR,
        parent_key="PROJ-80",
        parent_summary="Infrastructure Migration",
    ),
    Issue(
        id="i5",
        key="PROJ-105",
        summary="Dashboard UI Revamp",
        type=IssueType.STORY,
        priority=Priority.MEDIUM,
        status=IssueStatus.TO_DO,
        assignee_id=None,
        story_points=13,
        sprint_id="s2",
        time_estimate_seconds=12 * HOUR,
        parent_key="PROJ-100",
        parent_summary="Frontend Redesign v2",
    ),
    Issue(
        id="i6",
        key="PROJ-106",
        summary="API Rate Limiting",
        type=IssueType.STORY,
        priority=Priority.HIGH,
        status=IssueStatus.TO_DO,
        assignee_id=None,
        story_points=8,
        sprint_id="s2",
        time_estimate_seconds=6 * HOUR,
        parent_key="PROJ-99",
        parent_summary="User Security Overhaul",
    ),
]


def bootstrap_snapshot() -> Snapshot:
    """Return a fresh snapshot holding the bootstrap data and no sources."""
    return Snapshot(
        team=list(INITIAL_TEAM),
        issues=list(MOCK_ISSUES),
        sprints=list(INITIAL_SPRINTS),
        sources=[],
    )
