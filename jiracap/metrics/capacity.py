"""Capacity, utilization and sprint forecast metrics.

Utilization looks at all unfinished work assigned to a member, whether or
not it is planned in a sprint. Realization is scoped to the active sprint
when there is one.
"""

from collections import Counter
from collections.abc import Iterable

from pydantic import BaseModel, Field

from jiracap.api.models import Issue, IssueStatus, Snapshot, Sprint, SprintState, TeamMember

BURNOUT_THRESHOLD = 85.0
UTILIZATION_DISPLAY_CAP = 120.0


class SprintHealth(BaseModel):
    """Load of the active sprint against total team capacity."""

    active_sprint_id: str | None = None
    active_sprint_name: str | None = None
    points: float = 0
    capacity: float = 0
    percent: float = 0

    @property
    def is_over_capacity(self) -> bool:
        return self.points > self.capacity


class MemberLoad(BaseModel):
    """Utilization and realization of one team member."""

    member_id: str
    name: str
    capacity: float
    assigned_points: float = Field(description="Unfinished assigned points")
    completed_points: float = Field(description="Finished points in scope")
    raw_utilization: float
    utilization: float = Field(description="Utilization capped for charting")
    realization: float
    is_risk: bool


class SprintForecast(BaseModel):
    """Planned workload of a sprint against team capacity."""

    sprint_id: str
    name: str
    workload: float
    capacity: float
    is_breach: bool


class DashboardStats(BaseModel):
    """Headline numbers for the dashboard."""

    total_points: float = 0
    completed_points: float = 0
    unassigned_count: int = 0
    status_counts: dict[IssueStatus, int] = Field(default_factory=dict)


class MemberWorkload(BaseModel):
    """Unfinished issues assigned to one member."""

    member: TeamMember
    assigned_points: float
    issues: list[Issue]


def _points(issues: Iterable[Issue]) -> float:
    return sum(i.story_points for i in issues)


def find_active_sprint(sprints: Iterable[Sprint]) -> Sprint | None:
    """Return the first active sprint, if any."""
    for sprint in sprints:
        if sprint.state == SprintState.ACTIVE:
            return sprint
    return None


def total_capacity(team: Iterable[TeamMember]) -> float:
    """Sum of capacity per sprint over the team."""
    return sum(m.capacity_per_sprint for m in team)


def sprint_health(snapshot: Snapshot) -> SprintHealth:
    """Active sprint points as a percentage of total team capacity.

    The percentage is 0 when there is no active sprint or no capacity.
    """
    active = find_active_sprint(snapshot.sprints)
    if active is None:
        return SprintHealth()

    capacity = total_capacity(snapshot.team)
    points = _points(i for i in snapshot.issues if i.sprint_id == active.id)
    return SprintHealth(
        active_sprint_id=active.id,
        active_sprint_name=active.name,
        points=points,
        capacity=capacity,
        percent=points / capacity * 100 if capacity > 0 else 0,
    )


def member_load(snapshot: Snapshot) -> list[MemberLoad]:
    """Compute utilization, realization and burnout risk for every member."""
    active = find_active_sprint(snapshot.sprints)
    loads = []

    for member in snapshot.team:
        assigned = [i for i in snapshot.issues if i.assignee_id == member.id]
        active_points = _points(i for i in assigned if not i.is_done)
        completed_points = _points(
            i for i in assigned
            if i.is_done and (active is None or i.sprint_id == active.id)
        )

        capacity = member.capacity_per_sprint
        raw_utilization = active_points / capacity * 100 if capacity > 0 else 0
        scope = active_points + completed_points
        realization = completed_points / scope * 100 if scope > 0 else 0

        loads.append(
            MemberLoad(
                member_id=member.id,
                name=member.name,
                capacity=capacity,
                assigned_points=active_points,
                completed_points=completed_points,
                raw_utilization=raw_utilization,
                utilization=min(raw_utilization, UTILIZATION_DISPLAY_CAP),
                realization=realization,
                is_risk=raw_utilization > BURNOUT_THRESHOLD,
            )
        )

    return loads


def burnout_chart(snapshot: Snapshot) -> list[MemberLoad]:
    """Members with active or completed work, most utilized first."""
    loads = [
        load for load in member_load(snapshot)
        if load.assigned_points > 0 or load.realization > 0
    ]
    return sorted(loads, key=lambda load: load.raw_utilization, reverse=True)


def at_risk_members(snapshot: Snapshot) -> list[MemberLoad]:
    """Members above the burnout threshold."""
    return [load for load in burnout_chart(snapshot) if load.is_risk]


def capacity_forecast(snapshot: Snapshot) -> list[SprintForecast]:
    """Planned workload per sprint, in start date order."""
    capacity = total_capacity(snapshot.team)
    forecast = []
    for sprint in sorted(snapshot.sprints, key=lambda s: s.start_date):
        workload = _points(i for i in snapshot.issues if i.sprint_id == sprint.id)
        forecast.append(
            SprintForecast(
                sprint_id=sprint.id,
                name=sprint.name,
                workload=workload,
                capacity=capacity,
                is_breach=workload > capacity,
            )
        )
    return forecast


def dashboard_stats(snapshot: Snapshot) -> DashboardStats:
    """Totals, completion and status breakdown over all issues."""
    issues = snapshot.issues
    return DashboardStats(
        total_points=_points(issues),
        completed_points=_points(i for i in issues if i.is_done),
        unassigned_count=sum(1 for i in issues if not i.assignee_id),
        status_counts=dict(Counter(i.status for i in issues)),
    )


def unassigned_backlog(issues: Iterable[Issue]) -> list[Issue]:
    """Unfinished issues nobody is assigned to."""
    return [i for i in issues if not i.assignee_id and not i.is_done]


def member_workloads(snapshot: Snapshot) -> list[MemberWorkload]:
    """Members that have unfinished work, with that work."""
    workloads = []
    for member in snapshot.team:
        issues = [
            i for i in snapshot.issues
            if i.assignee_id == member.id and not i.is_done
        ]
        if issues:
            workloads.append(
                MemberWorkload(member=member, assigned_points=_points(issues), issues=issues)
            )
    return workloads
