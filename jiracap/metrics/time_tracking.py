"""Time tracking metrics: logged versus estimated time."""

from collections.abc import Iterable
from enum import Enum

from pydantic import BaseModel, Field

from jiracap.api.models import Issue, TeamMember

OVER_BUDGET_RATIO = 1.1
UNDER_BUDGET_RATIO = 0.9
NO_EPIC = "Uncategorized Work"


class BudgetStatus(str, Enum):
    """Classification of an issue's spent time against its estimate."""

    OVER = "Over Budget"
    ON_TRACK = "On Track"
    UNDER = "Under Budget"


class TimeSummary(BaseModel):
    """Totals over issues with any tracked or estimated time."""

    tracked_issues: int = 0
    total_spent_seconds: int = 0
    total_estimate_seconds: int = 0
    accuracy: float = 0
    over_budget: list[Issue] = Field(default_factory=list)

    @property
    def spent_hours(self) -> float:
        return to_hours(self.total_spent_seconds)

    @property
    def estimate_hours(self) -> float:
        return to_hours(self.total_estimate_seconds)


class AccuracyDistribution(BaseModel):
    """Issue counts per budget status."""

    over: int = 0
    on_track: int = 0
    under: int = 0

    @property
    def total(self) -> int:
        return self.over + self.on_track + self.under


class TimeBreakdown(BaseModel):
    """Spent and estimated hours for a member or an epic."""

    name: str
    spent_hours: float
    estimate_hours: float

    @property
    def variance_hours(self) -> float:
        return round(self.spent_hours - self.estimate_hours, 1)


def to_hours(seconds: float) -> float:
    """Convert seconds to hours, rounded to one decimal."""
    return round(seconds / 3600, 1)


def overage_seconds(issue: Issue) -> int:
    """Seconds spent beyond the estimate (negative when under)."""
    return issue.time_spent_seconds - issue.time_estimate_seconds


def is_over_budget(issue: Issue) -> bool:
    return issue.time_estimate_seconds > 0 and issue.time_spent_seconds > issue.time_estimate_seconds


def time_summary(issues: Iterable[Issue]) -> TimeSummary:
    """Estimation accuracy and over-budget issues, largest overage first."""
    tracked = [i for i in issues if i.time_spent_seconds or i.time_estimate_seconds]
    spent = sum(i.time_spent_seconds for i in tracked)
    estimate = sum(i.time_estimate_seconds for i in tracked)

    return TimeSummary(
        tracked_issues=len(tracked),
        total_spent_seconds=spent,
        total_estimate_seconds=estimate,
        accuracy=spent / estimate * 100 if estimate > 0 else 0,
        over_budget=sorted(
            (i for i in tracked if is_over_budget(i)),
            key=overage_seconds,
            reverse=True,
        ),
    )


def classify_budget(issue: Issue) -> BudgetStatus | None:
    """Classify spent time against the estimate.

    Only finished issues can be under budget: unfinished work naturally has
    time left. Issues without an estimate are not classified.
    """
    if issue.time_estimate_seconds <= 0:
        return None
    ratio = issue.time_spent_seconds / issue.time_estimate_seconds
    if ratio > OVER_BUDGET_RATIO:
        return BudgetStatus.OVER
    if ratio < UNDER_BUDGET_RATIO and issue.is_done:
        return BudgetStatus.UNDER
    return BudgetStatus.ON_TRACK


def accuracy_distribution(issues: Iterable[Issue]) -> AccuracyDistribution:
    """Count estimated issues per budget status."""
    dist = AccuracyDistribution()
    for issue in issues:
        status = classify_budget(issue)
        if status == BudgetStatus.OVER:
            dist.over += 1
        elif status == BudgetStatus.UNDER:
            dist.under += 1
        elif status == BudgetStatus.ON_TRACK:
            dist.on_track += 1
    return dist


def assignee_time(issues: Iterable[Issue], team: Iterable[TeamMember]) -> list[TimeBreakdown]:
    """Spent versus estimated hours per member, most time spent first."""
    issues = list(issues)
    rows = []
    for member in team:
        mine = [i for i in issues if i.assignee_id == member.id]
        spent = sum(i.time_spent_seconds for i in mine)
        estimate = sum(i.time_estimate_seconds for i in mine)
        if spent or estimate:
            rows.append(
                TimeBreakdown(
                    name=member.name,
                    spent_hours=to_hours(spent),
                    estimate_hours=to_hours(estimate),
                )
            )
    return sorted(rows, key=lambda r: r.spent_hours, reverse=True)


def epic_time(issues: Iterable[Issue], limit: int = 8) -> list[TimeBreakdown]:
    """Spent versus estimated hours per parent epic, top `limit` by time spent."""
    totals: dict[str, list[int]] = {}
    for issue in issues:
        name = issue.parent_summary or issue.parent_key or NO_EPIC
        spent_estimate = totals.setdefault(name, [0, 0])
        spent_estimate[0] += issue.time_spent_seconds
        spent_estimate[1] += issue.time_estimate_seconds

    rows = [
        TimeBreakdown(name=name, spent_hours=to_hours(spent), estimate_hours=to_hours(estimate))
        for name, (spent, estimate) in totals.items()
        if spent or estimate
    ]
    rows.sort(key=lambda r: r.spent_hours, reverse=True)
    return rows[:limit]
