"""Client and epic profitability matrix.

Hours come from logged time; revenue is entered by the user per group.
Quadrant boundaries sit at half of the largest hours and revenue observed in
the current data, so they move as the data changes: the matrix ranks groups
against each other, not against fixed targets.
"""

from collections.abc import Iterable, Mapping
from enum import Enum

from pydantic import BaseModel, Field

from jiracap.api.models import Issue

DEFAULT_HOURLY_RATE = 150.0
MIN_TRACKED_HOURS = 0.1
INDEPENDENT_TASKS = "Independent Tasks"


class GroupBy(str, Enum):
    """How issues are grouped into clients."""

    EPIC = "epic"
    PROJECT = "project"


class Quadrant(str, Enum):
    """Position in the revenue/effort matrix."""

    CASH_COW = "Cash Cow"
    STRATEGIC_PARTNER = "Strategic Partner"
    STANDARD = "Standard"
    DRAIN = "Drain"


class ClientGroup(BaseModel):
    """Effort, revenue and margin of one group."""

    key: str
    name: str
    hours_spent: float
    revenue: float
    profitability_index: float = Field(description="Revenue per hour spent")
    cost: float
    profit: float
    quadrant: Quadrant

    @property
    def is_loss(self) -> bool:
        return self.profit < 0 and self.revenue > 0


class ProfitabilityReport(BaseModel):
    """The matrix for one grouping."""

    group_by: GroupBy
    hourly_rate: float
    hours_midpoint: float = 0
    revenue_midpoint: float = 0
    groups: list[ClientGroup] = Field(default_factory=list)


def group_key(issue: Issue, group_by: GroupBy) -> str:
    """Return the group an issue's time counts towards.

    Project grouping uses the import source, or the key prefix for data that
    has none. Epic grouping uses the parent summary, then the parent key.
    """
    if group_by == GroupBy.PROJECT:
        return issue.source_tag or issue.project_prefix
    return issue.parent_summary or issue.parent_key or INDEPENDENT_TASKS


def classify_quadrant(
    hours: float,
    revenue: float,
    hours_midpoint: float,
    revenue_midpoint: float,
) -> Quadrant:
    """Place a group in the matrix relative to the midpoints."""
    if revenue > revenue_midpoint:
        return Quadrant.CASH_COW if hours < hours_midpoint else Quadrant.STRATEGIC_PARTNER
    return Quadrant.STANDARD if hours < hours_midpoint else Quadrant.DRAIN


def client_profitability(
    issues: Iterable[Issue],
    revenue: Mapping[str, float] | None = None,
    group_by: GroupBy = GroupBy.EPIC,
    hourly_rate: float = DEFAULT_HOURLY_RATE,
) -> ProfitabilityReport:
    """Aggregate logged hours per group and classify each group.

    Args:
        issues: Issues to aggregate
        revenue: Revenue per group key; groups not listed have none
        group_by: Grouping mode
        hourly_rate: Internal cost per hour, used for cost and profit

    Returns:
        Report with groups sorted by revenue, highest first. Groups with no
        meaningful tracked time and no revenue are left out.
    """
    revenue = revenue or {}
    seconds: dict[str, int] = {}
    for issue in issues:
        key = group_key(issue, group_by)
        seconds[key] = seconds.get(key, 0) + issue.time_spent_seconds

    totals = [
        (key, spent / 3600, float(revenue.get(key, 0)))
        for key, spent in seconds.items()
    ]
    totals = [t for t in totals if t[1] > MIN_TRACKED_HOURS or t[2] > 0]

    report = ProfitabilityReport(group_by=group_by, hourly_rate=hourly_rate)
    if not totals:
        return report

    report.hours_midpoint = max(hours for _, hours, _ in totals) / 2
    report.revenue_midpoint = max(rev for _, _, rev in totals) / 2

    for key, hours, rev in totals:
        cost = hours * hourly_rate
        report.groups.append(
            ClientGroup(
                key=key,
                name=key,
                hours_spent=hours,
                revenue=rev,
                profitability_index=rev / hours if hours > 0 else 0,
                cost=cost,
                profit=rev - cost,
                quadrant=classify_quadrant(
                    hours, rev, report.hours_midpoint, report.revenue_midpoint
                ),
            )
        )

    report.groups.sort(key=lambda g: g.revenue, reverse=True)
    return report
