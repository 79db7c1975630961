"""Display utilities for rendering metrics as tables."""

from typing import Any

from rich.table import Table

from jiracap.api.models import Issue, IssueStatus, TeamMember
from jiracap.metrics.capacity import MemberLoad, SprintForecast
from jiracap.metrics.profitability import ClientGroup, Quadrant
from jiracap.metrics.time_tracking import overage_seconds, to_hours

STATUS_COLORS: dict[IssueStatus, str] = {
    IssueStatus.TO_DO: "dim",
    IssueStatus.IN_PROGRESS: "yellow",
    IssueStatus.IN_REVIEW: "magenta",
    IssueStatus.DONE: "green",
}

QUADRANT_COLORS: dict[Quadrant, str] = {
    Quadrant.CASH_COW: "green",
    Quadrant.STRATEGIC_PARTNER: "blue",
    Quadrant.STANDARD: "dim",
    Quadrant.DRAIN: "red",
}


def format_value(value: Any, format_type: str | None = None, max_width: int | None = None) -> str:
    """Format a value for display based on format type.

    Args:
        value: The raw value
        format_type: One of: "percent", "points", "hours", "money", or None
        max_width: Maximum width for text truncation
    """
    if value is None:
        return "-"

    if isinstance(value, list):
        if not value:
            return "-"
        value = ", ".join(str(v) for v in value)

    if format_type == "percent":
        try:
            value = f"{round(float(value))}%"
        except (ValueError, TypeError):
            value = "-"
    elif format_type == "points":
        try:
            number = float(value)
            value = str(int(number)) if number.is_integer() else f"{number:g}"
        except (ValueError, TypeError):
            value = "-"
    elif format_type == "hours":
        try:
            value = f"{float(value):.1f}h"
        except (ValueError, TypeError):
            value = "-"
    elif format_type == "money":
        try:
            value = f"${float(value):,.0f}"
        except (ValueError, TypeError):
            value = "-"
    else:
        value = str(value)

    if max_width and len(value) > max_width:
        value = value[: max_width - 3] + "..."

    return value


def build_team_table(team: list[TeamMember]) -> Table:
    """Team members with their capacity."""
    table = Table(title="Team Members")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Name")
    table.add_column("Role", style="dim")
    table.add_column("Capacity", justify="right")
    table.add_column("Skills", style="dim")

    for member in team:
        capacity = format_value(member.capacity_per_sprint, "points")
        if member.capacity_edited:
            capacity += "*"
        table.add_row(
            member.id,
            member.name,
            member.role,
            capacity,
            format_value(member.skills, max_width=40),
        )
    return table


def build_burnout_table(loads: list[MemberLoad]) -> Table:
    """Utilization and realization per member, risks highlighted."""
    table = Table(title="Burnout Risk")
    table.add_column("Member")
    table.add_column("Assigned", justify="right")
    table.add_column("Capacity", justify="right")
    table.add_column("Utilization", justify="right")
    table.add_column("Realization", justify="right")
    table.add_column("Risk", no_wrap=True)

    for load in loads:
        style = "bold red" if load.is_risk else None
        table.add_row(
            load.name,
            format_value(load.assigned_points, "points"),
            format_value(load.capacity, "points"),
            format_value(load.raw_utilization, "percent"),
            format_value(load.realization, "percent"),
            "AT RISK" if load.is_risk else "",
            style=style,
        )
    return table


def build_forecast_table(forecast: list[SprintForecast]) -> Table:
    """Workload against capacity per sprint."""
    table = Table(title="Capacity Forecast")
    table.add_column("Sprint")
    table.add_column("Workload", justify="right")
    table.add_column("Capacity", justify="right")
    table.add_column("Status", no_wrap=True)

    for row in forecast:
        table.add_row(
            row.name,
            format_value(row.workload, "points"),
            format_value(row.capacity, "points"),
            "[red]Over capacity[/red]" if row.is_breach else "[green]OK[/green]",
        )
    return table


def build_issue_table(title: str, issues: list[Issue]) -> Table:
    """A plain issue list."""
    table = Table(title=title)
    table.add_column("Key", style="cyan", no_wrap=True)
    table.add_column("Summary")
    table.add_column("Type", style="dim")
    table.add_column("Priority")
    table.add_column("Status", no_wrap=True)
    table.add_column("Points", justify="right")

    for issue in issues:
        color = STATUS_COLORS.get(issue.status, "white")
        table.add_row(
            issue.key,
            format_value(issue.summary, max_width=50),
            issue.type.value,
            issue.priority.value,
            f"[{color}]{issue.status.value}[/{color}]",
            format_value(issue.story_points, "points"),
        )
    return table


def build_over_budget_table(issues: list[Issue]) -> Table:
    """Issues whose logged time exceeds the estimate."""
    table = Table(title="Over Budget")
    table.add_column("Key", style="cyan", no_wrap=True)
    table.add_column("Summary")
    table.add_column("Estimate", justify="right")
    table.add_column("Spent", justify="right")
    table.add_column("Variance", justify="right", style="bold red")

    for issue in issues:
        table.add_row(
            issue.key,
            format_value(issue.summary, max_width=50),
            format_value(to_hours(issue.time_estimate_seconds), "hours"),
            format_value(to_hours(issue.time_spent_seconds), "hours"),
            "+" + format_value(to_hours(overage_seconds(issue)), "hours"),
        )
    return table


def build_profitability_table(groups: list[ClientGroup]) -> Table:
    """Revenue, effort and margin per client group."""
    table = Table(title="Client Profitability")
    table.add_column("Group")
    table.add_column("Hours", justify="right")
    table.add_column("Revenue", justify="right")
    table.add_column("Rev/Hour", justify="right")
    table.add_column("Cost", justify="right")
    table.add_column("Profit", justify="right")
    table.add_column("Quadrant", no_wrap=True)

    for group in groups:
        color = QUADRANT_COLORS[group.quadrant]
        profit = format_value(group.profit, "money")
        table.add_row(
            format_value(group.name, max_width=40),
            format_value(group.hours_spent, "hours"),
            format_value(group.revenue, "money"),
            format_value(group.profitability_index, "money"),
            format_value(group.cost, "money"),
            f"[red]{profit}[/red]" if group.is_loss else profit,
            f"[{color}]{group.quadrant.value}[/{color}]",
        )
    return table
