"""CLI commands for jiracap."""

import asyncio
import json
from typing import Any

import click
from rich.console import Console

from jiracap.analysis import (
    DEFAULT_SAMPLE_DESCRIPTION,
    build_analysis_prompt,
    build_sample_prompt,
    parse_analysis_result,
    parse_sample_data,
)
from jiracap.api.client import JiraAPIError, JiraClient
from jiracap.config.auth import AuthError
from jiracap.config.defaults import bootstrap_snapshot
from jiracap.display import (
    build_burnout_table,
    build_forecast_table,
    build_issue_table,
    build_over_budget_table,
    build_profitability_table,
    build_team_table,
    format_value,
)
from jiracap.ingest.live import fetch_project
from jiracap.ingest.normalizer import IngestError
from jiracap.ingest.paste import parse_export
from jiracap.logging_config import configure_logging
from jiracap.metrics.capacity import (
    at_risk_members,
    burnout_chart,
    capacity_forecast,
    dashboard_stats,
    member_workloads,
    sprint_health,
    unassigned_backlog,
)
from jiracap.metrics.profitability import GroupBy, client_profitability
from jiracap.metrics.time_tracking import (
    accuracy_distribution,
    assignee_time,
    epic_time,
    time_summary,
)
from jiracap.storage.local import LocalStorage
from jiracap.storage.merge import SnapshotError
from jiracap.storage.snapshot import SnapshotStore

console = Console()
storage = LocalStorage()


def run_async(coro: Any) -> Any:
    """Run an async coroutine synchronously."""
    return asyncio.run(coro)


def handle_errors(func: Any) -> Any:
    """Decorator to handle common errors gracefully."""

    @click.pass_context
    def wrapper(ctx: click.Context, *args: Any, **kwargs: Any) -> Any:
        try:
            return ctx.invoke(func, *args, **kwargs)
        except AuthError as e:
            console.print(f"[red]Authentication error:[/red] {e}")
            raise SystemExit(1)
        except JiraAPIError as e:
            console.print(f"[red]Jira error:[/red] {e}")
            raise SystemExit(1)
        except IngestError as e:
            console.print(f"[red]Import failed:[/red] {e}")
            raise SystemExit(1)
        except SnapshotError as e:
            console.print(f"[red]Workspace error:[/red] {e}")
            raise SystemExit(1)
        except Exception as e:
            console.print(f"[red]Error:[/red] {e}")
            raise SystemExit(1)

    wrapper.__name__ = func.__name__
    wrapper.__doc__ = func.__doc__
    return wrapper


def _load_store() -> SnapshotStore:
    return SnapshotStore.load(storage)


def _echo_json(data: Any) -> None:
    click.echo(json.dumps(data, indent=2))


@click.group()
@click.version_option(package_name="jiracap")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging on stderr")
def cli(verbose: bool) -> None:
    """JCAP - Capacity planning over Jira data.

    Until a source is connected the workspace shows built-in demo data.
    To connect a Jira Cloud project, set:

        export JIRA_URL='https://your-domain.atlassian.net'

        export JIRA_EMAIL='you@company.com'

        export JIRA_TOKEN='your-api-token'

    Then run 'jcap connect <PROJECT_KEY>'.
    """
    configure_logging(verbose)


# =============================================================================
# Source Commands
# =============================================================================


@cli.command()
@click.argument("project_key")
@click.option("--include-done", "-a", is_flag=True, help="Also import issues that are done")
@handle_errors
def connect(project_key: str, include_done: bool) -> None:
    """Import a Jira project as a new source."""
    project_key = project_key.strip().upper()
    store = _load_store()
    if store.has_source(project_key):
        console.print(f"[yellow]Project {project_key} is already connected.[/yellow]")
        console.print(f"[dim]Use 'jcap remove {project_key}' first to re-import it.[/dim]")
        raise SystemExit(1)

    async def _connect() -> None:
        async with JiraClient() as client:
            console.print(f"Fetching {project_key} from {client.base_url}...")
            batch = await fetch_project(
                client,
                project_key,
                settings=storage.settings,
                include_done=include_done,
            )

        store.import_batch(batch, project_key)
        console.print(
            f"[green]Connected {project_key}:[/green] "
            f"{len(batch.issues)} issues, {len(batch.sprints)} sprints, "
            f"{len(batch.team)} team members"
        )

    run_async(_connect())


@cli.command(name="import")
@click.argument("file", type=click.File("r", encoding="utf-8"))
@handle_errors
def import_(file: Any) -> None:
    """Import a pasted Jira JSON export (use '-' for stdin)."""
    settings = storage.settings
    batch = parse_export(
        file.read(),
        story_points_field=settings.story_points_field,
        sprint_field=settings.sprint_field,
    )
    store = _load_store()
    tag, _ = store.import_manual(batch)
    console.print(f"[green]Imported {len(batch.issues)} issues as {tag}[/green]")


@cli.command()
@handle_errors
def sources() -> None:
    """List connected sources."""
    snapshot = _load_store().snapshot
    if snapshot.is_bootstrap:
        console.print("[yellow]No sources connected; showing demo data.[/yellow]")
        console.print("[dim]Use 'jcap connect <KEY>' or 'jcap import <FILE>'.[/dim]")
        return

    for tag in snapshot.sources:
        count = sum(1 for i in snapshot.issues if i.source_tag == tag)
        console.print(f"  [cyan]{tag}[/cyan] [dim]({count} issues)[/dim]")
    console.print(f"\n[dim]Total: {len(snapshot.sources)} sources[/dim]")


@cli.command()
@click.argument("source_tag")
@handle_errors
def remove(source_tag: str) -> None:
    """Remove a source and everything it imported."""
    snapshot = _load_store().remove_source(source_tag)
    console.print(f"[green]Removed {source_tag}[/green]")
    if snapshot.is_bootstrap:
        console.print("[dim]No sources left; demo data restored.[/dim]")


@cli.command()
@click.confirmation_option(prompt="Drop all sources and restore demo data?")
@handle_errors
def reset() -> None:
    """Drop all sources and restore demo data."""
    _load_store().reset()
    console.print("[green]Workspace reset.[/green]")


# =============================================================================
# Team Commands
# =============================================================================


@cli.command()
@handle_errors
def team() -> None:
    """List team members and their capacity."""
    snapshot = _load_store().snapshot
    if not snapshot.team:
        console.print("[yellow]No team members.[/yellow]")
        return
    console.print(build_team_table(snapshot.team))
    console.print("\n[dim]* capacity edited locally[/dim]")


@cli.command()
@click.argument("member_id")
@click.argument("points", type=float)
@handle_errors
def capacity(member_id: str, points: float) -> None:
    """Set a member's capacity in story points per sprint."""
    snapshot = _load_store().set_capacity(member_id, points)
    member = snapshot.member(member_id)
    console.print(
        f"[green]{member.name}:[/green] {format_value(points, 'points')} pts per sprint"
    )


# =============================================================================
# Capacity Commands
# =============================================================================


@cli.command()
@click.option("--format", "-f", "output_format", type=click.Choice(["table", "json"]), default="table", help="Output format")
@handle_errors
def dashboard(output_format: str) -> None:
    """Show sprint health, completion and burnout risk."""
    snapshot = _load_store().snapshot
    health = sprint_health(snapshot)
    stats = dashboard_stats(snapshot)
    loads = burnout_chart(snapshot)

    if output_format == "json":
        _echo_json({
            "sprintHealth": health.model_dump(mode="json"),
            "stats": stats.model_dump(mode="json"),
            "burnout": [load.model_dump(mode="json") for load in loads],
        })
        return

    if health.active_sprint_id is None:
        console.print("[yellow]No active sprint.[/yellow]")
    else:
        color = "red" if health.is_over_capacity else "green"
        console.print(f"[bold]{health.active_sprint_name}[/bold]")
        console.print(
            f"  Sprint health: [{color}]{format_value(health.percent, 'percent')}[/{color}] "
            f"({format_value(health.points, 'points')} / "
            f"{format_value(health.capacity, 'points')} pts)"
        )

    console.print(
        f"  Completed: {format_value(stats.completed_points, 'points')} of "
        f"{format_value(stats.total_points, 'points')} pts"
    )
    console.print(f"  Unassigned issues: {stats.unassigned_count}")
    for status, count in stats.status_counts.items():
        console.print(f"  [dim]{status.value}:[/dim] {count}")
    console.print()

    if loads:
        console.print(build_burnout_table(loads))
    risks = at_risk_members(snapshot)
    if risks:
        names = ", ".join(load.name for load in risks)
        console.print(f"\n[bold red]At risk:[/bold red] {names}")


@cli.command()
@handle_errors
def forecast() -> None:
    """Show planned workload per sprint against team capacity."""
    rows = capacity_forecast(_load_store().snapshot)
    if not rows:
        console.print("[yellow]No sprints.[/yellow]")
        return
    console.print(build_forecast_table(rows))


@cli.command()
@handle_errors
def planner() -> None:
    """Show the unassigned backlog and each member's open work."""
    snapshot = _load_store().snapshot

    backlog = unassigned_backlog(snapshot.issues)
    if backlog:
        console.print(build_issue_table("Unassigned Backlog", backlog))
    else:
        console.print("[green]Backlog is fully assigned.[/green]")

    for workload in member_workloads(snapshot):
        member = workload.member
        title = (
            f"{member.name} ({format_value(workload.assigned_points, 'points')}"
            f"/{format_value(member.capacity_per_sprint, 'points')} pts)"
        )
        console.print()
        console.print(build_issue_table(title, workload.issues))


# =============================================================================
# Time Tracking Commands
# =============================================================================


@cli.command()
@click.option("--format", "-f", "output_format", type=click.Choice(["table", "json"]), default="table", help="Output format")
@handle_errors
def time(output_format: str) -> None:
    """Show logged versus estimated time."""
    snapshot = _load_store().snapshot
    summary = time_summary(snapshot.issues)
    distribution = accuracy_distribution(snapshot.issues)

    if output_format == "json":
        _echo_json({
            "trackedIssues": summary.tracked_issues,
            "spentHours": summary.spent_hours,
            "estimateHours": summary.estimate_hours,
            "accuracy": summary.accuracy,
            "overBudget": [i.key for i in summary.over_budget],
            "distribution": distribution.model_dump(mode="json"),
        })
        return

    if not summary.tracked_issues:
        console.print("[yellow]No issues with tracked or estimated time.[/yellow]")
        return

    console.print(f"[bold]Time tracking[/bold] ({summary.tracked_issues} issues)")
    console.print(f"  Spent: {format_value(summary.spent_hours, 'hours')}")
    console.print(f"  Estimated: {format_value(summary.estimate_hours, 'hours')}")
    console.print(f"  Accuracy: {format_value(summary.accuracy, 'percent')}")
    console.print(
        f"  [red]Over: {distribution.over}[/red]  "
        f"On track: {distribution.on_track}  "
        f"[green]Under: {distribution.under}[/green]"
    )

    for heading, rows in (
        ("By assignee", assignee_time(snapshot.issues, snapshot.team)),
        ("By epic", epic_time(snapshot.issues)),
    ):
        if rows:
            console.print(f"\n[bold]{heading}[/bold]")
            for row in rows:
                console.print(
                    f"  {row.name}: {format_value(row.spent_hours, 'hours')} / "
                    f"{format_value(row.estimate_hours, 'hours')}"
                )

    if summary.over_budget:
        console.print()
        console.print(build_over_budget_table(summary.over_budget))


# =============================================================================
# Profitability Commands
# =============================================================================


@cli.command()
@click.option("--group-by", "-g", type=click.Choice([g.value for g in GroupBy]), help="Group issues by epic or project")
@click.option("--rate", "-r", type=float, help="Internal cost per hour (saved as the new default)")
@handle_errors
def profitability(group_by: str | None, rate: float | None) -> None:
    """Show the client profitability matrix."""
    if rate is not None:
        if rate < 0:
            raise click.BadParameter("rate must not be negative", param_hint="--rate")
        storage.set_hourly_rate(rate)

    settings = storage.settings
    report = client_profitability(
        _load_store().snapshot.issues,
        revenue=storage.get_revenue_map(),
        group_by=GroupBy(group_by or settings.group_by),
        hourly_rate=settings.hourly_rate,
    )
    if not report.groups:
        console.print("[yellow]No tracked time or revenue to report.[/yellow]")
        return

    console.print(build_profitability_table(report.groups))
    console.print(
        f"\n[dim]Rate {format_value(report.hourly_rate, 'money')}/h; "
        f"midpoints {format_value(report.hours_midpoint, 'hours')} and "
        f"{format_value(report.revenue_midpoint, 'money')}[/dim]"
    )
    losses = [g.name for g in report.groups if g.is_loss]
    if losses:
        console.print(f"[bold red]Losing money:[/bold red] {', '.join(losses)}")


@cli.command()
@click.argument("group")
@click.argument("amount", type=float)
@handle_errors
def revenue(group: str, amount: float) -> None:
    """Set the revenue of a client group (0 clears it)."""
    if amount < 0:
        raise click.BadParameter("amount must not be negative", param_hint="AMOUNT")
    storage.set_revenue(group, amount)
    if amount:
        console.print(f"[green]Revenue for {group}:[/green] {format_value(amount, 'money')}")
    else:
        console.print(f"[green]Cleared revenue for {group}[/green]")


# =============================================================================
# Analysis Commands
# =============================================================================


@cli.command()
@handle_errors
def context() -> None:
    """Print the capacity analysis prompt for the current workspace."""
    click.echo(build_analysis_prompt(_load_store().snapshot))


@cli.command()
@click.argument("file", type=click.File("r", encoding="utf-8"))
@handle_errors
def analysis(file: Any) -> None:
    """Render a capacity analysis result (JSON, '-' for stdin)."""
    result = parse_analysis_result(file.read())
    snapshot = _load_store().snapshot

    console.print("[bold]Summary[/bold]")
    console.print(result.summary)
    for heading, items, color in (
        ("Risks", result.risks, "red"),
        ("Recommendations", result.recommendations, "green"),
    ):
        if items:
            console.print(f"\n[bold {color}]{heading}[/bold {color}]")
            for item in items:
                console.print(f"  - {item}")

    if result.suggested_allocations:
        console.print("\n[bold]Suggested allocations[/bold]")
        for suggestion in result.suggested_allocations:
            member = snapshot.member(suggestion.suggested_assignee_id)
            name = member.name if member else suggestion.suggested_assignee_id
            console.print(f"  [cyan]{suggestion.issue_key}[/cyan] -> {name}")
            if suggestion.reason:
                console.print(f"    [dim]{suggestion.reason}[/dim]")


@cli.command(name="sample-prompt")
@click.argument("description", required=False, default=DEFAULT_SAMPLE_DESCRIPTION)
@handle_errors
def sample_prompt(description: str) -> None:
    """Print the prompt for generating sample data."""
    click.echo(build_sample_prompt(description, bootstrap_snapshot().sprints))


@cli.command()
@click.argument("file", type=click.File("r", encoding="utf-8"))
@handle_errors
def sample(file: Any) -> None:
    """Replace the workspace with generated sample data (JSON, '-' for stdin)."""
    batch = parse_sample_data(file.read())
    store = _load_store()
    dropped = list(store.snapshot.sources)
    store.load_sample(batch)
    console.print(
        f"[green]Loaded sample data:[/green] {len(batch.issues)} issues, "
        f"{len(batch.team)} team members"
    )
    if dropped:
        console.print(f"[dim]Dropped sources: {', '.join(dropped)}[/dim]")


if __name__ == "__main__":
    cli()
