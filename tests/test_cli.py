"""Tests for CLI commands."""

import json
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from click.testing import CliRunner
from rich.console import Console

from jiracap.api.models import ImportBatch, Issue, TeamMember
from jiracap.cli import cli
from jiracap.config.auth import AuthError
from jiracap.config.settings import reset_settings
from jiracap.storage.local import LocalStorage
from jiracap.storage.snapshot import SnapshotStore

EXPORT = {
    "issues": [
        {
            "id": "20001",
            "key": "APP-1",
            "fields": {
                "summary": "Checkout flow",
                "status": {"name": "In Progress"},
                "assignee": {"accountId": "zed", "accountType": "atlassian", "displayName": "Zed Shaw"},
                "customfield_10016": 5,
            },
        }
    ]
}


@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture
def mock_storage(tmp_path: Path):
    """Set up storage in a temp directory and a wide console."""
    with patch("jiracap.config.settings.Path.home", return_value=tmp_path), \
            patch("jiracap.cli.console", Console(width=200)):
        reset_settings()
        yield tmp_path
    reset_settings()


@pytest.fixture
def mock_client():
    """Create a mock JiraClient."""
    mock = MagicMock()
    mock.base_url = "https://acme.atlassian.net"
    mock.__aenter__ = AsyncMock(return_value=mock)
    mock.__aexit__ = AsyncMock(return_value=None)
    return mock


def current_snapshot():
    return SnapshotStore.load(LocalStorage()).snapshot


class TestSourceCommands:
    """Tests for connecting, importing and removing sources."""

    def test_connect(self, runner: CliRunner, mock_storage: Path, mock_client: MagicMock) -> None:
        """connect imports a project under its key."""
        batch = ImportBatch(
            team=[TeamMember(id="abc", name="Alice Chen")],
            issues=[Issue(id="1", key="WEB-1", story_points=3)],
        )

        with patch("jiracap.cli.JiraClient", return_value=mock_client), \
                patch("jiracap.cli.fetch_project", AsyncMock(return_value=batch)) as fetch:
            result = runner.invoke(cli, ["connect", "web"])

        assert result.exit_code == 0
        assert "Connected WEB" in result.output
        assert fetch.await_args.args[1] == "WEB"
        assert fetch.await_args.kwargs["include_done"] is False
        assert current_snapshot().sources == ["WEB"]

    def test_connect_twice(self, runner: CliRunner, mock_storage: Path, mock_client: MagicMock) -> None:
        """connect refuses a project that is already connected."""
        batch = ImportBatch(issues=[Issue(id="1", key="WEB-1")])

        with patch("jiracap.cli.JiraClient", return_value=mock_client), \
                patch("jiracap.cli.fetch_project", AsyncMock(return_value=batch)) as fetch:
            runner.invoke(cli, ["connect", "WEB"])
            result = runner.invoke(cli, ["connect", "WEB"])

        assert result.exit_code == 1
        assert "already connected" in result.output
        assert fetch.await_count == 1

    def test_connect_auth_error(self, runner: CliRunner, mock_storage: Path) -> None:
        """connect reports missing credentials."""
        with patch("jiracap.cli.JiraClient") as mock_cls:
            mock_cls.side_effect = AuthError("JIRA_URL environment variable not set.")
            result = runner.invoke(cli, ["connect", "WEB"])

        assert result.exit_code == 1
        assert "Authentication error" in result.output
        assert current_snapshot().is_bootstrap

    def test_import_file(self, runner: CliRunner, mock_storage: Path, tmp_path: Path) -> None:
        """import reads a JSON export and tags it."""
        path = tmp_path / "export.json"
        path.write_text(json.dumps(EXPORT))

        result = runner.invoke(cli, ["import", str(path)])

        assert result.exit_code == 0
        assert "MANUAL-IMPORT-1" in result.output
        snapshot = current_snapshot()
        assert [i.key for i in snapshot.issues] == ["APP-1"]
        assert [m.name for m in snapshot.team] == ["Zed Shaw"]

    def test_import_stdin(self, runner: CliRunner, mock_storage: Path) -> None:
        """import reads from stdin with '-'."""
        result = runner.invoke(cli, ["import", "-"], input=json.dumps(EXPORT))

        assert result.exit_code == 0
        assert current_snapshot().sources == ["MANUAL-IMPORT-1"]

    def test_import_invalid(self, runner: CliRunner, mock_storage: Path) -> None:
        """import reports malformed JSON."""
        result = runner.invoke(cli, ["import", "-"], input="{oops")

        assert result.exit_code == 1
        assert "Import failed" in result.output
        assert "Invalid JSON" in result.output

    def test_sources_bootstrap(self, runner: CliRunner, mock_storage: Path) -> None:
        """sources explains that demo data is shown."""
        result = runner.invoke(cli, ["sources"])

        assert result.exit_code == 0
        assert "demo data" in result.output

    def test_sources_and_remove(self, runner: CliRunner, mock_storage: Path) -> None:
        """Imported sources are listed and removable."""
        runner.invoke(cli, ["import", "-"], input=json.dumps(EXPORT))

        listed = runner.invoke(cli, ["sources"])
        removed = runner.invoke(cli, ["remove", "MANUAL-IMPORT-1"])

        assert "MANUAL-IMPORT-1" in listed.output
        assert "1 issues" in listed.output
        assert removed.exit_code == 0
        assert "demo data restored" in removed.output
        assert current_snapshot().is_bootstrap

    def test_remove_unknown(self, runner: CliRunner, mock_storage: Path) -> None:
        """remove rejects unknown sources."""
        result = runner.invoke(cli, ["remove", "NOPE"])

        assert result.exit_code == 1
        assert "Workspace error" in result.output

    def test_reset(self, runner: CliRunner, mock_storage: Path) -> None:
        """reset drops all sources."""
        runner.invoke(cli, ["import", "-"], input=json.dumps(EXPORT))

        result = runner.invoke(cli, ["reset", "--yes"])

        assert result.exit_code == 0
        assert current_snapshot().is_bootstrap


class TestTeamCommands:
    """Tests for team and capacity commands."""

    def test_team(self, runner: CliRunner, mock_storage: Path) -> None:
        """team lists the bootstrap members."""
        result = runner.invoke(cli, ["team"])

        assert result.exit_code == 0
        assert "Alice Chen" in result.output
        assert "Dana Scully" in result.output

    def test_capacity(self, runner: CliRunner, mock_storage: Path) -> None:
        """capacity changes and persists a member's capacity."""
        result = runner.invoke(cli, ["capacity", "u1", "12"])

        assert result.exit_code == 0
        assert "Alice Chen" in result.output
        assert current_snapshot().member("u1").capacity_per_sprint == 12
        assert "12*" in runner.invoke(cli, ["team"]).output

    def test_capacity_unknown_member(self, runner: CliRunner, mock_storage: Path) -> None:
        """capacity rejects unknown members."""
        result = runner.invoke(cli, ["capacity", "u99", "12"])

        assert result.exit_code == 1
        assert "u99" in result.output


class TestReportCommands:
    """Tests for the metric reports."""

    def test_dashboard(self, runner: CliRunner, mock_storage: Path) -> None:
        """dashboard shows sprint health and burnout risk."""
        result = runner.invoke(cli, ["dashboard"])

        assert result.exit_code == 0
        assert "Sprint 24" in result.output
        assert "37%" in result.output
        assert "At risk:" in result.output
        assert "Charlie Kim" in result.output

    def test_dashboard_json(self, runner: CliRunner, mock_storage: Path) -> None:
        """dashboard --format json prints machine readable output."""
        result = runner.invoke(cli, ["dashboard", "--format", "json"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["sprintHealth"]["points"] == 29
        assert data["stats"]["unassigned_count"] == 2
        assert [load["member_id"] for load in data["burnout"]] == ["u3", "u2", "u1"]

    def test_forecast(self, runner: CliRunner, mock_storage: Path) -> None:
        """forecast lists every sprint."""
        result = runner.invoke(cli, ["forecast"])

        assert result.exit_code == 0
        for name in ("Sprint 24", "Sprint 25", "Sprint 26"):
            assert name in result.output

    def test_planner(self, runner: CliRunner, mock_storage: Path) -> None:
        """planner shows the unassigned backlog and member work."""
        result = runner.invoke(cli, ["planner"])

        assert result.exit_code == 0
        assert "Unassigned Backlog" in result.output
        assert "PROJ-105" in result.output
        assert "Charlie Kim (13/15 pts)" in result.output

    def test_time(self, runner: CliRunner, mock_storage: Path) -> None:
        """time shows totals and over-budget issues."""
        result = runner.invoke(cli, ["time"])

        assert result.exit_code == 0
        assert "14.0h" in result.output
        assert "41.0h" in result.output
        assert "PROJ-104" in result.output
        assert "Infrastructure Migration" in result.output

    def test_time_json(self, runner: CliRunner, mock_storage: Path) -> None:
        """time --format json prints machine readable output."""
        result = runner.invoke(cli, ["time", "-f", "json"])

        data = json.loads(result.output)
        assert data["overBudget"] == ["PROJ-104"]
        assert data["distribution"] == {"over": 1, "on_track": 5, "under": 0}


class TestProfitabilityCommands:
    """Tests for profitability and revenue commands."""

    def test_profitability(self, runner: CliRunner, mock_storage: Path) -> None:
        """profitability shows groups with logged time."""
        result = runner.invoke(cli, ["profitability"])

        assert result.exit_code == 0
        assert "Infrastructure Migration" in result.output
        assert "Drain" in result.output

    def test_revenue_changes_quadrant(self, runner: CliRunner, mock_storage: Path) -> None:
        """Entered revenue is used by the matrix."""
        set_result = runner.invoke(cli, ["revenue", "Infrastructure Migration", "5000"])
        result = runner.invoke(cli, ["profitability"])

        assert set_result.exit_code == 0
        assert "$5,000" in set_result.output
        assert "Strategic Partner" in result.output

    def test_revenue_cleared(self, runner: CliRunner, mock_storage: Path) -> None:
        """A revenue of 0 clears the group."""
        runner.invoke(cli, ["revenue", "Acme", "5000"])
        result = runner.invoke(cli, ["revenue", "Acme", "0"])

        assert "Cleared revenue for Acme" in result.output
        assert LocalStorage().get_revenue_map() == {}

    def test_rate_saved(self, runner: CliRunner, mock_storage: Path) -> None:
        """--rate becomes the new default hourly rate."""
        result = runner.invoke(cli, ["profitability", "--rate", "100"])

        assert result.exit_code == 0
        assert "$100/h" in result.output
        assert LocalStorage().settings.hourly_rate == 100

    def test_group_by_project(self, runner: CliRunner, mock_storage: Path) -> None:
        """--group-by project groups bootstrap issues by key prefix."""
        result = runner.invoke(cli, ["profitability", "--group-by", "project"])

        assert result.exit_code == 0
        assert "PROJ" in result.output


class TestAnalysisCommands:
    """Tests for the analysis helpers."""

    def test_context(self, runner: CliRunner, mock_storage: Path) -> None:
        """context prints the prompt with the workspace data."""
        result = runner.invoke(cli, ["context"])

        assert result.exit_code == 0
        assert "Team Context:" in result.output
        assert "Alice Chen" in result.output

    def test_analysis(self, runner: CliRunner, mock_storage: Path) -> None:
        """analysis renders a result with member names."""
        payload = {
            "summary": "Charlie is overloaded.",
            "risks": ["Charlie over capacity"],
            "recommendations": ["Rebalance"],
            "suggestedAllocations": [
                {"issueKey": "PROJ-105", "suggestedAssigneeId": "u4", "reason": "Has capacity"}
            ],
        }

        result = runner.invoke(cli, ["analysis", "-"], input=json.dumps(payload))

        assert result.exit_code == 0
        assert "Charlie is overloaded." in result.output
        assert "PROJ-105 -> Dana Scully" in result.output

    def test_analysis_invalid(self, runner: CliRunner, mock_storage: Path) -> None:
        """analysis rejects malformed results."""
        result = runner.invoke(cli, ["analysis", "-"], input="")

        assert result.exit_code == 1
        assert "No response from AI" in result.output


class TestSampleCommands:
    """Tests for generated sample data."""

    SAMPLE = {
        "team": [{"id": "m1", "name": "Grace Hopper", "capacityPerSprint": 13}],
        "issues": [{"id": "g1", "key": "SHOP-1", "assigneeId": "m1", "storyPoints": 8, "sprintId": "s1"}],
    }

    def test_sample_prompt(self, runner: CliRunner, mock_storage: Path) -> None:
        """sample-prompt prints the prompt with the demo sprints."""
        result = runner.invoke(cli, ["sample-prompt", "A billing rewrite"])

        assert result.exit_code == 0
        assert '"A billing rewrite"' in result.output
        assert "Sprint 24" in result.output

    def test_sample_replaces_sources(self, runner: CliRunner, mock_storage: Path) -> None:
        """sample loads generated data and drops connected sources."""
        runner.invoke(cli, ["import", "-"], input=json.dumps(EXPORT))

        result = runner.invoke(cli, ["sample", "-"], input=json.dumps(self.SAMPLE))

        assert result.exit_code == 0
        assert "Loaded sample data" in result.output
        assert "MANUAL-IMPORT-1" in result.output
        snapshot = current_snapshot()
        assert snapshot.is_bootstrap
        assert [i.key for i in snapshot.issues] == ["SHOP-1"]
        assert "Grace Hopper" in runner.invoke(cli, ["team"]).output

    def test_sample_empty(self, runner: CliRunner, mock_storage: Path) -> None:
        """An empty answer is reported."""
        result = runner.invoke(cli, ["sample", "-"], input="")

        assert result.exit_code == 1
        assert "No response" in result.output
