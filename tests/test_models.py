"""Tests for data models."""

from datetime import date

import pytest
from pydantic import ValidationError

from jiracap.api.models import (
    AnalysisResult,
    Issue,
    IssueStatus,
    IssueType,
    Priority,
    Snapshot,
    Sprint,
    SprintState,
    TeamMember,
)


class TestTeamMember:
    """Tests for TeamMember model."""

    def test_create_member_required_fields(self) -> None:
        """Create member with the id only."""
        member = TeamMember(id="u1")

        assert member.id == "u1"
        assert member.name == ""
        assert member.role == "Developer"
        assert member.capacity_per_sprint == 10
        assert member.skills == []
        assert member.capacity_edited is False

    def test_negative_capacity_rejected(self) -> None:
        """Capacity must not be negative."""
        with pytest.raises(ValidationError):
            TeamMember(id="u1", capacity_per_sprint=-1)

    def test_first_name(self) -> None:
        """first_name is the first word of the name, or the id."""
        assert TeamMember(id="u1", name="Alice Chen").first_name == "Alice"
        assert TeamMember(id="u1").first_name == "u1"

    def test_members_are_frozen(self) -> None:
        """Members cannot be changed in place."""
        member = TeamMember(id="u1", name="Alice")
        with pytest.raises(ValidationError):
            member.name = "Alicia"

    def test_camel_case_aliases(self) -> None:
        """Wire names are camelCase and snake_case is accepted too."""
        member = TeamMember.model_validate({"id": "u1", "capacityPerSprint": 12})
        assert member.capacity_per_sprint == 12
        assert member.to_json_dict()["capacityPerSprint"] == 12

        member = TeamMember(id="u2", capacity_per_sprint=7)
        assert member.capacity_per_sprint == 7


class TestIssue:
    """Tests for Issue model."""

    def test_defaults(self) -> None:
        """Issue fields default to an unassigned to-do story."""
        issue = Issue(id="10001", key="PROJ-1")

        assert issue.type == IssueType.STORY
        assert issue.priority == Priority.MEDIUM
        assert issue.status == IssueStatus.TO_DO
        assert issue.assignee_id is None
        assert issue.story_points == 0
        assert issue.source_tag is None
        assert issue.time_spent_seconds == 0
        assert issue.time_estimate_seconds == 0

    def test_is_done(self) -> None:
        """is_done checks for the Done status."""
        assert Issue(id="1", key="P-1", status=IssueStatus.DONE).is_done
        assert not Issue(id="1", key="P-1", status=IssueStatus.IN_REVIEW).is_done

    def test_project_prefix(self) -> None:
        """project_prefix is the part of the key before the dash."""
        assert Issue(id="1", key="PROJ-101").project_prefix == "PROJ"

    def test_negative_points_rejected(self) -> None:
        """Story points must not be negative."""
        with pytest.raises(ValidationError):
            Issue(id="1", key="P-1", story_points=-3)

    def test_serializes_enums_as_values(self) -> None:
        """JSON output uses enum values and camelCase names."""
        data = Issue(
            id="1",
            key="P-1",
            status=IssueStatus.IN_PROGRESS,
            assignee_id="u1",
        ).to_json_dict()

        assert data["status"] == "In Progress"
        assert data["assigneeId"] == "u1"
        assert data["storyPoints"] == 0


class TestSprint:
    """Tests for Sprint model."""

    def test_create_sprint(self) -> None:
        """Create sprint with dates."""
        sprint = Sprint(id="s1", start_date=date(2023, 10, 1), end_date=date(2023, 10, 14))

        assert sprint.state == SprintState.FUTURE
        assert sprint.source_tag is None

    def test_start_after_end_rejected(self) -> None:
        """A sprint cannot end before it starts."""
        with pytest.raises(ValidationError, match="starts after it ends"):
            Sprint(id="s1", start_date=date(2023, 10, 14), end_date=date(2023, 10, 1))

    def test_parses_iso_dates(self) -> None:
        """Dates are parsed from their camelCase ISO form."""
        sprint = Sprint.model_validate(
            {"id": "s1", "startDate": "2023-10-01", "endDate": "2023-10-14", "state": "active"}
        )
        assert sprint.start_date == date(2023, 10, 1)
        assert sprint.state == SprintState.ACTIVE


class TestSnapshot:
    """Tests for Snapshot model."""

    def test_empty_snapshot_is_bootstrap(self) -> None:
        """A snapshot without sources is in bootstrap state."""
        assert Snapshot().is_bootstrap
        assert not Snapshot(sources=["PROJ"]).is_bootstrap

    def test_member_lookup(self) -> None:
        """member finds a member by id."""
        snapshot = Snapshot(team=[TeamMember(id="u1", name="Alice")])

        assert snapshot.member("u1").name == "Alice"
        assert snapshot.member("u9") is None

    def test_round_trip_through_json(self) -> None:
        """A serialized snapshot validates back to an equal snapshot."""
        snapshot = Snapshot(
            team=[TeamMember(id="u1", name="Alice", capacity_edited=True)],
            issues=[Issue(id="1", key="P-1", source_tag="P", assignee_id="u1")],
            sprints=[
                Sprint(id="s1", start_date=date(2023, 10, 1), end_date=date(2023, 10, 14))
            ],
            sources=["P"],
        )

        restored = Snapshot.model_validate(snapshot.to_json_dict())

        assert restored == snapshot

    def test_accepts_legacy_projects_key(self) -> None:
        """Workspaces saved with a 'projects' list load as sources."""
        snapshot = Snapshot.model_validate({"projects": ["PROJ"]})
        assert snapshot.sources == ["PROJ"]


class TestAnalysisResult:
    """Tests for AnalysisResult model."""

    def test_parse_camel_case(self) -> None:
        """Suggested allocations are read from their camelCase names."""
        result = AnalysisResult.model_validate({
            "summary": "ok",
            "risks": ["r"],
            "recommendations": [],
            "suggestedAllocations": [
                {"issueKey": "P-1", "suggestedAssigneeId": "u2", "reason": "free"}
            ],
        })

        assert result.suggested_allocations[0].issue_key == "P-1"
        assert result.suggested_allocations[0].suggested_assignee_id == "u2"

    def test_allocations_optional(self) -> None:
        """Suggested allocations may be absent."""
        assert AnalysisResult(summary="ok").suggested_allocations is None
