"""Pydantic models for capacity planning entities."""

from datetime import date
from enum import Enum

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class IssueType(str, Enum):
    """Issue types understood by the dashboard."""

    STORY = "Story"
    BUG = "Bug"
    TASK = "Task"
    EPIC = "Epic"


class Priority(str, Enum):
    """Issue priorities, highest first."""

    HIGHEST = "Highest"
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class IssueStatus(str, Enum):
    """Simplified 4-stage issue workflow."""

    TO_DO = "To Do"
    IN_PROGRESS = "In Progress"
    IN_REVIEW = "In Review"
    DONE = "Done"


class SprintState(str, Enum):
    """Sprint lifecycle states."""

    ACTIVE = "active"
    FUTURE = "future"
    CLOSED = "closed"


class Entity(BaseModel):
    """Base for persisted entities.

    Attributes are snake_case in Python and camelCase on the wire
    (``storyPoints``, ``assigneeId``). Instances are frozen; use
    ``model_copy(update=...)`` to derive a changed copy.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    def to_json_dict(self) -> dict:
        """Serialize using the camelCase wire names."""
        return self.model_dump(mode="json", by_alias=True)


class TeamMember(Entity):
    """A team member and their per-sprint capacity."""

    id: str = Field(description="Stable account identifier")
    name: str = Field(default="", description="Display name")
    role: str = Field(default="Developer", description="Role shown on the team page")
    avatar: str = Field(default="", description="Avatar URL")
    capacity_per_sprint: float = Field(default=10, ge=0, description="Story points per sprint")
    skills: list[str] = Field(default_factory=list, description="Skill tags")
    capacity_edited: bool = Field(default=False, description="Capacity was changed by the user")

    @property
    def first_name(self) -> str:
        """Return the first word of the name, for compact tables."""
        return self.name.split(" ")[0] if self.name else self.id


class Issue(Entity):
    """A trackable unit of work."""

    id: str = Field(description="Source-unique identifier")
    key: str = Field(description="Human readable key, e.g., 'PROJ-101'")
    summary: str = Field(default="", description="Issue title")
    type: IssueType = Field(default=IssueType.STORY)
    priority: Priority = Field(default=Priority.MEDIUM)
    status: IssueStatus = Field(default=IssueStatus.TO_DO)
    assignee_id: str | None = Field(default=None, description="Assigned member id")
    story_points: float = Field(default=0, ge=0, description="Effort estimate")
    sprint_id: str | None = Field(default=None, description="Sprint the issue is planned in")
    source_tag: str | None = Field(default=None, description="Import that produced this issue")
    time_spent_seconds: int = Field(default=0, ge=0)
    time_estimate_seconds: int = Field(default=0, ge=0)
    parent_key: str | None = Field(default=None, description="Parent epic key")
    parent_summary: str | None = Field(default=None, description="Parent epic title")
    due_date: str | None = Field(default=None, description="Due date as given by the source")

    @property
    def is_done(self) -> bool:
        """Check if the issue is completed."""
        return self.status == IssueStatus.DONE

    @property
    def project_prefix(self) -> str:
        """Return the project part of the key ('PROJ' for 'PROJ-101')."""
        return self.key.split("-")[0]


class Sprint(Entity):
    """A time-boxed work period."""

    id: str
    name: str = ""
    start_date: date
    end_date: date
    state: SprintState = SprintState.FUTURE
    source_tag: str | None = None

    @model_validator(mode="after")
    def _check_dates(self) -> "Sprint":
        if self.start_date > self.end_date:
            raise ValueError(f"Sprint {self.id} starts after it ends")
        return self


class ImportBatch(BaseModel):
    """Normalized entities from one ingestion, not yet tagged with a source."""

    team: list[TeamMember] = Field(default_factory=list)
    issues: list[Issue] = Field(default_factory=list)
    sprints: list[Sprint] = Field(default_factory=list)


class Snapshot(BaseModel):
    """The working set: everything the metrics are computed from."""

    team: list[TeamMember] = Field(default_factory=list)
    issues: list[Issue] = Field(default_factory=list)
    sprints: list[Sprint] = Field(default_factory=list)
    sources: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("sources", "projects"),
        description="Connected source tags",
    )

    @property
    def is_bootstrap(self) -> bool:
        """True while no real source is connected and the defaults are shown."""
        return not self.sources

    def member(self, member_id: str) -> TeamMember | None:
        """Find a team member by id."""
        for member in self.team:
            if member.id == member_id:
                return member
        return None

    def to_json_dict(self) -> dict:
        """Serialize to the persisted workspace layout."""
        return {
            "team": [m.to_json_dict() for m in self.team],
            "issues": [i.to_json_dict() for i in self.issues],
            "sprints": [s.to_json_dict() for s in self.sprints],
            "sources": list(self.sources),
        }


class SuggestedAllocation(Entity):
    """An assignment proposed by the analysis service."""

    issue_key: str
    suggested_assignee_id: str
    reason: str = ""


class AnalysisResult(Entity):
    """Structured result of a capacity analysis."""

    summary: str = ""
    risks: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    suggested_allocations: list[SuggestedAllocation] | None = None
