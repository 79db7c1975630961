"""Capacity analysis and sample data through an external text generation service.

The service is any callable taking a prompt and returning JSON text.
:func:`analyze_capacity` and :func:`generate_sample_data` call it directly and
are the entry points for programs that hold a service client. The command line
has no service of its own: it prints the prompts (``jcap context``,
``jcap sample-prompt``) and parses the answers (``jcap analysis``,
``jcap sample``) with the same functions.
"""

import json
import logging
from collections.abc import Callable

from pydantic import ValidationError

from jiracap.api.models import AnalysisResult, ImportBatch, Snapshot, Sprint
from jiracap.ingest.paste import parse_export

logger = logging.getLogger(__name__)

PROMPT_TEMPLATE = """\
Analyze the following project capacity data for a software team.

Team Context:
{team}

Active and Future Sprints:
{sprints}

Backlog & Assigned Issues:
{issues}

Please provide:
1. A short executive summary of the current capacity status.
2. Identify specific risks (e.g., developers over capacity, key skills missing for assigned tasks, high priority items unassigned).
3. Actionable recommendations to resolve these risks.
4. Suggested allocations for unassigned or poorly assigned tasks to optimize velocity.

Respond with a JSON object with the keys "summary" (string), "risks" (list of strings),
"recommendations" (list of strings) and "suggestedAllocations" (list of objects with
"issueKey", "suggestedAssigneeId" and "reason").
"""

FALLBACK_RESULT = AnalysisResult(
    summary="Failed to generate analysis.",
    risks=["System Error: Could not reach AI service."],
    recommendations=["Check your network connection or API key quota."],
)


def build_analysis_prompt(snapshot: Snapshot) -> str:
    """Render the analysis prompt with the snapshot as context."""
    data = snapshot.to_json_dict()
    return PROMPT_TEMPLATE.format(
        team=json.dumps(data["team"]),
        sprints=json.dumps(data["sprints"]),
        issues=json.dumps(data["issues"]),
    )


def parse_analysis_result(text: str) -> AnalysisResult:
    """Validate the JSON text returned by the service.

    Raises:
        ValueError: If the text is empty, not JSON or not an analysis result
    """
    if not text or not text.strip():
        raise ValueError("No response from AI")
    try:
        return AnalysisResult.model_validate_json(text)
    except ValidationError as e:
        raise ValueError(f"Unexpected analysis result: {e}") from e


def analyze_capacity(snapshot: Snapshot, generate: Callable[[str], str]) -> AnalysisResult:
    """Run the analysis, returning a fallback result when the service fails."""
    prompt = build_analysis_prompt(snapshot)
    try:
        return parse_analysis_result(generate(prompt))
    except Exception:
        logger.exception("Capacity analysis failed")
        return FALLBACK_RESULT


DEFAULT_SAMPLE_DESCRIPTION = "A modern e-commerce platform migration to microservices"

SAMPLE_PROMPT_TEMPLATE = """\
Generate realistic sample data for a Jira-like capacity planner based on this project description: "{description}".

Create 4-6 team members with different roles (Frontend, Backend, DevOps, QA).
Create 15-20 Jira issues (Stories, Bugs, Tasks) spanning these sprints:
{sprints}
Some issues should be assigned, some unassigned.
Ensure story points are realistic (Fibonacci: 1, 2, 3, 5, 8, 13).

Respond with a JSON object with the keys "team" (list of objects with "id", "name",
"role", "avatar", "capacityPerSprint" and "skills") and "issues" (list of objects with
"id", "key", "summary", "type" (Story, Bug, Task or Epic), "priority" (Highest, High,
Medium or Low), "status" (To Do, In Progress, In Review or Done), "assigneeId",
"storyPoints" and "sprintId").
"""


def build_sample_prompt(description: str, sprints: list[Sprint]) -> str:
    """Render the sample data prompt; generated issues refer to these sprints."""
    lines = "\n".join(f'- id "{s.id}": {s.name} ({s.state.value})' for s in sprints)
    return SAMPLE_PROMPT_TEMPLATE.format(description=description, sprints=lines)


def parse_sample_data(text: str) -> ImportBatch:
    """Normalize generated sample data.

    Raises:
        ValueError: If the text is empty
        IngestError: If the text is not usable import data
    """
    if not text or not text.strip():
        raise ValueError("No response")
    return parse_export(text)


def generate_sample_data(
    generate: Callable[[str], str],
    sprints: list[Sprint],
    description: str = DEFAULT_SAMPLE_DESCRIPTION,
) -> ImportBatch:
    """Ask the service for sample data.

    Unlike the analysis there is no fallback; failures propagate.
    """
    return parse_sample_data(generate(build_sample_prompt(description, sprints)))
