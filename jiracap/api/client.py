"""Jira Cloud REST API client."""

import logging
from typing import Any

import httpx

from jiracap.config.auth import get_api_token, get_jira_email, get_jira_url, get_verify_ssl

logger = logging.getLogger(__name__)

# Fields requested for every issue search
ISSUE_FIELDS = [
    "summary",
    "status",
    "priority",
    "issuetype",
    "assignee",
    "parent",
    "duedate",
    "timespent",
    "timeoriginalestimate",
    "timeestimate",
    "sprint",
]

# JQL reserved words that must be quoted when used as project keys (e.g. "IN")
JQL_RESERVED = frozenset({"in", "and", "or", "not", "null", "empty", "order", "by", "asc", "desc"})


class JiraAPIError(Exception):
    """Raised when a Jira API call fails."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class JiraAuthError(JiraAPIError):
    """Credentials were rejected (HTTP 401)."""


class JiraPermissionError(JiraAPIError):
    """The account lacks permission for the resource (HTTP 403)."""


class JiraNotFoundError(JiraAPIError):
    """Resource not found (HTTP 404), usually a wrong site URL or project key."""


class JiraConnectionError(JiraAPIError):
    """The site could not be reached."""


def build_project_jql(project_key: str, include_done: bool = False) -> str:
    """Build the issue search JQL for one project.

    Args:
        project_key: Jira project key, e.g. 'PROJ'
        include_done: Include issues in the Done status category
    """
    key = f'"{project_key}"' if project_key.lower() in JQL_RESERVED else project_key
    clauses = [f"project = {key}"]
    if not include_done:
        clauses.append("statusCategory != Done")
    return " AND ".join(clauses) + " ORDER BY rank"


class JiraClient:
    """Async client for the Jira Cloud REST and Agile APIs.

    Methods return the raw JSON records; turning them into entities is the
    job of :mod:`jiracap.ingest.normalizer`.
    """

    def __init__(
        self,
        base_url: str | None = None,
        email: str | None = None,
        token: str | None = None,
        timeout: float = 30.0,
        verify_ssl: bool | None = None,
    ):
        """Initialize the client.

        Args:
            base_url: Jira site URL (defaults to JIRA_URL env var)
            email: Account e-mail (defaults to JIRA_EMAIL env var)
            token: API token (defaults to JIRA_TOKEN env var)
            timeout: Request timeout in seconds
            verify_ssl: Whether to verify SSL certs (defaults to JIRA_VERIFY_SSL env var)
        """
        self.base_url = (base_url or get_jira_url()).rstrip("/")
        self.email = email or get_jira_email()
        self.token = token or get_api_token()
        self.timeout = timeout
        self.verify_ssl = verify_ssl if verify_ssl is not None else get_verify_ssl()
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "JiraClient":
        """Enter async context."""
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            auth=(self.email, self.token),
            headers={
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
            timeout=self.timeout,
            verify=self.verify_ssl,
        )
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Exit async context."""
        if self._client:
            await self._client.aclose()
            self._client = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Get the HTTP client, raising if not in context."""
        if self._client is None:
            raise RuntimeError("JiraClient must be used as async context manager")
        return self._client

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        """Issue a GET request and return the decoded JSON body."""
        logger.debug("GET %s %s", path, params or "")
        try:
            response = await self.client.get(path, params=params)
        except httpx.TransportError as e:
            raise JiraConnectionError(
                f"Could not reach {self.base_url}: {e}. Check the site URL and your network."
            ) from e
        self._check_response(response)
        return response.json()

    def _check_response(self, response: httpx.Response) -> None:
        """Check response for errors and raise if needed."""
        if response.status_code == 401:
            raise JiraAuthError("Authentication failed. Check JIRA_EMAIL and JIRA_TOKEN.", 401)
        if response.status_code == 403:
            raise JiraPermissionError(
                "Permission denied. The account cannot browse this project.", 403
            )
        if response.status_code == 404:
            raise JiraNotFoundError(
                "Resource not found. Check JIRA_URL and the project key.", 404
            )
        if response.status_code >= 400:
            try:
                error_data = response.json()
                messages = error_data.get("errorMessages") or [error_data.get("message", str(error_data))]
                message = "; ".join(str(m) for m in messages)
            except Exception:
                message = response.text
            raise JiraAPIError(f"API error: {message}", response.status_code)

    async def validate_credentials(self) -> dict[str, Any]:
        """Check the credentials by fetching the current user.

        Returns:
            The raw user record of the authenticated account
        """
        return await self._get("/rest/api/3/myself")

    async def get_assignable_users(self, project_key: str) -> list[dict[str, Any]]:
        """Get the users that can be assigned issues in a project."""
        users = await self._get(
            "/rest/api/3/user/assignable/search",
            params={"project": project_key},
        )
        return users if isinstance(users, list) else []

    async def get_boards(self, project_key: str) -> list[dict[str, Any]]:
        """Get the agile boards of a project."""
        data = await self._get(
            "/rest/agile/1.0/board",
            params={"projectKeyOrId": project_key},
        )
        return data.get("values", [])

    async def get_sprints(
        self,
        project_key: str,
        states: tuple[str, ...] = ("active", "future"),
    ) -> list[dict[str, Any]]:
        """Get sprints from the first board of a project.

        Args:
            project_key: Jira project key
            states: Sprint states to include

        Returns:
            Raw sprint records, empty if the project has no board
        """
        boards = await self.get_boards(project_key)
        if not boards:
            logger.info("Project %s has no agile board; no sprints imported", project_key)
            return []

        board_id = boards[0]["id"]
        data = await self._get(
            f"/rest/agile/1.0/board/{board_id}/sprint",
            params={"state": ",".join(states)},
        )
        return data.get("values", [])

    async def search_issues(
        self,
        jql: str,
        fields: list[str] | None = None,
        max_results: int = 100,
    ) -> list[dict[str, Any]]:
        """Search issues with JQL, following nextPageToken pagination.

        Args:
            jql: The JQL query
            fields: Fields to return (defaults to ISSUE_FIELDS)
            max_results: Page size

        Returns:
            Raw issue records
        """
        fields = fields or ISSUE_FIELDS
        issues: list[dict[str, Any]] = []
        next_page_token: str | None = None

        while True:
            params: dict[str, Any] = {
                "jql": jql,
                "maxResults": max_results,
                "fields": ",".join(fields),
            }
            if next_page_token:
                params["nextPageToken"] = next_page_token
            data = await self._get("/rest/api/3/search/jql", params=params)
            page = data.get("issues", [])
            issues.extend(page)
            next_page_token = data.get("nextPageToken")
            if not page or data.get("isLast") or not next_page_token:
                break

        logger.debug("Fetched %d issues for %r", len(issues), jql)
        return issues
