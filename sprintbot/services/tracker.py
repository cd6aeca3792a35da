"""
Tracker: fetch the active sprint and its work items, and build the sprint report.

Responsibility: Talk to the Jira Agile REST API (live) or serve fixed sample
data (mock). The implementation is chosen once by create_tracker_client() from
the settings; callers never branch on the mode.
"""

import logging
from typing import Any

import httpx

from sprintbot.core.config import Settings
from sprintbot.core.errors import ConfigurationError, TrackerError
from sprintbot.schemas.sprint import Sprint, SprintReport, StatusGroup, WorkItem

logger = logging.getLogger(__name__)

ISSUE_FIELDS = "summary,status,assignee,priority,issuetype,created,updated,key,duedate"
API_TIMEOUT = 30.0

# Case-insensitive substrings of a status name for each derived counter.
READY_MARKERS = ("ready", "done", "complete")
BLOCKED_MARKERS = ("blocked", "impediment")
IN_PROGRESS_MARKERS = ("progress", "development")


def _matches(status: str, markers: tuple[str, ...]) -> bool:
    lowered = (status or "").lower()
    return any(m in lowered for m in markers)


def build_sprint_report(sprint: Sprint, items: list[WorkItem]) -> SprintReport:
    """
    Group items by their own status (first-seen order) and count the derived buckets.

    The three counters are evaluated independently; a status that satisfies two
    marker sets is counted in both.
    """
    summary: dict[str, StatusGroup] = {}
    for item in items:
        group = summary.setdefault(item.status, StatusGroup(count=0))
        group.items.append(item)
        group.count += 1

    return SprintReport(
        sprint=sprint,
        total_items=len(items),
        summary=summary,
        ready_for_production=sum(1 for i in items if _matches(i.status, READY_MARKERS)),
        blocked=sum(1 for i in items if _matches(i.status, BLOCKED_MARKERS)),
        in_progress=sum(1 for i in items if _matches(i.status, IN_PROGRESS_MARKERS)),
    )


class TrackerClient:
    """Interface shared by the live and mock trackers."""

    mode = "base"

    def get_active_sprint(self) -> Sprint:
        raise NotImplementedError

    def get_work_items_in_sprint(self, sprint_id: int) -> list[WorkItem]:
        raise NotImplementedError

    def generate_sprint_report(self) -> SprintReport:
        """Fetch the active sprint, then its items. Errors from either call propagate unchanged."""
        sprint = self.get_active_sprint()
        items = self.get_work_items_in_sprint(sprint.id)
        report = build_sprint_report(sprint, items)
        logger.info(
            "[tracker:generate_sprint_report] OUT sprint=%r total=%d groups=%d ready=%d blocked=%d in_progress=%d",
            sprint.name,
            report.total_items,
            len(report.summary),
            report.ready_for_production,
            report.blocked,
            report.in_progress,
        )
        return report

    def close(self) -> None:
        pass


def _parse_sprint(data: dict[str, Any]) -> Sprint:
    return Sprint(
        id=int(data["id"]),
        name=str(data.get("name") or ""),
        state=data.get("state") or "active",
        start_date=data.get("startDate"),
        end_date=data.get("endDate"),
        goal=data.get("goal") or None,
    )


def _parse_issue(issue: dict[str, Any]) -> WorkItem:
    fields = issue.get("fields") or {}
    status = fields.get("status") or {}
    assignee = fields.get("assignee") or {}
    priority = fields.get("priority") or {}
    issue_type = fields.get("issuetype") or {}
    return WorkItem(
        id=str(issue.get("id", "")),
        key=str(issue.get("key", "")),
        summary=fields.get("summary") or "",
        status=status.get("name") or "",
        assignee=assignee.get("displayName"),
        priority=priority.get("name") or "Medium",
        issue_type=issue_type.get("name") or "",
        created=fields.get("created"),
        updated=fields.get("updated"),
        duedate=fields.get("duedate"),
    )


class JiraTrackerClient(TrackerClient):
    """Live client for the Jira Agile REST API (basic auth with email + API token)."""

    mode = "live"

    def __init__(self, settings: Settings, transport: httpx.BaseTransport | None = None) -> None:
        self.board_id = settings.jira_board_id
        self.max_results = settings.jira_max_results
        self._client = httpx.Client(
            base_url=settings.jira_base_url,
            auth=(settings.jira_email, settings.jira_api_token),
            headers={"Accept": "application/json", "Content-Type": "application/json"},
            timeout=API_TIMEOUT,
            transport=transport,
        )

    def _get_json(self, path: str, params: dict[str, Any]) -> dict[str, Any]:
        try:
            response = self._client.get(path, params=params)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error("[tracker] GET %s -> %s: %s", path, e.response.status_code, e.response.text[:200])
            raise TrackerError(f"Jira request failed with status {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.error("[tracker] GET %s failed: %s", path, e)
            raise TrackerError(f"Jira request failed: {e}") from e
        except ValueError as e:
            logger.error("[tracker] GET %s returned invalid JSON", path)
            raise TrackerError("Jira returned an invalid response") from e
        if not isinstance(data, dict):
            raise TrackerError("Jira returned an invalid response")
        return data

    def get_active_sprint(self) -> Sprint:
        if not self.board_id:
            raise ConfigurationError("JIRA_BOARD_ID must be set to specify the board to use.")
        logger.info("[tracker:get_active_sprint] IN  board_id=%s", self.board_id)
        data = self._get_json(f"/rest/agile/1.0/board/{self.board_id}/sprint", {"state": "active"})
        sprints = data.get("values") or []
        if not sprints:
            raise TrackerError("No active sprints found")
        try:
            sprint = _parse_sprint(sprints[0])
        except (KeyError, TypeError, ValueError) as e:
            raise TrackerError("Jira returned an unreadable sprint") from e
        logger.info("[tracker:get_active_sprint] OUT sprint_id=%d name=%r", sprint.id, sprint.name)
        return sprint

    def get_work_items_in_sprint(self, sprint_id: int) -> list[WorkItem]:
        logger.info("[tracker:get_work_items_in_sprint] IN  sprint_id=%s max_results=%d", sprint_id, self.max_results)
        data = self._get_json(
            f"/rest/agile/1.0/sprint/{sprint_id}/issue",
            {"fields": ISSUE_FIELDS, "maxResults": self.max_results},
        )
        issues = data.get("issues") or []
        try:
            items = [_parse_issue(issue) for issue in issues]
        except (AttributeError, TypeError, ValueError) as e:
            raise TrackerError("Jira returned unreadable work items") from e
        total = data.get("total")
        # Only the first page is read.
        if isinstance(total, int) and total > len(items):
            logger.warning(
                "[tracker:get_work_items_in_sprint] sprint %s has %d items; only the first %d were fetched",
                sprint_id,
                total,
                len(items),
            )
        logger.info("[tracker:get_work_items_in_sprint] OUT items=%d keys=%s", len(items), [i.key for i in items[:10]])
        return items

    def close(self) -> None:
        self._client.close()


MOCK_SPRINT = Sprint(
    id=123,
    name="Sprint 15 - Product Launch",
    state="active",
    start_date="2024-01-15T00:00:00.000Z",
    end_date="2024-01-29T00:00:00.000Z",
    goal="Launch the new user dashboard and improve performance",
)

MOCK_WORK_ITEMS: tuple[WorkItem, ...] = (
    WorkItem(
        id="1001", key="PROJ-101", summary="Implement user authentication flow",
        status="Ready for Production", assignee="John Doe", priority="High", issue_type="Story",
        created="2024-01-10T10:00:00.000Z", updated="2024-01-20T15:30:00.000Z",
    ),
    WorkItem(
        id="1002", key="PROJ-102", summary="Design new dashboard layout",
        status="In Progress", assignee="Jane Smith", priority="Medium", issue_type="Task",
        created="2024-01-12T09:00:00.000Z", updated="2024-01-21T11:45:00.000Z",
    ),
    WorkItem(
        id="1003", key="PROJ-103", summary="Fix performance issues in search",
        status="Blocked", assignee="Mike Johnson", priority="High", issue_type="Bug",
        created="2024-01-14T14:20:00.000Z", updated="2024-01-22T16:15:00.000Z",
    ),
    WorkItem(
        id="1004", key="PROJ-104", summary="Add unit tests for API endpoints",
        status="Ready for Production", assignee="Sarah Wilson", priority="Medium", issue_type="Task",
        created="2024-01-16T08:30:00.000Z", updated="2024-01-23T10:20:00.000Z",
    ),
    WorkItem(
        id="1005", key="PROJ-105", summary="Update documentation",
        status="In Progress", assignee="Tom Brown", priority="Low", issue_type="Task",
        created="2024-01-18T13:45:00.000Z", updated="2024-01-24T09:30:00.000Z",
    ),
    WorkItem(
        id="1006", key="PROJ-106", summary="Implement dark mode toggle",
        status="Code Review", assignee="Lisa Chen", priority="Medium", issue_type="Story",
        created="2024-01-20T11:15:00.000Z", updated="2024-01-25T14:45:00.000Z",
    ),
)


class MockTrackerClient(TrackerClient):
    """Serves a fixed sample sprint; used when Jira credentials are absent."""

    mode = "mock"

    def __init__(self) -> None:
        logger.warning("[tracker] Running in mock mode - using simulated Jira data")

    def get_active_sprint(self) -> Sprint:
        return MOCK_SPRINT.model_copy(deep=True)

    def get_work_items_in_sprint(self, sprint_id: int) -> list[WorkItem]:
        return [item.model_copy(deep=True) for item in MOCK_WORK_ITEMS]


def create_tracker_client(settings: Settings) -> TrackerClient:
    """Pick the live client when base URL and API token are set, otherwise the mock."""
    if settings.tracker_is_live:
        logger.info("[tracker] Using Jira at %s", settings.jira_base_url)
        return JiraTrackerClient(settings)
    return MockTrackerClient()
