"""
Tests for the tracker: report building, the mock client, and the live Jira client
against an in-process httpx transport.
"""

import httpx
import pytest

from sprintbot.core.config import Settings
from sprintbot.core.errors import ConfigurationError, TrackerError
from sprintbot.schemas.sprint import Sprint, WorkItem
from sprintbot.services.tracker import (
    ISSUE_FIELDS,
    JiraTrackerClient,
    MockTrackerClient,
    build_sprint_report,
    create_tracker_client,
)

SPRINT = Sprint(id=7, name="Sprint 7", state="active")

LIVE_SETTINGS = Settings(
    jira_base_url="https://example.atlassian.net",
    jira_api_token="token",
    jira_email="pm@example.com",
    jira_board_id="42",
    environment="test",
)


def _item(key: str, status: str, assignee: str | None = None) -> WorkItem:
    return WorkItem(id=key, key=key, summary=f"Summary {key}", status=status, assignee=assignee)


class TestBuildSprintReport:
    """Tests for build_sprint_report()."""

    def test_groups_in_first_seen_order(self) -> None:
        items = [_item("A-1", "To Do"), _item("A-2", "Done"), _item("A-3", "To Do"), _item("A-4", "Blocked")]
        report = build_sprint_report(SPRINT, items)
        assert list(report.summary) == ["To Do", "Done", "Blocked"]
        assert [g.count for g in report.summary.values()] == [2, 1, 1]
        assert [i.key for i in report.summary["To Do"].items] == ["A-1", "A-3"]

    def test_every_item_in_exactly_one_group(self) -> None:
        items = [_item(f"A-{n}", status) for n, status in enumerate(["x", "y", "x", "z", "y", "x"])]
        report = build_sprint_report(SPRINT, items)
        assert report.total_items == len(items)
        assert sum(g.count for g in report.summary.values()) == len(items)
        grouped_keys = [i.key for g in report.summary.values() for i in g.items]
        assert sorted(grouped_keys) == sorted(i.key for i in items)
        for status, group in report.summary.items():
            assert all(i.status == status for i in group.items)

    def test_derived_counters_are_case_insensitive(self) -> None:
        items = [
            _item("A-1", "READY FOR QA"),
            _item("A-2", "Done"),
            _item("A-3", "Completed"),
            _item("A-4", "Impediment"),
            _item("A-5", "In Development"),
            _item("A-6", "To Do"),
        ]
        report = build_sprint_report(SPRINT, items)
        assert report.ready_for_production == 3
        assert report.blocked == 1
        assert report.in_progress == 1

    def test_status_matching_two_buckets_counts_twice(self) -> None:
        report = build_sprint_report(SPRINT, [_item("A-1", "Blocked in development")])
        assert report.blocked == 1
        assert report.in_progress == 1
        assert report.total_items == 1

    def test_empty_sprint(self) -> None:
        report = build_sprint_report(SPRINT, [])
        assert report.total_items == 0
        assert report.summary == {}
        assert (report.ready_for_production, report.blocked, report.in_progress) == (0, 0, 0)


class TestMockTrackerClient:
    def test_sample_report(self) -> None:
        report = MockTrackerClient().generate_sprint_report()
        assert report.sprint.name == "Sprint 15 - Product Launch"
        assert report.sprint.state == "active"
        assert report.total_items == 6
        assert list(report.summary) == ["Ready for Production", "In Progress", "Blocked", "Code Review"]
        assert report.summary["Ready for Production"].count == 2
        assert report.ready_for_production == 2
        assert report.in_progress == 2
        assert report.blocked == 1

    def test_returns_copies(self) -> None:
        tracker = MockTrackerClient()
        items = tracker.get_work_items_in_sprint(123)
        items[0].status = "Changed"
        assert tracker.get_work_items_in_sprint(123)[0].status == "Ready for Production"


class TestCreateTrackerClient:
    def test_mock_without_credentials(self) -> None:
        assert create_tracker_client(Settings(jira_base_url="https://x.atlassian.net")).mode == "mock"

    def test_live_with_credentials(self) -> None:
        tracker = create_tracker_client(LIVE_SETTINGS)
        try:
            assert tracker.mode == "live"
        finally:
            tracker.close()


def _sprint_payload() -> dict:
    return {
        "values": [
            {
                "id": 7,
                "name": "Sprint 7",
                "state": "active",
                "startDate": "2024-03-01T09:00:00.000Z",
                "endDate": "2024-03-15T17:00:00.000Z",
                "goal": "Ship billing",
            },
            {"id": 8, "name": "Sprint 8", "state": "active"},
        ]
    }


def _issues_payload(total: int = 2) -> dict:
    return {
        "total": total,
        "issues": [
            {
                "id": "10001",
                "key": "BILL-1",
                "fields": {
                    "summary": "Invoice PDF",
                    "status": {"name": "In Progress"},
                    "assignee": {"displayName": "Ana Lima"},
                    "priority": {"name": "High"},
                    "issuetype": {"name": "Story"},
                    "created": "2024-03-01T10:00:00.000Z",
                    "updated": "2024-03-02T10:00:00.000Z",
                    "duedate": "2024-03-10",
                },
            },
            {
                "id": "10002",
                "key": "BILL-2",
                "fields": {
                    "summary": "Card retries",
                    "status": {"name": "Blocked"},
                    "assignee": None,
                    "priority": None,
                    "issuetype": {"name": "Bug"},
                },
            },
        ],
    }


def _live_client(handler) -> JiraTrackerClient:
    return JiraTrackerClient(LIVE_SETTINGS, transport=httpx.MockTransport(handler))


class TestJiraTrackerClient:
    def test_get_active_sprint_takes_first(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=_sprint_payload())

        sprint = _live_client(handler).get_active_sprint()
        assert sprint.id == 7
        assert sprint.goal == "Ship billing"
        assert seen[0].url.path == "/rest/agile/1.0/board/42/sprint"
        assert seen[0].url.params["state"] == "active"
        assert seen[0].headers["authorization"].startswith("Basic ")

    def test_no_active_sprints(self) -> None:
        tracker = _live_client(lambda request: httpx.Response(200, json={"values": []}))
        with pytest.raises(TrackerError, match="No active sprints found"):
            tracker.get_active_sprint()

    def test_missing_board_id_is_configuration_error(self) -> None:
        settings = Settings(jira_base_url="https://example.atlassian.net", jira_api_token="token")
        calls: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200, json=_sprint_payload())

        tracker = JiraTrackerClient(settings, transport=httpx.MockTransport(handler))
        with pytest.raises(ConfigurationError, match="JIRA_BOARD_ID"):
            tracker.get_active_sprint()
        assert calls == []

    def test_http_error_becomes_tracker_error(self) -> None:
        tracker = _live_client(lambda request: httpx.Response(401, text="Unauthorized"))
        with pytest.raises(TrackerError, match="401"):
            tracker.get_active_sprint()

    def test_transport_error_becomes_tracker_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(TrackerError):
            _live_client(handler).get_active_sprint()

    def test_get_work_items_parses_fields(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=_issues_payload())

        items = _live_client(handler).get_work_items_in_sprint(7)
        assert seen[0].url.path == "/rest/agile/1.0/sprint/7/issue"
        assert seen[0].url.params["fields"] == ISSUE_FIELDS
        assert seen[0].url.params["maxResults"] == "100"
        assert [i.key for i in items] == ["BILL-1", "BILL-2"]
        assert items[0].assignee == "Ana Lima"
        assert items[0].issue_type == "Story"
        assert items[0].duedate == "2024-03-10"
        assert items[1].assignee is None
        assert items[1].priority == "Medium"

    def test_only_first_page_is_fetched(self, caplog: pytest.LogCaptureFixture) -> None:
        calls: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200, json=_issues_payload(total=250))

        with caplog.at_level("WARNING"):
            items = _live_client(handler).get_work_items_in_sprint(7)
        assert len(items) == 2
        assert len(calls) == 1
        assert "only the first 2 were fetched" in caplog.text

    def test_generate_sprint_report(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path.endswith("/sprint"):
                return httpx.Response(200, json=_sprint_payload())
            return httpx.Response(200, json=_issues_payload())

        report = _live_client(handler).generate_sprint_report()
        assert report.sprint.name == "Sprint 7"
        assert report.total_items == 2
        assert report.in_progress == 1
        assert report.blocked == 1

    def test_generate_sprint_report_propagates_item_failure(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path.endswith("/sprint"):
                return httpx.Response(200, json=_sprint_payload())
            return httpx.Response(500, text="boom")

        with pytest.raises(TrackerError, match="500"):
            _live_client(handler).generate_sprint_report()
