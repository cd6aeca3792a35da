"""
Unit tests for assignee questions: extraction, partitioning, prompt text.
"""

import pytest

from sprintbot.agent.assignee import build_assignee_prompt, extract_assignee, partition_assignee_items
from sprintbot.services.tracker import MockTrackerClient


@pytest.fixture
def report():
    return MockTrackerClient().generate_sprint_report()


class TestExtractAssignee:
    @pytest.mark.parametrize(
        "message, expected",
        [
            ("What is Michael working on?", "Michael"),
            ("what is jane smith working on", "jane smith"),
            ("Show me high priority bugs", None),
            ("", None),
        ],
    )
    def test_extract(self, message: str, expected) -> None:
        assert extract_assignee(message) == expected


class TestPartitionAssigneeItems:
    def test_in_progress_is_main_focus(self, report) -> None:
        main, other = partition_assignee_items(report, "jane")
        assert [i.key for i in main] == ["PROJ-102"]
        assert other == []

    def test_code_review_is_main_focus(self, report) -> None:
        main, other = partition_assignee_items(report, "Lisa")
        assert [i.key for i in main] == ["PROJ-106"]
        assert other == []

    def test_other_statuses(self, report) -> None:
        main, other = partition_assignee_items(report, "Mike")
        assert main == []
        assert [i.key for i in other] == ["PROJ-103"]

    def test_unknown_person(self, report) -> None:
        assert partition_assignee_items(report, "Nobody") == ([], [])


class TestBuildAssigneePrompt:
    def test_lists_main_and_other(self, report) -> None:
        main, _ = partition_assignee_items(report, "Jane")
        _, other = partition_assignee_items(report, "Mike")
        prompt = build_assignee_prompt("Jane", main, other)
        assert "what Jane is working on" in prompt
        assert "Main focus (In Progress or Code Review):\n• [In Progress] PROJ-102:" in prompt
        assert "Other assigned tickets (not In Progress or Code Review):\n• [Blocked] PROJ-103:" in prompt
        assert prompt.endswith("Please summarise this for the user.")

    def test_nothing_in_focus(self) -> None:
        prompt = build_assignee_prompt("Michael", [], [])
        assert "Michael has no tickets currently In Progress or in Code Review." in prompt
        assert "Other assigned tickets" not in prompt
