"""Schemas for tracker entities: work items, sprints, sprint reports, and analysed queries."""

from typing import Any, Literal

from pydantic import BaseModel, Field

Intent = Literal[
    "sprint_status",
    "work_item_count",
    "ready_for_production",
    "blocked_items",
    "sprint_progress",
    "unknown",
]

INTENTS: tuple[str, ...] = (
    "sprint_status",
    "work_item_count",
    "ready_for_production",
    "blocked_items",
    "sprint_progress",
    "unknown",
)


class WorkItem(BaseModel):
    """A single issue (story, task, or bug) in the sprint."""

    id: str = Field(..., description="Tracker issue id.")
    key: str = Field(..., description="Issue key, e.g. PROJ-101.")
    summary: str = Field("", description="Issue title.")
    status: str = Field(..., description="Workflow status name, e.g. 'In Progress'.")
    assignee: str | None = Field(None, description="Assignee display name, if assigned.")
    priority: str = Field("Medium", description="Priority name.")
    issue_type: str = Field("", description="Issue type name, e.g. Story, Task, Bug.")
    created: str | None = None
    updated: str | None = None
    duedate: str | None = None


class Sprint(BaseModel):
    """A time-boxed iteration on the board."""

    id: int
    name: str
    state: Literal["active", "closed", "future"]
    start_date: str | None = None
    end_date: str | None = None
    goal: str | None = None


class StatusGroup(BaseModel):
    count: int
    items: list[WorkItem] = Field(default_factory=list)


class SprintReport(BaseModel):
    """
    Work items of one sprint grouped by status, plus derived counters.

    summary keeps statuses in first-seen order. The derived counters are
    independent substring matches, so one item may count toward more than one.
    """

    sprint: Sprint
    total_items: int
    summary: dict[str, StatusGroup] = Field(default_factory=dict)
    ready_for_production: int = 0
    blocked: int = 0
    in_progress: int = 0


class ProcessedQuery(BaseModel):
    """Intent classification of a user question."""

    intent: Intent = "unknown"
    parameters: dict[str, Any] = Field(default_factory=dict)
    confidence: float = Field(0.0, ge=0.0, le=1.0)
    fallback: bool = Field(False, description="True when the model was unavailable and this is the default analysis.")
