"""
Assignee lookup for questions like "What is Michael working on?".

Only this one phrasing is recognised; anything else goes through the full
sprint report flow.
"""

import re

from sprintbot.schemas.sprint import SprintReport, WorkItem

ASSIGNEE_PATTERN = re.compile(
    r"(?:what|which|show|list)\W+(?:is|tickets|tasks)?\W+([A-Za-z .'-]+)\W+working on",
    re.IGNORECASE,
)

# Lowercased statuses that count as someone's main focus.
MAIN_FOCUS_STATUSES = frozenset({"in progress", "code review"})


def extract_assignee(message: str) -> str | None:
    """Return the person named in an assignee question, or None when the message is not one."""
    match = ASSIGNEE_PATTERN.search(message or "")
    if not match:
        return None
    person = match.group(1).strip()
    return person or None


def partition_assignee_items(report: SprintReport, person: str) -> tuple[list[WorkItem], list[WorkItem]]:
    """
    Split the person's items into (main focus, other).

    An item belongs to the person when their name is a case-insensitive
    substring of the assignee display name.
    """
    needle = person.lower()
    main: list[WorkItem] = []
    other: list[WorkItem] = []
    for status, group in report.summary.items():
        for item in group.items:
            if not item.assignee or needle not in item.assignee.lower():
                continue
            if status.lower() in MAIN_FOCUS_STATUSES:
                main.append(item)
            else:
                other.append(item)
    return main, other


def _item_line(item: WorkItem) -> str:
    return f"• [{item.status}] {item.key}: {item.summary}\n"


def build_assignee_prompt(person: str, main: list[WorkItem], other: list[WorkItem]) -> str:
    text = (
        f"You are a product manager assistant. The user asked what {person} is working on. "
        "Here are their tickets in the current sprint.\n\n"
    )
    if main:
        text += "Main focus (In Progress or Code Review):\n"
        text += "".join(_item_line(item) for item in main)
    else:
        text += f"{person} has no tickets currently In Progress or in Code Review.\n"
    if other:
        text += "\nOther assigned tickets (not In Progress or Code Review):\n"
        text += "".join(_item_line(item) for item in other)
    text += "\nPlease summarise this for the user."
    return text
