"""
Chat formatting: flatten model Markdown into Slack-friendly plain text.

The transform is lossy (headings and emphasis are dropped) and idempotent:
running it on its own output changes nothing.
"""

import re

_HEADING = re.compile(r"^[ \t]*(?:#+[ \t]?)+", re.MULTILINE)
_EMPHASIS = re.compile(r"\*+")
# (pattern, replacement); the lookbehind skips headers that already carry their emoji.
_SECTION_HEADERS: tuple[tuple[re.Pattern[str], str], ...] = (
    (
        re.compile(r"(?<!🚧 )Active Work on Bunker-Related Tickets:?", re.IGNORECASE),
        "🚧 Active Work on Bunker-Related Tickets:",
    ),
    (
        re.compile(r"(?<!✅ )Completed Bunker-Related Work:?", re.IGNORECASE),
        "✅ Completed Bunker-Related Work:",
    ),
    (
        re.compile(r"(?<!✅ )Completed Bunkers-Related Tickets:?", re.IGNORECASE),
        "✅ Completed Bunkers-Related Tickets:",
    ),
    (
        re.compile(r"(?<!💡 )Actionable Insights:?", re.IGNORECASE),
        "💡 Actionable Insights:",
    ),
)
_BULLET = re.compile(r"^[ \t]?[-•][ \t]?", re.MULTILINE)
_NESTED_BULLET = re.compile(r"^([ \t]{2,})-[ \t]?", re.MULTILINE)
_EXTRA_NEWLINES = re.compile(r"\n{3,}")


def _nested(match: re.Match[str]) -> str:
    depth = len(match.group(1).expandtabs(2)) // 2
    return "    " * depth + "• "


def format_for_slack(message: str) -> str:
    """
    Convert model output to chat text.

    Removes underscores, asterisks and heading markers, prefixes known section
    headers with an emoji, turns top-level "-"/"•" list markers into "  • ",
    indents nested "-" items by four spaces per two leading spaces, collapses
    runs of blank lines, and trims.
    """
    if not message:
        return ""
    text = message.strip().replace("_", "")
    text = _EMPHASIS.sub("", text)
    text = _HEADING.sub("", text)
    for pattern, replacement in _SECTION_HEADERS:
        text = pattern.sub(replacement, text)
    text = _BULLET.sub("  • ", text)
    text = _NESTED_BULLET.sub(_nested, text)
    text = _EXTRA_NEWLINES.sub("\n\n", text)
    return text.strip()
