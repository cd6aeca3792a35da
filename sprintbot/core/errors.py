"""
Application errors for clean API error handling.

Tracker failures propagate as TrackerError so the pipeline aborts and the API
can report the message. ConfigurationError is raised on the first live call
that needs a setting which is missing (not at startup).
"""


class SprintBotError(Exception):
    """Base class for errors raised by the bridge."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConfigurationError(SprintBotError):
    """Raised when live mode is selected but a required setting (e.g. JIRA_BOARD_ID) is missing."""


class TrackerError(SprintBotError):
    """Raised when the project tracker is unreachable, returns an error, or returns an unusable payload."""
