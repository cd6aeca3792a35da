"""
Application configuration (env, settings, constants).

Responsibility: Load environment variables once at process entry into an
immutable Settings value. Components receive Settings in their constructors
and never read the environment themselves.
"""

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

APP_NAME: str = "Sprint Query Bridge"
APP_VERSION: str = "1.0.0"

# Tracker page size; items beyond the first page are not fetched.
JIRA_MAX_RESULTS: int = 100
SLACK_TIMEOUT_SECONDS: float = 10.0

DEFAULT_OPENAI_MODEL: str = "gpt-4o"
DEFAULT_OPENAI_TEMPERATURE: float = 0.1

# Settings that must be present for the bridge to run against real services
# (env var name -> Settings attribute).
REQUIRED_SETTINGS: dict[str, str] = {
    "OPENAI_API_KEY": "openai_api_key",
    "SLACK_WEBHOOK_URL": "slack_webhook_url",
    "JIRA_BASE_URL": "jira_base_url",
    "JIRA_API_TOKEN": "jira_api_token",
    "JIRA_EMAIL": "jira_email",
    "JIRA_PROJECT_KEY": "jira_project_key",
}


def _env(name: str, default: str = "") -> str:
    return (os.getenv(name) or default).strip()


def _env_int(name: str, default: int) -> int:
    raw = _env(name)
    try:
        return int(raw) if raw else default
    except ValueError:
        logger.warning("[config] %s=%r is not an integer; using %d", name, raw, default)
        return default


def _env_float(name: str, default: float) -> float:
    raw = _env(name)
    try:
        return float(raw) if raw else default
    except ValueError:
        logger.warning("[config] %s=%r is not a number; using %s", name, raw, default)
        return default


@dataclass(frozen=True)
class Settings:
    openai_api_key: str = ""
    openai_model: str = DEFAULT_OPENAI_MODEL
    openai_temperature: float = DEFAULT_OPENAI_TEMPERATURE
    slack_webhook_url: str = ""
    slack_bot_token: str = ""
    slack_timeout_seconds: float = SLACK_TIMEOUT_SECONDS
    jira_base_url: str = ""
    jira_api_token: str = ""
    jira_email: str = ""
    jira_project_key: str = ""
    jira_board_id: str = ""
    jira_max_results: int = JIRA_MAX_RESULTS
    port: int = 3000
    environment: str = "development"
    log_level: str = "INFO"
    frontend_dir: str = "public"

    @property
    def tracker_is_live(self) -> bool:
        return bool(self.jira_base_url and self.jira_api_token)

    @property
    def notifier_is_live(self) -> bool:
        return bool(self.slack_webhook_url)


def load_settings() -> Settings:
    """Read .env (if present) and the process environment into Settings."""
    load_dotenv()
    return Settings(
        openai_api_key=_env("OPENAI_API_KEY"),
        openai_model=_env("OPENAI_MODEL", DEFAULT_OPENAI_MODEL) or DEFAULT_OPENAI_MODEL,
        openai_temperature=_env_float("OPENAI_TEMPERATURE", DEFAULT_OPENAI_TEMPERATURE),
        slack_webhook_url=_env("SLACK_WEBHOOK_URL"),
        slack_bot_token=_env("SLACK_BOT_TOKEN"),
        slack_timeout_seconds=_env_float("SLACK_TIMEOUT_SECONDS", SLACK_TIMEOUT_SECONDS),
        jira_base_url=_env("JIRA_BASE_URL").rstrip("/"),
        jira_api_token=_env("JIRA_API_TOKEN"),
        jira_email=_env("JIRA_EMAIL"),
        jira_project_key=_env("JIRA_PROJECT_KEY"),
        jira_board_id=_env("JIRA_BOARD_ID"),
        jira_max_results=_env_int("JIRA_MAX_RESULTS", JIRA_MAX_RESULTS),
        port=_env_int("PORT", 3000),
        environment=_env("APP_ENV", "development") or "development",
        log_level=(_env("LOG_LEVEL", "INFO") or "INFO").upper(),
        frontend_dir=_env("FRONTEND_DIR", "public") or "public",
    )


def missing_settings(settings: Settings) -> list[str]:
    """Return env var names of required settings that are empty."""
    return [name for name, attr in REQUIRED_SETTINGS.items() if not getattr(settings, attr)]


def validate_settings(settings: Settings) -> list[str]:
    """Log missing required settings. Never raises; missing values only switch components to mock mode."""
    missing = missing_settings(settings)
    if missing:
        logger.warning("[config] Missing required environment variables: %s", ", ".join(missing))
        logger.warning("[config] Please check your .env file or environment variables.")
    else:
        logger.info("[config] All required settings present")
    return missing
