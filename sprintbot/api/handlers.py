"""
API handlers: read request data, call the agent, map results/errors to HTTP.

Responsibility: Bridge HTTP types and the agent. Lives in the API layer so the
agent and services stay free of FastAPI/HTTP types.
"""

import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse, PlainTextResponse

from sprintbot.agent.graph import QueryAgent

logger = logging.getLogger(__name__)

MESSAGE_REQUIRED = {"error": "Message is required"}


def now_iso() -> str:
    """UTC timestamp with millisecond precision, e.g. 2024-01-15T10:00:00.000Z."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def get_agent(request: Request) -> QueryAgent:
    """Dependency: the agent built once by create_app()."""
    return request.app.state.agent


def error_response(status_code: int, error: str, details: str | None = None) -> JSONResponse:
    content: dict[str, Any] = {"error": error}
    if details is not None:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


def _error_text(exc: Exception) -> str:
    return getattr(exc, "message", None) or str(exc) or "Unknown error"


def handle_slack_webhook(payload: dict[str, Any], agent: QueryAgent) -> Any:
    """
    Answer the URL verification handshake, forward message events to the agent,
    and acknowledge everything else with a plain OK.
    """
    event_type = payload.get("type")
    challenge = payload.get("challenge")
    if event_type == "url_verification" and challenge:
        logger.info("[api:slack_webhook] url_verification handshake")
        return {"challenge": challenge}

    event = payload.get("event")
    if event_type == "event_callback" and isinstance(event, dict):
        logger.info("[api:slack_webhook] Received Slack event: %s", event.get("type"))
        if event.get("type") == "message":
            agent.handle_slack_event(event)
    return PlainTextResponse("OK")


def handle_sprint_summary(agent: QueryAgent) -> Any:
    try:
        report = agent.generate_sprint_summary()
    except Exception as e:
        logger.exception("[api:sprint_summary] Error fetching sprint summary")
        return error_response(500, "Failed to fetch sprint summary", _error_text(e))
    return {"success": True, "data": report.model_dump(mode="json"), "timestamp": now_iso()}


def handle_integration_test(agent: QueryAgent) -> Any:
    try:
        agent.test_integration()
    except Exception as e:
        logger.exception("[api:test_integration] Integration test failed")
        return error_response(500, "Integration test failed", _error_text(e))
    return {"success": True, "message": "Integration test completed successfully", "timestamp": now_iso()}


def handle_demo_query(message: str | None, agent: QueryAgent) -> Any:
    if not message:
        return JSONResponse(status_code=400, content=MESSAGE_REQUIRED)
    try:
        answer = agent.answer_demo_query(message)
    except Exception as e:
        logger.exception("[api:demo_query] Demo query failed")
        return error_response(500, _error_text(e))
    return {"answer": answer}
