"""
API routes under /api. Each endpoint delegates to a handler in api/handlers.py.
"""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, Request
from fastapi.responses import JSONResponse

from sprintbot.agent.graph import QueryAgent
from sprintbot.api.handlers import (
    MESSAGE_REQUIRED,
    error_response,
    get_agent,
    handle_demo_query,
    handle_integration_test,
    handle_slack_webhook,
    handle_sprint_summary,
    now_iso,
)
from sprintbot.core.config import APP_VERSION, validate_settings
from sprintbot.schemas.query import ActionResponse, DemoQueryRequest, DemoQueryResponse, TestQueryRequest

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api")


# --- System ---

@router.get("/health", tags=["system"])
def health() -> dict:
    return {"status": "healthy", "timestamp": now_iso(), "version": APP_VERSION}


@router.get(
    "/config/status",
    tags=["system"],
    summary="Validate configuration",
    description="Logs any missing required settings. Always 200.",
)
def config_status(request: Request) -> dict:
    validate_settings(request.app.state.settings)
    return {"message": "Configuration validation completed", "timestamp": now_iso()}


# --- Slack ---

@router.post(
    "/slack/webhook",
    tags=["slack"],
    summary="Slack Events API receiver",
    description="Handles the url_verification handshake and forwards sprint questions from message events to the agent.",
)
def slack_webhook(
    payload: dict[str, Any] | None = Body(default=None),
    agent: QueryAgent = Depends(get_agent),
) -> Any:
    try:
        return handle_slack_webhook(payload or {}, agent)
    except Exception:
        logger.exception("[api:slack_webhook] Error handling Slack webhook")
        return error_response(500, "Internal server error")


# --- Sprint ---

@router.get("/sprint/summary", tags=["sprint"], summary="Current sprint report")
def sprint_summary(agent: QueryAgent = Depends(get_agent)) -> Any:
    return handle_sprint_summary(agent)


# --- Test / demo ---

@router.post(
    "/test/query",
    response_model=ActionResponse,
    tags=["test"],
    summary="Run a query through the chat pipeline",
    description="Processes the message as if it came from Slack; the answer is delivered to chat. 400 if message is missing.",
)
def test_query(
    body: TestQueryRequest | None = Body(default=None),
    agent: QueryAgent = Depends(get_agent),
) -> Any:
    if body is None or not body.message:
        return JSONResponse(status_code=400, content=MESSAGE_REQUIRED)
    logger.info("[api:test_query] IN  message=%r", body.message)
    try:
        agent.process_query(body.message, body.channel, body.thread_ts)
    except Exception as e:
        logger.exception("[api:test_query] Error processing test query")
        return error_response(500, "Failed to process query", str(e) or "Unknown error")
    return ActionResponse(message="Query processed successfully", timestamp=now_iso())


@router.post(
    "/test/integration",
    tags=["test"],
    summary="Exercise the tracker, language model, and chat clients once",
)
def test_integration(agent: QueryAgent = Depends(get_agent)) -> Any:
    return handle_integration_test(agent)


@router.post(
    "/demo/query",
    response_model=DemoQueryResponse,
    tags=["demo"],
    summary="Answer a question synchronously for the chat UI",
    description="Runs the full pipeline and returns the chat-formatted answer instead of posting it. 400 if message is missing.",
)
def demo_query(
    body: DemoQueryRequest | None = Body(default=None),
    agent: QueryAgent = Depends(get_agent),
) -> Any:
    return handle_demo_query(body.message if body else None, agent)
