# Run from project root: uvicorn sprintbot.main:app --reload  (or: python -m sprintbot.main)

import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse

from sprintbot.agent.graph import QueryAgent, build_agent
from sprintbot.api.routes import router
from sprintbot.core.config import APP_NAME, APP_VERSION, Settings, load_settings, validate_settings

logger = logging.getLogger(__name__)

ENDPOINTS = {
    "health": "/api/health",
    "slackWebhook": "/api/slack/webhook",
    "testQuery": "/api/test/query",
    "sprintSummary": "/api/sprint/summary",
    "testIntegration": "/api/test/integration",
    "configStatus": "/api/config/status",
    "demoQuery": "/api/demo/query",
}

# Unmatched /api paths answer 404 for every method, not 405.
API_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def _log_loop_exception(loop: asyncio.AbstractEventLoop, context: dict) -> None:
    logger.error("Unhandled exception in event loop: %s", context.get("message"), exc_info=context.get("exception"))


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Install the loop exception logger, run the startup self-test in development, close clients on shutdown."""
    asyncio.get_running_loop().set_exception_handler(_log_loop_exception)
    settings: Settings = app.state.settings
    agent: QueryAgent = app.state.agent
    if settings.environment == "development":
        logger.info("Running integration test on startup...")
        try:
            await asyncio.to_thread(agent.test_integration)
            logger.info("Integration test passed on startup")
        except Exception as e:
            logger.warning("Integration test failed on startup (this is normal in development): %s", e)
    yield
    agent.tracker.close()
    agent.notifier.close()


def _not_found(path: str) -> JSONResponse:
    return JSONResponse(status_code=404, content={"error": "Endpoint not found", "path": path})


def _frontend_file(frontend_dir: Path, path: str) -> Path | None:
    """Return the static file for a non-API path, falling back to index.html; None if nothing is built."""
    root = frontend_dir.resolve()
    if path:
        candidate = (root / path).resolve()
        if candidate.is_file() and root in candidate.parents:
            return candidate
    index = root / "index.html"
    return index if index.is_file() else None


def create_app(settings: Settings | None = None, agent: QueryAgent | None = None) -> FastAPI:
    """Build the FastAPI app. Settings are loaded from the environment when not given."""
    settings = settings or load_settings()
    logging.basicConfig(level=getattr(logging, settings.log_level, logging.INFO))
    validate_settings(settings)

    app = FastAPI(
        title=APP_NAME,
        description="Answers questions about the current sprint from Slack, the test endpoints, and the demo UI.",
        version=APP_VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.agent = agent or build_agent(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        logger.info("%s %s", request.method, request.url.path)
        return await call_next(request)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(_request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error", exc_info=exc)
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error", "message": str(exc) or "An unexpected error occurred"},
        )

    app.include_router(router)

    frontend_dir = Path(settings.frontend_dir)

    @app.api_route("/api/{path:path}", methods=API_METHODS, include_in_schema=False)
    def api_not_found(path: str):
        return _not_found(f"/api/{path}")

    @app.get("/{path:path}", include_in_schema=False)
    def frontend(path: str):
        if path == "api":
            return _not_found("/api")
        asset = _frontend_file(frontend_dir, path)
        if asset is not None:
            return FileResponse(asset)
        if not path:
            return {
                "name": APP_NAME,
                "version": APP_VERSION,
                "description": "AI-powered sprint assistant for Slack and Jira",
                "endpoints": ENDPOINTS,
            }
        return _not_found(f"/{path}")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=app.state.settings.port)
