"""Schemas for the query endpoints."""

from pydantic import BaseModel, ConfigDict, Field


class TestQueryRequest(BaseModel):
    """Request body for POST /api/test/query. message is checked by the route so a missing value returns 400."""

    model_config = ConfigDict(populate_by_name=True)

    message: str | None = Field(None, description="User question about the current sprint.")
    channel: str | None = Field(None, description="Chat channel to reply in.")
    thread_ts: str | None = Field(None, alias="threadTs", description="Chat thread to reply in.")


class DemoQueryRequest(BaseModel):
    """Request body for POST /api/demo/query."""

    message: str | None = Field(None, description="User question from the chat UI.")


class DemoQueryResponse(BaseModel):
    """Response for POST /api/demo/query."""

    answer: str = Field(..., description="Chat-formatted answer text.")

    model_config = {
        "json_schema_extra": {
            "examples": [{"answer": "There are 2 work items ready for production:\n  • PROJ-101 ..."}]
        }
    }


class ActionResponse(BaseModel):
    """Response for test endpoints that trigger work but return no data."""

    success: bool = True
    message: str
    timestamp: str
