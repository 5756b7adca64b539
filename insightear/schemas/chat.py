"""Schemas for the chat, health and report endpoints."""

from pydantic import BaseModel, Field


class ChatRequest(BaseModel):
    """Request body for POST /chat. The session is identified by the X-Session-ID header."""

    message: str = Field("", description="User message. Empty input gets a generic conversational reply.")


class ChatResponse(BaseModel):
    """Response for POST /chat."""

    response: str = Field(..., description="Reply text (markdown).")
    session_id: str = Field(..., description="Session key the reply was produced for.")
    report_ready: bool = Field(False, description="True when the reply links to a downloadable report.")

    model_config = {
        "json_schema_extra": {
            "examples": [{"response": "Hello! I'm InsightEar GPT...", "session_id": "abc123", "report_ready": False}]
        }
    }


class ChatErrorResponse(BaseModel):
    """Body returned with HTTP 500 when a research turn fails."""

    response: str = Field(..., description="User-facing degraded message.")
    error: str = Field(..., description="Diagnostic: failure message and raw run status.")


class HealthResponse(BaseModel):
    status: str = "ok"
    timestamp: str
