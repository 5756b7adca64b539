"""
API route aggregator: register endpoints; no logic — only delegate to handlers.
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, File, Request, UploadFile
from fastapi.responses import PlainTextResponse

from insightear.api.handlers import handle_chat, handle_download_report, handle_upload, resolve_session_id
from insightear.schemas.chat import ChatErrorResponse, ChatRequest, ChatResponse, HealthResponse
from insightear.schemas.upload import UploadResponse

logger = logging.getLogger(__name__)
router = APIRouter()


# --- System ---

@router.get("/", tags=["system"])
def root():
    return {"status": "InsightEar GPT backend running"}


@router.get("/health", response_model=HealthResponse, tags=["system"])
def health() -> HealthResponse:
    return HealthResponse(status="ok", timestamp=datetime.now(timezone.utc).isoformat())


# --- Chat ---

@router.post(
    "/chat",
    response_model=ChatResponse,
    responses={500: {"model": ChatErrorResponse}},
    tags=["chat"],
    summary="Send a chat message",
    description="Greetings and report requests are answered directly; anything else runs the research assistant. Session from the X-Session-ID header (fallback: client address). 500 with a degraded reply when the assistant run fails.",
)
async def post_chat(body: ChatRequest, request: Request):
    return await handle_chat(body.message, resolve_session_id(request))


# --- Reports ---

@router.get(
    "/download-report/{session_id}",
    response_class=PlainTextResponse,
    tags=["reports"],
    summary="Download the last analysis as a plain-text report",
    description="Returns the report as an attachment. 404 if the session has no stored analysis.",
)
def download_report(session_id: str) -> PlainTextResponse:
    return handle_download_report(session_id)


# --- Uploads ---

@router.post(
    "/upload",
    response_model=UploadResponse,
    tags=["uploads"],
    summary="Upload files",
    description="Accept up to 10 files of at most 5MB each; save to data/uploads/ and record them on the session. 413 for oversized files.",
)
async def upload_files(
    request: Request,
    files: list[UploadFile] = File(..., description="One or more files, 5MB max each."),
) -> UploadResponse:
    return await handle_upload(files, resolve_session_id(request))
