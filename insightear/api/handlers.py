"""
API handlers: route chat messages, build report downloads, read uploads, map errors to HTTP.

Responsibility: Bridge HTTP types and services. Marshalling and exception-to-HTTP mapping.
Lives in the API layer so services and the agent stay free of FastAPI/HTTP types.
"""

import logging
from urllib.parse import quote

from fastapi import HTTPException, Request, UploadFile
from fastapi.responses import JSONResponse, PlainTextResponse

from insightear.agent.graph import run_research_turn
from insightear.core.config import MAX_UPLOAD_BYTES
from insightear.core.errors import AssistantRunError, ServiceUnavailableError
from insightear.core.session_store import session_store
from insightear.schemas.chat import ChatErrorResponse, ChatResponse
from insightear.schemas.upload import UploadResponse
from insightear.services.intent import Intent, classify_message, conversational_reply
from insightear.services.report import build_report, report_filename
from insightear.services.upload_service import TooManyFilesError, UploadTooLargeError, save_uploaded_files

logger = logging.getLogger(__name__)

DEGRADED_REPLY = "I'm experiencing technical difficulties. Please try again in a moment."
NO_ANALYSIS_REPLY = (
    "I don't have a recent analysis to generate a report from. "
    "Please ask me to analyze a brand or market first."
)
NO_ANALYSIS_DETAIL = "No analysis found for this session. Run a research query first."
DEFAULT_SESSION_ID = "browser-session"


def resolve_session_id(request: Request) -> str:
    """X-Session-ID header, else the caller's address, else a shared browser session."""
    header = (request.headers.get("x-session-id") or "").strip()
    if header:
        return header
    if request.client and request.client.host:
        return request.client.host
    return DEFAULT_SESSION_ID


def download_path(session_id: str) -> str:
    return f"/download-report/{quote(session_id, safe='')}"


def _report_reply(session_id: str) -> ChatResponse:
    session = session_store.get_or_create(session_id)
    if not session.has_report:
        logger.info("[handlers:report_reply] no stored analysis session_id=%s", session_id[:16])
        return ChatResponse(response=NO_ANALYSIS_REPLY, session_id=session_id)
    text = (
        "✅ **Report Generated Successfully!**\n\n"
        f"I've prepared a report of the **{session.last_query}** analysis.\n\n"
        f"**📥 [Download Report]({download_path(session_id)})**\n\n"
        "The report includes the findings, data sources and recommendations from our analysis."
    )
    return ChatResponse(response=text, session_id=session_id, report_ready=True)


async def handle_chat(message: str, session_id: str) -> ChatResponse | JSONResponse:
    """
    Classify the message and answer it: report link, canned reply, or an assistant research turn.
    Research failures become a single HTTP 500 with a degraded reply and a diagnostic.
    """
    intent = classify_message(message)
    logger.info("[handlers:chat] IN  session_id=%s intent=%s message=%r", session_id[:16], intent.value, message)

    if intent is Intent.REPORT:
        return _report_reply(session_id)

    if intent is Intent.CONVERSATIONAL:
        # First contact creates the session even though the reply ignores it
        session_store.get_or_create(session_id)
        return ChatResponse(response=conversational_reply(message), session_id=session_id)

    session = session_store.get_or_create(session_id)
    try:
        result = await run_research_turn(session, message)
    except (AssistantRunError, ServiceUnavailableError) as e:
        logger.warning("[handlers:chat] research turn failed: %s", e)
        return _degraded(str(e))
    except Exception as e:
        logger.exception("[handlers:chat] research turn crashed")
        return _degraded(f"{type(e).__name__}: {e}")
    logger.info("[handlers:chat] OUT answer_len=%d tools_used=%s", len(result["answer"]), result["tools_used"])
    return ChatResponse(response=result["answer"], session_id=session_id)


def _degraded(diagnostic: str) -> JSONResponse:
    body = ChatErrorResponse(response=DEGRADED_REPLY, error=diagnostic)
    return JSONResponse(status_code=500, content=body.model_dump())


def handle_download_report(session_id: str) -> PlainTextResponse:
    """Plain-text report of the session's last analysis; 404 when there is none."""
    session = session_store.get(session_id)
    if session is None or not session.has_report:
        raise HTTPException(status_code=404, detail=NO_ANALYSIS_DETAIL)
    body = build_report(session.last_query, session.last_response)
    filename = report_filename(session.last_query)
    logger.info("[handlers:download_report] session_id=%s filename=%s", session_id[:16], filename)
    return PlainTextResponse(
        body,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


async def handle_upload(files: list[UploadFile], session_id: str) -> UploadResponse:
    """
    Read uploaded files, save them, record them on the session.
    Maps service errors to HTTP 400/413/500.
    """
    if not files:
        raise HTTPException(status_code=400, detail="At least one file is required.")

    items: list[tuple[str, str, bytes]] = []
    for upload in files:
        # One byte past the limit is enough to reject; never buffers more than that
        content = await upload.read(MAX_UPLOAD_BYTES + 1)
        items.append((upload.filename or "", upload.content_type or "", content))

    try:
        result = save_uploaded_files(items)
    except TooManyFilesError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except UploadTooLargeError as e:
        raise HTTPException(
            status_code=413,
            detail=f"Files must be 5MB or smaller. Rejected: {', '.join(e.rejected)}",
        ) from e
    except OSError as e:
        raise HTTPException(status_code=500, detail=f"Failed to save files: {e!s}") from e

    session = session_store.get_or_create(session_id)
    session.uploaded_files.extend(result.records)
    return UploadResponse(files_saved=result.files_saved, paths=result.paths)
