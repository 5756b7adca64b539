"""
Assistant LLM: thin async wrapper over the OpenAI Assistants API (threads, runs, tool outputs).

The orchestrator only sees plain Python values (ids, RunSnapshot, strings), so tests can
swap in an in-memory fake with the same methods.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from openai import AsyncOpenAI

from insightear.core.config import (
    ASSISTANT_ID,
    OPENAI_API_KEY,
    RUN_MAX_COMPLETION_TOKENS,
    RUN_MAX_PROMPT_TOKENS,
)
from insightear.core.errors import ServiceUnavailableError

logger = logging.getLogger(__name__)


@dataclass
class RunSnapshot:
    """Current state of a run. tool_calls is filled only when status == requires_action."""

    run_id: str
    status: str
    tool_calls: list[dict[str, Any]] = field(default_factory=list)


def _extract_tool_calls(run: Any) -> list[dict[str, Any]]:
    """Pending tool calls as [{id, name, arguments}], arguments left as the raw JSON string."""
    action = getattr(run, "required_action", None)
    submit = getattr(action, "submit_tool_outputs", None) if action else None
    calls = getattr(submit, "tool_calls", None) or []
    out = []
    for tc in calls:
        fn = getattr(tc, "function", None)
        out.append({
            "id": getattr(tc, "id", "") or "",
            "name": (getattr(fn, "name", "") if fn else "") or "",
            "arguments": (getattr(fn, "arguments", "") if fn else "") or "",
        })
    return out


class AssistantClient:
    """Assistants API calls used by one research turn."""

    def __init__(self, client: AsyncOpenAI, assistant_id: str) -> None:
        self._client = client
        self.assistant_id = assistant_id

    async def create_thread(self) -> str:
        thread = await self._client.beta.threads.create()
        logger.info("[llm:create_thread] OUT thread_id=%s", thread.id)
        return thread.id

    async def add_user_message(self, thread_id: str, content: str) -> None:
        await self._client.beta.threads.messages.create(thread_id, role="user", content=content)
        logger.info("[llm:add_user_message] thread_id=%s content_len=%d", thread_id, len(content))

    async def create_run(self, thread_id: str) -> str:
        run = await self._client.beta.threads.runs.create(
            thread_id=thread_id,
            assistant_id=self.assistant_id,
            max_prompt_tokens=RUN_MAX_PROMPT_TOKENS,
            max_completion_tokens=RUN_MAX_COMPLETION_TOKENS,
        )
        logger.info("[llm:create_run] OUT thread_id=%s run_id=%s status=%s", thread_id, run.id, run.status)
        return run.id

    async def retrieve_run(self, thread_id: str, run_id: str) -> RunSnapshot:
        run = await self._client.beta.threads.runs.retrieve(run_id, thread_id=thread_id)
        tool_calls = _extract_tool_calls(run) if run.status == "requires_action" else []
        return RunSnapshot(run_id=run.id, status=run.status, tool_calls=tool_calls)

    async def submit_tool_outputs(self, thread_id: str, run_id: str, tool_outputs: list[dict[str, str]]) -> None:
        await self._client.beta.threads.runs.submit_tool_outputs(
            run_id,
            thread_id=thread_id,
            tool_outputs=tool_outputs,
        )
        logger.info("[llm:submit_tool_outputs] run_id=%s outputs=%d", run_id, len(tool_outputs))

    async def cancel_run(self, thread_id: str, run_id: str) -> None:
        await self._client.beta.threads.runs.cancel(run_id, thread_id=thread_id)
        logger.info("[llm:cancel_run] thread_id=%s run_id=%s", thread_id, run_id)

    async def latest_assistant_message(self, thread_id: str) -> str | None:
        """Text of the newest assistant-authored message in the thread, or None."""
        page = await self._client.beta.threads.messages.list(thread_id, order="desc", limit=20)
        for msg in page.data:
            if msg.role != "assistant":
                continue
            parts = [
                block.text.value
                for block in (msg.content or [])
                if getattr(block, "type", "") == "text" and getattr(block, "text", None)
            ]
            text = "\n\n".join(p for p in parts if p).strip()
            if text:
                logger.info("[llm:latest_assistant_message] OUT len=%d", len(text))
                return text
        logger.info("[llm:latest_assistant_message] OUT no assistant message")
        return None


def get_assistant_client() -> AssistantClient:
    """
    Build the client from config. Requires OPENAI_API_KEY and ASSISTANT_ID
    (create one with scripts/create_assistant.py).
    """
    if not OPENAI_API_KEY:
        raise ServiceUnavailableError("OPENAI_API_KEY is not set; the research assistant is unavailable.")
    if not ASSISTANT_ID:
        raise ServiceUnavailableError("ASSISTANT_ID is not set; run scripts/create_assistant.py first.")
    return AssistantClient(AsyncOpenAI(api_key=OPENAI_API_KEY), ASSISTANT_ID)
