"""
Shared test doubles: an in-memory stand-in for the Assistants API client.
"""

import pytest

from insightear.agent.llm import RunSnapshot
from insightear.core.session_store import session_store


class FakeAssistantClient:
    """
    Scripted assistant. Each run walks through `statuses` (the last one repeats);
    requires_action polls report `tool_calls`.
    """

    def __init__(self, statuses=("completed",), tool_calls=None, answer="Sentiment around the brand is mostly positive.", sticky_action=False):
        self.statuses = list(statuses)
        self.tool_calls = tool_calls or []
        self.answer = answer
        self.sticky_action = sticky_action
        self.threads: list[str] = []
        self.messages: list[tuple[str, str]] = []
        self.runs: list[tuple[str, str]] = []
        self.submitted: list[list[dict]] = []
        self.cancelled: list[str] = []
        self.polls = 0
        self._step = 0

    async def create_thread(self) -> str:
        thread_id = f"thread_{len(self.threads) + 1}"
        self.threads.append(thread_id)
        return thread_id

    async def add_user_message(self, thread_id: str, content: str) -> None:
        self.messages.append((thread_id, content))

    async def create_run(self, thread_id: str) -> str:
        run_id = f"run_{len(self.runs) + 1}"
        self.runs.append((thread_id, run_id))
        self._step = 0
        return run_id

    async def retrieve_run(self, thread_id: str, run_id: str) -> RunSnapshot:
        self.polls += 1
        status = self.statuses[min(self._step, len(self.statuses) - 1)]
        self._step += 1
        calls = list(self.tool_calls) if status == "requires_action" else []
        return RunSnapshot(run_id=run_id, status=status, tool_calls=calls)

    async def submit_tool_outputs(self, thread_id: str, run_id: str, tool_outputs: list[dict]) -> None:
        self.submitted.append(tool_outputs)
        if self.sticky_action:
            return
        # The run moves on once outputs are in
        self.statuses = [s for s in self.statuses if s != "requires_action"] or ["completed"]
        self._step = 0

    async def cancel_run(self, thread_id: str, run_id: str) -> None:
        self.cancelled.append(run_id)

    async def latest_assistant_message(self, thread_id: str) -> str | None:
        return self.answer


@pytest.fixture
def fake_client_cls():
    return FakeAssistantClient


@pytest.fixture(autouse=True)
def clear_sessions():
    session_store.clear()
    yield
    session_store.clear()
