"""
LangGraph research turn: thread → message → run → poll (→ tool outputs → poll)* → answer.

One graph is built per research turn over the session's thread. Polling uses a fixed
delay and a per-turn attempt budget; running out of attempts is a terminal
"timed_out" failure instead of an open-ended wait.
"""

import asyncio
import logging
from typing import Literal, TypedDict

from langgraph.graph import END, StateGraph
from openai import OpenAIError

from insightear.agent.llm import AssistantClient, get_assistant_client
from insightear.agent.tools import execute_tool
from insightear.core.config import MAX_TOOL_ROUNDS, RUN_MAX_POLL_ATTEMPTS, RUN_POLL_INTERVAL
from insightear.core.errors import AssistantRunError
from insightear.core.session_store import Session

logger = logging.getLogger(__name__)

PENDING_STATUSES = frozenset({"queued", "in_progress", "cancelling"})
NO_RESPONSE_TEXT = "I wasn't able to generate a response. Please try rephrasing your question."
RESEARCH_HINT = "\n\nIMPORTANT: Please use the search_web_data function if this is a market intelligence query."


class TurnState(TypedDict):
    message: str
    thread_id: str | None
    run_id: str | None
    status: str
    tool_calls: list  # list of {"id", "name", "arguments"}
    polls: int
    tool_rounds: int
    tools_used: list
    answer: str


def build_graph(
    client: AssistantClient,
    session: Session,
    poll_interval: float = RUN_POLL_INTERVAL,
    max_polls: int = RUN_MAX_POLL_ATTEMPTS,
    max_tool_rounds: int = MAX_TOOL_ROUNDS,
):
    """
    Build and compile the graph for one turn on session's thread.
    ensure_thread → post_message → start_run → await_run → (dispatch_tools → await_run)* → fetch_answer → END.
    """

    async def _ensure_thread(state: TurnState) -> dict:
        # Read the session live: another turn may have created the thread since this one started
        async with session.thread_lock:
            if session.thread_id:
                logger.info("[graph:ensure_thread] reuse thread_id=%s", session.thread_id)
                return {"thread_id": session.thread_id}
            thread_id = await client.create_thread()
            # Stored right away so a failed turn still keeps the session's thread
            session.thread_id = thread_id
        logger.info("[graph:ensure_thread] OUT new thread_id=%s", thread_id)
        return {"thread_id": thread_id}

    async def _cancel_quietly(state: TurnState) -> None:
        """Cancel a run abandoned while still active so the thread accepts the next turn."""
        if not state.get("run_id"):
            return
        try:
            await client.cancel_run(state["thread_id"], state["run_id"])
        except OpenAIError as e:
            logger.warning("[graph:cancel_run] could not cancel run_id=%s: %s", state["run_id"], e)

    async def _post_message(state: TurnState) -> dict:
        await client.add_user_message(state["thread_id"], state["message"] + RESEARCH_HINT)
        return {"status": "message_posted"}

    async def _start_run(state: TurnState) -> dict:
        run_id = await client.create_run(state["thread_id"])
        return {"run_id": run_id, "status": "queued"}

    async def _await_run(state: TurnState) -> dict:
        polls = state.get("polls") or 0
        while True:
            if polls >= max_polls:
                logger.warning("[graph:await_run] poll budget exhausted polls=%d run_id=%s", polls, state["run_id"])
                await _cancel_quietly(state)
                raise AssistantRunError("Assistant run did not finish in time", status="timed_out")
            run = await client.retrieve_run(state["thread_id"], state["run_id"])
            polls += 1
            if run.status not in PENDING_STATUSES:
                break
            await asyncio.sleep(poll_interval)
        logger.info("[graph:await_run] OUT status=%s polls=%d", run.status, polls)
        if run.status == "requires_action":
            return {"status": run.status, "tool_calls": run.tool_calls, "polls": polls}
        if run.status == "completed":
            return {"status": run.status, "tool_calls": [], "polls": polls}
        raise AssistantRunError(f"Assistant run ended with status {run.status}", status=run.status)

    async def _dispatch_tools(state: TurnState) -> dict:
        try:
            return await _run_tools(state)
        except (AssistantRunError, OpenAIError):
            # The run is still waiting on outputs
            await _cancel_quietly(state)
            raise

    async def _run_tools(state: TurnState) -> dict:
        rounds = (state.get("tool_rounds") or 0) + 1
        if rounds > max_tool_rounds:
            raise AssistantRunError("Assistant requested too many tool rounds", status="tool_round_limit")
        tool_calls = state.get("tool_calls") or []
        if not tool_calls:
            raise AssistantRunError("Run requires action but listed no tool calls", status="requires_action")
        outputs = []
        used = list(state.get("tools_used") or [])
        for tc in tool_calls:
            output = await execute_tool(tc["name"], tc["arguments"])
            outputs.append({"tool_call_id": tc["id"], "output": output})
            used.append(tc["name"])
        await client.submit_tool_outputs(state["thread_id"], state["run_id"], outputs)
        logger.info("[graph:dispatch_tools] OUT round=%d tools=%s", rounds, [tc["name"] for tc in tool_calls])
        return {"tool_rounds": rounds, "tool_calls": [], "tools_used": used}

    async def _fetch_answer(state: TurnState) -> dict:
        text = await client.latest_assistant_message(state["thread_id"])
        return {"answer": text or NO_RESPONSE_TEXT}

    def _route_after_await(state: TurnState) -> Literal["dispatch_tools", "fetch_answer"]:
        return "dispatch_tools" if state.get("status") == "requires_action" else "fetch_answer"

    graph = StateGraph(TurnState)

    graph.add_node("ensure_thread", _ensure_thread)
    graph.add_node("post_message", _post_message)
    graph.add_node("start_run", _start_run)
    graph.add_node("await_run", _await_run)
    graph.add_node("dispatch_tools", _dispatch_tools)
    graph.add_node("fetch_answer", _fetch_answer)

    graph.set_entry_point("ensure_thread")
    graph.add_edge("ensure_thread", "post_message")
    graph.add_edge("post_message", "start_run")
    graph.add_edge("start_run", "await_run")
    graph.add_conditional_edges("await_run", _route_after_await)
    graph.add_edge("dispatch_tools", "await_run")
    graph.add_edge("fetch_answer", END)

    return graph.compile()


async def run_research_turn(
    session: Session,
    message: str,
    client: AssistantClient | None = None,
    poll_interval: float = RUN_POLL_INTERVAL,
    max_polls: int = RUN_MAX_POLL_ATTEMPTS,
    max_tool_rounds: int = MAX_TOOL_ROUNDS,
) -> dict:
    """
    Run one research turn for session and store the result on it.
    Returns {"answer", "tools_used", "thread_id"}.

    Raises AssistantRunError on a non-completed run, timeout or API failure, and
    ServiceUnavailableError when the assistant is not configured.
    """
    q = (message or "").strip()
    if not q:
        raise ValueError("message is required")
    client = client or get_assistant_client()
    logger.info("[run_research_turn] START session_id=%s thread_id=%s query=%r", session.session_id[:16], session.thread_id, q)
    initial: TurnState = {
        "message": q,
        "thread_id": session.thread_id,
        "run_id": None,
        "status": "",
        "tool_calls": [],
        "polls": 0,
        "tool_rounds": 0,
        "tools_used": [],
        "answer": "",
    }
    graph = build_graph(client, session, poll_interval, max_polls, max_tool_rounds)
    try:
        final = await graph.ainvoke(initial, config={"recursion_limit": 2 * max_tool_rounds + 10})
    except OpenAIError as e:
        logger.exception("[run_research_turn] assistant API call failed")
        raise AssistantRunError(f"Assistant API error: {e}", status="api_error") from e
    answer = final.get("answer") or NO_RESPONSE_TEXT
    # Other requests for this session may have interleaved while awaiting; last writer wins
    # for the query and answer, but the thread handle is only ever set once
    if not session.thread_id:
        session.thread_id = final.get("thread_id")
    session.last_query = q
    session.last_response = answer
    tools_used = list(final.get("tools_used") or [])
    logger.info("[run_research_turn] END polls=%d tool_rounds=%d tools_used=%s answer_len=%d", final.get("polls") or 0, final.get("tool_rounds") or 0, tools_used, len(answer))
    return {"answer": answer, "tools_used": tools_used, "thread_id": session.thread_id}
