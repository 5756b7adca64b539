"""
Assistant tools: definitions and execution for run tool calls.

Tools: search_web_data (Reddit + news evidence), analyze_market_data (simulated
analysis), get_company_background (Wikipedia summary). Every call yields exactly
one output string; unknown tool names get an error object instead of nothing.
"""

import json
import logging
import zlib
from datetime import datetime, timezone
from typing import Any
from urllib.parse import quote

import httpx

from insightear.core.config import TOOLS_HTTP_TIMEOUT, WEB_USER_AGENT, WIKIPEDIA_SUMMARY_URL
from insightear.core.errors import ToolArgumentsError
from insightear.services.web_evidence import gather_web_evidence

logger = logging.getLogger(__name__)

# Assistants API function-calling format; used by scripts/create_assistant.py
ASSISTANT_TOOLS = [
    {
        "type": "function",
        "function": {
            "name": "search_web_data",
            "description": "Search recent Reddit discussions and news headlines about a brand, product or market. Use this for any market intelligence question before answering.",
            "parameters": {
                "type": "object",
                "properties": {
                    "query": {
                        "type": "string",
                        "description": "Brand, product or topic to research (e.g. Nike running shoes)",
                    },
                    "sources": {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": "Optional source hints, e.g. [\"reddit\", \"news\"]",
                    },
                    "date_range": {
                        "type": "string",
                        "description": "Optional time window hint, e.g. past_month",
                    },
                },
                "required": ["query"],
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": "analyze_market_data",
            "description": "Run a market analysis (sentiment, trends or competition) for a brand or topic. Returns indicative figures to frame the answer.",
            "parameters": {
                "type": "object",
                "properties": {
                    "query": {
                        "type": "string",
                        "description": "Brand or topic to analyze",
                    },
                    "analysis_type": {
                        "type": "string",
                        "enum": ["sentiment", "trends", "competitive"],
                        "description": "Kind of analysis",
                    },
                },
                "required": ["query"],
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": "get_company_background",
            "description": "Get a short encyclopedia background summary for a company or brand.",
            "parameters": {
                "type": "object",
                "properties": {
                    "query": {
                        "type": "string",
                        "description": "Company or brand name (e.g. Nike)",
                    }
                },
                "required": ["query"],
            },
        },
    },
]

ASSISTANT_INSTRUCTIONS = (
    "You are InsightEar GPT, a market research assistant. For every question about a brand, product, "
    "market or consumer sentiment, call search_web_data first and base your answer on what it returns. "
    "Use analyze_market_data to frame sentiment or trend figures and get_company_background for company "
    "context. Structure answers with the headings: Summary, Key Findings, Consumer Sentiment, "
    "Recommendations. Cite the discussions and headlines you used. End by offering a downloadable report."
)


def _parse_arguments(name: str, raw: str) -> dict[str, Any]:
    """Tool arguments must be a JSON object; empty means no arguments."""
    if not raw or not raw.strip():
        return {}
    try:
        args = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ToolArgumentsError(name, raw) from e
    if not isinstance(args, dict):
        raise ToolArgumentsError(name, raw)
    return args


def analyze_market_data(query: str, analysis_type: str = "sentiment") -> dict[str, Any]:
    """
    Simulated market analysis. Figures are derived from a checksum of the query so the
    same question always gets the same numbers; they are indicative, not measured.
    """
    seed = zlib.crc32((query or "").lower().encode("utf-8"))
    positive = 40 + seed % 31
    negative = 5 + (seed >> 8) % 21
    neutral = 100 - positive - negative
    trend = ("rising", "stable", "declining")[(seed >> 16) % 3]
    return {
        "query": query,
        "analysis_type": analysis_type or "sentiment",
        "sentiment": {"positive": positive, "neutral": neutral, "negative": negative},
        "trend": trend,
        "mention_volume_index": 50 + (seed >> 4) % 51,
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "note": "Simulated analysis; combine with search_web_data evidence.",
    }


async def get_company_background(query: str, client: httpx.AsyncClient | None = None) -> dict[str, Any]:
    """Wikipedia page summary for query. Best-effort: returns found=False on any error."""
    q = (query or "").strip()
    if not q:
        return {"query": q, "found": False}
    url = WIKIPEDIA_SUMMARY_URL + quote(q.replace(" ", "_"))
    owns_client = client is None
    http = client or httpx.AsyncClient(
        timeout=TOOLS_HTTP_TIMEOUT,
        headers={"User-Agent": WEB_USER_AGENT},
        follow_redirects=True,
    )
    try:
        response = await http.get(url)
        if response.status_code != 200:
            logger.info("[tools] get_company_background status=%d for %r", response.status_code, q)
            return {"query": q, "found": False}
        data = response.json()
    except Exception as e:
        logger.warning("[tools] get_company_background failed: %s", e)
        return {"query": q, "found": False}
    finally:
        if owns_client:
            await http.aclose()
    return {
        "query": q,
        "found": True,
        "title": data.get("title") or q,
        "description": data.get("description") or "",
        "summary": (data.get("extract") or "")[:1500],
        "url": ((data.get("content_urls") or {}).get("desktop") or {}).get("page", ""),
    }


async def execute_tool(name: str, raw_arguments: str) -> str:
    """
    Execute a tool call and return its output as a JSON string for submission.

    Raises ToolArgumentsError when the arguments are not a JSON object.
    """
    args = _parse_arguments(name, raw_arguments)
    logger.info("[tools] execute_tool name=%r arguments=%r", name, args)

    if name == "search_web_data":
        query = str(args.get("query") or "").strip()
        result = await gather_web_evidence(query, args.get("sources"), args.get("date_range"))
        return json.dumps(result)

    if name == "analyze_market_data":
        query = str(args.get("query") or "").strip()
        return json.dumps(analyze_market_data(query, str(args.get("analysis_type") or "sentiment")))

    if name == "get_company_background":
        query = str(args.get("query") or "").strip()
        return json.dumps(await get_company_background(query))

    logger.warning("[tools] unknown tool %r; returning error output", name)
    return json.dumps({"error": f"Unknown tool: {name}"})
