"""
Unit tests for assistant tool execution.
"""

import asyncio
import json
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from insightear.agent.tools import ASSISTANT_TOOLS, analyze_market_data, execute_tool, get_company_background
from insightear.core.errors import ToolArgumentsError


def test_tool_definitions_cover_dispatch() -> None:
    names = {t["function"]["name"] for t in ASSISTANT_TOOLS}
    assert names == {"search_web_data", "analyze_market_data", "get_company_background"}


def test_market_analysis_is_stable_per_query() -> None:
    a = analyze_market_data("Nike", "sentiment")
    b = analyze_market_data("nike", "sentiment")
    assert a["sentiment"] == b["sentiment"]
    assert sum(a["sentiment"].values()) == 100
    assert a["trend"] in ("rising", "stable", "declining")


def test_unknown_tool_returns_error_object() -> None:
    out = asyncio.run(execute_tool("nope", "{}"))
    assert json.loads(out) == {"error": "Unknown tool: nope"}


@pytest.mark.parametrize("raw", ["{oops", "[1, 2]", "\"just a string\""])
def test_malformed_arguments_raise(raw: str) -> None:
    with pytest.raises(ToolArgumentsError) as exc:
        asyncio.run(execute_tool("analyze_market_data", raw))
    assert exc.value.status == "invalid_tool_arguments"


def test_empty_arguments_are_allowed() -> None:
    out = json.loads(asyncio.run(execute_tool("analyze_market_data", "")))
    assert out["analysis_type"] == "sentiment"


def test_company_background_empty_query() -> None:
    assert asyncio.run(get_company_background("  ")) == {"query": "", "found": False}


WIKI_NIKE = {
    "title": "Nike, Inc.",
    "description": "American athletic apparel company",
    "extract": "Nike, Inc. is an American athletic footwear and apparel corporation.",
    "content_urls": {"desktop": {"page": "https://en.wikipedia.org/wiki/Nike,_Inc."}},
}


def _background(query: str, handler) -> dict:
    async def run() -> dict:
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await get_company_background(query, client=client)

    return asyncio.run(run())


def test_company_background_parses_summary() -> None:
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url.path)
        return httpx.Response(200, json=WIKI_NIKE)

    out = _background("Nike Inc", handler)
    assert seen == ["/api/rest_v1/page/summary/Nike_Inc"]
    assert out == {
        "query": "Nike Inc",
        "found": True,
        "title": "Nike, Inc.",
        "description": "American athletic apparel company",
        "summary": WIKI_NIKE["extract"],
        "url": "https://en.wikipedia.org/wiki/Nike,_Inc.",
    }


def test_company_background_missing_fields_use_defaults() -> None:
    out = _background("Acme", lambda request: httpx.Response(200, json={}))
    assert out["found"] is True
    assert out["title"] == "Acme"
    assert out["summary"] == ""
    assert out["url"] == ""


def test_company_background_not_found() -> None:
    out = _background("Nosuchbrand", lambda request: httpx.Response(404, json={"type": "not_found"}))
    assert out == {"query": "Nosuchbrand", "found": False}


def test_company_background_network_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    assert _background("Nike", handler) == {"query": "Nike", "found": False}


def test_company_background_bad_json() -> None:
    out = _background("Nike", lambda request: httpx.Response(200, text="<html>oops</html>"))
    assert out == {"query": "Nike", "found": False}


def test_execute_tool_dispatches_company_background() -> None:
    fake = AsyncMock(return_value={"query": "Nike", "found": True, "title": "Nike, Inc."})
    with patch("insightear.agent.tools.get_company_background", new=fake):
        out = asyncio.run(execute_tool("get_company_background", '{"query": " Nike "}'))
    fake.assert_awaited_once_with("Nike")
    assert json.loads(out)["title"] == "Nike, Inc."


def test_execute_tool_dispatches_web_search() -> None:
    payload = {"query": "Nike", "summary": "", "reddit": [], "news": [], "sources": ["reddit"], "date_range": None}
    fake = AsyncMock(return_value=payload)
    with patch("insightear.agent.tools.gather_web_evidence", new=fake):
        out = asyncio.run(execute_tool("search_web_data", '{"query": "Nike", "sources": ["reddit"]}'))
    fake.assert_awaited_once_with("Nike", ["reddit"], None)
    assert json.loads(out) == payload
