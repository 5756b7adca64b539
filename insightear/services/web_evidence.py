"""
Web evidence: best-effort Reddit and news lookups for the search_web_data tool.

Responsibility: Fetch both sources concurrently and shape a small, bounded,
JSON-serializable payload for the assistant. Each fetcher absorbs every network,
status, parse and timeout error and returns an empty list; nothing propagates.
Feed parsing is deliberately narrow (regex over <title>), and its output is
treated as untrusted text with an explicit result cap.
"""

import asyncio
import html
import logging
import re
from typing import Any

import httpx

from insightear.core.config import (
    MAX_NEWS_RESULTS,
    MAX_REDDIT_RESULTS,
    NEWS_RSS_URL,
    REDDIT_BASE_URL,
    REDDIT_FETCH_LIMIT,
    REDDIT_SEARCH_URL,
    TOOLS_HTTP_TIMEOUT,
    WEB_USER_AGENT,
)

logger = logging.getLogger(__name__)

_TITLE_RE = re.compile(r"<title>(.*?)</title>", re.IGNORECASE | re.DOTALL)
_CDATA_RE = re.compile(r"^<!\[CDATA\[(.*)\]\]>$", re.DOTALL)
_MAX_TITLE_LEN = 300


def _http_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=TOOLS_HTTP_TIMEOUT,
        headers={"User-Agent": WEB_USER_AGENT},
        follow_redirects=True,
    )


def _clean_title(raw: str) -> str:
    """Unwrap CDATA, unescape entities, collapse whitespace, cap length."""
    text = (raw or "").strip()
    m = _CDATA_RE.match(text)
    if m:
        text = m.group(1)
    text = html.unescape(text)
    text = " ".join(text.split())
    return text[:_MAX_TITLE_LEN]


async def search_reddit(query: str, client: httpx.AsyncClient) -> list[dict[str, Any]]:
    """Search Reddit discussions. Returns up to 3 {title, url, subreddit, score}; [] on any error."""
    q = (query or "").strip()
    if not q:
        return []
    try:
        response = await client.get(
            REDDIT_SEARCH_URL,
            params={"q": q, "limit": REDDIT_FETCH_LIMIT, "sort": "relevance"},
        )
        response.raise_for_status()
        children = ((response.json() or {}).get("data") or {}).get("children") or []
        results = []
        for child in children[:MAX_REDDIT_RESULTS]:
            post = (child or {}).get("data") or {}
            title = _clean_title(str(post.get("title") or ""))
            if not title:
                continue
            permalink = str(post.get("permalink") or "")
            results.append({
                "title": title,
                "url": f"{REDDIT_BASE_URL}{permalink}" if permalink else "",
                "subreddit": str(post.get("subreddit") or ""),
                "score": post.get("score") or 0,
            })
    except Exception as e:
        logger.warning("[web_evidence:search_reddit] failed for %r: %s", q, e)
        return []
    logger.info("[web_evidence:search_reddit] OUT query=%r results=%d", q, len(results))
    return results


def parse_feed_titles(feed_text: str, limit: int = MAX_NEWS_RESULTS) -> list[str]:
    """Extract item titles from an RSS feed, skipping the first <title> (the feed's own)."""
    titles = [_clean_title(t) for t in _TITLE_RE.findall(feed_text or "")]
    return [t for t in titles[1:] if t][:limit]


async def search_news(query: str, client: httpx.AsyncClient) -> list[dict[str, Any]]:
    """Search the news RSS feed. Returns up to 3 {title}; [] on any error."""
    q = (query or "").strip()
    if not q:
        return []
    try:
        response = await client.get(
            NEWS_RSS_URL,
            params={"q": q, "hl": "en-US", "gl": "US", "ceid": "US:en"},
        )
        response.raise_for_status()
        results = [{"title": t} for t in parse_feed_titles(response.text)]
    except Exception as e:
        logger.warning("[web_evidence:search_news] failed for %r: %s", q, e)
        return []
    logger.info("[web_evidence:search_news] OUT query=%r results=%d", q, len(results))
    return results


def summarize(reddit: list, news: list) -> str:
    return f"Found {len(reddit)} Reddit discussions and {len(news)} news articles."


async def gather_web_evidence(
    query: str,
    sources: list[str] | None = None,
    date_range: str | None = None,
    client: httpx.AsyncClient | None = None,
) -> dict[str, Any]:
    """
    Fetch Reddit discussions and news headlines concurrently for query.

    Always returns a well-formed payload:
    {query, summary, reddit: [...], news: [...], sources, date_range}.
    sources and date_range are echoed back for the assistant; both fetches always run.
    """
    logger.info("[web_evidence:gather] IN  query=%r sources=%s date_range=%r", query, sources, date_range)
    owns_client = client is None
    http = client or _http_client()
    try:
        reddit, news = await asyncio.gather(search_reddit(query, http), search_news(query, http))
    finally:
        if owns_client:
            await http.aclose()
    payload = {
        "query": query,
        "summary": summarize(reddit, news),
        "reddit": reddit,
        "news": news,
        "sources": sources or ["reddit", "news"],
        "date_range": date_range,
    }
    logger.info("[web_evidence:gather] OUT %s", payload["summary"])
    return payload
