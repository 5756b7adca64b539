"""Plain-text report artifact for the last research answer of a session."""

import re
from datetime import datetime, timezone

REPORT_TITLE = "InsightEar GPT - Market Research Report"
DEFAULT_FILENAME = "insightear_report.txt"


def build_report(query: str, answer: str, generated_at: datetime | None = None) -> str:
    """Report body: fixed header, the query, a generation timestamp, then the answer verbatim."""
    ts = (generated_at or datetime.now(timezone.utc)).strftime("%Y-%m-%d %H:%M:%S UTC")
    rule = "=" * len(REPORT_TITLE)
    return (
        f"{REPORT_TITLE}\n"
        f"{rule}\n\n"
        f"Query: {query}\n"
        f"Generated: {ts}\n\n"
        f"{'-' * 40}\n\n"
        f"{answer}\n\n"
        f"{'-' * 40}\n"
        "Sources: Reddit discussions and news coverage gathered at analysis time.\n"
    )


def report_filename(query: str) -> str:
    """Filename from the query: whitespace collapsed to underscores, unsafe characters dropped."""
    slug = re.sub(r"\s+", "_", (query or "").strip())
    slug = re.sub(r"[^\w\-]", "", slug, flags=re.ASCII)[:80].strip("_")
    if not slug:
        return DEFAULT_FILENAME
    return f"{slug}_report.txt"
