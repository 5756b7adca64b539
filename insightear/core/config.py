"""
Application configuration (env, settings, constants).

Responsibility: Centralize config loading, environment variables, and app-wide
constants. Keeps the rest of the app decoupled from how config is sourced.
"""

import os

from dotenv import load_dotenv

load_dotenv()

# OpenAI Assistants API. ASSISTANT_ID comes from scripts/create_assistant.py.
OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "").strip()
ASSISTANT_ID: str = os.getenv("ASSISTANT_ID", "").strip()
ASSISTANT_MODEL: str = os.getenv("ASSISTANT_MODEL", "gpt-4o-mini").strip() or "gpt-4o-mini"
ASSISTANT_NAME: str = "InsightEar GPT"

# Sessions: removed 15 minutes after creation, regardless of activity
SESSION_TTL_SECONDS: float = float(os.getenv("SESSION_TTL_SECONDS", "900"))
SESSION_SWEEP_INTERVAL_SECONDS: float = float(os.getenv("SESSION_SWEEP_INTERVAL_SECONDS", "900"))

# Assistant run polling (fixed delay, bounded attempts)
RUN_POLL_INTERVAL: float = float(os.getenv("RUN_POLL_INTERVAL", "1.5"))
RUN_MAX_POLL_ATTEMPTS: int = int(os.getenv("RUN_MAX_POLL_ATTEMPTS", "120"))
MAX_TOOL_ROUNDS: int = 8
RUN_MAX_PROMPT_TOKENS: int = 15000
RUN_MAX_COMPLETION_TOKENS: int = 6000

# Web evidence sources (no key required)
TOOLS_HTTP_TIMEOUT: float = 10.0
WEB_USER_AGENT: str = "InsightEarGPT/1.0 (market research assistant)"
REDDIT_SEARCH_URL: str = "https://www.reddit.com/search.json"
REDDIT_BASE_URL: str = "https://www.reddit.com"
NEWS_RSS_URL: str = "https://news.google.com/rss/search"
WIKIPEDIA_SUMMARY_URL: str = "https://en.wikipedia.org/api/rest_v1/page/summary/"
REDDIT_FETCH_LIMIT: int = 5
MAX_REDDIT_RESULTS: int = 3
MAX_NEWS_RESULTS: int = 3

# Upload storage
UPLOAD_DIR_NAME: str = "data/uploads"
MAX_UPLOAD_BYTES: int = 5 * 1024 * 1024
MAX_UPLOAD_FILES: int = 10
