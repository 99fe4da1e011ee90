"""Load settings from environment (.env and env vars)."""

from __future__ import annotations

import os
from pathlib import Path

# Load .env from project root if present
_env_path = Path(__file__).resolve().parent.parent.parent / ".env"
if _env_path.exists():
    from dotenv import load_dotenv
    load_dotenv(_env_path)


def _str(key: str, default: str = "") -> str:
    return (os.environ.get(key) or "").strip() or default


# Notion
NOTION_API_KEY = _str("NOTION_API_KEY")
NOTION_API_BASE = _str("NOTION_API_BASE") or "https://api.notion.com/v1"
NOTION_VERSION = _str("NOTION_VERSION") or "2022-06-28"

# LLM (OpenAI)
OPENAI_API_KEY = _str("OPENAI_API_KEY")
LLM_MODEL = _str("LLM_MODEL") or "gpt-4o-mini"

# Logging
LOG_LEVEL = _str("LOG_LEVEL") or "INFO"
