"""Run the company-analysis workflow from the command line.

Builds the same body a Notion automation would send and runs it in-process.

Usage:
  python -m notion_company_agent.scripts.run_analysis "Company Name" [page_id]

Env:
  OPENAI_API_KEY
  NOTION_API_KEY (only when page_id is given)
"""

from __future__ import annotations

import json
import sys

from .. import config
from ..logging_config import setup_logging
from ..services.run_pipeline import ACCOUNT_NAME_PROPERTY, get_task, run_task


def build_webhook_body(company_name: str, page_id: str | None = None) -> dict:
    data: dict = {
        "object": "page",
        "properties": {
            ACCOUNT_NAME_PROPERTY: {"type": "title", "title": [{"type": "text", "plain_text": company_name}]},
        },
    }
    if page_id:
        data["id"] = page_id
    return {"source": {"type": "automation"}, "data": data}


def main(argv: list[str] | None = None) -> None:
    args = sys.argv[1:] if argv is None else argv
    if not args:
        raise SystemExit('Usage: python -m notion_company_agent.scripts.run_analysis "Company Name" [page_id]')
    setup_logging(config.LOG_LEVEL)
    body = build_webhook_body(args[0], args[1] if len(args) > 1 else None)
    task_id = run_task(body)
    task = get_task(task_id) or {}
    print("task_id:", task_id)
    print("status:", task.get("status"))
    print("result:", json.dumps(task.get("result"), ensure_ascii=False, indent=2))


if __name__ == "__main__":
    main()
