"""Run the company-analysis workflow for one Notion webhook: analyze, format, write back.

Steps run strictly in order; each awaits its external call before the next
starts. Progress is recorded as events on an in-memory task record so the API
can list tasks and stream progress.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Callable

from .analyze_company import analyze_company
from .format_properties import format_notion_properties
from .md_to_notion import blocks_to_notion
from .notion_client import append_blocks_to_page, update_page_properties

logger = logging.getLogger(__name__)

# In-memory task store for status and result
_task_store: dict[str, dict[str, Any]] = {}

ACCOUNT_NAME_PROPERTY = "Account Name"
STEP_PROGRESS = {"analyzing": 25, "formatting": 50, "appending": 75, "updating": 100}


def extract_company_name(body: Any) -> str:
    """Read the page title (`Account Name`) from a Notion automation webhook body."""
    try:
        name = body["data"]["properties"][ACCOUNT_NAME_PROPERTY]["title"][0]["plain_text"]
    except (KeyError, IndexError, TypeError):
        name = None
    if not isinstance(name, str) or not name.strip():
        raise ValueError(f"Missing or invalid '{ACCOUNT_NAME_PROPERTY}' in webhook body")
    return name.strip()


def extract_page_id(body: Any) -> str | None:
    """The page that triggered the automation, if the payload carries it."""
    data = body.get("data") if isinstance(body, dict) else None
    if isinstance(data, dict) and isinstance(data.get("id"), str) and data["id"]:
        return data["id"]
    return None


def run_workflow(body: Any, on_progress: Callable[[str], None] | None = None) -> dict[str, Any]:
    """Execute every step for one webhook body and return the task result."""
    progress = on_progress or (lambda _step: None)

    company_name = extract_company_name(body)
    page_id = extract_page_id(body)

    progress("analyzing")
    analysis = analyze_company(company_name)

    progress("formatting")
    formatted = format_notion_properties(analysis)
    notion_blocks = blocks_to_notion(formatted.blocks)

    if page_id:
        progress("appending")
        append_blocks_to_page(page_id, notion_blocks)
        progress("updating")
        update_page_properties(page_id, formatted.properties)
    else:
        logger.warning("Webhook body has no data.id; skipping write-back for %r", company_name)

    return {
        "company_name": company_name,
        "page_id": page_id,
        "properties": formatted.properties,
        "block_count": len(notion_blocks),
        "status": "success",
        "failure_reason": "",
    }


def run_task(body: Any, task_id: str | None = None) -> str:
    """Run a workflow task. If task_id is provided, use it and append events to that task's store."""
    task_id = task_id or uuid.uuid4().hex
    events: list[dict[str, Any]] = []
    record = _task_store.setdefault(task_id, {"status": "running", "events": events, "result": None})
    record["events"] = events
    record["status"] = "running"

    def on_progress(step: str) -> None:
        events.append({"kind": "progress", "data": {"step": step, "progress": STEP_PROGRESS.get(step, 0)}})

    logger.info("Task %s started", task_id)
    try:
        result = run_workflow(body, on_progress=on_progress)
        record["company_name"] = result["company_name"]
        record["page_id"] = result["page_id"]
        record["result"] = result
        record["status"] = "completed"
        logger.info("Task %s completed: %d blocks for %r", task_id, result["block_count"], result["company_name"])
    except Exception as e:
        logger.exception("Task %s failed", task_id)
        record["status"] = "failed"
        record["result"] = {"status": "failed", "failure_reason": str(e)}
        events.append({"kind": "error", "data": {"message": str(e)}})
    return task_id


def get_task(task_id: str) -> dict[str, Any] | None:
    return _task_store.get(task_id)


def list_tasks(page: int = 1, size: int = 20) -> dict[str, Any]:
    items = list(_task_store.items())
    items.reverse()
    total = len(items)
    start = (page - 1) * size
    end = start + size
    tasks = []
    for tid, data in items[start:end]:
        row = {
            "task_id": tid,
            "status": data.get("status", "unknown"),
            "company_name": data.get("company_name"),
            "page_id": data.get("page_id"),
        }
        result = data.get("result")
        if result:
            row["failure_reason"] = result.get("failure_reason") or None
        tasks.append(row)
    return {"tasks": tasks, "total": total}
