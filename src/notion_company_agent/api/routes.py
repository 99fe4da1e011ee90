"""API routes: Notion automation webhook and task progress."""

from __future__ import annotations

import json
import logging
import uuid
from concurrent.futures import ThreadPoolExecutor
from typing import AsyncGenerator

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse
from sse_starlette.sse import EventSourceResponse

from ..models import TaskDetailResponse, TaskListResponse, WebhookResponse
from ..services.run_pipeline import run_task, get_task, list_tasks, _task_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["api"])
_executor = ThreadPoolExecutor(max_workers=4)


@router.post(
    "/workflows/notion-company-analysis",
    response_model=WebhookResponse,
    response_model_exclude_none=True,
)
async def api_notion_company_analysis(request: Request):
    """Start the analysis workflow for a Notion webhook body. Returns task_id immediately."""
    try:
        body = await request.json()
        if not isinstance(body, dict):
            raise ValueError("Webhook body must be a JSON object")
        task_id = uuid.uuid4().hex
        _task_store[task_id] = {"status": "running", "events": [], "result": None}
        _executor.submit(run_task, body, task_id=task_id)
    except Exception as e:
        logger.warning("Rejected webhook: %s", e)
        return JSONResponse(
            status_code=500,
            content=WebhookResponse(success=False, error=str(e) or "Unknown error").model_dump(exclude_none=True),
        )
    return WebhookResponse(success=True, message="Workflow started successfully", task_id=task_id)


@router.get("/tasks/{task_id}/stream")
async def api_task_stream(task_id: str):
    """SSE stream for task progress. Events: progress (step, progress), result, error."""
    if not get_task(task_id):
        raise HTTPException(404, "Task not found")

    async def event_generator() -> AsyncGenerator[str, None]:
        import asyncio
        last_index = 0
        while True:
            t = get_task(task_id)
            if not t:
                break
            events = t.get("events", [])
            for ev in events[last_index:]:
                yield json.dumps(ev)
            last_index = len(events)
            status = t.get("status", "running")
            if status != "running":
                result = t.get("result")
                if result:
                    yield json.dumps({"kind": "result", "data": result})
                break
            await asyncio.sleep(0.3)

    return EventSourceResponse(event_generator())


@router.get("/tasks/{task_id}", response_model=TaskDetailResponse)
async def api_task_detail(task_id: str):
    t = get_task(task_id)
    if not t:
        raise HTTPException(404, "Task not found")
    return TaskDetailResponse(
        task_id=task_id,
        status=t.get("status", "unknown"),
        events=list(t.get("events", [])),
        result=t.get("result"),
    )


@router.get("/tasks", response_model=TaskListResponse)
async def api_tasks_list(page: int = 1, size: int = 20):
    """List task history."""
    data = list_tasks(page=page, size=size)
    return TaskListResponse(**data)
