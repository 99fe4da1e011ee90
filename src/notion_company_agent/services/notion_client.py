"""Notion API client: append block children in batches, update page properties."""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from ..config import NOTION_API_BASE, NOTION_API_KEY, NOTION_VERSION

logger = logging.getLogger(__name__)

# Notion accepts at most 100 children per append request
BATCH_SIZE = 100


class NotionAPIError(RuntimeError):
    def __init__(self, message: str, status_code: int | None = None, code: str | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.code = code


def _raise_http_error(resp: httpx.Response, *, hint: str = "") -> None:
    body = ""
    code = None
    try:
        body = resp.text
        data = resp.json()
        if isinstance(data, dict):
            code = data.get("code")
    except (ValueError, httpx.ResponseNotRead):
        body = body or "<unreadable body>"
    msg = f"HTTP {resp.status_code} for {resp.request.method} {resp.request.url}\nResponse body: {body}"
    if hint:
        msg = hint + "\n" + msg
    raise NotionAPIError(msg, status_code=resp.status_code, code=code)


def _headers(token: str) -> dict[str, str]:
    return {
        "Authorization": f"Bearer {token}",
        "Notion-Version": NOTION_VERSION,
        "Content-Type": "application/json",
    }


def _patch_json(url: str, *, token: str, payload: dict[str, Any], timeout: float) -> dict[str, Any]:
    with httpx.Client(timeout=timeout) as client:
        resp = client.patch(url, json=payload, headers=_headers(token))
        if resp.status_code >= 400:
            hint = ""
            if resp.status_code in (401, 403):
                hint = (
                    "Notion rejected the integration token. Check NOTION_API_KEY and make sure the "
                    "page is shared with the integration (page menu → Connections)."
                )
            _raise_http_error(resp, hint=hint)
        return resp.json()


def append_block_children(token: str, block_id: str, children: list[dict[str, Any]]) -> dict[str, Any]:
    """PATCH /v1/blocks/{block_id}/children (≤ 100 children per call)."""
    url = f"{NOTION_API_BASE}/blocks/{block_id}/children"
    try:
        return _patch_json(url, token=token, payload={"children": children}, timeout=30.0)
    except NotionAPIError as e:
        sample = json.dumps(children[0], ensure_ascii=False)[:1000] if children else ""
        raise NotionAPIError(
            f"Append blocks failed. count={len(children)} first_block_sample={sample}\n{e}",
            status_code=e.status_code,
            code=e.code,
        ) from e


def update_page(token: str, page_id: str, properties: dict[str, Any]) -> dict[str, Any]:
    """PATCH /v1/pages/{page_id} - set database column values."""
    url = f"{NOTION_API_BASE}/pages/{page_id}"
    return _patch_json(url, token=token, payload={"properties": properties}, timeout=15.0)


def _resolve_token(api_key: str | None, purpose: str) -> str:
    token = (api_key or "").strip() or NOTION_API_KEY
    if not token:
        raise ValueError(f"NOTION_API_KEY environment variable is required to {purpose}")
    return token


def append_blocks_to_page(page_id: str, blocks: list[dict[str, Any]], *, api_key: str | None = None) -> bool:
    """Append Notion block objects to the body of a page, in batches of `BATCH_SIZE`."""
    if not blocks:
        return True
    token = _resolve_token(api_key, "append content to a Notion page")
    for i in range(0, len(blocks), BATCH_SIZE):
        batch = blocks[i : i + BATCH_SIZE]
        try:
            append_block_children(token, page_id, batch)
        except NotionAPIError as e:
            raise NotionAPIError(f"batch_offset={i} {e}", status_code=e.status_code, code=e.code) from e
        logger.info("Appended blocks %d-%d to page %s", i, i + len(batch) - 1, page_id)
    return True


def update_page_properties(page_id: str, properties: dict[str, Any], *, api_key: str | None = None) -> bool:
    """Write extracted column values to a page. Empty properties are a no-op."""
    if not properties:
        return True
    token = _resolve_token(api_key, "update Notion page properties")
    update_page(token, page_id, properties)
    logger.info("Updated properties %s on page %s", sorted(properties), page_id)
    return True
