"""Pydantic models for API responses and extracted Notion properties."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class WebhookResponse(BaseModel):
    success: bool
    message: str | None = None
    task_id: str | None = None
    error: str | None = None


class TaskListItem(BaseModel):
    task_id: str
    status: str
    company_name: str | None = None
    page_id: str | None = None
    failure_reason: str | None = None


class TaskListResponse(BaseModel):
    tasks: list[TaskListItem]
    total: int


class TaskDetailResponse(BaseModel):
    task_id: str
    status: str
    events: list[dict[str, Any]] = Field(default_factory=list)
    result: dict[str, Any] | None = None


# ---------------------------------------------------------------------------
# Notion database columns (property values as accepted by PATCH /v1/pages)
# ---------------------------------------------------------------------------


class SelectOption(BaseModel):
    name: str


class SelectProperty(BaseModel):
    select: SelectOption | None = None


class UrlProperty(BaseModel):
    url: str | None = None

    @field_validator("url")
    @classmethod
    def must_be_http_url(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not (v.startswith("http://") or v.startswith("https://")):
            raise ValueError(f"not a URL: {v!r}")
        return v


class NumberProperty(BaseModel):
    number: float | None = None


class NotionProperties(BaseModel):
    """Company columns the extraction model may fill in. Keys are Notion property names."""

    model_config = ConfigDict(populate_by_name=True)

    industry: SelectProperty | None = Field(default=None, alias="Industry")
    region: SelectProperty | None = Field(default=None, alias="Region")
    website: UrlProperty | None = Field(default=None, alias="Website")
    arr: NumberProperty | None = Field(default=None, alias="ARR (k€)")
