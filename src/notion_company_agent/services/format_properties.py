"""Format a company analysis for Notion: page blocks plus DB column values.

Blocks come from the deterministic markdown converter. Column values are
extracted by the LLM in JSON mode and validated against `NotionProperties`;
any failure there is logged and yields no properties, so the page body is
still written.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from ..config import OPENAI_API_KEY, LLM_MODEL
from ..models import NotionProperties
from .md_to_notion import Block, markdown_to_notion_blocks

logger = logging.getLogger(__name__)

NOTION_PROPERTIES_SYSTEM_PROMPT = """You are a data extraction assistant. Your job is to extract structured information from company analysis text and format it as Notion API-compatible property values.

Extract the following information:
- Industry: Primary industry/vertical (e.g., "Retail / Fashion", "SaaS", "Healthcare")
- Region: HQ region (e.g., "Europe", "North America", "Asia")
- Website: Official company website URL
- ARR (k€): Estimated annual revenue in thousands of euros (number, nullable)

Only include properties that can be determined with reasonable confidence. Omit properties that are uncertain or unavailable.

Respond with a single JSON object using exactly these keys and shapes:
{"Industry": {"select": {"name": "..."}}, "Region": {"select": {"name": "..."}}, "Website": {"url": "https://..."}, "ARR (k€)": {"number": 1234}}"""

_NULLABLE_VALUE_KEYS = ("select", "url", "number")


@dataclass
class FormattedAnalysis:
    properties: dict[str, Any] = field(default_factory=dict)
    blocks: list[Block] = field(default_factory=list)


def filter_null_properties(properties: NotionProperties) -> dict[str, Any]:
    """Drop unset or null values so existing column data is not overwritten with blanks."""
    filtered: dict[str, Any] = {}
    for key, value in properties.model_dump(by_alias=True).items():
        if value is None:
            continue
        if any(k in value and value[k] is None for k in _NULLABLE_VALUE_KEYS):
            continue
        filtered[key] = value
    return filtered


def extract_properties(analysis_text: str, *, api_key: str | None = None, model: str | None = None) -> NotionProperties:
    """Ask the LLM for column values. Raises on API, JSON or schema errors."""
    key = (api_key or "").strip() or OPENAI_API_KEY
    if not key:
        raise ValueError("OPENAI_API_KEY is not set; cannot extract Notion properties")
    model = (model or "").strip() or LLM_MODEL

    from openai import OpenAI
    client = OpenAI(api_key=key)
    response = client.chat.completions.create(
        model=model,
        messages=[
            {"role": "system", "content": NOTION_PROPERTIES_SYSTEM_PROMPT},
            {"role": "user", "content": analysis_text},
        ],
        response_format={"type": "json_object"},
        temperature=0,
    )
    content = (response.choices[0].message.content or "").strip() or "{}"
    return NotionProperties.model_validate_json(content)


def format_notion_properties(
    analysis_text: str, *, api_key: str | None = None, model: str | None = None
) -> FormattedAnalysis:
    """Convert the full analysis into blocks and extract column properties."""
    if not analysis_text or not analysis_text.strip():
        return FormattedAnalysis()

    blocks = markdown_to_notion_blocks(analysis_text)

    properties: dict[str, Any] = {}
    try:
        properties = filter_null_properties(extract_properties(analysis_text, api_key=api_key, model=model))
    except ValidationError as e:
        logger.error("Extracted Notion properties failed validation: %s", e)
    except Exception:
        logger.exception("Failed to extract Notion properties")

    logger.info("Formatted analysis: %d blocks, properties=%s", len(blocks), sorted(properties))
    return FormattedAnalysis(properties=properties, blocks=blocks)
