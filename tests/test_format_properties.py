import json
import logging

from fakes import install_fake_openai
from notion_company_agent.models import NotionProperties
from notion_company_agent.services import format_properties as mod
from notion_company_agent.services.md_to_notion import HeadingBlock, TextRun


ANALYSIS = "# Acme\n* **Vertical**: Retail / Fashion\n* Website: https://acme.example"


def test_filter_null_properties_drops_blank_values():
    props = NotionProperties.model_validate(
        {
            "Industry": {"select": {"name": "SaaS"}},
            "Region": {"select": None},
            "Website": {"url": None},
            "ARR (k€)": {"number": 1200},
        }
    )
    assert mod.filter_null_properties(props) == {
        "Industry": {"select": {"name": "SaaS"}},
        "ARR (k€)": {"number": 1200},
    }


def test_filter_null_properties_empty():
    assert mod.filter_null_properties(NotionProperties()) == {}


def test_empty_analysis_returns_nothing(monkeypatch):
    fake = install_fake_openai(monkeypatch)
    result = mod.format_notion_properties("  \n ", api_key="sk-test")
    assert result.properties == {}
    assert result.blocks == []
    assert fake.requests == []


def test_blocks_and_properties(monkeypatch):
    reply = json.dumps(
        {
            "Industry": {"select": {"name": "Retail / Fashion"}},
            "Website": {"url": "https://acme.example"},
            "ARR (k€)": {"number": None},
        }
    )
    fake = install_fake_openai(monkeypatch, reply)
    result = mod.format_notion_properties(ANALYSIS, api_key="sk-test")
    assert result.blocks[0] == HeadingBlock(1, [TextRun("Acme")])
    assert len(result.blocks) == 3
    assert result.properties == {
        "Industry": {"select": {"name": "Retail / Fashion"}},
        "Website": {"url": "https://acme.example"},
    }
    request = fake.requests[0]
    assert request["response_format"] == {"type": "json_object"}
    assert request["messages"][1]["content"] == ANALYSIS


def test_invalid_website_discards_properties(monkeypatch, caplog):
    reply = json.dumps({"Industry": {"select": {"name": "SaaS"}}, "Website": {"url": "acme dot com"}})
    install_fake_openai(monkeypatch, reply)
    with caplog.at_level(logging.ERROR):
        result = mod.format_notion_properties(ANALYSIS, api_key="sk-test")
    assert result.properties == {}
    assert len(result.blocks) == 3
    assert "failed validation" in caplog.text


def test_llm_error_keeps_blocks(monkeypatch, caplog):
    install_fake_openai(monkeypatch, RuntimeError("rate limited"))
    with caplog.at_level(logging.ERROR):
        result = mod.format_notion_properties(ANALYSIS, api_key="sk-test")
    assert result.properties == {}
    assert len(result.blocks) == 3
    assert "Failed to extract Notion properties" in caplog.text


def test_missing_api_key_keeps_blocks(monkeypatch):
    monkeypatch.setattr(mod, "OPENAI_API_KEY", "")
    result = mod.format_notion_properties(ANALYSIS)
    assert result.properties == {}
    assert len(result.blocks) == 3
