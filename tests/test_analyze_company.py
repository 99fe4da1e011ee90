import pytest

from fakes import install_fake_openai
from notion_company_agent.services import analyze_company as mod


def test_analyze_company_returns_model_text(monkeypatch):
    fake = install_fake_openai(monkeypatch, "  # Acme\n\n* **Vertical**: Retail  ")
    text = mod.analyze_company("Acme", api_key="sk-test", model="gpt-test")
    assert text == "# Acme\n\n* **Vertical**: Retail"
    (request,) = fake.requests
    assert request["model"] == "gpt-test"
    assert request["messages"][0] == {"role": "system", "content": mod.COMPANY_ANALYZER_SYSTEM_PROMPT}
    assert request["messages"][1]["content"] == "Analyze the following company: Acme"


@pytest.mark.parametrize("name", ["", "   "])
def test_analyze_company_rejects_empty_name(name):
    with pytest.raises(ValueError, match="Company name is required"):
        mod.analyze_company(name, api_key="sk-test")


def test_analyze_company_requires_api_key(monkeypatch):
    monkeypatch.setattr(mod, "OPENAI_API_KEY", "")
    with pytest.raises(ValueError, match="OPENAI_API_KEY"):
        mod.analyze_company("Acme")


def test_analyze_company_uses_configured_model(monkeypatch):
    fake = install_fake_openai(monkeypatch, "ok")
    monkeypatch.setattr(mod, "LLM_MODEL", "configured-model")
    mod.analyze_company("Acme", api_key="sk-test")
    assert fake.requests[0]["model"] == "configured-model"
