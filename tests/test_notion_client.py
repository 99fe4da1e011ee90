import httpx
import pytest

from notion_company_agent.services import notion_client as mod


def _blocks(n):
    return [{"object": "block", "type": "paragraph", "paragraph": {"rich_text": [{"type": "text", "text": {"content": str(i)}}]}} for i in range(n)]


@pytest.fixture()
def calls(monkeypatch):
    recorded = []

    def fake_patch_json(url, *, token, payload, timeout):
        recorded.append({"url": url, "token": token, "payload": payload})
        return {"object": "list", "results": []}

    monkeypatch.setattr(mod, "_patch_json", fake_patch_json)
    return recorded


def test_append_batches_of_100(calls):
    blocks = _blocks(250)
    assert mod.append_blocks_to_page("page-1", blocks, api_key="secret") is True
    assert [len(c["payload"]["children"]) for c in calls] == [100, 100, 50]
    assert all(c["url"].endswith("/blocks/page-1/children") for c in calls)
    assert all(c["token"] == "secret" for c in calls)
    sent = [b for c in calls for b in c["payload"]["children"]]
    assert sent == blocks


def test_append_nothing_skips_network(calls, monkeypatch):
    monkeypatch.setattr(mod, "NOTION_API_KEY", "")
    assert mod.append_blocks_to_page("page-1", []) is True
    assert calls == []


def test_append_requires_api_key(calls, monkeypatch):
    monkeypatch.setattr(mod, "NOTION_API_KEY", "")
    with pytest.raises(ValueError, match="NOTION_API_KEY"):
        mod.append_blocks_to_page("page-1", _blocks(1))


def test_update_page_properties(calls):
    props = {"Industry": {"select": {"name": "SaaS"}}}
    assert mod.update_page_properties("page-1", props, api_key="secret") is True
    (call,) = calls
    assert call["url"].endswith("/pages/page-1")
    assert call["payload"] == {"properties": props}


def test_update_empty_properties_is_noop(calls):
    assert mod.update_page_properties("page-1", {}, api_key="secret") is True
    assert calls == []


def test_append_failure_reports_batch_and_sample(monkeypatch):
    def failing_patch_json(url, *, token, payload, timeout):
        raise mod.NotionAPIError("HTTP 400", status_code=400, code="validation_error")

    monkeypatch.setattr(mod, "_patch_json", failing_patch_json)
    with pytest.raises(mod.NotionAPIError) as exc_info:
        mod.append_blocks_to_page("page-1", _blocks(150), api_key="secret")
    err = exc_info.value
    assert err.status_code == 400
    assert err.code == "validation_error"
    assert "batch_offset=0" in str(err)
    assert "count=100" in str(err)
    assert "first_block_sample=" in str(err)


def test_raise_http_error_includes_body():
    request = httpx.Request("PATCH", "https://api.notion.com/v1/pages/p")
    resp = httpx.Response(
        400,
        json={"object": "error", "status": 400, "code": "validation_error", "message": "bad"},
        request=request,
    )
    with pytest.raises(mod.NotionAPIError) as exc_info:
        mod._raise_http_error(resp, hint="check input")
    err = exc_info.value
    assert err.status_code == 400
    assert err.code == "validation_error"
    assert str(err).startswith("check input\nHTTP 400 for PATCH https://api.notion.com/v1/pages/p")
    assert '"message"' in str(err)


def test_headers_carry_version():
    headers = mod._headers("tok")
    assert headers["Authorization"] == "Bearer tok"
    assert headers["Notion-Version"] == mod.NOTION_VERSION
