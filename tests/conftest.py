import pytest
from fastapi.testclient import TestClient


@pytest.fixture()
def client() -> TestClient:
    from notion_company_agent.main import app

    return TestClient(app)


@pytest.fixture(autouse=True)
def _clear_in_memory_stores():
    # Ensure deterministic tests across runs.
    from notion_company_agent.services import run_pipeline

    run_pipeline._task_store.clear()
    yield
    run_pipeline._task_store.clear()
