"""FastAPI application entry - Notion company analysis agent."""

from . import config
from fastapi import FastAPI

from .api.routes import router
from .logging_config import setup_logging

setup_logging(config.LOG_LEVEL)

app = FastAPI(
    title="Notion Company Analysis Agent",
    description="Research a company from a Notion webhook and write the analysis back to the page",
    version="0.1.0",
)
app.include_router(router)


@app.get("/")
async def root():
    return {"service": "notion-company-analysis-agent", "docs": "/docs"}
