"""FastAPI application entry point."""

from __future__ import annotations

from fastapi import FastAPI

from audit5s import __version__
from audit5s.api.router import api_router

app = FastAPI(
    title="audit5s",
    description="Photo-based 5S workplace audits scored by a vision LLM.",
    version=__version__,
)

app.include_router(api_router)
