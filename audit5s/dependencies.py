"""FastAPI dependencies: settings and the vision LLM provider."""

from __future__ import annotations

from fastapi import Depends, HTTPException

from audit5s.agents.llm_provider import LLMProvider, get_llm_provider
from audit5s.config import Settings, get_settings
from audit5s.exceptions import ProviderNotConfiguredError


def get_app_settings() -> Settings:
    return get_settings()


def get_provider(settings: Settings = Depends(get_app_settings)) -> LLMProvider:
    try:
        return get_llm_provider(settings)
    except ProviderNotConfiguredError as e:
        raise HTTPException(503, str(e))
