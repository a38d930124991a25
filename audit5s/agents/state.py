"""LangGraph TypedDict state for the 5S assessment agent."""

from __future__ import annotations

from typing import TypedDict

from audit5s.schemas import AnalysisResponse


class AnalyzerRunConfig(TypedDict):
    max_retries: int
    retry_delay_s: float
    request_timeout_s: float
    score_validation: str  # strict | lenient | off
    max_size_mb: float
    max_dimension: int
    quality: int
    pre_compression_limit_mb: float


class AssessmentState(TypedDict):
    image_path: str
    work_dir: str  # per-assessment temp namespace
    attempt: int
    status: str  # "" | invalid | compression_failed | retry | exhausted | done
    last_error: str
    analysis: AnalysisResponse | None
    config: AnalyzerRunConfig
