"""Pydantic request/response schemas."""

from audit5s.schemas.area import Area
from audit5s.schemas.assessment import (
    CATEGORIES, CATEGORY_MAX, TOTAL_MAX, SEVERITY_DEDUCTIONS,
    ScoreEntry, SafetyHazard, Recommendations, Assessment,
)
from audit5s.schemas.analysis import AnalysisResponse, ParseSuccess, ParseFailure, ParseResult

__all__ = [
    "Area",
    "CATEGORIES", "CATEGORY_MAX", "TOTAL_MAX", "SEVERITY_DEDUCTIONS",
    "ScoreEntry", "SafetyHazard", "Recommendations", "Assessment",
    "AnalysisResponse", "ParseSuccess", "ParseFailure", "ParseResult",
]
