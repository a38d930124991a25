"""Score structures shared by the analyzer and the report emitters.

The canonical rubric is the 60-point scheme: six categories scored 0-10,
minus the deductions of any safety hazards found in the photo.
"""

from __future__ import annotations

from typing import Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

CATEGORIES: tuple[str, ...] = ("sort", "set", "shine", "standardize", "sustain", "safety")
CATEGORY_MAX = 10
TOTAL_MAX = CATEGORY_MAX * len(CATEGORIES)

Severity = Literal["minor", "moderate", "severe"]

# Rubric guidance only, the model supplies the actual deduction.
SEVERITY_DEDUCTIONS: dict[str, int] = {"minor": 1, "moderate": 2, "severe": 5}


class ScoreEntry(BaseModel):
    score: float = Field(allow_inf_nan=False)
    observations: str = ""

    model_config = ConfigDict(frozen=True)


class SafetyHazard(BaseModel):
    severity: Severity
    description: str = ""
    deduction: int = 0
    location: str = ""
    recommendation: str = ""

    model_config = ConfigDict(frozen=True)

    @field_validator("severity", mode="before")
    @classmethod
    def _normalize_severity(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v


class Recommendations(BaseModel):
    immediate: list[str] = Field(default_factory=list)
    short_term: list[str] = Field(
        default_factory=list, validation_alias=AliasChoices("short_term", "shortTerm"),
    )
    long_term: list[str] = Field(
        default_factory=list, validation_alias=AliasChoices("long_term", "longTerm"),
    )

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class Assessment(BaseModel):
    """Scored result of auditing one Area at one point in time."""

    timestamp: str
    area_name: str
    scores: dict[str, ScoreEntry]
    observations: dict[str, str]
    safety_hazards: list[SafetyHazard] = Field(default_factory=list)
    total_score: float
    recommendations: Recommendations = Field(default_factory=Recommendations)

    model_config = ConfigDict(frozen=True)
