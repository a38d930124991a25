"""Strict schema of the vision model's reply and the tagged parse result."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from audit5s.schemas.assessment import CATEGORIES, Recommendations, SafetyHazard, ScoreEntry


class AnalysisResponse(BaseModel):
    scores: dict[str, ScoreEntry]
    safety_hazards: list[SafetyHazard] = Field(default_factory=list)
    recommendations: Recommendations = Field(default_factory=Recommendations)

    model_config = ConfigDict(frozen=True)

    @field_validator("scores")
    @classmethod
    def _require_canonical_categories(cls, v: dict[str, ScoreEntry]) -> dict[str, ScoreEntry]:
        missing = [c for c in CATEGORIES if c not in v]
        extra = [c for c in v if c not in CATEGORIES]
        if missing or extra:
            raise ValueError(f"score categories mismatch (missing={missing}, unexpected={extra})")
        # rubric order, whatever order the model used
        return {c: v[c] for c in CATEGORIES}


FailureKind = Literal["invalid_json", "schema_mismatch", "out_of_range"]


@dataclass(frozen=True)
class ParseSuccess:
    analysis: AnalysisResponse
    ok: ClassVar[bool] = True


@dataclass(frozen=True)
class ParseFailure:
    kind: FailureKind
    message: str
    raw: str = ""
    ok: ClassVar[bool] = False


ParseResult = Union[ParseSuccess, ParseFailure]
