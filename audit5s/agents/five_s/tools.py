"""5S analyzer tools: response parsing, range checks, scoring."""

from __future__ import annotations

import json
import logging
import re
from datetime import datetime, timezone
from typing import Iterable, Mapping

from pydantic import ValidationError

from audit5s.schemas import (
    CATEGORY_MAX, AnalysisResponse, Area, Assessment,
    ParseFailure, ParseResult, ParseSuccess, SafetyHazard, ScoreEntry,
)

logger = logging.getLogger(__name__)


_FENCED_BLOCK = re.compile(r"```(?:json)?[ \t]*\n(.*?)\n[ \t]*```", re.DOTALL)


def _strip_code_fence(text: str) -> str:
    text = text.strip()
    if text.startswith(("{", "[")):
        return text
    match = _FENCED_BLOCK.search(text)
    return match.group(1).strip() if match else text


def parse_analysis_response(response: str, mode: str = "lenient") -> ParseResult:
    """Parse the vision LLM reply into an AnalysisResponse.

    Malformed JSON, a reply that does not match the schema, and (in strict
    mode) out-of-range numbers each come back as a ParseFailure of their own
    kind; the caller decides whether to retry.
    """
    raw = response or ""
    try:
        data = json.loads(_strip_code_fence(raw))
    except json.JSONDecodeError as e:
        return ParseFailure(kind="invalid_json", message=str(e), raw=raw)

    if not isinstance(data, dict):
        return ParseFailure(kind="schema_mismatch", message="expected a JSON object", raw=raw)

    try:
        analysis = AnalysisResponse.model_validate(data)
    except ValidationError as e:
        return ParseFailure(kind="schema_mismatch", message=str(e), raw=raw)

    return validate_ranges(analysis, mode, raw)


def _range_violations(analysis: AnalysisResponse) -> list[str]:
    problems = []
    for category, entry in analysis.scores.items():
        if not 0 <= entry.score <= CATEGORY_MAX:
            problems.append(f"{category} score {entry.score} outside 0-{CATEGORY_MAX}")
    for i, hazard in enumerate(analysis.safety_hazards):
        if hazard.deduction < 0:
            problems.append(f"hazard {i} has negative deduction {hazard.deduction}")
    return problems


def validate_ranges(analysis: AnalysisResponse, mode: str = "lenient", raw: str = "") -> ParseResult:
    """Apply the rubric bounds: strict rejects, lenient clamps, off passes through."""
    if mode == "off":
        return ParseSuccess(analysis)

    problems = _range_violations(analysis)
    if not problems:
        return ParseSuccess(analysis)

    if mode == "strict":
        return ParseFailure(kind="out_of_range", message="; ".join(problems), raw=raw)

    logger.warning("Clamping out-of-range model values: %s", "; ".join(problems))
    scores = {
        c: e.model_copy(update={"score": min(max(e.score, 0), CATEGORY_MAX)})
        for c, e in analysis.scores.items()
    }
    hazards = [h.model_copy(update={"deduction": max(h.deduction, 0)}) for h in analysis.safety_hazards]
    return ParseSuccess(analysis.model_copy(update={"scores": scores, "safety_hazards": hazards}))


def compute_total_score(scores: Mapping[str, ScoreEntry], hazards: Iterable[SafetyHazard]) -> float:
    """Sum of category scores minus hazard deductions, floored at 0."""
    base = sum(entry.score for entry in scores.values())
    deductions = sum(h.deduction for h in hazards)
    return max(0, base - deductions)


def build_assessment(area: Area, analysis: AnalysisResponse, now: datetime | None = None) -> Assessment:
    now = now or datetime.now(timezone.utc)
    return Assessment(
        timestamp=now.isoformat(),
        area_name=area.name,
        scores=dict(analysis.scores),
        observations={c: e.observations for c, e in analysis.scores.items()},
        safety_hazards=list(analysis.safety_hazards),
        total_score=compute_total_score(analysis.scores, analysis.safety_hazards),
        recommendations=analysis.recommendations,
    )


def generate_improvement_plan(assessment: Assessment) -> dict[str, list[str]]:
    """Hazards first as immediate actions, then the model's recommendations."""
    plan: dict[str, list[str]] = {
        "immediate": [
            f"Address {h.severity} safety hazard: {h.description}" for h in assessment.safety_hazards
        ],
        "short_term": [],
        "long_term": [],
    }
    recs = assessment.recommendations
    plan["immediate"].extend(recs.immediate)
    plan["short_term"].extend(recs.short_term)
    plan["long_term"].extend(recs.long_term)
    return plan
