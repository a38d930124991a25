from __future__ import annotations

from pydantic import BaseModel

from audit5s.schemas.assessment import Assessment


class AssessmentResult(BaseModel):
    assessment: Assessment
    improvement_plan: dict[str, list[str]]
    reports: dict[str, str] = {}
