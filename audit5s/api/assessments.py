from __future__ import annotations

import logging
import tempfile
from pathlib import Path

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile

from audit5s.agents.five_s.graph import assess_area
from audit5s.agents.five_s.tools import generate_improvement_plan
from audit5s.agents.llm_provider import LLMProvider
from audit5s.config import Settings
from audit5s.dependencies import get_app_settings, get_provider
from audit5s.exceptions import AnalysisFailedError
from audit5s.schemas import Area
from audit5s.schemas.api import AssessmentResult
from audit5s.services.file_validator import is_valid_image
from audit5s.services.report_generator import ReportGenerator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/assessments", tags=["assessments"])

_ALLOWED_SUFFIXES = {".jpg", ".jpeg", ".png", ".webp", ".gif"}
_CHUNK_SIZE = 1024 * 1024


async def _save_upload(image: UploadFile, dest: Path, limit: int) -> bool:
    """Stream the upload to dest; False as soon as it exceeds limit bytes."""
    if image.size is not None and image.size > limit:
        return False
    written = 0
    with open(dest, "wb") as f:
        while True:
            chunk = await image.read(_CHUNK_SIZE)
            if not chunk:
                break
            written += len(chunk)
            if written > limit:
                return False
            f.write(chunk)
    return True


@router.post("", response_model=AssessmentResult)
async def create_assessment(
    image: UploadFile = File(...),
    area: str = Form(...),
    department: str = Form(""),
    assessed_by: str = Form(""),
    export: bool = Form(False),
    settings: Settings = Depends(get_app_settings),
    llm: LLMProvider = Depends(get_provider),
):
    """Upload a photo of a work area and score it against the 5S rubric."""
    suffix = Path(image.filename or "").suffix.lower() or ".jpg"
    if suffix not in _ALLOWED_SUFFIXES:
        raise HTTPException(422, f"Unsupported image type: {suffix}")

    max_mb = settings.validator.max_upload_mb
    with tempfile.TemporaryDirectory(prefix="audit5s_upload_") as upload_dir:
        image_path = Path(upload_dir) / f"upload{suffix}"
        saved = await _save_upload(image, image_path, int(max_mb * 1024 * 1024))

        if not saved or not is_valid_image(image_path, max_mb):
            raise HTTPException(422, f"Image must be a readable file under {max_mb:g} MB")

        target = Area(
            name=area,
            image_path=str(image_path),
            department=department or None,
            assessed_by=assessed_by or None,
        )
        try:
            assessment = await assess_area(target, llm, settings)
        except AnalysisFailedError as e:
            logger.error("Assessment of %s failed: %s", area, e)
            raise HTTPException(502, str(e))

    if assessment is None:
        raise HTTPException(422, "Image could not be validated or compressed")

    reports: dict[str, str] = {}
    if export:
        generator = ReportGenerator(settings.reports.output_dir, settings.reports.prefix)
        reports = {k: str(p) for k, p in generator.batch_export(assessment, target).items()}

    return AssessmentResult(
        assessment=assessment,
        improvement_plan=generate_improvement_plan(assessment),
        reports=reports,
    )
