"""Render an (Area, Assessment) pair as text, Excel and JSON reports.

Rendering is pure; only the ``create_*``/``save_*`` methods touch the
filesystem, and only under the configured output directory.
"""

from __future__ import annotations

import json
import logging
import re
from datetime import datetime
from pathlib import Path

import pandas as pd
from jinja2 import Environment, FileSystemLoader

from audit5s.schemas import CATEGORY_MAX, TOTAL_MAX, Area, Assessment

logger = logging.getLogger(__name__)

_TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"

HORIZON_LABELS = (
    ("immediate", "Immediate Actions (24-48 hours):"),
    ("short_term", "Short-term Improvements (1-2 weeks):"),
    ("long_term", "Long-term Initiatives (1-3 months):"),
)


def _num(value: float) -> str:
    """8.0 -> '8', 7.5 -> '7.5'."""
    return f"{value:g}"


_env = Environment(
    loader=FileSystemLoader(str(_TEMPLATE_DIR)),
    autoescape=False,
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
)
_env.filters["num"] = _num


def safe_name(name: str) -> str:
    return re.sub(r"[^\w\-]+", "_", name).strip("_") or "area"


def render_text(assessment: Assessment, area: Area) -> str:
    recs = assessment.recommendations
    horizons = [(label, getattr(recs, key)) for key, label in HORIZON_LABELS]
    template = _env.get_template("report.txt.j2")
    return template.render(
        area=area,
        assessment=assessment,
        horizons=horizons,
        category_max=CATEGORY_MAX,
        total_max=TOTAL_MAX,
    )


def render_json(assessment: Assessment, area: Area) -> str:
    data = {
        "area": area.model_dump(mode="json"),
        "assessment": assessment.model_dump(mode="json"),
    }
    return json.dumps(data, indent=4)


def build_sheets(assessment: Assessment) -> dict[str, pd.DataFrame]:
    scores = pd.DataFrame(
        [
            {"Category": c, "Score": e.score, "MaxScore": CATEGORY_MAX, "Observations": e.observations}
            for c, e in assessment.scores.items()
        ],
        columns=["Category", "Score", "MaxScore", "Observations"],
    )
    findings = pd.DataFrame(
        [
            {
                "Severity": h.severity, "Description": h.description, "Deduction": h.deduction,
                "Location": h.location, "Recommendation": h.recommendation,
            }
            for h in assessment.safety_hazards
        ],
        columns=["Severity", "Description", "Deduction", "Location", "Recommendation"],
    )
    recs = assessment.recommendations
    recommendations = pd.DataFrame(
        [
            {"Timeframe": label, "Action": action}
            for key, label in (("immediate", "Immediate"), ("short_term", "Short Term"), ("long_term", "Long Term"))
            for action in getattr(recs, key)
        ],
        columns=["Timeframe", "Action"],
    )
    return {"Scores": scores, "Findings": findings, "Recommendations": recommendations}


class ReportGenerator:
    def __init__(self, output_dir: str | Path = "data/reports", prefix: str = "5S_Assessment"):
        self.output_dir = Path(output_dir).resolve()
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.prefix = prefix

    def get_timestamp(self) -> str:
        return datetime.now().strftime("%Y%m%d_%H%M%S")

    def _path(self, area: Area, ext: str) -> Path:
        return self.output_dir / f"{self.prefix}_{safe_name(area.name)}_{self.get_timestamp()}.{ext}"

    def create_text_report(self, assessment: Assessment, area: Area) -> Path:
        path = self._path(area, "txt")
        path.write_text(render_text(assessment, area), encoding="utf-8")
        logger.info("Text report written to %s", path)
        return path

    def create_excel_report(self, assessment: Assessment, area: Area) -> Path:
        path = self._path(area, "xlsx")
        with pd.ExcelWriter(path, engine="openpyxl") as writer:
            for sheet, df in build_sheets(assessment).items():
                df.to_excel(writer, sheet_name=sheet, index=False)
        logger.info("Excel report written to %s", path)
        return path

    def save_json_data(self, assessment: Assessment, area: Area) -> Path:
        path = self._path(area, "json")
        path.write_text(render_json(assessment, area), encoding="utf-8")
        logger.info("JSON report written to %s", path)
        return path

    def batch_export(self, assessment: Assessment, area: Area) -> dict[str, Path]:
        """Generate all report formats (text, Excel, JSON)."""
        return {
            "text": self.create_text_report(assessment, area),
            "excel": self.create_excel_report(assessment, area),
            "json": self.save_json_data(assessment, area),
        }
