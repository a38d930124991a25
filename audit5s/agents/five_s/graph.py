"""5S Assessment Agent — LangGraph StateGraph implementation.

Graph: validate → attempt → (finalize | backoff → attempt)
One attempt compresses the photo, calls the vision LLM and parses the reply.
The compressed copy lives only for the duration of the attempt.
"""

from __future__ import annotations

import asyncio
import logging
import os
import tempfile
from typing import Literal

from langchain_core.runnables import RunnableConfig
from langgraph.graph import StateGraph, END

from audit5s.agents.state import AssessmentState, AnalyzerRunConfig
from audit5s.agents.llm_provider import LLMProvider, get_llm_provider
from audit5s.agents.five_s.prompts import FIVE_S_RUBRIC_PROMPT
from audit5s.agents.five_s.tools import build_assessment, parse_analysis_response
from audit5s.config import Settings, get_settings
from audit5s.exceptions import AnalysisFailedError, CompressionError
from audit5s.schemas import AnalysisResponse, Area, Assessment
from audit5s.services.file_validator import check_image_file, validate_image_size
from audit5s.services.image_compressor import encode_image, prepared_image

logger = logging.getLogger(__name__)

_MB = 1024 * 1024


# ── Node functions ────────────────────────────────────────

def validate_node(state: AssessmentState) -> dict:
    """Reject missing, unreadable or oversized source images before any work."""
    path = state["image_path"]
    limit = int(state["config"]["pre_compression_limit_mb"] * _MB)
    if not check_image_file(path):
        return {"status": "invalid", "last_error": f"image not found or unreadable: {path}"}
    if not validate_image_size(path, limit):
        logger.warning("Image %s exceeds the %s MB input ceiling", path, state["config"]["pre_compression_limit_mb"])
        return {"status": "invalid", "last_error": f"image too large: {path}"}
    return {"status": ""}


def _transient_failure(attempt: int, cfg: AnalyzerRunConfig, error: str) -> dict:
    logger.error("Attempt %d failed: %s", attempt, error)
    status = "retry" if attempt < cfg["max_retries"] else "exhausted"
    return {"attempt": attempt, "status": status, "last_error": error}


async def attempt_node(state: AssessmentState, config: RunnableConfig) -> dict:
    """Compress → request → parse, once."""
    cfg = state["config"]
    attempt = state["attempt"] + 1
    llm: LLMProvider = config["configurable"]["provider"]

    try:
        async with prepared_image(
            state["image_path"], cfg["max_size_mb"], state["work_dir"],
            cfg["max_dimension"], cfg["quality"],
        ) as image:
            image_b64 = await asyncio.to_thread(encode_image, image)
            logger.info(
                "Sending image to %s (size: %.2fMB), attempt %d/%d",
                getattr(llm, "model", "vision model"), len(image_b64) / _MB, attempt, cfg["max_retries"],
            )
            response = await asyncio.wait_for(
                llm.analyze_image(image_b64, FIVE_S_RUBRIC_PROMPT, "image/jpeg"),
                timeout=cfg["request_timeout_s"],
            )
    except CompressionError as e:
        logger.warning("Unable to compress image sufficiently: %s", e)
        return {"attempt": attempt, "status": "compression_failed", "last_error": str(e)}
    except asyncio.TimeoutError:
        return _transient_failure(attempt, cfg, f"request timed out after {cfg['request_timeout_s']}s")
    except Exception as e:
        return _transient_failure(attempt, cfg, f"request failed: {e}")

    result = parse_analysis_response(response, cfg["score_validation"])
    if not result.ok:
        logger.debug("Raw response: %s", result.raw)
        return _transient_failure(attempt, cfg, f"{result.kind}: {result.message}")

    return {"attempt": attempt, "status": "done", "analysis": result.analysis, "last_error": ""}


async def backoff_node(state: AssessmentState) -> dict:
    """Flat delay between attempts."""
    delay = state["config"]["retry_delay_s"]
    logger.info("Waiting %.1fs before retry...", delay)
    await asyncio.sleep(delay)
    return {}


def finalize_node(state: AssessmentState) -> dict:
    logger.info("Assessment of %s finished: %s after %d attempt(s)",
                state["image_path"], state["status"], state["attempt"])
    return {}


def after_validate(state: AssessmentState) -> Literal["attempt", "finalize"]:
    if state["status"] == "invalid":
        return "finalize"
    return "attempt"


def after_attempt(state: AssessmentState) -> Literal["backoff", "finalize"]:
    if state["status"] == "retry":
        return "backoff"
    return "finalize"


# ── Build graph ───────────────────────────────────────────

def build_assessment_graph():
    graph = StateGraph(AssessmentState)

    graph.add_node("validate", validate_node)
    graph.add_node("attempt", attempt_node)
    graph.add_node("backoff", backoff_node)
    graph.add_node("finalize", finalize_node)

    graph.set_entry_point("validate")
    graph.add_conditional_edges("validate", after_validate, {
        "attempt": "attempt",
        "finalize": "finalize",
    })
    graph.add_conditional_edges("attempt", after_attempt, {
        "backoff": "backoff",
        "finalize": "finalize",
    })
    graph.add_edge("backoff", "attempt")
    graph.add_edge("finalize", END)

    return graph.compile()


# ── Public API ────────────────────────────────────────────

def run_config(settings: Settings, max_retries: int | None = None) -> AnalyzerRunConfig:
    a, c = settings.analyzer, settings.compression
    return {
        "max_retries": max(1, max_retries if max_retries is not None else a.max_retries),
        "retry_delay_s": a.retry_delay_s,
        "request_timeout_s": a.request_timeout_s,
        "score_validation": a.score_validation,
        "max_size_mb": c.max_size_mb,
        "max_dimension": c.max_dimension,
        "quality": c.quality,
        "pre_compression_limit_mb": c.pre_compression_limit_mb,
    }


async def analyze_image(
    image_path: str,
    provider: LLMProvider | None = None,
    settings: Settings | None = None,
    max_retries: int | None = None,
) -> AnalysisResponse | None:
    """Run the assessment graph on one image.

    Returns None for input errors (missing/unreadable file, compression
    shortfall). Raises AnalysisFailedError once every attempt has failed.
    """
    settings = settings or get_settings()
    llm = provider or get_llm_provider(settings)
    cfg = run_config(settings, max_retries)

    with tempfile.TemporaryDirectory(prefix="audit5s_") as work_dir:
        initial_state: AssessmentState = {
            "image_path": os.fspath(image_path),
            "work_dir": work_dir,
            "attempt": 0,
            "status": "",
            "last_error": "",
            "analysis": None,
            "config": cfg,
        }
        graph = build_assessment_graph()
        # each attempt may pass through attempt + backoff
        limit = 2 * cfg["max_retries"] + 5
        result = await graph.ainvoke(
            initial_state,
            config={"configurable": {"provider": llm}, "recursion_limit": limit},
        )

    if result["status"] == "done":
        return result["analysis"]
    if result["status"] == "exhausted":
        raise AnalysisFailedError(result["attempt"], result["last_error"])
    logger.warning("No assessment for %s: %s", image_path, result["last_error"])
    return None


async def assess_area(
    area: Area,
    provider: LLMProvider | None = None,
    settings: Settings | None = None,
    max_retries: int | None = None,
) -> Assessment | None:
    """Analyze an Area's photo and build its scored Assessment."""
    logger.info("Analyzing image: %s", area.image_path)
    analysis = await analyze_image(area.image_path, provider, settings, max_retries)
    if analysis is None:
        return None
    return build_assessment(area, analysis)
