"""Tests for the 5S Assessment Agent (validate → attempt → backoff/finalize)."""

import asyncio
import base64
import json
import os
import tempfile

import pytest

from audit5s.agents.five_s import graph as graph_module
from audit5s.agents.five_s.graph import (
    after_attempt,
    after_validate,
    analyze_image,
    assess_area,
    build_assessment_graph,
    run_config,
)
from audit5s.agents.five_s.prompts import FIVE_S_RUBRIC_PROMPT
from audit5s.config import Settings
from audit5s.exceptions import AnalysisFailedError
from audit5s.schemas import Area
from audit5s.services.image_compressor import budget_bytes
from tests.fakes import FakeProvider, analysis_payload


@pytest.fixture
def temp_root(tmp_path, monkeypatch):
    """Route every tempfile call into a directory the test can inspect."""
    root = tmp_path / "tmp"
    root.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(root))
    return root


@pytest.fixture
def sleeps(monkeypatch):
    delays = []
    real_sleep = asyncio.sleep

    async def _record(delay, *args, **kwargs):
        delays.append(delay)
        await real_sleep(0)

    monkeypatch.setattr(graph_module.asyncio, "sleep", _record)
    return delays


# ── routing ──────────────────────────────────────────────────────────

def test_after_validate_routes_invalid_to_finalize():
    assert after_validate({"status": "invalid"}) == "finalize"
    assert after_validate({"status": ""}) == "attempt"


def test_after_attempt_routes_only_retry_to_backoff():
    assert after_attempt({"status": "retry"}) == "backoff"
    for status in ("done", "exhausted", "compression_failed"):
        assert after_attempt({"status": status}) == "finalize"


def test_build_assessment_graph_returns_callable():
    graph = build_assessment_graph()
    assert graph is not None
    assert hasattr(graph, "ainvoke")


def test_run_config_enforces_at_least_one_attempt(settings):
    assert run_config(settings, max_retries=0)["max_retries"] == 1
    assert run_config(settings)["max_retries"] == 3


# ── end-to-end through the graph ─────────────────────────────────────

@pytest.mark.asyncio
async def test_assess_area_scores_example(large_image, settings, valid_reply):
    provider = FakeProvider([valid_reply])
    area = Area(name="Warehouse A", image_path=str(large_image))

    assessment = await assess_area(area, provider, settings)

    assert assessment is not None
    assert assessment.area_name == "Warehouse A"
    assert assessment.total_score == 43
    assert assessment.observations["sort"] == "sort looks fine"
    assert len(provider.calls) == 1
    assert provider.calls[0]["prompt"] == FIVE_S_RUBRIC_PROMPT


@pytest.mark.asyncio
async def test_large_image_is_sent_compressed(large_image, settings, valid_reply):
    provider = FakeProvider([valid_reply])
    await analyze_image(str(large_image), provider, settings)

    sent = base64.b64decode(provider.calls[0]["image_b64"])
    assert sent[:2] == b"\xff\xd8"
    assert len(sent) <= settings.compression.max_size_mb * 1024 * 1024
    assert provider.calls[0]["media_type"] == "image/jpeg"


@pytest.mark.asyncio
async def test_small_image_is_sent_untouched(small_jpeg, settings, valid_reply):
    provider = FakeProvider([valid_reply])
    await analyze_image(str(small_jpeg), provider, settings)
    assert base64.b64decode(provider.calls[0]["image_b64"]) == small_jpeg.read_bytes()


@pytest.mark.asyncio
async def test_small_non_jpeg_is_reencoded_with_default_budget(large_image, valid_reply):
    settings = Settings()
    settings.analyzer.retry_delay_s = 0
    provider = FakeProvider([valid_reply])

    assert os.path.getsize(large_image) < budget_bytes(settings.compression.max_size_mb)
    assert await analyze_image(str(large_image), provider, settings) is not None

    assert len(provider.calls) == 1
    assert base64.b64decode(provider.calls[0]["image_b64"])[:2] == b"\xff\xd8"
    assert provider.calls[0]["media_type"] == "image/jpeg"


@pytest.mark.asyncio
async def test_missing_file_returns_none_without_calling_model(tmp_path, settings, valid_reply):
    provider = FakeProvider([valid_reply])
    area = Area(name="Ghost", image_path=str(tmp_path / "missing.jpg"))
    assert await assess_area(area, provider, settings) is None
    assert provider.calls == []


@pytest.mark.asyncio
async def test_image_over_input_ceiling_returns_none(large_image, settings, valid_reply):
    settings.compression.pre_compression_limit_mb = 0.5
    provider = FakeProvider([valid_reply])
    assert await analyze_image(str(large_image), provider, settings) is None
    assert provider.calls == []


@pytest.mark.asyncio
async def test_compression_shortfall_returns_none(tmp_path, settings, valid_reply, temp_root):
    from PIL import Image

    noisy = tmp_path / "noise.bmp"
    Image.frombytes("RGB", (1000, 800), os.urandom(1000 * 800 * 3)).save(noisy)
    settings.compression.max_size_mb = 0.01
    provider = FakeProvider([valid_reply])

    assert await analyze_image(str(noisy), provider, settings) is None
    assert provider.calls == []
    assert list(temp_root.iterdir()) == []


@pytest.mark.asyncio
async def test_malformed_json_then_success_retries(large_image, settings, valid_reply, sleeps):
    settings.analyzer.retry_delay_s = 5
    provider = FakeProvider(["not json at all", valid_reply])
    analysis = await analyze_image(str(large_image), provider, settings)
    assert analysis is not None
    assert len(provider.calls) == 2
    assert [d for d in sleeps if d] == [5]


@pytest.mark.asyncio
async def test_network_error_is_retried(large_image, settings, valid_reply, sleeps):
    provider = FakeProvider([ConnectionError("reset by peer"), valid_reply])
    analysis = await analyze_image(str(large_image), provider, settings)
    assert analysis is not None
    assert len(provider.calls) == 2


@pytest.mark.asyncio
async def test_always_malformed_raises_after_max_retries(large_image, settings, temp_root, sleeps):
    settings.analyzer.retry_delay_s = 5
    provider = FakeProvider(["{broken"])

    with pytest.raises(AnalysisFailedError) as excinfo:
        await analyze_image(str(large_image), provider, settings, max_retries=3)

    assert excinfo.value.attempts == 3
    assert "invalid_json" in excinfo.value.last_error
    assert len(provider.calls) == 3
    # flat delay between attempts, none after the last
    assert [d for d in sleeps if d] == [5, 5]
    assert list(temp_root.iterdir()) == []


@pytest.mark.asyncio
async def test_request_timeout_counts_as_failed_attempt(small_jpeg, settings):
    settings.analyzer.request_timeout_s = 0.05
    provider = FakeProvider([json.dumps(analysis_payload())], delay=1.0)
    with pytest.raises(AnalysisFailedError) as excinfo:
        await analyze_image(str(small_jpeg), provider, settings, max_retries=1)
    assert "timed out" in str(excinfo.value)


@pytest.mark.asyncio
async def test_strict_mode_out_of_range_is_retried_then_fails(small_jpeg, settings):
    settings.analyzer.score_validation = "strict"
    scores = {"sort": 15, "set": 7, "shine": 9, "standardize": 6, "sustain": 5, "safety": 10}
    provider = FakeProvider([json.dumps(analysis_payload(scores=scores))])
    with pytest.raises(AnalysisFailedError) as excinfo:
        await analyze_image(str(small_jpeg), provider, settings, max_retries=2)
    assert "out_of_range" in excinfo.value.last_error
    assert len(provider.calls) == 2


@pytest.mark.asyncio
async def test_lenient_mode_clamps_and_succeeds(small_jpeg, settings):
    scores = {"sort": 15, "set": 7, "shine": 9, "standardize": 6, "sustain": 5, "safety": 10}
    provider = FakeProvider([json.dumps(analysis_payload(scores=scores, hazards=[]))])
    area = Area(name="Line 1", image_path=str(small_jpeg))
    assessment = await assess_area(area, provider, settings)
    assert assessment.scores["sort"].score == 10
    assert assessment.total_score == 47


@pytest.mark.asyncio
async def test_concurrent_assessments_do_not_interfere(large_image, small_jpeg, settings, valid_reply):
    areas = [
        Area(name="A", image_path=str(large_image)),
        Area(name="B", image_path=str(small_jpeg)),
    ]
    results = await asyncio.gather(*(assess_area(a, FakeProvider([valid_reply]), settings) for a in areas))
    assert [r.area_name for r in results] == ["A", "B"]
