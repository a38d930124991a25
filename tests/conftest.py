from __future__ import annotations

import io
import json

import pytest
from PIL import Image

from audit5s.config import AnalyzerConfig, CompressionConfig, ReportConfig, Settings
from tests.fakes import analysis_payload


@pytest.fixture
def valid_reply() -> str:
    return json.dumps(analysis_payload())


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        analyzer=AnalyzerConfig(max_retries=3, retry_delay_s=0, request_timeout_s=5),
        compression=CompressionConfig(max_size_mb=0.05),
        reports=ReportConfig(output_dir=str(tmp_path / "reports")),
    )


@pytest.fixture
def large_image(tmp_path):
    """Uncompressed 800x600 BMP (~1.4 MB) that compresses to a few KB."""
    path = tmp_path / "dock.bmp"
    Image.new("RGB", (800, 600), color=(70, 130, 180)).save(path)
    return path


@pytest.fixture
def small_jpeg(tmp_path):
    path = tmp_path / "desk.jpg"
    Image.new("RGB", (64, 48), color=(200, 200, 200)).save(path, "JPEG")
    return path


@pytest.fixture
def jpeg_bytes() -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (320, 240), color=(70, 130, 180)).save(buf, format="JPEG")
    return buf.getvalue()
