"""Application configuration loaded from config.yaml + environment variables."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

import yaml
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings

from audit5s.exceptions import ConfigError

_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config.yaml"


def _load_yaml(path: Path) -> dict:
    if path.exists():
        with open(path) as f:
            return yaml.safe_load(f) or {}
    return {}


class AnalyzerConfig(BaseSettings):
    model_config = {"env_prefix": "AUDIT5S_ANALYZER_"}

    provider: Literal["anthropic", "openai"] = "anthropic"
    model: str = "claude-3-5-sonnet-20241022"
    max_tokens: int = 1500
    max_retries: int = 3
    retry_delay_s: float = 5.0
    request_timeout_s: float = 120.0
    # strict rejects out-of-range numbers, lenient clamps them, off trusts the model
    score_validation: Literal["strict", "lenient", "off"] = "lenient"


class CompressionConfig(BaseSettings):
    model_config = {"env_prefix": "AUDIT5S_COMPRESSION_"}

    max_size_mb: float = 3.0
    max_dimension: int = 1920
    quality: int = 80
    pre_compression_limit_mb: float = 20.0


class ValidatorConfig(BaseSettings):
    model_config = {"env_prefix": "AUDIT5S_VALIDATOR_"}

    max_upload_mb: float = 10.0


class ReportConfig(BaseSettings):
    model_config = {"env_prefix": "AUDIT5S_REPORTS_"}

    output_dir: str = "data/reports"
    prefix: str = "5S_Assessment"


class Settings(BaseSettings):
    anthropic_api_key: str = ""
    openai_api_key: str = ""
    analyzer: AnalyzerConfig = Field(default_factory=AnalyzerConfig)
    compression: CompressionConfig = Field(default_factory=CompressionConfig)
    validator: ValidatorConfig = Field(default_factory=ValidatorConfig)
    reports: ReportConfig = Field(default_factory=ReportConfig)

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


def _build_settings(y: dict) -> Settings:
    if not isinstance(y, dict):
        raise ConfigError(f"expected a mapping at the top level, got {type(y).__name__}")
    # an empty section ("analyzer:") loads as None
    return Settings(
        analyzer=AnalyzerConfig(**(y.get("analyzer") or {})),
        compression=CompressionConfig(**(y.get("compression") or {})),
        validator=ValidatorConfig(**(y.get("validator") or {})),
        reports=ReportConfig(**(y.get("reports") or {})),
    )


def load_settings(path: str | Path) -> Settings:
    """Build Settings from an explicit YAML file. The file must exist."""
    p = Path(path)
    if not p.is_file():
        raise ConfigError(f"Configuration file not found: {p}")
    try:
        return _build_settings(_load_yaml(p))
    except (yaml.YAMLError, ValidationError, TypeError, ConfigError) as e:
        raise ConfigError(f"Invalid configuration file {p}: {e}") from e


def get_settings() -> Settings:
    """Build Settings by merging YAML defaults with env overrides.

    AUDIT5S_CONFIG points at an alternative YAML file.
    """
    override = os.environ.get("AUDIT5S_CONFIG")
    if override:
        return load_settings(override)
    return _build_settings(_load_yaml(_CONFIG_PATH))
