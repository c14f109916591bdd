"""Configuration utilities for the Pulse briefing pipeline."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from .errors import ConfigError

DEFAULT_DATA_DIR = Path(os.getenv("PULSE_DATA_DIR", "data"))
DEFAULT_OUTPUT_PATH = DEFAULT_DATA_DIR / "live" / "briefings.json"
DEFAULT_API_URL = "https://api.deepseek.com/chat/completions"
DEFAULT_MODEL = "deepseek-chat"

API_KEY_ENV = "DEEPSEEK_API_KEY"


@dataclass(frozen=True)
class Config:
    """Runtime configuration values for one generation run."""

    api_key: str
    output_path: Path = DEFAULT_OUTPUT_PATH
    api_url: str = DEFAULT_API_URL
    model: str = DEFAULT_MODEL
    max_items_per_briefing: int = 10
    max_items_to_process: int = 15
    max_days_to_keep: int = 7
    batch_size: int = 15
    batch_delay_seconds: float = 0.0
    min_relevance_score: int = 5
    similarity_threshold: float = 0.35
    request_timeout: float = 30.0
    run_timeout: float = 300.0


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from exc


def load_config() -> Config:
    """Load configuration from environment variables and defaults.

    Raises ConfigError when the completion API key is not set.
    """

    api_key = os.getenv(API_KEY_ENV, "").strip()
    if not api_key:
        raise ConfigError(f"{API_KEY_ENV} environment variable is required")

    return Config(
        api_key=api_key,
        output_path=Path(os.getenv("PULSE_OUTPUT_PATH", str(DEFAULT_OUTPUT_PATH))),
        api_url=os.getenv("DEEPSEEK_API_URL", DEFAULT_API_URL),
        model=os.getenv("DEEPSEEK_MODEL", DEFAULT_MODEL),
        batch_size=int(_env_float("PULSE_BATCH_SIZE", 15)),
        batch_delay_seconds=_env_float("PULSE_BATCH_DELAY", 0.0),
        min_relevance_score=int(_env_float("PULSE_MIN_RELEVANCE", 5)),
        run_timeout=_env_float("PULSE_RUN_TIMEOUT", 300.0),
    )


__all__ = ["API_KEY_ENV", "Config", "DEFAULT_OUTPUT_PATH", "load_config"]
