from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

import logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settings:
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    model: str = "gpt-4o-mini"
    timeout_seconds: float = 10.0
    max_tokens: int = 300
    temperature: float = 0.7
    history_window: int = 6
    max_query_chars: int = 1000

    @property
    def generative_enabled(self) -> bool:
        return bool(self.api_key and self.api_key.strip())


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("config.invalid_float %s=%s", name, raw)
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("config.invalid_int %s=%s", name, raw)
        return default


def load_settings() -> Settings:
    return Settings(
        api_key=os.getenv("OPENAI_API_KEY") or os.getenv("GROQ_API_KEY"),
        base_url=os.getenv("INTAKE_LLM_BASE_URL") or None,
        model=os.getenv("INTAKE_LLM_MODEL", "gpt-4o-mini"),
        timeout_seconds=_env_float("INTAKE_LLM_TIMEOUT", 10.0),
        max_tokens=_env_int("INTAKE_LLM_MAX_TOKENS", 300),
        temperature=_env_float("INTAKE_LLM_TEMPERATURE", 0.7),
        history_window=_env_int("INTAKE_HISTORY_WINDOW", 6),
        max_query_chars=_env_int("INTAKE_MAX_QUERY_CHARS", 1000),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()
