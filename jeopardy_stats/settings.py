from __future__ import annotations

import logging
import os
from dataclasses import dataclass

logger = logging.getLogger(__name__)
_SETTINGS: Settings | None = None


@dataclass(frozen=True)
class Settings:
    game_data_dir: str
    database_url: str
    anthropic_api_key: str | None
    anthropic_model: str
    anthropic_max_tokens: int
    analysis_timeout_seconds: float
    port: int


def _env_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Invalid %s=%r, falling back to %s", name, raw, default)
        return default


def load_settings() -> Settings:
    api_key = (os.getenv("ANTHROPIC_API_KEY") or "").strip() or None
    return Settings(
        game_data_dir=os.getenv("GAME_DATA_DIR", "gameData"),
        database_url=os.getenv("DATABASE_URL", "sqlite:///./jeopardy_stats.db"),
        anthropic_api_key=api_key,
        anthropic_model=os.getenv("ANTHROPIC_MODEL", "claude-sonnet-4-20250514"),
        anthropic_max_tokens=_env_int("ANTHROPIC_MAX_TOKENS", 2048),
        analysis_timeout_seconds=float(_env_int("ANALYSIS_TIMEOUT_SECONDS", 30)),
        port=_env_int("PORT", 3000),
    )


def get_settings() -> Settings:
    global _SETTINGS
    if _SETTINGS is not None:
        return _SETTINGS
    _SETTINGS = load_settings()
    if not _SETTINGS.anthropic_api_key:
        logger.warning("ANTHROPIC_API_KEY missing. Free-form questions are disabled.")
    return _SETTINGS
