from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml


def _env_int(name: str, default: int) -> int:
    v = os.getenv(name)
    if v is None or v == "":
        return default
    try:
        return int(v)
    except ValueError:
        return default


def _env_bool(name: str, default: bool) -> bool:
    v = os.getenv(name)
    if v is None or v == "":
        return default
    return v.strip().lower() in ("1", "true", "yes", "y", "on")


def _env_str(name: str, default: str) -> str:
    v = os.getenv(name)
    return default if v is None else v


@dataclass
class Settings:
    # Stats
    top_domains_limit: int = 10
    most_recent_limit: int = 20
    domain_mode: str = "host"  # host | registrable

    # OpenAI narrative
    openai_model: str = "gpt-4.1-mini"
    openai_timeout_s: int = 120
    openai_max_output_tokens: int = 2000
    openai_reasoning_effort: str = ""  # low | medium | high, empty to omit
    narrative_language: str = "English"

    # Logging / UX
    log_level: str = "INFO"
    no_color: bool = False

    @staticmethod
    def from_env() -> "Settings":
        s = Settings()
        s.top_domains_limit = _env_int("MARKSTATS_TOP_DOMAINS", s.top_domains_limit)
        s.most_recent_limit = _env_int("MARKSTATS_MOST_RECENT", s.most_recent_limit)
        s.domain_mode = _env_str("MARKSTATS_DOMAIN_MODE", s.domain_mode)

        s.openai_model = _env_str("MARKSTATS_OPENAI_MODEL", s.openai_model)
        s.openai_timeout_s = _env_int("MARKSTATS_OPENAI_TIMEOUT_S", s.openai_timeout_s)
        s.openai_max_output_tokens = _env_int("MARKSTATS_OPENAI_MAX_OUTPUT_TOKENS", s.openai_max_output_tokens)
        s.openai_reasoning_effort = _env_str("MARKSTATS_OPENAI_REASONING_EFFORT", s.openai_reasoning_effort)
        s.narrative_language = _env_str("MARKSTATS_NARRATIVE_LANGUAGE", s.narrative_language)

        s.log_level = _env_str("MARKSTATS_LOG_LEVEL", s.log_level)
        s.no_color = _env_bool("MARKSTATS_NO_COLOR", s.no_color)
        return s

    @staticmethod
    def from_file(path: Path) -> "Settings":
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        s = Settings.from_env()
        for k, v in data.items():
            if hasattr(s, k):
                setattr(s, k, v)
        return s


def load_settings(config_path: Optional[str]) -> Settings:
    if config_path:
        return Settings.from_file(Path(config_path))
    return Settings.from_env()
