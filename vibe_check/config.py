"""Configuration helpers for the Vibe Check backend."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache
from typing import List, Mapping

from dotenv import load_dotenv

from .errors import ConfigurationError

DEFAULT_BASE_URL = "https://api.perplexity.ai"
DEFAULT_MODEL = "sonar-pro"
DEFAULT_TIMEOUT_SECONDS = 60.0
DEFAULT_PORT = 3000
DEFAULT_TABLE = "analyses"
DEFAULT_STATIC_DIR = "public"

load_dotenv(override=False)


class ExtractionPolicy(str, Enum):
    """How the pipeline reacts to model output that is not valid JSON."""

    SOFT = "soft"
    HARD = "hard"


@dataclass(frozen=True)
class Settings:
    """Settings container resolved once from the process environment.

    Only the Perplexity key is mandatory. The durable Supabase backend is
    enabled when both its URL and key are present; otherwise results live in
    process memory.
    """

    perplexity_api_key: str | None = None
    perplexity_base_url: str = DEFAULT_BASE_URL
    perplexity_model: str = DEFAULT_MODEL
    upstream_timeout: float = DEFAULT_TIMEOUT_SECONDS
    extraction_policy: ExtractionPolicy = ExtractionPolicy.SOFT
    supabase_url: str | None = None
    supabase_key: str | None = None
    supabase_table: str = DEFAULT_TABLE
    allowed_origins: List[str] = field(default_factory=list)
    static_dir: str = DEFAULT_STATIC_DIR
    log_level: str = "INFO"
    port: int = DEFAULT_PORT

    @property
    def durable_storage_enabled(self) -> bool:
        """True when the Supabase endpoint and credential are both configured."""

        return bool(self.supabase_url and self.supabase_key)

    @property
    def missing_variables(self) -> List[str]:
        """Names of required environment variables that are unset."""

        missing = []
        if not self.perplexity_api_key:
            missing.append("PERPLEXITY_KEY")
        return missing


def _split_origins(raw: str | None) -> List[str]:
    if not raw:
        return []
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def _parse_float(environ: Mapping[str, str], name: str, default: float) -> float:
    raw = environ.get(name)
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from exc
    if value <= 0:
        raise ConfigurationError(f"{name} must be positive, got {raw!r}")
    return value


def _parse_port(environ: Mapping[str, str]) -> int:
    raw = environ.get("PORT")
    if not raw:
        return DEFAULT_PORT
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"PORT must be an integer, got {raw!r}") from exc


def _parse_policy(environ: Mapping[str, str]) -> ExtractionPolicy:
    raw = environ.get("VIBECHECK_EXTRACTION_POLICY")
    if not raw:
        return ExtractionPolicy.SOFT
    try:
        return ExtractionPolicy(raw.strip().lower())
    except ValueError as exc:
        allowed = ", ".join(policy.value for policy in ExtractionPolicy)
        raise ConfigurationError(
            f"VIBECHECK_EXTRACTION_POLICY must be one of {allowed}, got {raw!r}"
        ) from exc


def load_settings(environ: Mapping[str, str]) -> Settings:
    """Build settings from an explicit mapping of environment variables."""

    return Settings(
        perplexity_api_key=environ.get("PERPLEXITY_KEY") or None,
        perplexity_base_url=environ.get("PERPLEXITY_BASE_URL") or DEFAULT_BASE_URL,
        perplexity_model=environ.get("PERPLEXITY_MODEL") or DEFAULT_MODEL,
        upstream_timeout=_parse_float(environ, "VIBECHECK_UPSTREAM_TIMEOUT", DEFAULT_TIMEOUT_SECONDS),
        extraction_policy=_parse_policy(environ),
        supabase_url=environ.get("SUPABASE_URL") or None,
        supabase_key=environ.get("SUPABASE_KEY") or None,
        supabase_table=environ.get("SUPABASE_TABLE") or DEFAULT_TABLE,
        allowed_origins=_split_origins(environ.get("VIBECHECK_ALLOWED_ORIGINS")),
        static_dir=environ.get("VIBECHECK_STATIC_DIR") or DEFAULT_STATIC_DIR,
        log_level=(environ.get("VIBECHECK_LOG_LEVEL") or "INFO").upper(),
        port=_parse_port(environ),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Read environment variables and return cached settings."""

    return load_settings(os.environ)


def require_settings(settings: Settings | None = None) -> Settings:
    """Return settings, refusing to continue when required variables are missing."""

    resolved = settings or get_settings()
    missing = resolved.missing_variables
    if missing:
        raise ConfigurationError(
            f"Missing {', '.join(missing)} environment variable. Add it to your .env file."
        )
    return resolved
