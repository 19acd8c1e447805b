"""Configuration management for the portfolio chat service."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional, Tuple

DEFAULT_FALLBACK_MODELS: Tuple[str, ...] = (
    "llama-3.3-70b-versatile",
    "llama-3.1-70b-versatile",
    "llama-3.1-8b-instant",
    "mixtral-8x7b-32768",
    "gemma2-9b-it",
)


def _env_bool(name: str, default: bool) -> bool:
    """Get boolean environment variable with fallback."""
    v = os.getenv(name)
    if v is None or v == "":
        return default
    return v.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_float(name: str, default: float) -> float:
    """Get float environment variable with fallback."""
    v = os.getenv(name)
    if v is None or v == "":
        return default
    try:
        return float(v)
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    """Get integer environment variable with fallback."""
    v = os.getenv(name)
    if v is None or v == "":
        return default
    try:
        return int(v.strip())
    except ValueError:
        return default


def _env_optional_int(name: str) -> Optional[int]:
    v = os.getenv(name)
    if v is None or v.strip() == "":
        return None
    try:
        return int(v.strip())
    except ValueError:
        return None


def _env_str(name: str, default: str) -> str:
    """Get string environment variable with fallback."""
    v = os.getenv(name)
    if v is None:
        return default
    return v


def _csv_list(name: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
    """Parse comma-separated environment variable into an ordered tuple."""
    v = os.getenv(name, "")
    items = tuple(x.strip() for x in v.split(",") if x.strip())
    return items or default


@dataclass(frozen=True)
class AppConfig:
    """Application configuration."""

    # Groq (OpenAI-compatible) upstream
    groq_base_url: str
    groq_api_key: str
    model_override: str
    fallback_models: Tuple[str, ...]

    # Public surface
    allowed_origin: str
    assistant_name: str

    # Token bucket
    rate_capacity: int
    rate_refill_per_minute: float
    rate_max_clients: int
    rate_idle_ttl_s: float

    # Input and prompt
    max_message_chars: int
    history_turns: int
    persona_path: str

    # Completion parameters
    temperature: float
    max_tokens: int
    request_timeout_s: float

    # Flavoring
    flavor_enabled: bool
    flavor_seed: Optional[int]

    # Server settings
    port: int
    log_level: str
    log_path: str
    user_agent: str

    @classmethod
    def from_env(cls) -> AppConfig:
        """Load configuration from environment variables."""
        return cls(
            groq_base_url=_env_str("GROQ_BASE_URL", "https://api.groq.com/openai/v1").rstrip("/"),
            groq_api_key=os.getenv("GROQ_API_KEY", ""),
            model_override=_env_str("GROQ_MODEL", "").strip(),
            fallback_models=_csv_list("FALLBACK_MODELS", DEFAULT_FALLBACK_MODELS),
            allowed_origin=_env_str("ALLOWED_ORIGIN", "https://pranjalmax.github.io"),
            assistant_name=_env_str("ASSISTANT_NAME", "Max-AI Assistant"),
            rate_capacity=_env_int("RATE_CAPACITY", 16),
            rate_refill_per_minute=_env_float("RATE_REFILL_PER_MINUTE", 8.0),
            rate_max_clients=_env_int("RATE_MAX_CLIENTS", 10_000),
            rate_idle_ttl_s=_env_float("RATE_IDLE_TTL_S", 3600.0),
            max_message_chars=_env_int("MAX_MESSAGE_CHARS", 800),
            history_turns=_env_int("HISTORY_TURNS", 6),
            persona_path=_env_str("PERSONA_PATH", ""),
            temperature=_env_float("TEMPERATURE", 0.35),
            max_tokens=_env_int("MAX_TOKENS", 450),
            request_timeout_s=_env_float("REQUEST_TIMEOUT_S", 60.0),
            flavor_enabled=_env_bool("FLAVOR_ENABLED", True),
            flavor_seed=_env_optional_int("FLAVOR_SEED"),
            port=int(os.getenv("PORT", "8000")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper().strip(),
            log_path=_env_str("LOG_PATH", ""),
            user_agent=_env_str("USER_AGENT", "portfolio-chat/1.0"),
        )

    @property
    def model_candidates(self) -> Tuple[str, ...]:
        """Override first (if any), then the fallback order, without duplicates."""
        ordered = [self.model_override, *self.fallback_models]
        seen = set()
        out = []
        for m in ordered:
            if m and m not in seen:
                seen.add(m)
                out.append(m)
        return tuple(out)

    def validate(self, require_api_key: bool = True) -> None:
        """Validate configuration."""
        if require_api_key and not self.groq_api_key:
            raise ValueError("GROQ_API_KEY is required")
        if not self.groq_base_url:
            raise ValueError("GROQ_BASE_URL must be non-empty")
        if not self.model_candidates:
            raise ValueError("FALLBACK_MODELS must name at least one model")
        if not self.allowed_origin:
            raise ValueError("ALLOWED_ORIGIN must be non-empty")
        if self.rate_capacity <= 0:
            raise ValueError("RATE_CAPACITY must be > 0")
        if self.rate_refill_per_minute < 0:
            raise ValueError("RATE_REFILL_PER_MINUTE must be >= 0")
        if self.rate_max_clients <= 0:
            raise ValueError("RATE_MAX_CLIENTS must be > 0")
        if self.rate_idle_ttl_s <= 0:
            raise ValueError("RATE_IDLE_TTL_S must be > 0")
        if self.max_message_chars <= 0:
            raise ValueError("MAX_MESSAGE_CHARS must be > 0")
        if self.history_turns < 0:
            raise ValueError("HISTORY_TURNS must be >= 0")
        if not 0.0 <= self.temperature <= 2.0:
            raise ValueError("TEMPERATURE must be between 0 and 2")
        if self.max_tokens <= 0:
            raise ValueError("MAX_TOKENS must be > 0")
        if self.request_timeout_s <= 0:
            raise ValueError("REQUEST_TIMEOUT_S must be > 0")
        if not self.user_agent:
            raise ValueError("USER_AGENT must be non-empty")


def load_config() -> AppConfig:
    """Load configuration from environment."""
    return AppConfig.from_env()
