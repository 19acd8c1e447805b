"""Utility functions for the portfolio chat service."""

from __future__ import annotations

import logging
from pathlib import Path

from dotenv import load_dotenv

from logger import LOGGER_NAME, mask_secret

log = logging.getLogger(LOGGER_NAME)


def load_env_files() -> None:
    """Load .env files from program and current directory."""
    this_dir = Path(__file__).resolve().parent
    p1 = this_dir / ".env"
    p2 = Path.cwd() / ".env"

    loaded_any = False
    if p1.exists():
        loaded_any = load_dotenv(dotenv_path=str(p1), override=True) or loaded_any
        log.info("Loaded .env from %s", str(p1))

    if p2.exists() and p2 != p1:
        loaded_any = load_dotenv(dotenv_path=str(p2), override=True) or loaded_any
        log.info("Loaded .env from %s", str(p2))

    if not loaded_any:
        log.info(".env not loaded (not found or no variables applied).")


def dump_config(config) -> None:
    """Log effective configuration at startup."""
    log.info("=== Portfolio chat startup config ===")
    log.info("GROQ_BASE_URL=%s", config.groq_base_url)
    log.info(
        "GROQ_API_KEY_set=%s value=%s len=%s",
        bool(config.groq_api_key),
        mask_secret(config.groq_api_key),
        len(config.groq_api_key or ""),
    )
    log.info("GROQ_MODEL=%s", config.model_override or "(none)")
    log.info("MODEL_CANDIDATES=%s", list(config.model_candidates))
    log.info("ALLOWED_ORIGIN=%s", config.allowed_origin)
    log.info("ASSISTANT_NAME=%s", config.assistant_name)
    log.info(
        "RATE capacity=%s refill_per_minute=%s max_clients=%s idle_ttl_s=%s",
        config.rate_capacity,
        config.rate_refill_per_minute,
        config.rate_max_clients,
        config.rate_idle_ttl_s,
    )
    log.info("MAX_MESSAGE_CHARS=%s", config.max_message_chars)
    log.info("HISTORY_TURNS=%s", config.history_turns)
    log.info("PERSONA_PATH=%s", config.persona_path or "(built-in)")
    log.info("TEMPERATURE=%s MAX_TOKENS=%s", config.temperature, config.max_tokens)
    log.info("REQUEST_TIMEOUT_S=%s", config.request_timeout_s)
    log.info("FLAVOR_ENABLED=%s FLAVOR_SEED=%s", config.flavor_enabled, config.flavor_seed)
    log.info("LOG_LEVEL=%s", config.log_level)
    log.info("LOG_PATH=%s", config.log_path or "(console)")
    log.info("WorkingDir=%s", str(Path.cwd()))
    log.info("===============================")
