"""Upstream chat-completion API communication (Groq, OpenAI-compatible)."""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Dict, Optional

import httpx

from config import AppConfig
from logger import LOGGER_NAME
from prompts import system_instruction

log = logging.getLogger(LOGGER_NAME)

# Groq error codes that mean "this model is gone, try another one".
RECOVERABLE_ERROR_CODES = frozenset({
    "model_decommissioned",
    "model_not_found",
    "model_not_active",
})
# Substring fallback for bodies without a structured code.
RECOVERABLE_ERROR_MARKERS = ("model_decommissioned", "not found", "unavailable")


def error_code(text: str) -> Optional[str]:
    """Extract ``error.code`` from an OpenAI-style error body, if any."""
    try:
        payload = json.loads(text)
    except (TypeError, ValueError):
        return None
    if not isinstance(payload, dict):
        return None
    err = payload.get("error")
    if isinstance(err, dict):
        code = err.get("code")
        if isinstance(code, str) and code:
            return code
    return None


def is_recoverable_error(text: str) -> bool:
    """
    Decide whether an upstream failure should advance to the next model.

    Provider-specific: a structured Groq error code is checked first, then
    the body text is searched for the known markers.
    """
    if error_code(text) in RECOVERABLE_ERROR_CODES:
        return True
    low = (text or "").lower()
    return any(marker in low for marker in RECOVERABLE_ERROR_MARKERS)


def extract_answer(payload: Any) -> str:
    """Trimmed ``choices[0].message.content`` or an empty string."""
    if not isinstance(payload, dict):
        return ""
    choices = payload.get("choices")
    if not isinstance(choices, list) or not choices:
        return ""
    first = choices[0]
    if not isinstance(first, dict):
        return ""
    message = first.get("message") or {}
    content = message.get("content") if isinstance(message, dict) else None
    if not isinstance(content, str):
        return ""
    return content.strip()


class UpstreamClient:
    """Handle communication with the chat-completion endpoint."""

    def __init__(self, config: AppConfig, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self._config = config
        self._transport = transport

    def get_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self._config.groq_api_key}",
            "Content-Type": "application/json",
            "User-Agent": self._config.user_agent,
        }

    def build_payload(self, model_id: str, prompt: str) -> Dict[str, Any]:
        return {
            "model": model_id,
            "messages": [
                {"role": "system", "content": system_instruction(self._config.assistant_name)},
                {"role": "user", "content": prompt},
            ],
            "temperature": self._config.temperature,
            "max_tokens": self._config.max_tokens,
        }

    def open_client(self) -> httpx.AsyncClient:
        """One client per inbound request; caller closes it."""
        return httpx.AsyncClient(
            timeout=httpx.Timeout(self._config.request_timeout_s),
            transport=self._transport,
        )

    async def chat_completion(
        self,
        client: httpx.AsyncClient,
        model_id: str,
        prompt: str,
    ) -> httpx.Response:
        """Send a single non-streaming chat completion request."""
        t0 = time.time()
        resp = await client.post(
            f"{self._config.groq_base_url}/chat/completions",
            headers=self.get_headers(),
            json=self.build_payload(model_id, prompt),
        )
        dt = (time.time() - t0) * 1000
        log.info("Upstream chat model=%s status=%s ms=%.1f", model_id, resp.status_code, dt)

        if not resp.is_success:
            log.warning(
                "Upstream chat error model=%s status=%s content-type=%s",
                model_id,
                resp.status_code,
                resp.headers.get("content-type", ""),
            )
        return resp

    @staticmethod
    def read_error_snippet(resp: httpx.Response, limit: int = 2000) -> str:
        """Best-effort: decoded error body, truncated."""
        try:
            txt = resp.text
        except Exception:
            return ""
        return txt[:limit]
