"""Sequential multi-model fallback for chat completions."""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

import httpx

from errors import AllModelsExhausted, UpstreamModelError
from logger import LOGGER_NAME
from upstream import UpstreamClient, extract_answer, is_recoverable_error

log = logging.getLogger(LOGGER_NAME)

EMPTY_RESPONSE = "Empty response"


class FallbackInvoker:
    """
    Try each model candidate in order until one returns a usable answer.

    Exactly one attempt per model, strictly one at a time. Only the
    "model gone" family of upstream errors and empty completions advance to
    the next candidate; any other failure is raised straight away.
    """

    def __init__(self, upstream: UpstreamClient, candidates: Iterable[str]) -> None:
        self._upstream = upstream
        self.candidates: List[str] = list(candidates)
        if not self.candidates:
            raise ValueError("at least one model candidate is required")

    @classmethod
    def from_config(cls, config, transport: Optional[httpx.AsyncBaseTransport] = None) -> FallbackInvoker:
        return cls(UpstreamClient(config, transport=transport), config.model_candidates)

    async def complete(self, prompt: str, req_id: str = "-") -> str:
        client = self._upstream.open_client()
        try:
            return await self._complete_with(client, prompt, req_id)
        finally:
            await client.aclose()

    async def _complete_with(self, client: httpx.AsyncClient, prompt: str, req_id: str) -> str:
        last_error: Optional[str] = None
        total = len(self.candidates)

        for i, model_id in enumerate(self.candidates, start=1):
            log.info("Attempt %d/%d req_id=%s -> %s", i, total, req_id, model_id)
            try:
                answer = await self._attempt(client, model_id, prompt)
            except UpstreamModelError as e:
                if not e.recoverable:
                    log.error(
                        "Attempt %d/%d req_id=%s model=%s fatal status=%s: %s",
                        i,
                        total,
                        req_id,
                        model_id,
                        e.status_code,
                        e.text[:500],
                    )
                    raise
                last_error = e.text
                log.warning(
                    "Attempt %d/%d req_id=%s model=%s unavailable status=%s; trying next",
                    i,
                    total,
                    req_id,
                    model_id,
                    e.status_code,
                )
                continue

            if answer:
                log.info("Answer committed req_id=%s model=%s chars=%d", req_id, model_id, len(answer))
                return answer

            last_error = EMPTY_RESPONSE
            log.warning(
                "Attempt %d/%d req_id=%s model=%s empty-completion; trying next",
                i,
                total,
                req_id,
                model_id,
            )

        log.error("All %d model candidates failed req_id=%s last_error=%r", total, req_id, last_error)
        raise AllModelsExhausted(last_error)

    async def _attempt(self, client: httpx.AsyncClient, model_id: str, prompt: str) -> str:
        try:
            resp = await self._upstream.chat_completion(client, model_id, prompt)
        except httpx.HTTPError as e:
            text = f"{type(e).__name__}: {e}"
            raise UpstreamModelError(model_id, text, recoverable=is_recoverable_error(text)) from e

        if not resp.is_success:
            text = self._upstream.read_error_snippet(resp) or f"Upstream error {resp.status_code}"
            raise UpstreamModelError(
                model_id,
                text,
                status_code=resp.status_code,
                recoverable=is_recoverable_error(text),
            )

        try:
            payload = resp.json()
        except ValueError:
            log.warning("Upstream model=%s returned non-JSON body", model_id)
            return ""
        return extract_answer(payload)
