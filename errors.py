"""Error taxonomy for the chat pipeline."""

from __future__ import annotations

from typing import Optional


class ChatError(Exception):
    """Base error carrying the HTTP status and the client-facing message."""

    status_code: int = 500
    message: str = "Server error"

    def __init__(self, message: Optional[str] = None, detail: Optional[str] = None) -> None:
        self.message = message or self.message
        self.detail = detail
        super().__init__(self.message)

    def to_body(self) -> dict:
        body = {"error": self.message}
        if self.detail is not None:
            body["detail"] = self.detail
        return body


class ClientInputError(ChatError):
    """Request body failed validation. Never carries internal detail."""

    status_code = 400


class MissingMessage(ClientInputError):
    message = "Provide 'message' (string)"


class EmptyMessage(ClientInputError):
    message = "Empty message"


class MessageTooLong(ClientInputError):
    status_code = 413

    def __init__(self, max_chars: int) -> None:
        self.max_chars = max_chars
        super().__init__(f"Message too long (max {max_chars} chars)")


class SpamLike(ClientInputError):
    message = "Message looks like spam. Try rephrasing."


class RateLimitExceeded(ChatError):
    status_code = 429
    message = "Too many requests, please wait a bit."


class UpstreamModelError(Exception):
    """A single upstream attempt failed.

    ``recoverable`` marks the provider conditions that move on to the next
    model candidate; anything else ends the request.
    """

    def __init__(
        self,
        model: str,
        text: str,
        status_code: Optional[int] = None,
        recoverable: bool = False,
    ) -> None:
        self.model = model
        self.text = text
        self.status_code = status_code
        self.recoverable = recoverable
        super().__init__(text)


class AllModelsExhausted(ChatError):
    """Every candidate was tried without a usable answer."""

    status_code = 500
    message = "Server error"

    def __init__(self, last_error: Optional[str] = None) -> None:
        self.last_error = last_error or "All models failed"
        super().__init__(detail=self.last_error)
