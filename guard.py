"""Input guard for inbound chat messages."""

from __future__ import annotations

import re
from typing import Any

from errors import EmptyMessage, MessageTooLong, MissingMessage, SpamLike

MAX_CHARS = 800
MAX_LINK_CHARS = 20

# Links with a scheme or a www. prefix, plus bare host/path links on common
# spam TLDs. Slash-joined tech names such as "Node.js/Express.js" are not links.
_SPAM_TLDS = ("com", "net", "org", "info", "biz", "xyz", "top", "site", "online", "ru", "cn", "ly")
_LINK_RE = re.compile(
    r"(?:https?://|www\.)\S+"
    r"|(?<![\w./-])(?:[a-z0-9-]+\.)+(?:" + "|".join(_SPAM_TLDS) + r")/\S*",
    re.IGNORECASE,
)
_SPAM_PHRASE_RE = re.compile(r"free\s*money|giveaway", re.IGNORECASE)
# ASCII word characters, whitespace and a short punctuation list only.
_DISALLOWED_CHAR_RE = re.compile(r"[^\w\s.,?!@()\-+/'\":;%&]", re.ASCII)


def _has_long_link(text: str) -> bool:
    return any(len(m.group(0)) > MAX_LINK_CHARS for m in _LINK_RE.finditer(text))


def looks_like_spam(text: str) -> bool:
    """True when ``text`` trips any of the blocking patterns."""
    return (
        _has_long_link(text)
        or _SPAM_PHRASE_RE.search(text) is not None
        or _DISALLOWED_CHAR_RE.search(text) is not None
    )


def validate_message(raw: Any, max_chars: int = MAX_CHARS) -> str:
    """
    Return the trimmed message or raise the first failing check.

    Order: missing/non-string, empty after trimming, too long, spam-like.
    """
    if not isinstance(raw, str):
        raise MissingMessage()
    trimmed = raw.strip()
    if not trimmed:
        raise EmptyMessage()
    if len(trimmed) > max_chars:
        raise MessageTooLong(max_chars)
    if looks_like_spam(trimmed):
        raise SpamLike()
    return trimmed
