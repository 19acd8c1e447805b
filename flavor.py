"""Cosmetic post-processing of model answers: openers, closers, paragraphs."""

from __future__ import annotations

import random
import re
from typing import List, Optional, Sequence

OPENERS: Sequence[str] = (
    "Happy to help!",
    "Great question!",
    "Sure thing!",
    "Here's the quick version:",
    "Glad you asked!",
)
CLOSERS: Sequence[str] = (
    "Want me to expand on any part of that?",
    "Happy to dig deeper if you're curious.",
    "Anything else you'd like to know about Pranjal's work?",
    "Let me know if you want more detail on any of this.",
)

OPENER_PROBABILITY = 0.6
CLOSER_PROBABILITY = 0.8
SENTENCES_PER_PARAGRAPH = 3
MIN_SENTENCES_TO_REFLOW = 4

_BLANK_LINE_RE = re.compile(r"\n[ \t]*\n")
# End punctuation, whitespace, then a capital, digit, or opening quote/bracket.
_SENTENCE_BOUNDARY_RE = re.compile(r"(?<=[.!?])\s+(?=[A-Z0-9\"'(\[“‘])")


def split_sentences(text: str) -> List[str]:
    return [s for s in _SENTENCE_BOUNDARY_RE.split(text.strip()) if s]


def reflow_paragraphs(text: str) -> str:
    """
    Group plain text into paragraphs of three sentences.

    Text that already has a blank line, or has fewer than four sentences,
    is only trimmed.
    """
    text = text.strip()
    if _BLANK_LINE_RE.search(text):
        return text
    sentences = split_sentences(text)
    if len(sentences) < MIN_SENTENCES_TO_REFLOW:
        return text
    paragraphs = [
        " ".join(sentences[i:i + SENTENCES_PER_PARAGRAPH])
        for i in range(0, len(sentences), SENTENCES_PER_PARAGRAPH)
    ]
    return "\n\n".join(paragraphs)


class Flavorer:
    """
    Adds a random opener or closer and reflows the answer into paragraphs.

    Randomness comes from ``rng`` (anything with ``random()`` and
    ``choice()``), so a seeded ``random.Random`` gives repeatable output.
    With ``enabled=False`` only the paragraph reflow runs.
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        enabled: bool = True,
        openers: Sequence[str] = OPENERS,
        closers: Sequence[str] = CLOSERS,
    ) -> None:
        self._rng = rng if rng is not None else random.Random()
        self.enabled = enabled
        self.openers = tuple(openers)
        self.closers = tuple(closers)

    @classmethod
    def from_config(cls, config) -> Flavorer:
        return cls(rng=random.Random(config.flavor_seed), enabled=config.flavor_enabled)

    def add_opener_or_closer(self, text: str) -> str:
        if self.openers and self._rng.random() < OPENER_PROBABILITY:
            return f"{self._rng.choice(self.openers)} {text}"
        if self.closers and self._rng.random() < CLOSER_PROBABILITY:
            return f"{text}\n\n{self._rng.choice(self.closers)}"
        return text

    def flavor(self, raw_answer: str) -> str:
        text = reflow_paragraphs(raw_answer)
        if not self.enabled or not text:
            return text
        return self.add_opener_or_closer(text)
