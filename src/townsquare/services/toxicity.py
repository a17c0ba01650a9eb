"""Advisory toxicity estimates shown to jurors.

The estimate is a hint for humans reviewing a case. It never feeds into the
verdict; the court only counts juror votes. Classifiers are pluggable: any
object with an ``analyze(text)`` method returning ``ToxicityEstimate`` can be
handed to the case queue builder.
"""
from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Protocol

DEFAULT_KEYWORDS: tuple[str, ...] = (
    "stupid", "idiot", "dumb", "moron", "hate", "kill", "die", "ugly",
    "loser", "pathetic", "disgusting", "trash", "garbage", "worthless",
    "shut up", "get out", "go away", "nobody cares", "you suck",
    "fake", "scam", "spam", "click here", "link in bio", "1000x",
    "crypto", "nft", "free money", "guaranteed",
)

KEYWORD_PENALTY = 15
CAPS_PENALTY = 20
CAPS_RATIO_THRESHOLD = 0.5
CAPS_MIN_LENGTH = 10
CAPS_MARKER = "EXCESSIVE CAPS"
PUNCTUATION_PENALTY = 10
MAX_SCORE = 100
MAX_REPORTED_KEYWORDS = 5
HIGH_CONFIDENCE_HITS = 3

_UPPERCASE = re.compile(r"[A-Z]")
_REPEATED_PUNCTUATION = re.compile(r"[!?]{2,}")


@dataclass(frozen=True)
class ToxicityEstimate:
    toxicity_score: int = 0
    flagged_keywords: list[str] = field(default_factory=list)
    confidence: str = "Low"


class ToxicityClassifier(Protocol):
    def analyze(self, text: str) -> ToxicityEstimate: ...


class KeywordToxicityClassifier:
    """Keyword and shouting heuristics."""

    def __init__(self, keywords: Iterable[str] = DEFAULT_KEYWORDS) -> None:
        self.keywords = tuple(keyword.lower() for keyword in keywords)

    def analyze(self, text: str) -> ToxicityEstimate:
        lowered = text.lower()
        flagged = [keyword for keyword in self.keywords if keyword in lowered]
        score = len(flagged) * KEYWORD_PENALTY

        if text:
            caps_ratio = len(_UPPERCASE.findall(text)) / len(text)
            if caps_ratio > CAPS_RATIO_THRESHOLD and len(text) > CAPS_MIN_LENGTH:
                score += CAPS_PENALTY
                flagged.append(CAPS_MARKER)

        if _REPEATED_PUNCTUATION.search(text):
            score += PUNCTUATION_PENALTY

        if len(flagged) >= HIGH_CONFIDENCE_HITS:
            confidence = "High"
        elif flagged:
            confidence = "Medium"
        else:
            confidence = "Low"

        return ToxicityEstimate(
            toxicity_score=min(MAX_SCORE, score),
            flagged_keywords=flagged[:MAX_REPORTED_KEYWORDS],
            confidence=confidence,
        )


def get_toxicity_classifier() -> ToxicityClassifier:
    """Return the classifier used by the case queue; override in tests."""
    return KeywordToxicityClassifier()
