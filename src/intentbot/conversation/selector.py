"""
Response selection.

Turns a resolved intent into reply text. All randomness in the engine
(reply choice, empathy prefix, typing delay) goes through one seedable
RandomChooser so tests can pin it down.
"""

import random
from dataclasses import dataclass
from typing import Mapping, Optional, Sequence, TypeVar

from intentbot.config.constants import (
    FALLBACK_RESPONSE,
    RESPONSE_CONFIDENCE_THRESHOLD,
    UNKNOWN_INTENT,
)
from intentbot.conversation.intent import IntentResult

T = TypeVar("T")


class RandomChooser:
    """Seedable source of uniform choices."""

    def __init__(self, seed: Optional[int] = None):
        self._rng = random.Random(seed)

    def choice(self, options: Sequence[T]) -> T:
        return self._rng.choice(options)

    def uniform(self, low: float, high: float) -> float:
        return self._rng.uniform(low, high)


@dataclass
class ResponseResult:
    """Reply text with the confidence and intent that produced it."""

    text: str
    confidence: float
    intent: str


class ResponseSelector:
    """
    Pick an authored reply for a resolved intent.

    Attributes:
        _chooser: Random source for picking among replies
        _threshold: Confidence that must be exceeded (strictly)
        _fallback_text: Reply when the intent cannot be trusted

    Example:
        >>> selector = ResponseSelector(RandomChooser(seed=1))
        >>> selector.select(IntentResult("greeting", 0.9, "network"), {"greeting": ["Hi there"]})
        ResponseResult(text='Hi there', confidence=0.9, intent='greeting')
    """

    def __init__(
        self,
        chooser: Optional[RandomChooser] = None,
        threshold: float = RESPONSE_CONFIDENCE_THRESHOLD,
        fallback_text: str = FALLBACK_RESPONSE,
    ):
        self._chooser = chooser or RandomChooser()
        self._threshold = threshold
        self._fallback_text = fallback_text

    def fallback(self) -> ResponseResult:
        return ResponseResult(text=self._fallback_text, confidence=0.0, intent=UNKNOWN_INTENT)

    def select(
        self,
        result: IntentResult,
        responses: Mapping[str, Sequence[str]],
    ) -> ResponseResult:
        """
        Choose a reply.

        Args:
            result: Resolved intent and confidence
            responses: Tag -> candidate replies

        Returns:
            A random reply for the tag when confidence exceeds the threshold
            and replies exist, otherwise the fixed fallback
        """
        candidates = responses.get(result.intent) or []
        if result.confidence > self._threshold and candidates:
            confidence = min(1.0, max(0.0, float(result.confidence)))
            return ResponseResult(
                text=self._chooser.choice(candidates),
                confidence=confidence,
                intent=result.intent,
            )
        return self.fallback()

    def __repr__(self) -> str:
        return f"ResponseSelector(threshold={self._threshold})"
