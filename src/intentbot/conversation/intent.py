"""
Intent resolution as an ordered list of classifier strategies.

Each strategy turns raw text into a (tag, score) pair and carries the
threshold its score must reach to be trusted. The resolver tries them in
order; the first one to clear its threshold wins, and the last strategy's
answer is used when none does.
"""

from dataclasses import dataclass
from typing import List, Protocol, Sequence, Tuple

from intentbot.config.constants import NETWORK_CONFIDENCE_THRESHOLD, UNKNOWN_INTENT
from intentbot.conversation.encoder import VectorEncoder
from intentbot.conversation.fallback import FallbackClassifier
from intentbot.conversation.network import IntentNetwork


@dataclass
class IntentResult:
    """Result of intent resolution."""

    intent: str
    confidence: float
    source: str  # name of the strategy that decided

    def __repr__(self) -> str:
        return f"IntentResult({self.intent}, conf={self.confidence:.2f}, via={self.source})"


class ClassifierStrategy(Protocol):
    name: str
    threshold: float

    def classify(self, text: str) -> Tuple[str, float]:
        ...


class NetworkStrategy:
    """Encode the text and ask the intent network."""

    name = "network"

    def __init__(
        self,
        network: IntentNetwork,
        encoder: VectorEncoder,
        threshold: float = NETWORK_CONFIDENCE_THRESHOLD,
    ):
        self._network = network
        self._encoder = encoder
        self.threshold = threshold

    def classify(self, text: str) -> Tuple[str, float]:
        return self._network.resolve(self._encoder.encode(text))


class BayesStrategy:
    """Ask the Bayesian classifier for its best tag and that tag's probability."""

    name = "bayes"

    def __init__(self, classifier: FallbackClassifier, threshold: float = 0.0):
        self._classifier = classifier
        self.threshold = threshold

    def classify(self, text: str) -> Tuple[str, float]:
        classifications = self._classifier.get_classifications(text)
        if not classifications:
            return UNKNOWN_INTENT, 0.0
        return classifications[0]


class IntentResolver:
    """
    Try strategies in order until one is confident.

    Example:
        >>> resolver = IntentResolver([
        ...     NetworkStrategy(network, encoder, threshold=0.7),
        ...     BayesStrategy(classifier),
        ... ])
        >>> resolver.resolve("hello")
        IntentResult(greeting, conf=0.93, via=network)
    """

    def __init__(self, strategies: Sequence[ClassifierStrategy]):
        if not strategies:
            raise ValueError("IntentResolver needs at least one strategy")
        self._strategies: List[ClassifierStrategy] = list(strategies)

    def resolve(self, text: str) -> IntentResult:
        result = IntentResult(UNKNOWN_INTENT, 0.0, "none")
        for strategy in self._strategies:
            tag, score = strategy.classify(text)
            result = IntentResult(intent=tag, confidence=float(score), source=strategy.name)
            if score >= strategy.threshold:
                break
        return result

    def __repr__(self) -> str:
        chain = " -> ".join(f"{s.name}@{s.threshold}" for s in self._strategies)
        return f"IntentResolver({chain})"
