"""
Advanced analysis: named entities and lexicon sentiment.

Runs independently of intent classification. Entities come from a spaCy
pipeline; sentiment is a plain count of positive minus negative lexicon
words.
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Protocol

import spacy

from intentbot.config.constants import DEFAULT_SPACY_MODEL, NEGATIVE_WORDS, POSITIVE_WORDS


logger = logging.getLogger(__name__)

# spaCy entity labels grouped into the four reported buckets
PEOPLE_LABELS = {"PERSON"}
PLACE_LABELS = {"GPE", "LOC", "FAC"}
ORGANIZATION_LABELS = {"ORG"}
DATE_LABELS = {"DATE"}


@dataclass
class Entities:
    """Entities mentioned in one message, in order of appearance."""

    people: List[str] = field(default_factory=list)
    places: List[str] = field(default_factory=list)
    organizations: List[str] = field(default_factory=list)
    dates: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, List[str]]:
        return {
            "people": list(self.people),
            "places": list(self.places),
            "organizations": list(self.organizations),
            "dates": list(self.dates),
        }


@dataclass
class Analysis:
    """Entities plus sentiment for one message."""

    entities: Entities
    sentiment: str  # "positive" | "negative" | "neutral"
    sentiment_score: int

    @property
    def is_negative(self) -> bool:
        return self.sentiment == "negative"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "entities": self.entities.to_dict(),
            "sentiment": self.sentiment,
            "sentimentScore": self.sentiment_score,
        }


class EntityExtractor(Protocol):
    def extract(self, text: str) -> Entities:
        ...


class SpacyEntityExtractor:
    """
    Named-entity extraction through a spaCy pipeline.

    The pipeline is loaded on first use. If the named model is not
    installed a blank English pipeline is used instead, which has no NER
    component and therefore reports no entities.
    """

    def __init__(self, model_name: str = DEFAULT_SPACY_MODEL):
        self._model_name = model_name
        self._nlp = None
        self._lock = threading.Lock()

    def _pipeline(self):
        with self._lock:
            if self._nlp is None:
                try:
                    self._nlp = spacy.load(self._model_name)
                    logger.info(f"spaCy model '{self._model_name}' loaded")
                except OSError as e:
                    logger.warning(f"spaCy model '{self._model_name}' not available: {e}. Entities disabled.")
                    self._nlp = spacy.blank("en")
            return self._nlp

    def extract(self, text: str) -> Entities:
        entities = Entities()
        if not text.strip():
            return entities

        for ent in self._pipeline()(text).ents:
            if ent.label_ in PEOPLE_LABELS:
                entities.people.append(ent.text)
            elif ent.label_ in PLACE_LABELS:
                entities.places.append(ent.text)
            elif ent.label_ in ORGANIZATION_LABELS:
                entities.organizations.append(ent.text)
            elif ent.label_ in DATE_LABELS:
                entities.dates.append(ent.text)
        return entities

    def __repr__(self) -> str:
        return f"SpacyEntityExtractor(model={self._model_name}, loaded={self._nlp is not None})"


class AdvancedAnalyzer:
    """
    Entity and sentiment analysis for raw user text.

    Example:
        >>> analyzer = AdvancedAnalyzer(entity_extractor=SpacyEntityExtractor())
        >>> analyzer.analyze("I hate this").sentiment
        'negative'
    """

    def __init__(
        self,
        entity_extractor: Optional[EntityExtractor] = None,
        positive_words: Iterable[str] = POSITIVE_WORDS,
        negative_words: Iterable[str] = NEGATIVE_WORDS,
    ):
        self._extractor = entity_extractor or SpacyEntityExtractor()
        self._positive: FrozenSet[str] = frozenset(w.lower() for w in positive_words)
        self._negative: FrozenSet[str] = frozenset(w.lower() for w in negative_words)

    def sentiment_score(self, text: str) -> int:
        """+1 per positive word, -1 per negative word (whitespace tokens, case-insensitive)."""
        score = 0
        for word in text.lower().split():
            if word in self._positive:
                score += 1
            if word in self._negative:
                score -= 1
        return score

    @staticmethod
    def label(score: int) -> str:
        if score > 0:
            return "positive"
        if score < 0:
            return "negative"
        return "neutral"

    def analyze(self, text: str) -> Analysis:
        score = self.sentiment_score(text)
        return Analysis(
            entities=self._extractor.extract(text),
            sentiment=self.label(score),
            sentiment_score=score,
        )

    def __repr__(self) -> str:
        return f"AdvancedAnalyzer(positive={len(self._positive)}, negative={len(self._negative)})"
