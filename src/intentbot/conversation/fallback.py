"""
Bayesian fallback intent classifier.

Trained on raw pattern strings (not vectors) with a multinomial naive
Bayes model over stemmed token counts. Consulted when the intent network
is not confident enough.

The classifier keeps its training documents so it can be persisted
alongside the network and refitted on load.
"""

import logging
import threading
from typing import Any, Dict, List, Optional, Tuple

import numpy as np
from sklearn.feature_extraction.text import CountVectorizer
from sklearn.naive_bayes import MultinomialNB
from sklearn.pipeline import Pipeline

from intentbot.config.constants import UNKNOWN_INTENT
from intentbot.conversation.preprocessing import TextPreprocessor
from intentbot.errors import TrainingError


logger = logging.getLogger(__name__)


class FallbackClassifier:
    """
    Naive Bayes text classifier over stemmed tokens.

    Usage mirrors a document-based classifier: add labelled documents,
    call `train()`, then `classify()`.

    Example:
        >>> classifier = FallbackClassifier()
        >>> classifier.add_document("hello there", "greeting")
        >>> classifier.add_document("see you later", "goodbye")
        >>> classifier.train()
        >>> classifier.classify("hello")
        'greeting'
    """

    def __init__(self, preprocessor: Optional[TextPreprocessor] = None, alpha: float = 1.0):
        """
        Args:
            preprocessor: Tokenizer/stemmer shared with the vector encoder
            alpha: Additive (Laplace) smoothing
        """
        self._preprocessor = preprocessor or TextPreprocessor()
        self._alpha = alpha
        self._documents: List[Tuple[str, str]] = []
        self._pipeline: Optional[Pipeline] = None
        self._classes: List[str] = []
        self._lock = threading.RLock()

    @property
    def is_trained(self) -> bool:
        return self._pipeline is not None

    @property
    def documents(self) -> List[Tuple[str, str]]:
        return list(self._documents)

    def add_document(self, text: str, tag: str) -> None:
        """Queue a labelled document for the next `train()`."""
        self._documents.append((text, tag))

    def train(self) -> None:
        """
        Fit the model on every added document.

        Raises:
            TrainingError: If there are no documents or none yields a token
        """
        if not self._documents:
            raise TrainingError("Fallback classifier has no documents")

        texts, labels = zip(*self._documents)
        pipeline = Pipeline([
            ('counts', CountVectorizer(analyzer=self._preprocessor)),
            ('clf', MultinomialNB(alpha=self._alpha)),
        ])
        try:
            pipeline.fit(list(texts), list(labels))
        except ValueError as e:
            # CountVectorizer refuses an empty vocabulary
            raise TrainingError(f"Fallback classifier could not be fitted: {e}") from e

        with self._lock:
            self._pipeline = pipeline
            self._classes = [str(c) for c in pipeline.classes_]
        logger.debug(f"Fallback classifier trained on {len(texts)} documents, {len(self._classes)} tags")

    def get_classifications(self, text: str) -> List[Tuple[str, float]]:
        """
        Posterior probability of every tag, best first.

        Returns:
            List of (tag, probability); empty when untrained
        """
        with self._lock:
            pipeline, classes = self._pipeline, self._classes
        if pipeline is None:
            return []

        probs = pipeline.predict_proba([text])[0]
        order = np.argsort(-probs, kind="stable")
        return [(classes[i], float(probs[i])) for i in order]

    def classify(self, text: str) -> str:
        """Most probable tag, or `unknown` when untrained."""
        classifications = self.get_classifications(text)
        if not classifications:
            return UNKNOWN_INTENT
        return classifications[0][0]

    def classification_score(self, text: str, tag: str) -> float:
        """Probability that `text` belongs to `tag` (0.0 for unseen tags)."""
        for candidate, score in self.get_classifications(text):
            if candidate == tag:
                return score
        return 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {"documents": [[text, tag] for text, tag in self._documents]}

    @classmethod
    def from_dict(
        cls,
        data: Dict[str, Any],
        preprocessor: Optional[TextPreprocessor] = None,
    ) -> "FallbackClassifier":
        """
        Restore from `to_dict` output and refit.

        A restored classifier with no usable documents stays untrained.
        """
        classifier = cls(preprocessor=preprocessor)
        for text, tag in data.get("documents", []):
            classifier.add_document(str(text), str(tag))
        if classifier._documents:
            try:
                classifier.train()
            except TrainingError as e:
                logger.warning(f"Restored fallback classifier left untrained: {e}")
        return classifier

    def __repr__(self) -> str:
        return f"FallbackClassifier(documents={len(self._documents)}, tags={len(self._classes)})"
