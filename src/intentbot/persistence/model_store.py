"""
ModelStore: persistence of the complete trained model.

File layout (JSON):
```
{
    "network": {...},             # topology, tag order and weights
    "classifier": {"documents": [[pattern, tag], ...]},
    "responses": {"tag": ["reply", ...]},
    "vocabulary": ["stem", ...]
}
```

The `classifier` key is optional on load; files without it restore an
untrained Bayesian classifier.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Tuple

from pydantic import BaseModel, ValidationError

from intentbot.conversation.fallback import FallbackClassifier
from intentbot.conversation.network import IntentNetwork
from intentbot.conversation.preprocessing import TextPreprocessor
from intentbot.errors import ModelLoadError, PersistenceError
from intentbot.persistence.serialization import JsonSerializer


logger = logging.getLogger(__name__)


class ClassifierSection(BaseModel):
    """Bayesian classifier training documents as (pattern, tag) pairs."""

    documents: List[Tuple[str, str]] = []


class ModelFile(BaseModel):
    """Schema of the persisted model file."""

    network: Dict[str, Any]
    classifier: Optional[ClassifierSection] = None
    responses: Dict[str, List[str]]
    vocabulary: List[str]


@dataclass
class TrainedModel:
    """
    A complete, usable model: classifiers plus the replies they map to.

    Instances are never mutated after construction; retraining builds a
    new one that replaces the old in a single assignment.
    """

    network: IntentNetwork
    classifier: FallbackClassifier
    responses: Dict[str, List[str]] = field(default_factory=dict)
    vocabulary: Set[str] = field(default_factory=set)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "network": self.network.to_dict(),
            "classifier": self.classifier.to_dict(),
            "responses": {tag: list(replies) for tag, replies in self.responses.items()},
            "vocabulary": sorted(self.vocabulary),
        }

    @classmethod
    def from_dict(
        cls,
        data: Any,
        preprocessor: Optional[TextPreprocessor] = None,
        seed: Optional[int] = None,
    ) -> "TrainedModel":
        """
        Validate and rebuild a model.

        Raises:
            ModelLoadError: If the data does not describe a valid model
        """
        try:
            parsed = ModelFile.model_validate(data)
            network = IntentNetwork.from_dict(parsed.network, seed=seed)
            classifier = FallbackClassifier.from_dict(
                parsed.classifier.model_dump() if parsed.classifier else {},
                preprocessor=preprocessor,
            )
        except (ValidationError, ValueError, KeyError, TypeError) as e:
            raise ModelLoadError(f"Invalid model data: {e}") from e

        return cls(
            network=network,
            classifier=classifier,
            responses=parsed.responses,
            vocabulary=set(parsed.vocabulary),
        )


class ModelStore:
    """
    Save and load TrainedModel files.

    Example:
        >>> store = ModelStore(Path("./data/trained-model.json"))
        >>> store.save(model)
        >>> restored = store.load()
    """

    def __init__(self, path: Path, preprocessor: Optional[TextPreprocessor] = None):
        self._path = Path(path)
        self._preprocessor = preprocessor
        self._serializer = JsonSerializer()

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.exists()

    def save(self, model: TrainedModel) -> None:
        """
        Write the model atomically.

        Raises:
            PersistenceError: If the file cannot be written
        """
        try:
            self._serializer.save(model.to_dict(), self._path)
        except (OSError, TypeError, ValueError) as e:
            raise PersistenceError(f"Could not save model to {self._path}: {e}") from e
        logger.info(f"Model saved to {self._path}")

    def load(self, seed: Optional[int] = None) -> TrainedModel:
        """
        Read and validate the model file.

        Raises:
            ModelLoadError: If the file is missing, unreadable or invalid
        """
        try:
            data = self._serializer.load(self._path)
        except FileNotFoundError as e:
            raise ModelLoadError(f"No saved model at {self._path}") from e
        except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ModelLoadError(f"Unreadable model file {self._path}: {e}") from e

        model = TrainedModel.from_dict(data, preprocessor=self._preprocessor, seed=seed)
        logger.info(f"Model loaded from {self._path}")
        return model

    def __repr__(self) -> str:
        return f"ModelStore(path={self._path})"
