"""
Training corpus: validated intent and knowledge-base records.

Loads `intents.json` and `knowledge-base.json`, validates every record and
derives the supervised examples, response table, Bayesian documents and
vocabulary that a training run needs.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Set, Tuple

from pydantic import BaseModel, ValidationError

from intentbot.config.constants import QA_INTENT_TAG
from intentbot.conversation.encoder import VectorEncoder
from intentbot.errors import DataLoadError


logger = logging.getLogger(__name__)


class IntentDefinition(BaseModel):
    """A named user goal with example patterns and candidate replies."""

    tag: str
    patterns: List[str]
    responses: List[str]


class QAPair(BaseModel):
    """A knowledge-base entry, trained under the synthetic `qa_response` tag."""

    question: str
    answer: str


class IntentsFile(BaseModel):
    intents: List[IntentDefinition]


class KnowledgeBaseFile(BaseModel):
    qa_pairs: List[QAPair]


@dataclass
class TrainingExample:
    """One supervised example for the intent network."""

    vector: List[float]
    target_tag: str


@dataclass
class TrainingCorpus:
    """
    Everything a training run is derived from.

    Attributes:
        intents: Intent definitions in file order
        qa_pairs: Knowledge-base pairs in file order
    """

    intents: List[IntentDefinition] = field(default_factory=list)
    qa_pairs: List[QAPair] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.intents and not self.qa_pairs

    def examples(self, encoder: VectorEncoder) -> List[TrainingExample]:
        """
        Build network training examples.

        One example per intent pattern followed by one per knowledge-base
        question (labelled `qa_response`).
        """
        examples = [
            TrainingExample(encoder.encode(pattern), intent.tag)
            for intent in self.intents
            for pattern in intent.patterns
        ]
        examples.extend(
            TrainingExample(encoder.encode(pair.question), QA_INTENT_TAG)
            for pair in self.qa_pairs
        )
        return examples

    def documents(self) -> List[Tuple[str, str]]:
        """(pattern, tag) pairs for the Bayesian classifier."""
        return [
            (pattern, intent.tag)
            for intent in self.intents
            for pattern in intent.patterns
        ]

    def responses(self) -> Dict[str, List[str]]:
        """
        Build the tag -> replies table.

        An intent only contributes replies if it has at least one pattern,
        and the first definition of a duplicated tag wins. Every knowledge
        base answer accumulates under `qa_response`.
        """
        table: Dict[str, List[str]] = {}
        for intent in self.intents:
            if intent.patterns and intent.tag not in table:
                table[intent.tag] = list(intent.responses)
        for pair in self.qa_pairs:
            table.setdefault(QA_INTENT_TAG, []).append(pair.answer)
        return table

    def vocabulary(self, encoder: VectorEncoder) -> Set[str]:
        """Stemmed tokens of every pattern and question."""
        vocab: Set[str] = set()
        texts = [p for intent in self.intents for p in intent.patterns]
        texts.extend(pair.question for pair in self.qa_pairs)
        for text in texts:
            vocab.update(encoder.preprocessor.tokenize(text))
        return vocab

    def __repr__(self) -> str:
        return f"TrainingCorpus(intents={len(self.intents)}, qa_pairs={len(self.qa_pairs)})"


def _read_json(path: Path) -> object:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError as e:
        raise DataLoadError(f"Training file not found: {path}") from e
    except (OSError, json.JSONDecodeError) as e:
        raise DataLoadError(f"Unreadable training file {path}: {e}") from e


def load_intents(path: Path) -> List[IntentDefinition]:
    """
    Load and validate intent definitions.

    Raises:
        DataLoadError: If the file is missing, not JSON or fails validation
    """
    try:
        return IntentsFile.model_validate(_read_json(path)).intents
    except ValidationError as e:
        raise DataLoadError(f"Malformed intents file {path}: {e}") from e


def load_qa_pairs(path: Path) -> List[QAPair]:
    """
    Load and validate knowledge-base pairs.

    Raises:
        DataLoadError: If the file is missing, not JSON or fails validation
    """
    try:
        return KnowledgeBaseFile.model_validate(_read_json(path)).qa_pairs
    except ValidationError as e:
        raise DataLoadError(f"Malformed knowledge base {path}: {e}") from e


def load_training_data(intents_path: Path, knowledge_path: Path) -> TrainingCorpus:
    """
    Load both training files, recovering from either one failing.

    A file that cannot be loaded contributes an empty corpus; the failure
    is logged and training proceeds with whatever remains.

    Args:
        intents_path: Path to intents.json
        knowledge_path: Path to knowledge-base.json

    Returns:
        TrainingCorpus (possibly empty)
    """
    corpus = TrainingCorpus()
    try:
        corpus.intents = load_intents(Path(intents_path))
    except DataLoadError as e:
        logger.warning(f"Intents unavailable, training without them: {e}")
    try:
        corpus.qa_pairs = load_qa_pairs(Path(knowledge_path))
    except DataLoadError as e:
        logger.warning(f"Knowledge base unavailable, training without it: {e}")

    logger.info(
        f"Loaded training data: {len(corpus.intents)} intents, "
        f"{len(corpus.qa_pairs)} Q&A pairs"
    )
    return corpus
