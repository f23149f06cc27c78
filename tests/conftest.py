"""
Shared fixtures for intentbot tests.

Provides training-data writers and a ChatEngine factory that never needs a
spaCy model: entity extraction goes through a stub collaborator.
"""

import json
from pathlib import Path
from typing import Dict, List, Optional

import pytest

from intentbot.conversation.analyzer import AdvancedAnalyzer, Entities
from intentbot.conversation.encoder import VectorEncoder
from intentbot.conversation.memory import ConversationStore
from intentbot.conversation.preprocessing import TextPreprocessor
from intentbot.conversation.selector import RandomChooser, ResponseSelector
from intentbot.engine import ChatEngine
from intentbot.persistence.model_store import ModelStore


class StubEntityExtractor:
    """Entity collaborator returning a fixed result."""

    def __init__(self, entities: Optional[Entities] = None):
        self.entities = entities or Entities()
        self.calls: List[str] = []

    def extract(self, text: str) -> Entities:
        self.calls.append(text)
        return self.entities


def write_training_data(
    data_dir: Path,
    intents: Optional[List[Dict]] = None,
    qa_pairs: Optional[List[Dict]] = None,
) -> None:
    """Write intents.json / knowledge-base.json; None leaves the file absent."""
    data_dir.mkdir(parents=True, exist_ok=True)
    if intents is not None:
        (data_dir / "intents.json").write_text(json.dumps({"intents": intents}), encoding="utf-8")
    if qa_pairs is not None:
        (data_dir / "knowledge-base.json").write_text(json.dumps({"qa_pairs": qa_pairs}), encoding="utf-8")


# =============================================================================
# Component Fixtures
# =============================================================================

@pytest.fixture
def preprocessor():
    return TextPreprocessor()


@pytest.fixture
def encoder(preprocessor):
    return VectorEncoder(preprocessor)


@pytest.fixture
def data_dir(tmp_path):
    return tmp_path / "data"


@pytest.fixture
def make_engine(data_dir, encoder):
    """
    Factory for ChatEngine instances sharing one data directory.

    Keyword args:
        intents / qa_pairs: training data to write (None = file absent)
        analyzer: override AdvancedAnalyzer
        model_path: override model location
        seed: seeds both the chooser and the network
        max_messages: history capacity
    """

    def _make(
        intents: Optional[List[Dict]] = None,
        qa_pairs: Optional[List[Dict]] = None,
        analyzer: Optional[AdvancedAnalyzer] = None,
        model_path: Optional[Path] = None,
        seed: int = 0,
        max_messages: int = 20,
        store: Optional[ConversationStore] = None,
    ) -> ChatEngine:
        write_training_data(data_dir, intents, qa_pairs)
        data_dir.mkdir(parents=True, exist_ok=True)
        chooser = RandomChooser(seed)
        return ChatEngine(
            encoder=encoder,
            store=store or ConversationStore(max_messages=max_messages),
            selector=ResponseSelector(chooser),
            analyzer=analyzer or AdvancedAnalyzer(entity_extractor=StubEntityExtractor()),
            model_store=ModelStore(model_path or data_dir / "trained-model.json", encoder.preprocessor),
            intents_path=data_dir / "intents.json",
            knowledge_path=data_dir / "knowledge-base.json",
            chooser=chooser,
            seed=seed,
        )

    return _make


@pytest.fixture
def stub_extractor():
    return StubEntityExtractor()


@pytest.fixture
def write_data(data_dir):
    """Write training files into the shared data directory."""

    def _write(intents: Optional[List[Dict]] = None, qa_pairs: Optional[List[Dict]] = None) -> Path:
        write_training_data(data_dir, intents, qa_pairs)
        return data_dir

    return _write
