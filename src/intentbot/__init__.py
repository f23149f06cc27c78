"""
intentbot: a conversational response engine.

Resolves the intent behind free-form user text and answers with a
pre-authored reply, while keeping a bounded message history per room.

The system includes:
- Positional character-code text encoding
- A feed-forward intent network with a naive Bayes fallback
- Confidence-gated response selection
- Lexicon sentiment and spaCy entity analysis
- Thread-safe per-room conversation memory and model lifecycle
"""

__version__ = "0.1.0"

from intentbot.config.settings import Settings
from intentbot.container import EngineContainer
from intentbot.engine import ChatEngine, EngineStatus
from intentbot.errors import (
    DataLoadError,
    IntentBotError,
    ModelLoadError,
    PersistenceError,
    ProcessingError,
    TrainingError,
    TrainingInProgressError,
)
from intentbot.persistence.model_store import ModelStore, TrainedModel

__all__ = [
    "ChatEngine",
    "EngineStatus",
    "EngineContainer",
    "Settings",
    "ModelStore",
    "TrainedModel",
    # Errors
    "IntentBotError",
    "DataLoadError",
    "ModelLoadError",
    "TrainingError",
    "TrainingInProgressError",
    "ProcessingError",
    "PersistenceError",
]
