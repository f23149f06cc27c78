"""
Conversation package: intent classification and conversational state.

This package implements the per-turn building blocks:
- Text preprocessing and positional vector encoding
- A feed-forward intent network with a Bayesian fallback
- Response selection with seedable randomness
- Entity and sentiment analysis
- Bounded per-room conversation memory

Components:
    - TextPreprocessor: Lowercase, strip, stem, filter
    - VectorEncoder: Text -> fixed-length vector
    - IntentNetwork: Trainable sigmoid classifier
    - FallbackClassifier: Naive Bayes over raw patterns
    - IntentResolver: Ordered classifier strategies
    - ResponseSelector: Reply choice
    - AdvancedAnalyzer: Entities and sentiment
    - ConversationStore: Per-room histories
    - ChatSession: Delayed delivery to a transport
"""

from intentbot.conversation.preprocessing import TextPreprocessor
from intentbot.conversation.encoder import VectorEncoder
from intentbot.conversation.corpus import (
    IntentDefinition,
    QAPair,
    TrainingCorpus,
    TrainingExample,
    load_training_data,
)
from intentbot.conversation.network import IntentNetwork, TrainingStats
from intentbot.conversation.fallback import FallbackClassifier
from intentbot.conversation.intent import (
    BayesStrategy,
    IntentResolver,
    IntentResult,
    NetworkStrategy,
)
from intentbot.conversation.selector import RandomChooser, ResponseResult, ResponseSelector
from intentbot.conversation.analyzer import (
    AdvancedAnalyzer,
    Analysis,
    Entities,
    SpacyEntityExtractor,
)
from intentbot.conversation.memory import ConversationMessage, ConversationStore
from intentbot.conversation.session import ChatSession

__all__ = [
    # Text
    "TextPreprocessor",
    "VectorEncoder",
    # Training data
    "IntentDefinition",
    "QAPair",
    "TrainingCorpus",
    "TrainingExample",
    "load_training_data",
    # Classification
    "IntentNetwork",
    "TrainingStats",
    "FallbackClassifier",
    "IntentResolver",
    "IntentResult",
    "NetworkStrategy",
    "BayesStrategy",
    # Selection
    "RandomChooser",
    "ResponseResult",
    "ResponseSelector",
    # Analysis
    "AdvancedAnalyzer",
    "Analysis",
    "Entities",
    "SpacyEntityExtractor",
    # Memory
    "ConversationMessage",
    "ConversationStore",
    # Delivery
    "ChatSession",
]
