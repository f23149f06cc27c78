"""
Engine constants.

These values define the behaviour of a trained model. The encoding and
network constants are part of the persisted model format: changing them
invalidates every model file written under the old values.
"""

# ==============================================================================
# Text Encoding
# ==============================================================================

VECTOR_SIZE = 100
"""Length of every encoded vector. Tokens past this position are ignored."""

VECTOR_SCALE = 1000.0
"""Divisor applied to the character-code sum of each token."""

MIN_TOKEN_LENGTH = 2
"""Stemmed tokens of this length or shorter are discarded."""

# ==============================================================================
# Intent Network
# ==============================================================================

HIDDEN_LAYERS = (10, 8, 6)
"""Hidden layer widths of the feed-forward intent network."""

TRAINING_ITERATIONS = 2000
"""Maximum training iterations over the whole corpus."""

TRAINING_ERROR_THRESHOLD = 0.005
"""Training stops early once mean squared error falls below this."""

LEARNING_RATE = 0.3
"""SGD learning rate for the intent network."""

MOMENTUM = 0.1
"""SGD momentum for the intent network."""

INITIAL_WEIGHT_RANGE = 0.2
"""Weights and biases start uniformly in [-range, range]."""

TRAINING_LOG_PERIOD = 100
"""Log training error every this many iterations."""

# ==============================================================================
# Confidence Thresholds
# ==============================================================================

NETWORK_CONFIDENCE_THRESHOLD = 0.7
"""Network activation required before its intent is trusted.
Below this the Bayesian classifier decides instead."""

RESPONSE_CONFIDENCE_THRESHOLD = 0.5
"""Resolved confidence must exceed this to answer with an authored reply."""

# ==============================================================================
# Responses
# ==============================================================================

QA_INTENT_TAG = "qa_response"
"""Synthetic intent collecting every knowledge-base answer."""

UNKNOWN_INTENT = "unknown"
"""Intent reported with the fallback response."""

FALLBACK_RESPONSE = "I don't understand, please rephrase."
"""Reply used when no classifier is confident enough."""

ERROR_RESPONSE = "Sorry, something went wrong. Please try again."
"""Reply used when a turn fails."""

EMPATHY_PREFIXES = (
    "I understand how you feel. ",
    "It sounds like you're not happy. ",
    "I'm sorry about that. ",
)
"""Prefixes prepended to the reply when the user's sentiment is negative."""

# ==============================================================================
# Sentiment Lexicon
# ==============================================================================

POSITIVE_WORDS = frozenset({"good", "great", "awesome", "love", "like", "happy"})
"""Each occurrence adds +1 to the sentiment score."""

NEGATIVE_WORDS = frozenset({"bad", "hate", "sad", "angry", "terrible", "awful"})
"""Each occurrence adds -1 to the sentiment score."""

DEFAULT_SPACY_MODEL = "en_core_web_sm"
"""spaCy pipeline used for named entities."""

# ==============================================================================
# Conversation
# ==============================================================================

MAX_HISTORY_MESSAGES = 20
"""Messages kept per room. Oldest are evicted first."""

TYPING_DELAY_MIN = 1.0
"""Lower bound (seconds) of the simulated typing delay."""

TYPING_DELAY_MAX = 2.0
"""Upper bound (seconds) of the simulated typing delay."""

# ==============================================================================
# Files
# ==============================================================================

DEFAULT_DATA_DIR = "./data"
"""Directory holding training data and the trained model."""

INTENTS_FILENAME = "intents.json"
KNOWLEDGE_BASE_FILENAME = "knowledge-base.json"
MODEL_FILENAME = "trained-model.json"
