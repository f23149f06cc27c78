"""Engine error hierarchy.

Every error raised across module boundaries derives from IntentBotError so
callers can catch engine failures in one place. Most of these are recovered
locally (see ChatEngine); process_message never raises them.
"""

from typing import Optional


class IntentBotError(Exception):
    """Base class for engine errors.

    Attributes:
        code: Machine-readable error code (e.g. "MODEL_LOAD_ERROR").
        message: Human-readable description.
    """

    code = "INTENTBOT_ERROR"

    def __init__(self, message: str, code: Optional[str] = None):
        self.message = message
        if code is not None:
            self.code = code
        super().__init__(message)


class DataLoadError(IntentBotError):
    """Training data file is missing or malformed."""

    code = "DATA_LOAD_ERROR"


class ModelLoadError(IntentBotError):
    """Persisted model is missing or corrupt."""

    code = "MODEL_LOAD_ERROR"


class TrainingError(IntentBotError):
    """Nothing usable to train on."""

    code = "TRAINING_ERROR"


class TrainingInProgressError(TrainingError):
    """train() was re-entered from the thread already training."""

    code = "TRAINING_IN_PROGRESS"


class ProcessingError(IntentBotError):
    """A single turn could not be processed."""

    code = "PROCESSING_ERROR"


class PersistenceError(IntentBotError):
    """Trained model could not be written."""

    code = "PERSISTENCE_ERROR"
