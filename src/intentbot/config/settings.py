"""
Runtime settings for the engine, container and shell.

Values come from INTENTBOT_* environment variables or a .env file and
fall back to the defaults in intentbot.config.constants.
"""

from pathlib import Path
from typing import List, Optional

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from intentbot.config.constants import (
    DEFAULT_DATA_DIR,
    DEFAULT_SPACY_MODEL,
    EMPATHY_PREFIXES,
    ERROR_RESPONSE,
    FALLBACK_RESPONSE,
    HIDDEN_LAYERS,
    INTENTS_FILENAME,
    KNOWLEDGE_BASE_FILENAME,
    LEARNING_RATE,
    MAX_HISTORY_MESSAGES,
    MODEL_FILENAME,
    MOMENTUM,
    NETWORK_CONFIDENCE_THRESHOLD,
    RESPONSE_CONFIDENCE_THRESHOLD,
    TRAINING_ERROR_THRESHOLD,
    TRAINING_ITERATIONS,
    TYPING_DELAY_MAX,
    TYPING_DELAY_MIN,
)


class Settings(BaseSettings):
    """
    Application settings with environment variable support.

    Settings can be overridden via environment variables prefixed with INTENTBOT_
    For example: INTENTBOT_DATA_DIR=/srv/bot/data
    """

    model_config = SettingsConfigDict(
        env_prefix="INTENTBOT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Allow other env vars without error
    )

    # Files
    data_dir: Path = Field(
        default=Path(DEFAULT_DATA_DIR),
        description="Directory containing training data and the trained model",
    )

    model_path: Optional[Path] = Field(
        default=None,
        description="Trained model file (defaults to <data_dir>/trained-model.json)",
    )

    intents_file: str = Field(
        default=INTENTS_FILENAME,
        description="Intent definitions file name inside data_dir",
    )

    knowledge_file: str = Field(
        default=KNOWLEDGE_BASE_FILENAME,
        description="Question/answer file name inside data_dir",
    )

    # Intent Network
    hidden_layers: List[int] = Field(
        default=list(HIDDEN_LAYERS),
        description="Hidden layer widths",
        min_length=1,
    )

    training_iterations: int = Field(
        default=TRAINING_ITERATIONS,
        description="Maximum training iterations",
        ge=1,
        le=100000,
    )

    error_threshold: float = Field(
        default=TRAINING_ERROR_THRESHOLD,
        description="Stop training once mean error drops below this",
        ge=0.0,
        le=1.0,
    )

    learning_rate: float = Field(
        default=LEARNING_RATE,
        description="Network learning rate",
        gt=0.0,
        le=10.0,
    )

    momentum: float = Field(
        default=MOMENTUM,
        description="Network SGD momentum",
        ge=0.0,
        lt=1.0,
    )

    # Confidence Thresholds
    network_threshold: float = Field(
        default=NETWORK_CONFIDENCE_THRESHOLD,
        description="Network activation needed before the Bayesian fallback is skipped",
        ge=0.0,
        le=1.0,
    )

    response_threshold: float = Field(
        default=RESPONSE_CONFIDENCE_THRESHOLD,
        description="Confidence that must be exceeded to use an authored reply",
        ge=0.0,
        le=1.0,
    )

    # Responses
    fallback_response: str = Field(
        default=FALLBACK_RESPONSE,
        description="Reply when no classifier is confident",
    )

    error_response: str = Field(
        default=ERROR_RESPONSE,
        description="Reply when a turn fails",
    )

    empathy_prefixes: List[str] = Field(
        default=list(EMPATHY_PREFIXES),
        description="Prefixes added to replies for negative sentiment",
        min_length=1,
    )

    spacy_model: str = Field(
        default=DEFAULT_SPACY_MODEL,
        description="spaCy pipeline used for entity extraction",
    )

    # Conversation
    max_history_messages: int = Field(
        default=MAX_HISTORY_MESSAGES,
        description="Messages kept per room",
        ge=1,
        le=10000,
    )

    typing_delay_min: float = Field(
        default=TYPING_DELAY_MIN,
        description="Minimum simulated typing delay (seconds)",
        ge=0.0,
    )

    typing_delay_max: float = Field(
        default=TYPING_DELAY_MAX,
        description="Maximum simulated typing delay (seconds)",
        ge=0.0,
    )

    # Runtime
    seed: Optional[int] = Field(
        default=None,
        description="Seed for response selection and weight initialisation",
    )

    debug: bool = Field(
        default=False,
        description="Enable debug logging",
    )

    @model_validator(mode="after")
    def _check_delay_range(self) -> "Settings":
        if self.typing_delay_max < self.typing_delay_min:
            raise ValueError("typing_delay_max must be >= typing_delay_min")
        return self

    @property
    def model_file(self) -> Path:
        """Resolved path of the persisted model."""
        if self.model_path is not None:
            return self.model_path
        return self.data_dir / MODEL_FILENAME

    @property
    def intents_path(self) -> Path:
        return self.data_dir / self.intents_file

    @property
    def knowledge_path(self) -> Path:
        return self.data_dir / self.knowledge_file


# Global settings instance (can be overridden for testing)
settings = Settings()
