"""
Dependency Injection Container for intentbot.

Builds every engine component from one Settings instance and shares the
pieces that must be shared: one preprocessor (so the encoder and the
Bayesian classifier tokenise identically), one random source, and one
conversation store per process.
"""

from typing import Optional

from intentbot.config.settings import Settings, settings as default_settings
from intentbot.conversation.analyzer import AdvancedAnalyzer, EntityExtractor, SpacyEntityExtractor
from intentbot.conversation.encoder import VectorEncoder
from intentbot.conversation.memory import ConversationStore
from intentbot.conversation.preprocessing import TextPreprocessor
from intentbot.conversation.selector import RandomChooser, ResponseSelector
from intentbot.conversation.session import ChatSession, Emitter
from intentbot.engine import ChatEngine
from intentbot.persistence.model_store import ModelStore


class EngineContainer:
    """
    Dependency injection container for the chat engine.

    Manages shared singletons (preprocessor, encoder, chooser, store) and
    provides factories for the components that depend on them.

    Attributes:
        _settings: Configuration every factory reads from
        _preprocessor: Shared TextPreprocessor
        _encoder: Shared VectorEncoder
        _chooser: Shared RandomChooser (seeded from settings)
        _store: Process-wide ConversationStore

    Example:
        >>> container = EngineContainer()
        >>> engine = container.create_engine(start=True)
        >>> session = container.create_session(engine, "room-1", "user-1", emit)
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        entity_extractor: Optional[EntityExtractor] = None,
    ):
        """
        Initialize container with shared dependencies.

        Args:
            settings: Configuration (defaults to the global settings)
            entity_extractor: Override for the spaCy entity extractor
        """
        self._settings = settings or default_settings
        self._entity_extractor = entity_extractor

        self._preprocessor = TextPreprocessor()
        self._encoder = VectorEncoder(self._preprocessor)
        self._chooser = RandomChooser(self._settings.seed)
        self._store = ConversationStore(max_messages=self._settings.max_history_messages)
        self._engine: Optional[ChatEngine] = None

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def preprocessor(self) -> TextPreprocessor:
        return self._preprocessor

    @property
    def encoder(self) -> VectorEncoder:
        return self._encoder

    @property
    def chooser(self) -> RandomChooser:
        return self._chooser

    @property
    def conversation_store(self) -> ConversationStore:
        return self._store

    def create_model_store(self) -> ModelStore:
        return ModelStore(self._settings.model_file, preprocessor=self._preprocessor)

    def create_response_selector(self) -> ResponseSelector:
        return ResponseSelector(
            chooser=self._chooser,
            threshold=self._settings.response_threshold,
            fallback_text=self._settings.fallback_response,
        )

    def create_analyzer(self) -> AdvancedAnalyzer:
        extractor = self._entity_extractor or SpacyEntityExtractor(self._settings.spacy_model)
        return AdvancedAnalyzer(entity_extractor=extractor)

    def create_engine(self, start: bool = False) -> ChatEngine:
        """
        Create a ChatEngine wired to the shared components.

        Args:
            start: Load (or train) the model before returning
        """
        s = self._settings
        engine = ChatEngine(
            encoder=self._encoder,
            store=self._store,
            selector=self.create_response_selector(),
            analyzer=self.create_analyzer(),
            model_store=self.create_model_store(),
            intents_path=s.intents_path,
            knowledge_path=s.knowledge_path,
            chooser=self._chooser,
            hidden_layers=s.hidden_layers,
            training_iterations=s.training_iterations,
            error_threshold=s.error_threshold,
            learning_rate=s.learning_rate,
            momentum=s.momentum,
            network_threshold=s.network_threshold,
            empathy_prefixes=s.empathy_prefixes,
            error_response=s.error_response,
            seed=s.seed,
        )
        if start:
            engine.start()
        return engine

    @property
    def engine(self) -> ChatEngine:
        """Process-wide engine, created and started on first access."""
        if self._engine is None:
            self._engine = self.create_engine(start=True)
        return self._engine

    def create_session(
        self,
        engine: ChatEngine,
        room_id: str,
        user_id: str,
        emit: Emitter,
    ) -> ChatSession:
        return ChatSession(
            engine,
            room_id=room_id,
            user_id=user_id,
            emit=emit,
            delay_min=self._settings.typing_delay_min,
            delay_max=self._settings.typing_delay_max,
            chooser=self._chooser,
        )

    def __repr__(self) -> str:
        return f"EngineContainer(data_dir={self._settings.data_dir}, model={self._settings.model_file})"
