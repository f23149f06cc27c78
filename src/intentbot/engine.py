"""
ChatEngine: per-turn orchestration and model lifecycle.

Lifecycle:
    UNTRAINED --start()/load_model()--> TRAINED
                    | (no usable saved model)
                    v
                TRAINING --train()--> TRAINED

Key Design Decisions:
- The trained model is an immutable snapshot swapped in with one
  assignment; turns read the reference once and never see a half-built model
- Only one training run at a time; concurrent callers wait for it and reuse
  its result, the training thread itself may not re-enter
- Each turn holds its room's lock, so turns in one room are serialised
  while rooms run in parallel
- Any failure inside a turn becomes an apology reply; the transport never
  sees an exception
"""

import logging
import threading
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from intentbot.config.constants import (
    EMPATHY_PREFIXES,
    ERROR_RESPONSE,
    LEARNING_RATE,
    MOMENTUM,
    NETWORK_CONFIDENCE_THRESHOLD,
    TRAINING_ERROR_THRESHOLD,
    TRAINING_ITERATIONS,
    UNKNOWN_INTENT,
)
from intentbot.conversation.analyzer import AdvancedAnalyzer
from intentbot.conversation.corpus import TrainingCorpus, load_training_data
from intentbot.conversation.encoder import VectorEncoder
from intentbot.conversation.fallback import FallbackClassifier
from intentbot.conversation.intent import BayesStrategy, IntentResolver, NetworkStrategy
from intentbot.conversation.memory import ConversationMessage, ConversationStore, now_ms
from intentbot.conversation.network import IntentNetwork
from intentbot.conversation.selector import RandomChooser, ResponseResult, ResponseSelector
from intentbot.errors import (
    ModelLoadError,
    PersistenceError,
    ProcessingError,
    TrainingError,
    TrainingInProgressError,
)
from intentbot.persistence.model_store import ModelStore, TrainedModel


logger = logging.getLogger(__name__)


class EngineStatus(Enum):
    """Model lifecycle states."""

    UNTRAINED = "untrained"
    TRAINING = "training"
    TRAINED = "trained"


class ChatEngine:
    """
    Conversational response engine.

    Orchestrates all components for each turn:
    - Conversation history (per room)
    - Intent resolution (network, then Bayesian fallback)
    - Response selection
    - Sentiment/entity analysis and empathy prefixing

    Attributes:
        _encoder: Text -> vector encoder (owns the preprocessor)
        _store: Per-room conversation histories
        _selector: Reply selection
        _analyzer: Entity and sentiment analysis
        _model_store: Persisted model file
        _model: Current TrainedModel snapshot (None until trained or loaded)

    Example:
        >>> engine = container.create_engine()
        >>> engine.start()
        >>> engine.process_message("hello", user_id="u1", room_id="r1")
        {'role': 'assistant', 'message': 'Hi there', 'intent': 'greeting', ...}
    """

    def __init__(
        self,
        encoder: VectorEncoder,
        store: ConversationStore,
        selector: ResponseSelector,
        analyzer: AdvancedAnalyzer,
        model_store: ModelStore,
        intents_path: Path,
        knowledge_path: Path,
        chooser: Optional[RandomChooser] = None,
        hidden_layers: Optional[Sequence[int]] = None,
        training_iterations: int = TRAINING_ITERATIONS,
        error_threshold: float = TRAINING_ERROR_THRESHOLD,
        learning_rate: float = LEARNING_RATE,
        momentum: float = MOMENTUM,
        network_threshold: float = NETWORK_CONFIDENCE_THRESHOLD,
        empathy_prefixes: Sequence[str] = EMPATHY_PREFIXES,
        error_response: str = ERROR_RESPONSE,
        seed: Optional[int] = None,
    ):
        """
        Initialize the engine. No model is loaded until `start()` or the
        first turn.

        Args:
            encoder: Shared vector encoder
            store: Conversation store owned for the process lifetime
            selector: Response selector
            analyzer: Advanced analyzer
            model_store: Location of the persisted model
            intents_path: intents.json used by `train()`
            knowledge_path: knowledge-base.json used by `train()`
            chooser: Random source for empathy prefixes
            hidden_layers: Network hidden widths (None = network default)
            training_iterations: Maximum network training iterations
            error_threshold: Network early-stop error
            learning_rate: Network learning rate
            momentum: Network momentum
            network_threshold: Activation needed to skip the Bayesian fallback
            empathy_prefixes: Prefixes for negative-sentiment replies
            error_response: Apology text for failed turns
            seed: Seed for network weight initialisation
        """
        if not empathy_prefixes:
            raise ValueError("At least one empathy prefix is required")

        self._encoder = encoder
        self._store = store
        self._selector = selector
        self._analyzer = analyzer
        self._model_store = model_store
        self._intents_path = Path(intents_path)
        self._knowledge_path = Path(knowledge_path)
        self._chooser = chooser or RandomChooser()

        self._hidden_layers = hidden_layers
        self._training_iterations = training_iterations
        self._error_threshold = error_threshold
        self._learning_rate = learning_rate
        self._momentum = momentum
        self._network_threshold = network_threshold
        self._empathy_prefixes = list(empathy_prefixes)
        self._error_response = error_response
        self._seed = seed

        self._model: Optional[TrainedModel] = None
        self._status = EngineStatus.UNTRAINED

        # Training synchronisation
        self._train_lock = threading.Lock()
        self._training_thread: Optional[int] = None
        self._load_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def status(self) -> EngineStatus:
        return self._status

    @property
    def is_trained(self) -> bool:
        return self._model is not None

    @property
    def model(self) -> Optional[TrainedModel]:
        return self._model

    @property
    def store(self) -> ConversationStore:
        return self._store

    def start(self) -> None:
        """Load the saved model, training a new one if there is none."""
        self.load_model()

    def load_model(self) -> None:
        """
        Load the persisted model; retrain synchronously if that fails.

        Raises:
            TrainingInProgressError: If called from inside a training run
        """
        try:
            model = self._model_store.load(seed=self._seed)
        except ModelLoadError as e:
            logger.info(f"No usable saved model ({e}), training a new one")
            self.train()
            return

        self._install(model)
        logger.info(
            f"Model ready: {len(model.responses)} response tags, "
            f"{len(model.vocabulary)} vocabulary stems"
        )

    def train(self) -> None:
        """
        Train network and classifier from the training files, then save.

        Blocks until complete. A call made while another thread is training
        waits for that run and returns without training again.

        Raises:
            TrainingInProgressError: If re-entered from the training thread
        """
        if not self._train_lock.acquire(blocking=False):
            if self._training_thread == threading.get_ident():
                raise TrainingInProgressError("train() called while already training")
            logger.info("Training already in progress, waiting for it to finish")
            with self._train_lock:
                return

        try:
            self._training_thread = threading.get_ident()
            previous_status = self._status
            self._status = EngineStatus.TRAINING
            try:
                corpus = load_training_data(self._intents_path, self._knowledge_path)
                model = self._build_model(corpus)
            except BaseException:
                self._status = previous_status
                raise
            self._install(model)
            self.save_model()
        finally:
            self._training_thread = None
            self._train_lock.release()

    def _build_model(self, corpus: TrainingCorpus) -> TrainedModel:
        """Train fresh classifiers on the corpus."""
        logger.info(f"Starting training on {corpus!r}")

        if self._hidden_layers is None:
            network = IntentNetwork(input_size=self._encoder.size, seed=self._seed)
        else:
            network = IntentNetwork(
                input_size=self._encoder.size,
                hidden_layers=self._hidden_layers,
                seed=self._seed,
            )
        try:
            network.train(
                corpus.examples(self._encoder),
                iterations=self._training_iterations,
                error_threshold=self._error_threshold,
                learning_rate=self._learning_rate,
                momentum=self._momentum,
            )
        except TrainingError as e:
            logger.warning(f"Intent network left untrained: {e}")

        classifier = FallbackClassifier(preprocessor=self._encoder.preprocessor)
        for pattern, tag in corpus.documents():
            classifier.add_document(pattern, tag)
        try:
            classifier.train()
        except TrainingError as e:
            logger.warning(f"Fallback classifier left untrained: {e}")

        logger.info("Training completed")
        return TrainedModel(
            network=network,
            classifier=classifier,
            responses=corpus.responses(),
            vocabulary=corpus.vocabulary(self._encoder),
        )

    def _install(self, model: TrainedModel) -> None:
        self._model = model
        self._status = EngineStatus.TRAINED

    def save_model(self) -> None:
        """
        Persist the current model. Failures are logged; the in-memory model
        stays in use.
        """
        model = self._model
        if model is None:
            logger.warning("save_model() called with no trained model")
            return
        try:
            self._model_store.save(model)
        except PersistenceError as e:
            logger.error(f"Error saving model: {e}")

    def _ensure_model(self) -> TrainedModel:
        model = self._model
        if model is not None:
            return model
        with self._load_lock:
            if self._model is None:
                self.load_model()
        if self._model is None:
            raise ProcessingError("No trained model available")
        return self._model

    # ------------------------------------------------------------------
    # Per-turn processing
    # ------------------------------------------------------------------

    def generate_response(self, text: str) -> ResponseResult:
        """Resolve the intent of `text` and pick a reply (no history, no analysis)."""
        model = self._ensure_model()
        resolver = IntentResolver([
            NetworkStrategy(model.network, self._encoder, threshold=self._network_threshold),
            BayesStrategy(model.classifier),
        ])
        result = resolver.resolve(text)
        logger.debug(f"Resolved {result!r}")
        return self._selector.select(result, model.responses)

    def add_empathy(self, text: str) -> str:
        """Prefix a randomly chosen empathy phrase."""
        return self._chooser.choice(self._empathy_prefixes) + text

    def process_message(
        self,
        text: str,
        user_id: str,
        room_id: str,
        timestamp: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        Handle one user turn.

        Args:
            text: User's message
            user_id: Sender id (echoed back)
            room_id: Conversation room
            timestamp: User message time in epoch ms (defaults to now)

        Returns:
            Wire dict {role, message, timestamp, confidence, intent, analysis,
            roomId, userId}; on failure the apology variant with `error: True`
        """
        with self._store.lock(room_id):
            try:
                self._store.append(
                    room_id,
                    ConversationMessage(role="user", message=text, timestamp=timestamp or now_ms()),
                )

                response = self.generate_response(text)
                analysis = self._analyzer.analyze(text)

                reply = response.text
                if analysis.is_negative:
                    reply = self.add_empathy(reply)

                assistant = ConversationMessage(
                    role="assistant",
                    message=reply,
                    timestamp=now_ms(),
                    confidence=response.confidence,
                    intent=response.intent,
                    analysis=analysis,
                )
                self._store.append(room_id, assistant)
            except Exception as e:
                logger.error(f"Error processing message in room {room_id}: {e}", exc_info=True)
                return self._error_payload(room_id, user_id)

        payload = assistant.to_dict()
        payload["roomId"] = room_id
        payload["userId"] = user_id
        return payload

    def _error_payload(self, room_id: str, user_id: str) -> Dict[str, Any]:
        return {
            "role": "assistant",
            "message": self._error_response,
            "timestamp": now_ms(),
            "confidence": 0.0,
            "intent": UNKNOWN_INTENT,
            "analysis": None,
            "roomId": room_id,
            "userId": user_id,
            "error": True,
        }

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def get_conversation_history(self, room_id: str) -> List[ConversationMessage]:
        return self._store.get(room_id)

    def clear_conversation_history(self, room_id: str) -> None:
        self._store.clear(room_id)

    def __repr__(self) -> str:
        return f"ChatEngine(status={self._status.value}, model={self._model_store.path})"
