"""
ChatSession: delivers engine replies to a transport after a typing delay.

The delay is cosmetic. Pending deliveries belong to the session and are
cancelled when it closes, so nothing is sent to a session that has ended.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional, Set

from intentbot.config.constants import TYPING_DELAY_MAX, TYPING_DELAY_MIN
from intentbot.conversation.selector import RandomChooser

if TYPE_CHECKING:
    from intentbot.engine import ChatEngine


logger = logging.getLogger(__name__)

# Transport callback: (event name, payload)
Emitter = Callable[[str, Dict[str, Any]], None]


class ChatSession:
    """
    One user's connection to one room.

    Events emitted, in order, for each submitted message:
    `typing-start`, then after the delay `typing-stop` and `receive-message`.

    Args:
        engine: ChatEngine producing replies
        room_id: Room the session talks in
        user_id: User owning the session
        emit: Transport callback
        delay_min: Minimum typing delay in seconds
        delay_max: Maximum typing delay in seconds
        chooser: Random source for the delay

    Example:
        >>> session = ChatSession(engine, "room-1", "user-1", emit=socket_emit)
        >>> session.submit("hello")
        >>> ...
        >>> session.close()  # cancels anything still pending
    """

    def __init__(
        self,
        engine: ChatEngine,
        room_id: str,
        user_id: str,
        emit: Emitter,
        delay_min: float = TYPING_DELAY_MIN,
        delay_max: float = TYPING_DELAY_MAX,
        chooser: Optional[RandomChooser] = None,
    ):
        if delay_max < delay_min:
            raise ValueError("delay_max must be >= delay_min")
        self._engine = engine
        self._room_id = room_id
        self._user_id = user_id
        self._emit = emit
        self._delay_min = delay_min
        self._delay_max = delay_max
        self._chooser = chooser or RandomChooser()

        self._lock = threading.Lock()
        self._pending: Set[threading.Timer] = set()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending_count(self) -> int:
        with self._lock:
            return len(self._pending)

    def submit(self, text: str, timestamp: Optional[int] = None) -> Dict[str, Any]:
        """
        Process a message and schedule delivery of the reply.

        Returns:
            The reply payload (delivered to the transport later)

        Raises:
            RuntimeError: If the session is closed
        """
        if self._closed:
            raise RuntimeError("Session is closed")

        response = self._engine.process_message(text, self._user_id, self._room_id, timestamp)
        delay = self._chooser.uniform(self._delay_min, self._delay_max)

        with self._lock:
            if self._closed:
                return response
            self._emit("typing-start", {"roomId": self._room_id})
            timer = threading.Timer(delay, lambda: self._deliver(timer, response))
            timer.daemon = True
            self._pending.add(timer)
            timer.start()
        return response

    def _deliver(self, timer: threading.Timer, response: Dict[str, Any]) -> None:
        with self._lock:
            self._pending.discard(timer)
            if self._closed:
                return
            try:
                self._emit("typing-stop", {"roomId": self._room_id})
                self._emit("receive-message", response)
            except Exception as e:
                logger.error(f"Delivery to room {self._room_id} failed: {e}", exc_info=True)

    def close(self) -> None:
        """End the session and cancel every pending delivery."""
        with self._lock:
            self._closed = True
            pending, self._pending = self._pending, set()
        for timer in pending:
            timer.cancel()
        if pending:
            logger.debug(f"Session {self._user_id}@{self._room_id} closed, {len(pending)} deliveries cancelled")

    def __enter__(self) -> ChatSession:
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"ChatSession(room={self._room_id}, user={self._user_id}, closed={self._closed})"
