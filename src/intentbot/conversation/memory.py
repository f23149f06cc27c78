"""
Conversation memory: bounded per-room message histories.

The store is the only owner of history lists. Each room has its own
re-entrant lock so a whole turn (user append, processing, assistant
append) can be serialised per room while different rooms run in parallel.
"""

import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Literal, Optional

from intentbot.config.constants import MAX_HISTORY_MESSAGES
from intentbot.conversation.analyzer import Analysis

Role = Literal["user", "assistant"]


def now_ms() -> int:
    """Current time as integer epoch milliseconds."""
    return int(time.time() * 1000)


@dataclass
class ConversationMessage:
    """A single message in a room's history."""

    role: Role
    message: str
    timestamp: int
    confidence: Optional[float] = None  # assistant only
    intent: Optional[str] = None  # assistant only
    analysis: Optional[Analysis] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "role": self.role,
            "message": self.message,
            "timestamp": self.timestamp,
        }
        if self.role == "assistant":
            data["confidence"] = self.confidence
            data["intent"] = self.intent
            data["analysis"] = self.analysis.to_dict() if self.analysis else None
        return data

    def __repr__(self) -> str:
        return f"Message({self.role}: '{self.message[:20]}...')"


class ConversationStore:
    """
    Ordered, capacity-bounded histories keyed by room id.

    Attributes:
        _max_messages: Messages kept per room (oldest evicted first)
        _histories: Room id -> message list
        _room_locks: Room id -> lock serialising mutations of that room

    Example:
        >>> store = ConversationStore(max_messages=20)
        >>> with store.lock("room-1"):
        ...     store.append("room-1", ConversationMessage("user", "hi", now_ms()))
        >>> len(store.get("room-1"))
        1
    """

    def __init__(self, max_messages: int = MAX_HISTORY_MESSAGES):
        if max_messages < 1:
            raise ValueError("max_messages must be at least 1")
        self._max_messages = max_messages
        self._histories: Dict[str, List[ConversationMessage]] = {}
        self._room_locks: Dict[str, threading.RLock] = {}
        self._registry_lock = threading.Lock()

    @property
    def max_messages(self) -> int:
        return self._max_messages

    def _room_lock(self, room_id: str, create: bool = True) -> Optional[threading.RLock]:
        """Lock for `room_id`; without `create`, None for rooms never locked."""
        with self._registry_lock:
            lock = self._room_locks.get(room_id)
            if lock is None and create:
                lock = self._room_locks[room_id] = threading.RLock()
            return lock

    @contextmanager
    def lock(self, room_id: str) -> Iterator[None]:
        """Hold the room's lock for a sequence of operations."""
        with self._room_lock(room_id):
            yield

    def append(self, room_id: str, message: ConversationMessage) -> None:
        """
        Append to the room's history, creating it if needed.

        Trims the oldest messages once the history exceeds capacity.
        """
        with self._room_lock(room_id):
            history = self._histories.setdefault(room_id, [])
            history.append(message)
            if len(history) > self._max_messages:
                del history[: len(history) - self._max_messages]

    def get(self, room_id: str) -> List[ConversationMessage]:
        """Snapshot of the room's history, oldest first (empty if unseen)."""
        lock = self._room_lock(room_id, create=False)
        if lock is None:
            return []
        with lock:
            return list(self._histories.get(room_id, []))

    def clear(self, room_id: str) -> None:
        """Drop the room's history. Unknown rooms are ignored."""
        lock = self._room_lock(room_id, create=False)
        if lock is None:
            return
        with lock:
            self._histories.pop(room_id, None)

    @property
    def room_count(self) -> int:
        with self._registry_lock:
            return len(self._histories)

    def __contains__(self, room_id: str) -> bool:
        return room_id in self._histories

    def __repr__(self) -> str:
        return f"ConversationStore(rooms={self.room_count}, max={self._max_messages})"
