"""Interactive chat shell for intentbot."""

from intentbot.chat.interface import ChatInterface

__all__ = ["ChatInterface"]
