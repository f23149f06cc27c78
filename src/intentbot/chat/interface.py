#!/usr/bin/env python3
"""
Chat interface for the intentbot engine.

Provides an interactive REPL over a single conversation room.
"""

from dotenv import load_dotenv
load_dotenv()  # Load .env file before settings are read

import uuid
from typing import Optional

from intentbot.container import EngineContainer
from intentbot.engine import ChatEngine


class ChatInterface:
    """
    Interactive chat interface.

    Commands:
    - /history - Show this room's conversation history
    - /clear - Clear this room's conversation history
    - /train - Retrain the model from the training files
    - /help - Show help
    - /exit - Exit

    Example session:
        > hello
        Hi there  [greeting, 0.93]

        > I hate this
        I'm sorry about that. I don't understand, please rephrase.  [unknown, 0.00]
    """

    def __init__(
        self,
        container: Optional[EngineContainer] = None,
        room_id: str = "console",
        user_id: Optional[str] = None,
        show_details: bool = True,
    ):
        """
        Initialize chat interface.

        Args:
            container: Engine container (default settings if omitted)
            room_id: Room used for the whole session
            user_id: User id (random if omitted)
            show_details: Print intent and confidence after each reply
        """
        self.container = container or EngineContainer()
        self.engine: ChatEngine = self.container.engine
        self.room_id = room_id
        self.user_id = user_id or f"user-{uuid.uuid4().hex[:8]}"
        self.show_details = show_details

    def start(self) -> None:
        """Start interactive REPL."""
        print("=" * 60)
        print("  intentbot: conversational response engine")
        print(f"  [Model: {self.container.settings.model_file}]")
        print("=" * 60)
        print()
        print("(Type naturally or use /help for commands)")
        print()

        while True:
            try:
                user_input = input("> ").strip()
            except (EOFError, KeyboardInterrupt):
                print("\nGoodbye!")
                break

            if not user_input:
                continue

            if user_input.startswith("/"):
                if not self._handle_command(user_input):
                    break
                continue

            print(self.respond(user_input))
            print()

    def respond(self, text: str) -> str:
        """Process one line and format the reply for the console."""
        reply = self.engine.process_message(text, self.user_id, self.room_id)
        line = reply["message"]
        if self.show_details:
            line += f"  [{reply['intent']}, {reply['confidence']:.2f}]"
            analysis = reply.get("analysis") or {}
            entities = {k: v for k, v in (analysis.get("entities") or {}).items() if v}
            if entities:
                line += f"  entities={entities}"
        return line

    def _handle_command(self, command: str) -> bool:
        """Run a slash command. Returns False when the REPL should stop."""
        name = command.split()[0].lower()

        if name in ("/exit", "/quit"):
            print("Goodbye!")
            return False

        if name == "/help":
            print(self.__class__.__doc__)
        elif name == "/history":
            history = self.engine.get_conversation_history(self.room_id)
            if not history:
                print("(no history)")
            for message in history:
                print(f"  {message.role:>9}: {message.message}")
        elif name == "/clear":
            self.engine.clear_conversation_history(self.room_id)
            print("History cleared.")
        elif name == "/train":
            print("Training...")
            self.engine.train()
            print("Training complete.")
        else:
            print(f"Unknown command: {name} (try /help)")
        print()
        return True
