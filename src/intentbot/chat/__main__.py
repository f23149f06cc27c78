#!/usr/bin/env python3
"""Entry point for running chat interface as a module.

Usage:
    python -m intentbot.chat
    python -m intentbot.chat --data-dir ./data --retrain
"""

import argparse
import logging
from pathlib import Path


def main():
    parser = argparse.ArgumentParser(
        description="intentbot conversational chat interface",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Use default data directory (./data)
  python -m intentbot.chat

  # Use another data directory and retrain before chatting
  python -m intentbot.chat --data-dir ./my_data --retrain

  # Reproducible replies
  python -m intentbot.chat --seed 42
        """
    )

    parser.add_argument(
        "--data-dir",
        default=None,
        help="Directory with intents.json, knowledge-base.json and the trained model",
    )
    parser.add_argument(
        "--model-path",
        default=None,
        help="Trained model file (default: <data-dir>/trained-model.json)",
    )
    parser.add_argument(
        "--room",
        default="console",
        help="Conversation room id (default: console)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for reply selection and network initialisation",
    )
    parser.add_argument(
        "--retrain",
        action="store_true",
        help="Retrain from the training files before starting",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    args = parser.parse_args()

    # Import here so .env is loaded before settings are built
    from intentbot.chat.interface import ChatInterface
    from intentbot.config.settings import Settings
    from intentbot.container import EngineContainer

    overrides = {}
    if args.data_dir:
        overrides["data_dir"] = Path(args.data_dir)
    if args.model_path:
        overrides["model_path"] = Path(args.model_path)
    if args.seed is not None:
        overrides["seed"] = args.seed
    if args.debug:
        overrides["debug"] = True
    settings = Settings(**overrides)

    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    container = EngineContainer(settings)
    if args.retrain:
        container.engine.train()

    interface = ChatInterface(container=container, room_id=args.room)
    interface.start()


if __name__ == "__main__":
    main()
