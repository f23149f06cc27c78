#!/usr/bin/env python3
"""
Train the intent model from the training files and save it.

Usage:
    python scripts/train_model.py
    python scripts/train_model.py --data-dir ./data --seed 42 --probe "hello"
"""

import argparse
import logging
import sys
from pathlib import Path

from intentbot.config.settings import Settings
from intentbot.container import EngineContainer


def main() -> int:
    parser = argparse.ArgumentParser(description="Train and save the intentbot model")
    parser.add_argument("--data-dir", default=None, help="Directory with the training files")
    parser.add_argument("--model-path", default=None, help="Where to write the trained model")
    parser.add_argument("--seed", type=int, default=None, help="Weight initialisation seed")
    parser.add_argument(
        "--probe",
        action="append",
        default=[],
        help="Text to classify after training (repeatable)",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    overrides = {}
    if args.data_dir:
        overrides["data_dir"] = Path(args.data_dir)
    if args.model_path:
        overrides["model_path"] = Path(args.model_path)
    if args.seed is not None:
        overrides["seed"] = args.seed
    settings = Settings(**overrides)

    container = EngineContainer(settings)
    engine = container.create_engine()
    engine.train()

    model = engine.model
    print(f"Trained: {len(model.responses)} response tags, {len(model.vocabulary)} stems")
    print(f"Saved to: {settings.model_file}")

    for text in args.probe:
        result = engine.generate_response(text)
        print(f"  {text!r} -> {result.intent} ({result.confidence:.3f}): {result.text}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
