"""
JSON serialization with atomic writes.

Files are written to a temporary sibling and renamed into place, so a
reader sees either the previous file or the complete new one, never a
partial write.
"""

import json
import os
from pathlib import Path
from typing import Any
from uuid import uuid4


class JsonSerializer:
    """Simple JSON serializer for dictionaries and lists."""

    @staticmethod
    def save(obj: Any, path: Path, indent: int = 2) -> None:
        """
        Save object as JSON atomically.

        Raises:
            OSError: If the directory or file cannot be written
            TypeError: If the object is not JSON serialisable
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.parent / f".{path.name}.{uuid4().hex}.tmp"
        try:
            with open(tmp_path, 'w', encoding='utf-8') as f:
                json.dump(obj, f, indent=indent, ensure_ascii=False)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, path)
        finally:
            if tmp_path.exists():
                tmp_path.unlink()

    @staticmethod
    def load(path: Path) -> Any:
        """Load object from JSON."""
        path = Path(path)
        with open(path, 'r', encoding='utf-8') as f:
            return json.load(f)
