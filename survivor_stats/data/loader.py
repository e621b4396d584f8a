"""JSON artifact loading and atomic persistence."""

import json
import os
import tempfile
from pathlib import Path
from typing import Any


class DataLoader:
    """Loads and saves the engine's JSON artifacts."""

    @staticmethod
    def load_json(file_path) -> Any:
        """
        Load a JSON document.

        Args:
            file_path: Path to JSON file

        Returns:
            Decoded JSON value
        """
        with open(file_path, "r", encoding="utf-8") as f:
            return json.load(f)

    @staticmethod
    def save_json(payload: Any, file_path) -> str:
        """
        Write a JSON document via a temp file renamed over the target.

        Args:
            payload: JSON-serializable value
            file_path: Output file path

        Returns:
            The written path as a string
        """
        path = Path(file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent))
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2, ensure_ascii=False)
                f.write("\n")
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
        return str(path)
