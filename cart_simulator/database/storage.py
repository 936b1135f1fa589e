"""JSON file persistence for store collections"""

import json
import logging
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """A collection file could not be read or written"""


class JsonFileStore:
    """
    One JSON file holding a whole collection.

    The file is rewritten in full on every save, shaped as
    ``{"<collection>": [...], "last_updated": "<iso timestamp>"}``.
    """

    def __init__(self, path: Path, collection: str):
        self.path = Path(path)
        self.collection = collection

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> Optional[list[dict[str, Any]]]:
        """
        Read the collection records.

        Returns:
            The stored records, or None when the file does not exist yet
        """
        if not self.path.exists():
            return None

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to read {self.path}: {e}")
            raise StorageError(f"Failed to read {self.collection} from {self.path}") from e

        records = data.get(self.collection) if isinstance(data, dict) else None
        if not isinstance(records, list):
            raise StorageError(f"{self.path} has no '{self.collection}' list")

        return records

    def save(self, records: list[dict[str, Any]]) -> None:
        """Replace the collection file with records"""
        payload = {
            self.collection: records,
            "last_updated": datetime.utcnow().isoformat(),
        }

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.collection}-", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(payload, f, indent=2, ensure_ascii=False)
                os.replace(tmp_name, self.path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.remove(tmp_name)
                raise
        except OSError as e:
            logger.error(f"Failed to write {self.path}: {e}")
            raise StorageError(f"Failed to save {self.collection} to {self.path}") from e

        logger.debug(f"Saved {len(records)} {self.collection} to {self.path}")
