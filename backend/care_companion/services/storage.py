# backend/care_companion/services/storage.py

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

from care_companion.services.errors import StorageError


class StoragePort(Protocol):
    """Where the care state blob lives between runs."""

    def load(self) -> Optional[Dict[str, Any]]:
        ...

    def save(self, data: Dict[str, Any]) -> None:
        ...


class InMemoryStorage:
    def __init__(self, data: Optional[Dict[str, Any]] = None):
        self.data = data
        self.saves = 0

    def load(self) -> Optional[Dict[str, Any]]:
        return self.data

    def save(self, data: Dict[str, Any]) -> None:
        self.data = data
        self.saves += 1


class JsonFileStorage:
    """Keeps the whole blob in `<directory>/<name>.json`."""

    def __init__(self, directory: str, name: str):
        self.path = Path(directory) / f"{name}.json"

    def load(self) -> Optional[Dict[str, Any]]:
        if not self.path.exists():
            return None
        try:
            with self.path.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, ValueError) as e:
            raise StorageError(f"Could not read {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise StorageError(f"Unexpected content in {self.path}")
        return data

    def save(self, data: Dict[str, Any]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=".tmp-", suffix=".json")
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh, indent=2)
            os.replace(tmp, self.path)
        except OSError as e:
            raise StorageError(f"Could not write {self.path}: {e}") from e
