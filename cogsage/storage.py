"""Storage backends for knowledge namespaces"""

import copy
import json
import logging
from pathlib import Path
from typing import Dict, List

from . import config

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when a namespace cannot be read or written"""


class Storage:
    """
    Persistence contract used by the knowledge store and learning queue.
    A namespace holds a list of plain dicts.
    """

    def load(self, namespace: str) -> List[Dict]:
        raise NotImplementedError

    def save(self, namespace: str, entries: List[Dict]) -> None:
        raise NotImplementedError


class MemoryStorage(Storage):
    """In-process storage, used for tests and offline sessions"""

    def __init__(self, initial: Dict[str, List[Dict]] = None):
        self.namespaces: Dict[str, List[Dict]] = copy.deepcopy(initial or {})
        self.save_count = 0

    def load(self, namespace: str) -> List[Dict]:
        return copy.deepcopy(self.namespaces.get(namespace, []))

    def save(self, namespace: str, entries: List[Dict]) -> None:
        self.namespaces[namespace] = copy.deepcopy(list(entries))
        self.save_count += 1


class JsonFileStorage(Storage):
    """One JSON file per namespace inside a directory"""

    def __init__(self, directory: Path = None):
        self.directory = Path(directory or config.KNOWLEDGE_DIR)
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, namespace: str) -> Path:
        return self.directory / f"{namespace}.json"

    def load(self, namespace: str) -> List[Dict]:
        path = self._path(namespace)
        if not path.exists():
            logger.info(f"No stored data for namespace {namespace!r}, starting fresh")
            return []
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise StorageError(f"Failed to load {namespace!r}: {e}") from e
        if not isinstance(data, list):
            raise StorageError(f"Namespace {namespace!r} is not a list")
        logger.debug(f"Loaded {len(data)} records from {path}")
        return data

    def save(self, namespace: str, entries: List[Dict]) -> None:
        path = self._path(namespace)
        tmp_path = path.with_suffix(".json.tmp")
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(list(entries), f, indent=2, ensure_ascii=False)
            tmp_path.replace(path)
        except (OSError, TypeError, ValueError) as e:
            raise StorageError(f"Failed to save {namespace!r}: {e}") from e
        logger.debug(f"Saved {len(entries)} records to {path}")
