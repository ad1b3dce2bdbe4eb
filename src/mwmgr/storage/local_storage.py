"""
Local Storage

File-backed key-value store: an in-memory mirror of every collection,
written through to one plaintext JSON file per namespaced key.

The files are not encrypted. Anyone with access to the data directory can
read them, including password hashes.
"""
import copy
import json
import logging
import os
import time
from pathlib import Path
from typing import Any, Dict, Optional

from .base import BaseStorage, COLLECTIONS
from ..config import Config

logger = logging.getLogger("mwmgr.storage.local")


class LocalStorage(BaseStorage):
    """Storage over JSON files in a data directory"""

    def __init__(self, data_dir: Optional[Path] = None):
        """
        Initialize local storage.

        Args:
            data_dir: Directory holding mw_mgr_<collection>_v1.json files
        """
        self.data_dir = Path(data_dir or Config.LOCAL_STORAGE_DIR)
        self._data: Dict[str, Any] = {}
        self._initialized = False

    async def init(self):
        """Create the data directory and load every collection into memory"""
        if self._initialized:
            return

        start_time = time.time()
        self.data_dir.mkdir(parents=True, exist_ok=True)

        for collection in COLLECTIONS:
            value = self._read_file(collection)
            if value is not None:
                self._data[collection] = value

        self._initialized = True
        duration_ms = round((time.time() - start_time) * 1000, 2)
        logger.info(f"LocalStorage loaded {len(self._data)} collections from {self.data_dir} in {duration_ms}ms")

    async def close(self):
        self._data.clear()
        self._initialized = False

    async def get(self, collection: str, default: Any = None) -> Any:
        if collection not in self._data:
            return default
        return copy.deepcopy(self._data[collection])

    async def set(self, collection: str, value: Any) -> None:
        self._data[collection] = copy.deepcopy(value)
        self._write_file(collection, value)

    async def remove(self, collection: str) -> None:
        self._data.pop(collection, None)
        path = self._path(collection)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.error(f"Failed to remove {path.name}: {e}")

    def _path(self, collection: str) -> Path:
        return self.data_dir / f"{Config.storage_key(collection)}.json"

    def _read_file(self, collection: str) -> Any:
        """Read one collection file; unreadable or corrupt files count as absent"""
        path = self._path(collection)
        if not path.exists():
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to read {path.name}: {e}")
            return None

    def _write_file(self, collection: str, value: Any):
        """
        Write one collection file atomically.

        On failure the in-memory mirror stays ahead of the file until the
        next successful write.
        """
        path = self._path(collection)
        tmp_path = path.with_suffix(".json.tmp")
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(value, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, path)
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to write {path.name}: {e}")
