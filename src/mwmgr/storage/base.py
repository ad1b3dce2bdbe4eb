"""
Base Storage

Persistence port shared by every backend. Business logic talks only to
this interface over named collections and never branches on the backend.
"""
import copy
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from ..config import Config

logger = logging.getLogger("mwmgr.storage")

# Collections holding lists of records, with the field that identifies a record
RECORD_COLLECTIONS = {
    "users": "id",
    "users_pwd": "user_id",
    "articles": "id",
    "chat": "id",
    "todos": "id",
    "notifications": "id",
    "notification_settings": "user_id",
}

# Collections holding a single value (session blob, flags, maps)
BLOB_COLLECTIONS = ("auth", "theme", "notification_permission")

COLLECTIONS = tuple(RECORD_COLLECTIONS) + BLOB_COLLECTIONS


class StorageError(Exception):
    """Raised by a backend when a write cannot be completed"""


class BaseStorage(ABC):
    """
    Abstract persistence port.

    Whole-collection access goes through get/set/remove. Record-level
    helpers (list/insert/update/delete) default to read-modify-write over
    get/set; backends with native row access override them.
    """

    async def init(self):
        """Connect / load the backend"""

    async def close(self):
        """Release backend resources"""

    @abstractmethod
    async def get(self, collection: str, default: Any = None) -> Any:
        """Return the stored value of a collection, or default"""
        ...

    @abstractmethod
    async def set(self, collection: str, value: Any) -> None:
        """Replace the stored value of a collection"""
        ...

    @abstractmethod
    async def remove(self, collection: str) -> None:
        """Drop a collection entirely"""
        ...

    # ============================================
    # Record helpers
    # ============================================

    async def list(self, collection: str) -> List[dict]:
        """List all records of a collection"""
        return list(await self.get(collection, []) or [])

    async def find(self, collection: str, record_id: str) -> Optional[dict]:
        """Get one record by its key"""
        key = self._key_field(collection)
        for record in await self.list(collection):
            if record.get(key) == record_id:
                return record
        return None

    async def insert(self, collection: str, record: dict) -> dict:
        """Append a record"""
        records = await self.list(collection)
        records.append(record)
        await self.set(collection, records)
        return record

    async def update(self, collection: str, record_id: str, changes: dict) -> Optional[dict]:
        """Merge changes into a record. Returns None for an unknown id."""
        key = self._key_field(collection)
        records = await self.list(collection)
        for index, record in enumerate(records):
            if record.get(key) == record_id:
                updated = {**record, **changes}
                records[index] = updated
                await self.set(collection, records)
                return updated
        return None

    async def delete(self, collection: str, record_id: str) -> bool:
        """Delete a record. Returns False for an unknown id."""
        key = self._key_field(collection)
        records = await self.list(collection)
        remaining = [r for r in records if r.get(key) != record_id]
        if len(remaining) == len(records):
            return False
        await self.set(collection, remaining)
        return True

    # ============================================
    # Export / import
    # ============================================

    async def export(self) -> Dict[str, Any]:
        """Dump every non-empty collection keyed by its namespaced name"""
        data = {}
        for collection in COLLECTIONS:
            value = await self.get(collection, None)
            if value is not None:
                data[Config.storage_key(collection)] = copy.deepcopy(value)
        return data

    async def import_data(self, data: Dict[str, Any]) -> List[str]:
        """
        Write each collection of an export back verbatim.

        Returns the collections that were imported. Unknown keys are skipped.
        """
        by_key = {Config.storage_key(c): c for c in COLLECTIONS}
        imported = []
        for key, value in data.items():
            collection = by_key.get(key)
            if collection is None:
                logger.warning(f"Skipping unknown key in import: {key}")
                continue
            await self.set(collection, copy.deepcopy(value))
            imported.append(collection)
        return imported

    @staticmethod
    def _key_field(collection: str) -> str:
        try:
            return RECORD_COLLECTIONS[collection]
        except KeyError:
            raise ValueError(f"Not a record collection: {collection}")
