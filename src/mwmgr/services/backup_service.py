"""
Backup Service

Full logical dump of every namespaced collection, and the inverse import.
"""
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Union

from ..config import Config
from ..models.result import ServiceResult
from ..models.user import User
from ..storage.base import BaseStorage

logger = logging.getLogger("mwmgr.services.backup")


class BackupService:
    """Export and import of the whole store"""

    def __init__(self, storage: BaseStorage):
        self.storage = storage

    async def export_data(self) -> Dict[str, Any]:
        """One JSON-ready document keyed by namespaced collection names"""
        return await self.storage.export()

    async def import_data(self, actor: User, data: Dict[str, Any]) -> ServiceResult:
        """
        Write each collection of an export back verbatim (admin only).

        Returns the imported collection names in data.
        """
        if not actor.is_admin:
            return ServiceResult.denied("Only admins can import data")
        if not isinstance(data, dict):
            return ServiceResult.invalid("Backup must be a JSON object")

        imported = await self.storage.import_data(data)
        logger.info(f"Imported {len(imported)} collections: {', '.join(imported)}")
        return ServiceResult.ok(imported)

    async def export_to_file(self, directory: Union[str, Path]) -> Path:
        """Write the export to <directory>/mw_mgr_backup_<timestamp>.json"""
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)

        stamp = datetime.utcnow().strftime("%Y%m%dT%H%M%SZ")
        path = directory / f"{Config.STORAGE_KEY_PREFIX}backup_{stamp}.json"

        data = await self.export_data()
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)

        logger.info(f"Backup written to {path}")
        return path

    async def import_from_file(self, actor: User, path: Union[str, Path]) -> ServiceResult:
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to read backup {path}: {e}")
            return ServiceResult.invalid(f"Cannot read backup file: {e}")

        return await self.import_data(actor, data)
