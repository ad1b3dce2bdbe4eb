"""
MW_MGR Storage Layer

Persistence port and its two backends: local JSON files and PostgreSQL.
"""
from .base import BaseStorage, StorageError, COLLECTIONS, RECORD_COLLECTIONS, BLOB_COLLECTIONS
from .local_storage import LocalStorage
from .postgres_storage import PostgresStorage
from ..config import Config


def create_storage(backend: str = None) -> BaseStorage:
    """Build the configured storage backend"""
    backend = (backend or Config.STORAGE_BACKEND).lower()
    if backend == "postgres":
        return PostgresStorage(Config.get_postgres_dsn())
    if backend == "local":
        return LocalStorage(Config.LOCAL_STORAGE_DIR)
    raise ValueError(f"Unknown storage backend: {backend}")


__all__ = [
    'BaseStorage',
    'StorageError',
    'COLLECTIONS',
    'RECORD_COLLECTIONS',
    'BLOB_COLLECTIONS',
    'LocalStorage',
    'PostgresStorage',
    'create_storage',
]
