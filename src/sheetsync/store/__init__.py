"""Spreadsheet store backends and the remote store client."""

from .base import SpreadsheetStore
from .client import StoreClient, StoreClientError
from .memory import MemoryStore
from .sqlite import SQLiteStore

__all__ = [
    "SpreadsheetStore",
    "StoreClient",
    "StoreClientError",
    "MemoryStore",
    "SQLiteStore",
    "create_store",
]


def create_store(backend: str = None):
    """Create the store backend named by settings (or backend)."""
    from ..config import settings

    backend = backend or settings.store_backend
    if backend == "memory":
        return MemoryStore()
    if backend == "sqlite":
        return SQLiteStore()
    raise ValueError(f"Unknown store backend: {backend}")
