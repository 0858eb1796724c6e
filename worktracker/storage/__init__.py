"""Storage package."""

from .areas import (
    StorageArea,
    MemoryStorageArea,
    SqlStorageArea,
    StorageError,
    StorageQuotaExceeded,
)
from .context import StorageContext

__all__ = [
    "StorageArea",
    "MemoryStorageArea",
    "SqlStorageArea",
    "StorageError",
    "StorageQuotaExceeded",
    "StorageContext",
]
