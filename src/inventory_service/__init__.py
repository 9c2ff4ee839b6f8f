"""
Inventory Service - a small HTTP service for tracking items and their photos

Features:
- Register, list, update, search and delete inventory items
- Attach a photo to each item and replace it later
- Photos kept on disk, item records kept in memory
- CLI to start the API server
"""

__version__ = "1.0.0"

from .attachments import AttachmentCoordinator, Upload
from .blob_store import BlobStore, make_blob_name
from .errors import (
    BadRequestError,
    InventoryError,
    NotFoundError,
    PhotoMissingError,
    StorageIOError,
    ValidationError,
)
from .repository import Item, ItemRepository
from .service import InventoryService, SearchResult

__all__ = [
    "AttachmentCoordinator",
    "Upload",
    "BlobStore",
    "make_blob_name",
    "BadRequestError",
    "InventoryError",
    "NotFoundError",
    "PhotoMissingError",
    "StorageIOError",
    "ValidationError",
    "Item",
    "ItemRepository",
    "InventoryService",
    "SearchResult",
]
