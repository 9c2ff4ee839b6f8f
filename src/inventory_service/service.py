"""
Inventory service: the operations the HTTP layer exposes.

Register, list, get, update, delete, search, get-photo and replace-photo,
built from the item repository and the blob store. Errors from the lower
layers pass through unchanged.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from .attachments import AttachmentCoordinator, Upload
from .blob_store import BlobStore
from .errors import NotFoundError, PhotoMissingError, ValidationError
from .repository import Item, ItemRepository

LOGGER = logging.getLogger(__name__)

TRUTHY_FLAGS = ("on", "true")


def photo_url(item_id: str) -> str:
    """Locator of the photo-retrieval route for an item."""
    return f"/inventory/{item_id}/photo"


def is_flag_set(value) -> bool:
    """Interpret a checkbox-style flag: ``"on"``, ``True`` or ``"true"``."""
    if value is True:
        return True
    return isinstance(value, str) and value in TRUTHY_FLAGS


@dataclass
class SearchResult:
    """An item shaped for display. Derived fields are never stored."""
    item: Item
    description: str
    photo_url: Optional[str] = None


class InventoryService:

    def __init__(self, repository: ItemRepository, blobs: BlobStore,
                 attachments: Optional[AttachmentCoordinator] = None):
        self.repository = repository
        self.blobs = blobs
        self.attachments = attachments or AttachmentCoordinator(blobs)

    def register(self, name: Optional[str], description: Optional[str] = "",
                 upload: Optional[Upload] = None) -> Item:
        if not name:
            raise ValidationError("inventory_name is required")

        photo_ref = self.attachments.attach_on_create(upload)
        try:
            item = self.repository.create(name, description, photo_ref)
        except Exception:
            if photo_ref:
                self.attachments.discard(photo_ref)
            raise

        LOGGER.info("Registered item %s (%s)", item.id, item.name)
        return item

    def list(self) -> list[Item]:
        return self.repository.list()

    def get_by_id(self, item_id: str) -> Item:
        return self.repository.get(item_id)

    def update_metadata(self, item_id: str, fields: dict) -> Item:
        """Apply ``name``/``description`` from ``fields``; anything else is ignored."""
        return self.repository.update_metadata(
            item_id,
            name=field_text(fields.get("name")),
            description=field_text(fields.get("description")),
        )

    def get_photo(self, item_id: str) -> bytes:
        item = self.repository.get(item_id)
        if not item.photo_ref:
            raise NotFoundError(f"Item '{item_id}' has no photo")
        try:
            return self.blobs.get(item.photo_ref)
        except NotFoundError:
            LOGGER.warning("Item %s references missing blob %s", item_id, item.photo_ref)
            raise PhotoMissingError(item_id, item.photo_ref) from None

    def replace_photo(self, item_id: str, upload: Optional[Upload]) -> None:
        new_ref = self.attachments.replace(item_id, self.repository, upload)
        LOGGER.info("Replaced photo of item %s with %s", item_id, new_ref)

    def delete(self, item_id: str) -> None:
        removed = self.repository.delete(item_id)
        self.attachments.detach(removed)
        LOGGER.info("Deleted item %s", item_id)

    def search(self, item_id: Optional[str], include_photo=False) -> SearchResult:
        """Look an item up by id. With ``include_photo``, point the description at its photo."""
        if not item_id:
            raise NotFoundError("Item id is required")
        item = self.repository.get(item_id)

        if is_flag_set(include_photo) and item.photo_ref:
            url = photo_url(item.id)
            pointer = f"Photo: {url}"
            description = f"{item.description}\n{pointer}" if item.description else pointer
            return SearchResult(item=item, description=description, photo_url=url)

        return SearchResult(item=item, description=item.description)


def field_text(value) -> Optional[str]:
    """Coerce a submitted field to text. Numbers become strings; files and booleans count as absent."""
    if value is None or isinstance(value, (bytes, bool)):
        return None
    if isinstance(value, (int, float)):
        return str(value)
    return value if isinstance(value, str) else None
