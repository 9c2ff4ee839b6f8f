"""
Keeps item photo references and stored blobs in step.

Order of operations matters here: a new blob is always written before any
record points at it, and an old blob is only removed after no record points
at it any more. A crash in between can leave an unreferenced blob behind,
never a record pointing at a deleted file.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from .blob_store import BlobStore, extension_of
from .errors import BadRequestError, NotFoundError, StorageIOError
from .repository import Item, ItemRepository

LOGGER = logging.getLogger(__name__)

PHOTO_FIELD = "photo"


@dataclass
class Upload:
    """A file received from a client."""
    content: bytes
    filename: Optional[str] = None
    field_tag: str = PHOTO_FIELD

    @property
    def extension(self) -> str:
        return extension_of(self.filename)


class AttachmentCoordinator:
    """Orchestrates blob writes and deletes around repository changes. Holds no state."""

    def __init__(self, blobs: BlobStore):
        self.blobs = blobs

    def attach_on_create(self, upload: Optional[Upload]) -> Optional[str]:
        """Store the upload (if any) so the item can be created with its photo in one step."""
        if upload is None or not upload.content:
            return None
        return self.blobs.put(upload.field_tag, upload.extension, upload.content)

    def replace(self, item_id: str, repository: ItemRepository, upload: Optional[Upload]) -> str:
        """Point the item at a new photo, then remove the old one.

        Returns the new blob name.
        """
        repository.get(item_id)
        if upload is None or not upload.content:
            raise BadRequestError("No file uploaded")

        new_ref = self.blobs.put(upload.field_tag, upload.extension, upload.content)
        try:
            previous = repository.set_photo_ref(item_id, new_ref)
        except NotFoundError:
            # Item deleted while the upload was being written
            self.discard(new_ref)
            raise

        if previous and previous != new_ref:
            self.discard(previous)
        return new_ref

    def detach(self, removed: Item) -> None:
        """Clean up the photo of an item that has already left the repository."""
        if removed.photo_ref:
            self.discard(removed.photo_ref)

    def discard(self, blob_name: str) -> bool:
        """Delete a blob, logging (never raising) on failure. Returns True on success."""
        try:
            self.blobs.delete(blob_name)
        except StorageIOError as e:
            LOGGER.warning("Could not delete blob %s: %s", blob_name, e)
            return False
        return True
