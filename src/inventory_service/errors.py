"""
Typed errors for the inventory service.

Every failure raised by the core derives from InventoryError and carries the
HTTP status the API layer answers with.
"""


class InventoryError(Exception):
    """Base class for all inventory service errors."""

    status_code = 500


class ValidationError(InventoryError):
    """A required field is missing or empty."""

    status_code = 400


class NotFoundError(InventoryError):
    """An item (or the photo behind it) does not exist."""

    status_code = 404

    def __init__(self, message: str = "Not Found"):
        super().__init__(message)


class PhotoMissingError(NotFoundError):
    """The item references a blob that is gone from the blob store."""

    def __init__(self, item_id: str, blob_name: str):
        self.item_id = item_id
        self.blob_name = blob_name
        super().__init__("Photo file missing")


class BadRequestError(InventoryError):
    """The operation needed an upload (or a parseable body) that was not supplied."""

    status_code = 400


class StorageIOError(InventoryError):
    """The blob directory could not be written or read."""

    status_code = 500
