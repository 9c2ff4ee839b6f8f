"""
Disk-backed storage for item photos.

Each photo is an opaque byte payload stored as one file in a single root
directory, under a generated name of the form
``<field>-<timestamp ms>-<random><ext>`` (e.g. ``photo-1718000000000-42.jpg``).
"""
import logging
import os
import random
import tempfile
import time
from pathlib import Path
from typing import Callable, Optional

from .errors import NotFoundError, StorageIOError

LOGGER = logging.getLogger(__name__)

DISAMBIGUATOR_MAX = 10**9


def make_blob_name(field_tag: str, timestamp_ms: int, disambiguator: int, extension: str) -> str:
    """Build a blob name from its parts. Pure; no clock or randomness involved."""
    if extension and not extension.startswith('.'):
        extension = f".{extension}"
    return f"{field_tag}-{timestamp_ms}-{disambiguator}{extension}"


def extension_of(filename: Optional[str]) -> str:
    """Return the extension of an uploaded file name (``''`` if it has none)."""
    if not filename:
        return ''
    # Browsers on Windows may send the full client path
    return Path(filename.replace('\\', '/')).suffix


class BlobStore:
    """Stores, fetches and deletes photo payloads in one directory."""

    def __init__(self, root: Path, clock: Callable[[], float] = time.time,
                 rng: Optional[random.Random] = None):
        self.root = Path(root)
        self._clock = clock
        self._rng = rng or random.Random()
        self._last_timestamp = 0

    def _timestamp_ms(self) -> int:
        # Wall clocks can step backwards; names must not
        now = int(self._clock() * 1000)
        self._last_timestamp = max(now, self._last_timestamp)
        return self._last_timestamp

    def _path(self, blob_name: str) -> Optional[Path]:
        """Resolve a blob name to its file, or None if the name could escape the root."""
        if not blob_name or blob_name in ('.', '..') or Path(blob_name).name != blob_name:
            return None
        if '\\' in blob_name:
            return None
        return self.root / blob_name

    def put(self, field_tag: str, extension: str, data: bytes) -> str:
        """Write ``data`` under a freshly generated name and return that name."""
        tmp_name = None
        try:
            while True:
                name = make_blob_name(
                    field_tag,
                    self._timestamp_ms(),
                    self._rng.randrange(DISAMBIGUATOR_MAX),
                    extension,
                )
                if not self.exists(name):
                    break

            fd, tmp_name = tempfile.mkstemp(dir=self.root, prefix='.upload-', suffix='.part')
            with os.fdopen(fd, 'wb') as f:
                f.write(data)
            os.replace(tmp_name, self.root / name)
        except OSError as e:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    pass
            raise StorageIOError(f"Failed to store blob: {e}") from e

        LOGGER.debug("Stored blob %s (%d bytes)", name, len(data))
        return name

    def get(self, blob_name: str) -> bytes:
        """Return the bytes stored under ``blob_name``."""
        path = self._path(blob_name)
        if path is None:
            raise NotFoundError(f"Blob '{blob_name}' not found")
        try:
            return path.read_bytes()
        except (FileNotFoundError, IsADirectoryError):
            raise NotFoundError(f"Blob '{blob_name}' not found") from None
        except OSError as e:
            raise StorageIOError(f"Failed to read blob '{blob_name}': {e}") from e

    def exists(self, blob_name: str) -> bool:
        path = self._path(blob_name)
        return path is not None and path.is_file()

    def delete(self, blob_name: str) -> None:
        """Remove a blob. Removing a name that is not there is not an error."""
        path = self._path(blob_name)
        if path is None:
            return
        try:
            path.unlink()
        except FileNotFoundError:
            return
        except OSError as e:
            raise StorageIOError(f"Failed to delete blob '{blob_name}': {e}") from e
        LOGGER.debug("Deleted blob %s", blob_name)

    def names(self) -> list[str]:
        """List stored blob names, skipping in-flight temporary files."""
        return sorted(
            p.name for p in self.root.iterdir()
            if p.is_file() and not p.name.startswith('.upload-')
        )
