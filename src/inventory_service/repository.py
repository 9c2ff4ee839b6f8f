"""
In-memory item records.

The repository owns every Item. Callers only ever receive copies, so a list
returned earlier is not changed by later updates.
"""
import copy
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from .errors import NotFoundError, ValidationError


@dataclass
class Item:
    """One tracked inventory record."""
    id: str
    name: str
    description: str = ""
    photo_ref: Optional[str] = None


class ItemRepository:
    """Mapping from item id to Item, in insertion order.

    Every public method runs under one lock, so no caller can observe a
    half-applied update.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._items: dict[str, Item] = {}
        self._lock = threading.Lock()
        self._clock = clock
        self._last_id = 0

    def _next_id(self) -> str:
        # Millisecond timestamps, bumped so ids strictly increase and never repeat
        now = int(self._clock() * 1000)
        self._last_id = max(now, self._last_id + 1)
        return str(self._last_id)

    def _require(self, item_id: str) -> Item:
        item = self._items.get(item_id)
        if item is None:
            raise NotFoundError(f"Item '{item_id}' not found")
        return item

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def create(self, name: Optional[str], description: Optional[str] = "",
               photo_ref: Optional[str] = None) -> Item:
        if not name:
            raise ValidationError("inventory_name is required")
        with self._lock:
            item = Item(
                id=self._next_id(),
                name=name,
                description=description or "",
                photo_ref=photo_ref,
            )
            self._items[item.id] = item
            return copy.copy(item)

    def get(self, item_id: str) -> Item:
        with self._lock:
            return copy.copy(self._require(item_id))

    def list(self) -> list[Item]:
        with self._lock:
            return [copy.copy(item) for item in self._items.values()]

    def update_metadata(self, item_id: str, name: Optional[str] = None,
                        description: Optional[str] = None) -> Item:
        """Patch name and/or description. Empty or missing values leave the field as is."""
        with self._lock:
            item = self._require(item_id)
            if name:
                item.name = name
            if description:
                item.description = description
            return copy.copy(item)

    def set_photo_ref(self, item_id: str, photo_ref: Optional[str]) -> Optional[str]:
        """Swap the photo reference and return the one it replaced."""
        with self._lock:
            item = self._require(item_id)
            previous = item.photo_ref
            item.photo_ref = photo_ref
            return previous

    def delete(self, item_id: str) -> Item:
        with self._lock:
            self._require(item_id)
            return self._items.pop(item_id)
