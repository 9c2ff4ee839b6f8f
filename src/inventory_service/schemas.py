"""Wire models for the inventory API."""
from typing import Optional

from pydantic import BaseModel

from .repository import Item
from .service import SearchResult, photo_url


class ItemOut(BaseModel):
    """An item as returned by the API."""
    id: str
    name: str
    description: str = ""
    photo: Optional[str] = None
    photo_url: Optional[str] = None

    @classmethod
    def from_item(cls, item: Item) -> "ItemOut":
        return cls(
            id=item.id,
            name=item.name,
            description=item.description,
            photo=item.photo_ref,
            photo_url=photo_url(item.id) if item.photo_ref else None,
        )

    @classmethod
    def from_search(cls, result: SearchResult) -> "ItemOut":
        out = cls.from_item(result.item)
        out.description = result.description
        return out


class ActionResult(BaseModel):
    """Outcome of a state-changing request."""
    success: bool = True
    message: str
    id: str


class HealthOut(BaseModel):
    status: str
    item_count: int
    blob_count: int
    cache_dir: str
