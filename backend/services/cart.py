# backend/services/cart.py
"""
Client-held shopping cart.

The server keeps no cart: the browser sends its cart records with each call,
they are loaded into a `Cart`, changed, and dumped back.
"""
import time
from typing import Iterable, List, Optional, Union

from pydantic import TypeAdapter

from exceptions import CartEntryNotFound, InvalidCartOperation
from schemas.cart import (
    CartEntry, ConfiguredBasketEntry, PredefinedBasketEntry, StandaloneCandyEntry,
)

_entries_adapter = TypeAdapter(List[CartEntry])


class Cart:
    """Ordered cart entries; each entry has a cart-local `entry_id`."""

    def __init__(self, entries: Optional[Iterable[CartEntry]] = None):
        self._entries: List[CartEntry] = []
        for entry in entries or []:
            # Records coming from an older client may lack an identifier
            if not entry.entry_id or self._find(entry.entry_id) is not None:
                entry = entry.model_copy(update={"entry_id": self._new_entry_id()})
            self._entries.append(entry)

    @classmethod
    def from_records(cls, records: Iterable[dict]) -> "Cart":
        return cls(_entries_adapter.validate_python(list(records)))

    def to_records(self) -> List[dict]:
        return [entry.model_dump(by_alias=True, mode="json") for entry in self._entries]

    @property
    def entries(self) -> tuple:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def is_empty(self) -> bool:
        return not self._entries

    def _find(self, entry_id: str) -> Optional[int]:
        for index, entry in enumerate(self._entries):
            if entry.entry_id == entry_id:
                return index
        return None

    def _new_entry_id(self) -> str:
        # Time based, bumped until unique within this cart
        stamp = time.time_ns()
        taken = {entry.entry_id for entry in self._entries}
        while str(stamp) in taken:
            stamp += 1
        return str(stamp)

    def add_predefined(self, product: Union[PredefinedBasketEntry, StandaloneCandyEntry]) -> CartEntry:
        """Add one unit of a catalog basket or candy, merging on (id, kind)."""
        for index, entry in enumerate(self._entries):
            if isinstance(entry, ConfiguredBasketEntry):
                continue
            if entry.product_id == product.product_id and entry.kind == product.kind:
                merged = entry.model_copy(update={"quantity": entry.quantity + 1})
                self._entries[index] = merged
                return merged

        added = product.model_copy(update={"entry_id": self._new_entry_id(), "quantity": 1})
        self._entries.append(added)
        return added

    def add_configured(self, configured: ConfiguredBasketEntry) -> ConfiguredBasketEntry:
        """Append a configured basket; never merged with any other entry."""
        added = configured.model_copy(update={"entry_id": self._new_entry_id()})
        self._entries.append(added)
        return added

    def update_quantity(self, entry_id: str, quantity: int) -> CartEntry:
        index = self._find(entry_id)
        if index is None:
            raise CartEntryNotFound(entry_id)
        entry = self._entries[index]
        if isinstance(entry, ConfiguredBasketEntry):
            raise InvalidCartOperation(entry_id, "a configured basket is always a single unit")
        if quantity < 1:
            raise InvalidCartOperation(entry_id, "quantity must be at least 1")
        updated = entry.model_copy(update={"quantity": quantity})
        self._entries[index] = updated
        return updated

    def remove(self, entry_id: str) -> bool:
        """Drop the entry with this cart-local id. Unknown ids are ignored."""
        index = self._find(entry_id)
        if index is None:
            return False
        del self._entries[index]
        return True

    def total(self) -> float:
        return round(sum(entry_total(entry) for entry in self._entries), 2)

    def clear(self) -> None:
        self._entries = []


def entry_total(entry: CartEntry) -> float:
    if isinstance(entry, ConfiguredBasketEntry):
        return entry.final_total * entry.quantity
    if isinstance(entry, (PredefinedBasketEntry, StandaloneCandyEntry)):
        return entry.price * entry.quantity
    raise TypeError(f"Unknown cart entry type: {type(entry).__name__}")
