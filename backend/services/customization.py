# backend/services/customization.py
"""
Customization of a predefined basket with extra candies.

The engine holds the selection for one basket being configured. The same
class backs the interactive /customization endpoints and the re-validation
done when an order is committed, so the limit is enforced in one place.
"""
import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from exceptions import LimitExceeded, SelectionEntryNotFound
from schemas.cart import CONFIGURED_KIND, ConfiguredBasketEntry, SelectionLine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CustomizationTotals:
    base_price: float
    extra_cost: float
    final_total: float


class CustomizationEngine:
    """
    Selection of extra candies for a single basket.

    `basket` needs `id`, `name`, `base_price` and `customization_limit`;
    candies need `id`, `name` and `unit_price` (ORM rows or schemas both work).
    Entries keep first-insertion order and never hold a zero quantity.
    """

    def __init__(self, basket):
        self.basket = basket
        # candy_id -> [candy name, unit price, quantity]
        self._entries: dict = {}

    @classmethod
    def restore(cls, basket, lines: Iterable[Tuple[object, int]]) -> "CustomizationEngine":
        """
        Rebuild an engine from (candy, quantity) pairs the client already holds.

        No limit check happens here: an over-limit selection is representable,
        it just cannot be confirmed.
        """
        engine = cls(basket)
        for candy, quantity in lines:
            if quantity < 1:
                continue
            if candy.id in engine._entries:
                engine._entries[candy.id][2] += quantity
            else:
                engine._entries[candy.id] = [candy.name, float(candy.unit_price), quantity]
        return engine

    @property
    def limit(self) -> int:
        return int(self.basket.customization_limit or 0)

    def selected_quantity(self) -> int:
        return sum(entry[2] for entry in self._entries.values())

    def remaining_capacity(self) -> int:
        # May be negative for a restored over-limit selection
        return self.limit - self.selected_quantity()

    def can_confirm(self) -> bool:
        return self.remaining_capacity() >= 0

    def add_extra(self, candy) -> None:
        selected = self.selected_quantity()
        if selected >= self.limit:
            raise LimitExceeded(self.basket.id, self.limit, selected + 1)

        if candy.id in self._entries:
            self._entries[candy.id][2] += 1
        else:
            self._entries[candy.id] = [candy.name, float(candy.unit_price), 1]

    def remove_extra(self, candy_id: int) -> None:
        entry = self._entries.get(candy_id)
        if entry is None:
            raise SelectionEntryNotFound(candy_id)

        if entry[2] > 1:
            entry[2] -= 1
        else:
            del self._entries[candy_id]

    def selection(self) -> List[SelectionLine]:
        return [
            SelectionLine(candy_id=candy_id, name=name, unit_price=price, quantity=qty)
            for candy_id, (name, price, qty) in self._entries.items()
        ]

    def compute_totals(self) -> CustomizationTotals:
        base_price = float(self.basket.base_price)
        extra_cost = round(sum(price * qty for _, price, qty in self._entries.values()), 2)
        return CustomizationTotals(
            base_price=base_price,
            extra_cost=extra_cost,
            final_total=round(base_price + extra_cost, 2),
        )

    def confirm(self, name: Optional[str] = None) -> ConfiguredBasketEntry:
        """Freeze the current selection into a configured-basket cart entry."""
        selected = self.selected_quantity()
        if selected > self.limit:
            raise LimitExceeded(self.basket.id, self.limit, selected)

        totals = self.compute_totals()
        logger.debug("Basket %s confirmed with %s extra items", self.basket.id, selected)
        return ConfiguredBasketEntry(
            kind=CONFIGURED_KIND,
            basket_id=self.basket.id,
            name=name or f"{self.basket.name} (personalizada)",
            base_price=totals.base_price,
            extra_cost=totals.extra_cost,
            final_total=totals.final_total,
            selection=tuple(self.selection()),
        )
