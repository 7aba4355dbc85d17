# backend/services/order_commit.py
"""
Turns a finalized cart into an order header plus its line items.

Prices are never taken from the client: every entry is re-priced from the
catalog (configured baskets go through the CustomizationEngine again) and
the order is rejected when the client's figures disagree.
"""
import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from config import settings
from database import transaction
from exceptions import CatalogItemNotFound, InvalidOrder, LimitExceeded, PersistenceError
from models.order import Order, OrderItem
from schemas.cart import (
    CartEntry, ConfiguredBasketEntry, PredefinedBasketEntry, StandaloneCandyEntry,
)
from services.cart import Cart
from services.catalog import CatalogStore
from services.customization import CustomizationEngine

logger = logging.getLogger(__name__)

BASKET = "Basket"
CANDY = "Candy"


@dataclass(frozen=True)
class PlannedLine:
    product_type: str
    product_id: int
    product_name: str
    quantity: int
    unit_price: float


class OrderCommitService:
    def __init__(self, db: Session, catalog: Optional[CatalogStore] = None,
                 price_tolerance: Optional[float] = None):
        self.db = db
        self.catalog = catalog or CatalogStore(db)
        self.price_tolerance = settings.PRICE_TOLERANCE if price_tolerance is None else price_tolerance

    def commit(self, user_id: int, cart: Cart, payment_type_id: Optional[int],
               delivery_address: Optional[str], gift_message: Optional[str] = None,
               client_total: Optional[float] = None) -> int:
        """
        Persist the cart as one pending order and return the new order id.

        Raises InvalidOrder before anything is written, or PersistenceError
        after a rolled-back write. On success the given cart is cleared.
        """
        if cart is None or cart.is_empty():
            raise InvalidOrder("cart is empty")
        address = (delivery_address or "").strip()
        if not address:
            raise InvalidOrder("delivery address is required")
        if payment_type_id is None:
            raise InvalidOrder("payment type is required")
        try:
            self.catalog.get_payment_type(payment_type_id)
        except CatalogItemNotFound:
            raise InvalidOrder("unknown payment type", {'payment_type_id': payment_type_id})

        total, lines = self._plan(cart)
        if total <= 0:
            raise InvalidOrder("order total must be greater than zero", {'total': total})
        if client_total is not None and abs(client_total - total) > self.price_tolerance:
            raise InvalidOrder("submitted total does not match catalog prices",
                               {'submitted': client_total, 'expected': total})

        gift = (gift_message or "").strip() or None
        try:
            with transaction(self.db):
                order = Order(
                    user_id=user_id,
                    total=total,
                    payment_type_id=payment_type_id,
                    status="pending",
                    gift_message=gift,
                    delivery_address=address,
                )
                self.db.add(order)
                self.db.flush()
                order_id = order.id

                for position, line in enumerate(lines):
                    self.db.add(OrderItem(
                        order_id=order_id,
                        position=position,
                        product_type=line.product_type,
                        product_id=line.product_id,
                        product_name=line.product_name,
                        quantity=line.quantity,
                        unit_price=line.unit_price,
                    ))
                    self.db.flush()
        except SQLAlchemyError as e:
            logger.exception("Order commit rolled back for user %s: %s", user_id, e)
            raise PersistenceError(user_id, e) from e

        logger.info("Order %s committed for user %s: total=%.2f lines=%d", order_id, user_id, total, len(lines))
        cart.clear()
        return order_id

    def _plan(self, cart: Cart) -> Tuple[float, List[PlannedLine]]:
        # Walk entries in cart order; the result is the line-item order
        total = 0.0
        lines: List[PlannedLine] = []
        for entry in cart.entries:
            entry_lines, entry_total = self._price_entry(entry)
            lines.extend(entry_lines)
            total += entry_total
        return round(total, 2), lines

    def _price_entry(self, entry: CartEntry) -> Tuple[List[PlannedLine], float]:
        try:
            if isinstance(entry, PredefinedBasketEntry):
                basket = self.catalog.get_basket(entry.product_id)
                price = float(basket.base_price)
                self._check_price(entry.price, price, entry.name)
                line = PlannedLine(BASKET, basket.id, basket.name, entry.quantity, price)
                return [line], price * entry.quantity

            if isinstance(entry, StandaloneCandyEntry):
                # Stock is advisory: inactive candies are refused, sold-out ones are not
                candy = self.catalog.get_candy(entry.product_id, require_stock=False)
                price = float(candy.unit_price)
                self._check_price(entry.price, price, entry.name)
                line = PlannedLine(CANDY, candy.id, candy.name, entry.quantity, price)
                return [line], price * entry.quantity

            if isinstance(entry, ConfiguredBasketEntry):
                return self._price_configured(entry)
        except CatalogItemNotFound as e:
            raise InvalidOrder(f"{e.kind.lower()} {e.item_id} is not available", e.details)

        raise TypeError(f"Unknown cart entry type: {type(entry).__name__}")

    def _price_configured(self, entry: ConfiguredBasketEntry) -> Tuple[List[PlannedLine], float]:
        basket = self.catalog.get_basket(entry.basket_id)
        pairs = [
            (self.catalog.get_candy(line.candy_id, require_stock=False), line.quantity)
            for line in entry.selection
        ]
        engine = CustomizationEngine.restore(basket, pairs)
        try:
            # Line name comes from the catalog basket, not the client record
            confirmed = engine.confirm()
        except LimitExceeded as e:
            raise InvalidOrder("customization limit exceeded", e.details)

        for submitted, (candy, _) in zip(entry.selection, pairs):
            self._check_price(submitted.unit_price, float(candy.unit_price), candy.name)
        self._check_price(entry.final_total, confirmed.final_total, confirmed.name)

        lines = [PlannedLine(BASKET, basket.id, confirmed.name, 1, confirmed.final_total)]
        lines.extend(
            PlannedLine(CANDY, line.candy_id, line.name, line.quantity, line.unit_price)
            for line in confirmed.selection
        )
        return lines, confirmed.final_total

    def _check_price(self, submitted: float, expected: float, name: str) -> None:
        if abs(submitted - expected) > self.price_tolerance:
            raise InvalidOrder(f"price of {name} changed",
                               {'submitted': submitted, 'expected': expected})
