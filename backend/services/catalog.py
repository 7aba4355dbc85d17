# backend/services/catalog.py
from typing import Iterable, List, Optional, Tuple
from sqlalchemy.orm import Session, joinedload

from exceptions import CatalogItemNotFound
from models.catalog import Basket, BasketItem, Candy, PaymentType
from schemas.cart import SelectionLine


# Read-only queries over baskets, candies and payment types
class CatalogStore:
    def __init__(self, db: Session):
        self.db = db

    def active_baskets(self) -> List[Basket]:
        return (
            self.db.query(Basket)
            .filter(Basket.active == True)  # noqa: E712
            .order_by(Basket.base_price.asc(), Basket.id.asc())
            .all()
        )

    def get_basket(self, basket_id: int) -> Basket:
        basket = self.db.query(Basket).filter(Basket.id == basket_id, Basket.active == True).first()  # noqa: E712
        if not basket:
            raise CatalogItemNotFound("Basket", basket_id)
        return basket

    def basket_contents(self, basket_id: int) -> List[BasketItem]:
        return (
            self.db.query(BasketItem)
            .options(joinedload(BasketItem.candy))
            .filter(BasketItem.basket_id == basket_id)
            .order_by(BasketItem.id.asc())
            .all()
        )

    def available_candies(self) -> List[Candy]:
        # Only active candies with stock can be picked
        return (
            self.db.query(Candy)
            .filter(Candy.active == True, Candy.stock > 0)  # noqa: E712
            .order_by(Candy.name.asc())
            .all()
        )

    def get_candy(self, candy_id: int, require_stock: bool = True) -> Candy:
        query = self.db.query(Candy).filter(Candy.id == candy_id, Candy.active == True)  # noqa: E712
        if require_stock:
            query = query.filter(Candy.stock > 0)
        candy = query.first()
        if not candy:
            raise CatalogItemNotFound("Candy", candy_id)
        return candy

    def payment_types(self) -> List[PaymentType]:
        return self.db.query(PaymentType).order_by(PaymentType.id.asc()).all()

    def get_payment_type(self, payment_type_id: Optional[int]) -> PaymentType:
        payment_type = None
        if payment_type_id is not None:
            payment_type = self.db.query(PaymentType).filter(PaymentType.id == payment_type_id).first()
        if not payment_type:
            raise CatalogItemNotFound("PaymentType", payment_type_id)
        return payment_type

    def resolve_selection(self, lines: Iterable[SelectionLine]) -> List[Tuple[Candy, int]]:
        """Pair each client selection line with the current catalog candy.

        Stock is not checked here: a candy that sold out after it was picked
        can still be removed from the selection.
        """
        return [(self.get_candy(line.candy_id, require_stock=False), line.quantity) for line in lines]
