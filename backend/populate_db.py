import os
import sys
import logging

# Add 'backend' folder to Python path
sys.path.append(os.path.abspath(os.path.dirname(__file__)))

from sqlalchemy.orm import Session

from database import SessionLocal, init_db
from models.catalog import Basket, BasketItem, Candy, PaymentType

logger = logging.getLogger(__name__)

# Configuration
CANDIES = [
    # name, unit price, type, stock
    ("Chocolate de leche", 20.00, "chocolate", 120),
    ("Bombón relleno", 15.00, "chocolate", 80),
    ("Caramelo de leche", 5.00, "caramelo", 300),
    ("Gomitas de fruta", 8.00, "gomita", 200),
    ("Cajeta de coco", 12.00, "tradicional", 60),
    ("Turrón de maní", 18.00, "tradicional", 0),
]

BASKETS = [
    # name, description, base price, size, customization limit, fixed content
    ("Clásica", "Selección tradicional de dulces", 150.00, "Mediana", 3,
     [("Chocolate de leche", 2), ("Caramelo de leche", 5)]),
    ("Dulce Amor", "Chocolates y bombones para regalar", 250.00, "Grande", 5,
     [("Bombón relleno", 4), ("Chocolate de leche", 3)]),
    ("Pequeño Detalle", "Canasta pequeña sin personalización", 90.00, "Pequeña", 0,
     [("Gomitas de fruta", 3), ("Cajeta de coco", 1)]),
]

PAYMENT_TYPES = ["Efectivo", "Tarjeta", "Transferencia"]
# End Configuration


def populate(session: Session) -> None:
    """Seeds an empty catalog. Existing rows are left untouched."""
    if session.query(Basket).count() > 0:
        logger.info("Catalog already populated, skipping")
        return

    candies = {}
    for name, price, kind, stock in CANDIES:
        candy = Candy(name=name, unit_price=price, type=kind, stock=stock, active=True)
        session.add(candy)
        candies[name] = candy

    for name, description, price, size, limit, contents in BASKETS:
        basket = Basket(name=name, description=description, base_price=price, size=size,
                        customization_limit=limit, active=True)
        basket.items = [BasketItem(candy=candies[candy_name], quantity=qty) for candy_name, qty in contents]
        session.add(basket)

    for label in PAYMENT_TYPES:
        session.add(PaymentType(name=label))

    session.commit()
    logger.info("Inserted %d candies, %d baskets, %d payment types", len(CANDIES), len(BASKETS), len(PAYMENT_TYPES))


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    init_db()
    session = SessionLocal()
    try:
        populate(session)
    finally:
        session.close()
