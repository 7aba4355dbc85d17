"""Order commit: validation, server-side pricing and all-or-nothing writes."""
import pytest
from sqlalchemy.exc import OperationalError

from exceptions import InvalidOrder, PersistenceError
from models.catalog import Basket, Candy
from models.order import Order, OrderItem
from models.users import User
from schemas.cart import PredefinedBasketEntry, StandaloneCandyEntry
from services.cart import Cart
from services.catalog import CatalogStore
from services.customization import CustomizationEngine
from services.order_commit import OrderCommitService


@pytest.fixture
def user(db):
    customer = User(name="Carlos Ruiz", phone="55554444")
    db.add(customer)
    db.commit()
    return customer


@pytest.fixture
def service(db):
    return OrderCommitService(db, price_tolerance=0.01)


def _configured_clasica(db, catalog, chocolate_units=2):
    store = CatalogStore(db)
    engine = CustomizationEngine(store.get_basket(catalog["baskets"]["Clásica"]))
    chocolate = store.get_candy(catalog["candies"]["Chocolate de leche"])
    for _ in range(chocolate_units):
        engine.add_extra(chocolate)
    return engine.confirm()


def test_configured_basket_end_to_end(db, catalog, user, service):
    configured = _configured_clasica(db, catalog)
    assert configured.extra_cost == 40.00
    assert configured.final_total == 190.00

    cart = Cart()
    cart.add_configured(configured)
    order_id = service.commit(user.id, cart, payment_type_id=1, delivery_address="Del parque 2c al sur",
                              client_total=190.00)

    order = db.query(Order).filter(Order.id == order_id).one()
    assert order.total == 190.00
    assert order.status == "pending"
    assert order.user_id == user.id
    assert [(it.product_type, it.quantity, it.unit_price) for it in order.items] == [
        ("Basket", 1, 190.00),
        ("Candy", 2, 20.00),
    ]
    assert order.items[1].product_id == catalog["candies"]["Chocolate de leche"]
    assert cart.is_empty()


def test_line_items_follow_cart_order(db, catalog, user, service):
    cart = Cart()
    cart.add_predefined(StandaloneCandyEntry(kind="Dulce", product_id=catalog["candies"]["Caramelo de leche"],
                                             name="Caramelo de leche", price=5.0))
    cart.add_configured(_configured_clasica(db, catalog, chocolate_units=1))
    cart.add_predefined(PredefinedBasketEntry(kind="Canasta", product_id=catalog["baskets"]["Dulce Amor"],
                                              name="Dulce Amor", price=250.0))
    cart.add_predefined(StandaloneCandyEntry(kind="Dulce", product_id=catalog["candies"]["Caramelo de leche"],
                                             name="Caramelo de leche", price=5.0))

    order_id = service.commit(user.id, cart, 2, "Managua", gift_message="  Feliz cumpleaños ")

    order = db.query(Order).filter(Order.id == order_id).one()
    assert order.total == 10.0 + 170.0 + 250.0
    assert order.gift_message == "Feliz cumpleaños"
    assert [(it.position, it.product_type, it.product_name, it.quantity) for it in order.items] == [
        (0, "Candy", "Caramelo de leche", 2),
        (1, "Basket", "Clásica (personalizada)", 1),
        (2, "Candy", "Chocolate de leche", 1),
        (3, "Basket", "Dulce Amor", 1),
    ]


@pytest.mark.parametrize("payment_type_id,address,reason", [
    (1, "", "delivery address is required"),
    (1, "   ", "delivery address is required"),
    (None, "Managua", "payment type is required"),
    (99, "Managua", "unknown payment type"),
])
def test_missing_checkout_fields(db, catalog, user, service, payment_type_id, address, reason):
    cart = Cart()
    cart.add_predefined(PredefinedBasketEntry(kind="Canasta", product_id=catalog["baskets"]["Clásica"], name="Clásica", price=150.0))

    with pytest.raises(InvalidOrder) as exc:
        service.commit(user.id, cart, payment_type_id, address)

    assert exc.value.reason == reason
    assert db.query(Order).count() == 0
    assert len(cart) == 1


def test_empty_cart_is_rejected(db, user, service):
    with pytest.raises(InvalidOrder):
        service.commit(user.id, Cart(), 1, "Managua")
    assert db.query(Order).count() == 0


def test_zero_total_is_rejected(db, user, service):
    sample = Candy(name="Muestra gratis", unit_price=0.0, type="muestra", stock=10)
    db.add(sample)
    db.commit()
    cart = Cart()
    cart.add_predefined(StandaloneCandyEntry(kind="Dulce", product_id=sample.id, name=sample.name, price=0.0))

    with pytest.raises(InvalidOrder) as exc:
        service.commit(user.id, cart, 1, "Managua")
    assert "greater than zero" in exc.value.reason


def test_client_prices_are_checked_against_catalog(db, catalog, user, service):
    cart = Cart()
    cart.add_predefined(PredefinedBasketEntry(kind="Canasta", product_id=catalog["baskets"]["Clásica"], name="Clásica", price=1.0))

    with pytest.raises(InvalidOrder) as exc:
        service.commit(user.id, cart, 1, "Managua")
    assert exc.value.details["expected"] == 150.0
    assert db.query(Order).count() == 0


def test_client_total_mismatch_is_rejected(db, catalog, user, service):
    cart = Cart()
    cart.add_predefined(PredefinedBasketEntry(kind="Canasta", product_id=catalog["baskets"]["Clásica"], name="Clásica", price=150.0))

    with pytest.raises(InvalidOrder):
        service.commit(user.id, cart, 1, "Managua", client_total=100.0)
    assert db.query(Order).count() == 0


def test_forged_over_limit_customization_is_rejected(db, catalog, user, service):
    configured = _configured_clasica(db, catalog, chocolate_units=3)
    chocolate = configured.selection[0]
    forged = configured.model_copy(update={
        "selection": (chocolate.model_copy(update={"quantity": 5}),),
        "extra_cost": 100.0,
        "final_total": 250.0,
    })
    cart = Cart()
    cart.add_configured(forged)

    with pytest.raises(InvalidOrder) as exc:
        service.commit(user.id, cart, 1, "Managua")
    assert exc.value.reason == "customization limit exceeded"


def test_configured_basket_line_is_named_from_catalog(db, catalog, user, service):
    configured = _configured_clasica(db, catalog)
    cart = Cart()
    cart.add_configured(configured.model_copy(update={"name": "Canasta Premium de Oro"}))

    order_id = service.commit(user.id, cart, 1, "Managua")

    basket_line = db.query(OrderItem).filter(OrderItem.order_id == order_id,
                                             OrderItem.product_type == "Basket").one()
    assert basket_line.product_name == "Clásica (personalizada)"


def test_inactive_basket_is_rejected(db, catalog, user, service):
    basket = db.query(Basket).filter(Basket.id == catalog["baskets"]["Dulce Amor"]).one()
    basket.active = False
    db.commit()
    cart = Cart()
    cart.add_predefined(PredefinedBasketEntry(kind="Canasta", product_id=basket.id, name="Dulce Amor", price=250.0))

    with pytest.raises(InvalidOrder):
        service.commit(user.id, cart, 1, "Managua")


def test_failed_line_item_rolls_back_whole_order(db, catalog, user, service, monkeypatch):
    cart = Cart()
    cart.add_configured(_configured_clasica(db, catalog))
    cart.add_predefined(PredefinedBasketEntry(kind="Canasta", product_id=catalog["baskets"]["Dulce Amor"],
                                              name="Dulce Amor", price=250.0))

    # flush #1 writes the order, #2 and #3 the configured basket lines, #4 fails
    real_flush = db.flush
    calls = {"n": 0}

    def failing_flush(*args, **kwargs):
        calls["n"] += 1
        if calls["n"] == 4:
            raise OperationalError("INSERT INTO order_items", {}, Exception("disk I/O error"))
        return real_flush(*args, **kwargs)

    monkeypatch.setattr(db, "flush", failing_flush)

    with pytest.raises(PersistenceError):
        service.commit(user.id, cart, 1, "Managua")

    assert calls["n"] == 4
    assert db.query(Order).count() == 0
    assert db.query(OrderItem).count() == 0
    assert len(cart) == 2
