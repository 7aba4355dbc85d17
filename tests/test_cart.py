"""Client-held cart: merging, removal, totals and the record format."""
import json

import pytest
from pydantic import ValidationError

from exceptions import InvalidCartOperation
from schemas.cart import (
    ConfiguredBasketEntry, PredefinedBasketEntry, SelectionLine, StandaloneCandyEntry,
)
from services.cart import Cart


def _basket(product_id=1, price=150.0):
    return PredefinedBasketEntry(kind="Canasta", product_id=product_id, name="Clásica", price=price)


def _candy(product_id=1, price=20.0):
    return StandaloneCandyEntry(kind="Dulce", product_id=product_id, name="Chocolate de leche", price=price)


def _configured(basket_id=1):
    return ConfiguredBasketEntry(
        kind="Canasta_Configurada",
        basket_id=basket_id,
        name="Clásica (personalizada)",
        base_price=150.0,
        extra_cost=40.0,
        final_total=190.0,
        selection=(SelectionLine(candy_id=10, name="Chocolate de leche", unit_price=20.0, quantity=2),),
    )


def test_same_predefined_product_merges():
    cart = Cart()
    cart.add_predefined(_basket())
    cart.add_predefined(_basket())

    assert len(cart) == 1
    assert cart.entries[0].quantity == 2
    assert cart.total() == 300.0


def test_basket_and_candy_with_same_id_stay_apart():
    cart = Cart()
    cart.add_predefined(_basket(product_id=1))
    cart.add_predefined(_candy(product_id=1))
    assert [entry.kind for entry in cart.entries] == ["Canasta", "Dulce"]


def test_configured_baskets_never_merge():
    cart = Cart()
    first = cart.add_configured(_configured())
    second = cart.add_configured(_configured())
    cart.add_predefined(_basket(product_id=1))

    assert len(cart) == 3
    assert first.entry_id != second.entry_id
    assert first.entry_id != "1"
    assert cart.entries[2].quantity == 1


def test_remove_by_entry_id_only():
    cart = Cart()
    configured = cart.add_configured(_configured())
    basket = cart.add_predefined(_basket())

    assert cart.remove("1") is False  # catalog id is not an entry reference
    assert len(cart) == 2

    assert cart.remove(configured.entry_id) is True
    assert [entry.entry_id for entry in cart.entries] == [basket.entry_id]


def test_total_uses_frozen_configured_price():
    cart = Cart()
    cart.add_configured(_configured())
    cart.add_predefined(_candy(price=5.0))
    cart.add_predefined(_candy(price=5.0))
    assert cart.total() == 200.0


def test_update_quantity():
    cart = Cart()
    candy = cart.add_predefined(_candy())
    configured = cart.add_configured(_configured())

    cart.update_quantity(candy.entry_id, 4)
    assert cart.entries[0].quantity == 4
    assert cart.entries[0].price == 20.0

    with pytest.raises(InvalidCartOperation):
        cart.update_quantity(configured.entry_id, 2)


def test_clear():
    cart = Cart()
    cart.add_predefined(_basket())
    cart.clear()
    assert cart.is_empty()
    assert cart.total() == 0


def test_round_trip_through_json_records():
    cart = Cart()
    cart.add_predefined(_basket())
    cart.add_configured(_configured())
    cart.add_predefined(_candy())
    cart.add_predefined(_basket())

    restored = Cart.from_records(json.loads(json.dumps(cart.to_records())))

    assert restored.entries == cart.entries
    assert restored.total() == cart.total()


def test_record_shape():
    cart = Cart()
    cart.add_configured(_configured())
    cart.add_predefined(_candy())
    configured, candy = cart.to_records()

    assert configured["tipo"] == "Canasta_Configurada"
    assert configured["id_canasta_original"] == 1
    assert configured["precio_final"] == 190.0
    assert configured["cantidad"] == 1
    assert configured["detalle_personalizado"] == [
        {"id": 10, "nombre": "Chocolate de leche", "precio": 20.0, "cantidad": 2}
    ]
    assert set(candy) == {"tipo", "entrada", "id", "nombre", "precio", "cantidad"}


def test_records_without_identifiers_get_unique_ones():
    records = [
        {"tipo": "Canasta", "id": 1, "nombre": "Clásica", "precio": 150.0, "cantidad": 1},
        {"tipo": "Dulce", "id": 2, "nombre": "Bombón", "precio": 15.0, "cantidad": 3, "entrada": "x"},
        {"tipo": "Dulce", "id": 3, "nombre": "Caramelo", "precio": 5.0, "cantidad": 1, "entrada": "x"},
    ]
    cart = Cart.from_records(records)

    ids = [entry.entry_id for entry in cart.entries]
    assert ids[0] and ids[1] == "x"
    assert len(set(ids)) == 3
    assert cart.total() == 200.0


def test_records_without_kind_are_rejected():
    # A candy record missing `tipo` must not be read as the basket with the same id
    with pytest.raises(ValidationError):
        Cart.from_records([{"id": 1, "nombre": "Chocolate de leche", "precio": 20.0, "cantidad": 1}])


def test_configured_record_without_base_price():
    cart = Cart.from_records([{
        "tipo": "Canasta_Configurada",
        "id_canasta_original": 1,
        "nombre": "Clásica",
        "precio_final": 190.0,
        "cantidad": 1,
        "detalle_personalizado": [{"id": 1, "nombre": "Chocolate de leche", "precio": 20.0, "cantidad": 2}],
    }])

    (entry,) = cart.entries
    assert isinstance(entry, ConfiguredBasketEntry)
    assert entry.base_price is None
    assert cart.total() == 190.0


def test_update_quantity_below_one():
    cart = Cart()
    candy = cart.add_predefined(_candy())

    with pytest.raises(InvalidCartOperation):
        cart.update_quantity(candy.entry_id, 0)
    assert cart.entries[0].quantity == 1
