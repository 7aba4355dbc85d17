# backend/routes/cart.py
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from database import get_db
from exceptions import CatalogItemNotFound, CartEntryNotFound, InvalidCartOperation
from utils.tokenJWT import get_current_user
from utils.audit import write_log
from models.users import User
from schemas.cart import (
    CartIn, CartOut, CartAddItem, CartRemoveItem, CartUpdateItem,
    PredefinedBasketEntry, StandaloneCandyEntry, CANDY_KIND, PREDEFINED_KIND,
)
from services.cart import Cart
from services.catalog import CatalogStore

# The cart lives in the browser session: every call receives the current
# cart and answers with the new one.
router = APIRouter(prefix="/cart", tags=["Cart"])

def cart_to_out(cart: Cart) -> CartOut:
    return CartOut(carrito=cart.to_records(), total=cart.total())

@router.post("/summary", response_model=CartOut)
def cart_summary(payload: CartIn, current_user: User = Depends(get_current_user)):
    return cart_to_out(Cart(payload.carrito))

@router.post("/add", response_model=CartOut)
def add_to_cart(
    payload: CartAddItem,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    catalog = CatalogStore(db)
    cart = Cart(payload.carrito)

    # Price always comes from the catalog, never from the client
    try:
        if payload.tipo == PREDEFINED_KIND:
            basket = catalog.get_basket(payload.id)
            product = PredefinedBasketEntry(kind=PREDEFINED_KIND, product_id=basket.id, name=basket.name, price=basket.base_price)
        else:
            candy = catalog.get_candy(payload.id)
            product = StandaloneCandyEntry(kind=CANDY_KIND, product_id=candy.id, name=candy.name, price=candy.unit_price)
    except CatalogItemNotFound as e:
        raise HTTPException(status_code=404, detail=e.message)

    entry = cart.add_predefined(product)
    out = cart_to_out(cart)

    write_log(
        db,
        user_id=current_user.id,
        action="CART_ADD",
        resource="cart",
        status="SUCCESS",
        ip=request.client.host if request.client else None,
        meta={"kind": entry.kind, "product_id": entry.product_id, "qty": entry.quantity, "total": out.total},
    )
    return out

@router.post("/quantity", response_model=CartOut)
def update_cart_item(payload: CartUpdateItem, current_user: User = Depends(get_current_user)):
    cart = Cart(payload.carrito)
    try:
        cart.update_quantity(payload.entrada, payload.cantidad)
    except CartEntryNotFound:
        raise HTTPException(status_code=404, detail="Cart entry not found")
    except InvalidCartOperation as e:
        raise HTTPException(status_code=400, detail=e.message)
    return cart_to_out(cart)

@router.post("/remove", response_model=CartOut)
def remove_cart_item(
    payload: CartRemoveItem,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    cart = Cart(payload.carrito)
    # Unknown references leave the cart as it was
    removed = cart.remove(payload.entrada)
    out = cart_to_out(cart)

    if removed:
        write_log(
            db,
            user_id=current_user.id,
            action="CART_REMOVE",
            resource="cart",
            status="SUCCESS",
            ip=request.client.host if request.client else None,
            meta={"entry_id": payload.entrada, "cart_items": len(cart), "total": out.total},
        )
    return out
