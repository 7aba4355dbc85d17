# backend/routes/customization.py
from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from database import get_db
from exceptions import CatalogItemNotFound, LimitExceeded, SelectionEntryNotFound
from utils.tokenJWT import get_current_user
from utils.audit import write_log
from models.users import User
from schemas.cart import CartOut, CustomizationOut, SelectionChange, SelectionConfirm, SelectionIn
from services.cart import Cart
from services.catalog import CatalogStore
from services.customization import CustomizationEngine
from routes.cart import cart_to_out

router = APIRouter(prefix="/customization", tags=["Customization"])

def _load_engine(db: Session, basket_id: int, payload: SelectionIn) -> CustomizationEngine:
    # Rebuild the client's selection with current catalog prices
    catalog = CatalogStore(db)
    try:
        basket = catalog.get_basket(basket_id)
        return CustomizationEngine.restore(basket, catalog.resolve_selection(payload.seleccion))
    except CatalogItemNotFound as e:
        raise HTTPException(status_code=404, detail=e.message)

def _state_out(engine: CustomizationEngine) -> CustomizationOut:
    totals = engine.compute_totals()
    return CustomizationOut(
        basket_id=engine.basket.id,
        seleccion=[line.model_dump(by_alias=True) for line in engine.selection()],
        base_price=totals.base_price,
        extra_cost=totals.extra_cost,
        final_total=totals.final_total,
        remaining_capacity=engine.remaining_capacity(),
        can_confirm=engine.can_confirm(),
    )

def _log(db: Session, request: Request, user: User, action: str, status_: str, meta: dict):
    write_log(db, user_id=user.id, action=action, resource="customization", status=status_,
              ip=request.client.host if request.client else None, meta=meta)

# Current totals for a selection
@router.post("/{basket_id}", response_model=CustomizationOut)
def customization_state(
    basket_id: int,
    payload: SelectionIn,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return _state_out(_load_engine(db, basket_id, payload))

@router.post("/{basket_id}/add", response_model=CustomizationOut)
def add_extra(
    basket_id: int,
    payload: SelectionChange,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    engine = _load_engine(db, basket_id, payload)
    try:
        candy = CatalogStore(db).get_candy(payload.candy_id)
    except CatalogItemNotFound as e:
        raise HTTPException(status_code=404, detail=e.message)

    try:
        engine.add_extra(candy)
    except LimitExceeded as e:
        _log(db, request, current_user, "CUSTOMIZE_ADD", "FAIL", e.details)
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Customization limit reached")

    out = _state_out(engine)
    _log(db, request, current_user, "CUSTOMIZE_ADD", "SUCCESS",
         {"basket_id": basket_id, "candy_id": candy.id, "remaining": out.remaining_capacity})
    return out

@router.post("/{basket_id}/remove", response_model=CustomizationOut)
def remove_extra(
    basket_id: int,
    payload: SelectionChange,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    engine = _load_engine(db, basket_id, payload)
    try:
        engine.remove_extra(payload.candy_id)
    except SelectionEntryNotFound as e:
        raise HTTPException(status_code=404, detail=e.message)

    out = _state_out(engine)
    _log(db, request, current_user, "CUSTOMIZE_REMOVE", "SUCCESS",
         {"basket_id": basket_id, "candy_id": payload.candy_id, "remaining": out.remaining_capacity})
    return out

# Freeze the selection and append it to the cart as a new entry
@router.post("/{basket_id}/confirm", response_model=CartOut)
def confirm_customization(
    basket_id: int,
    payload: SelectionConfirm,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    engine = _load_engine(db, basket_id, payload)
    cart = Cart(payload.carrito)
    try:
        configured = engine.confirm()
    except LimitExceeded as e:
        _log(db, request, current_user, "CUSTOMIZE_CONFIRM", "FAIL", e.details)
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Customization limit exceeded")

    added = cart.add_configured(configured)
    out = cart_to_out(cart)
    _log(db, request, current_user, "CUSTOMIZE_CONFIRM", "SUCCESS",
         {"basket_id": basket_id, "entry_id": added.entry_id, "final_total": added.final_total})
    return out
