# backend/routes/orders.py
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Request, Query
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session, joinedload
import logging

from database import get_db
from exceptions import InvalidOrder, OrderNotFound, PersistenceError
from utils.tokenJWT import get_current_user
from utils.audit import write_log
from utils.pdf import generate_receipt_pdf, get_receipt_path
from models.users import User
from models.order import Order, OrderItem
from schemas.order import (
    OrderResponse, OrdersPage, OrderItemOut, OrderCreatePayload, OrderCommitResponse,
)
from services.cart import Cart
from services.order_commit import OrderCommitService

router = APIRouter(prefix="/orders", tags=["Orders"])
logger = logging.getLogger(__name__)

def _client_ip(request: Request):
    return request.client.host if request.client else None

# Map Order model to OrderResponse schema
def _order_to_out(order: Order) -> OrderResponse:
    items: List[OrderItemOut] = []
    for it in order.items:
        items.append(OrderItemOut(
            product_type=it.product_type,
            product_id=it.product_id,
            product_name=it.product_name,
            quantity=it.quantity,
            unit_price=it.unit_price,
            line_total=round(it.quantity * it.unit_price, 2)
        ))
    return OrderResponse(
        id=order.id,
        status=order.status,
        total=round(order.total, 2),
        payment_type=order.payment_type.name if order.payment_type else None,
        delivery_address=order.delivery_address,
        gift_message=order.gift_message,
        created_at=order.created_at,
        items=items
    )

# Load an order owned by the user, with items and payment type
def _get_own_order(db: Session, order_id: int, user: User) -> Order:
    order = db.query(Order).options(
        joinedload(Order.items), joinedload(Order.payment_type)
    ).filter(Order.id == order_id).first()
    if not order or order.user_id != user.id:
        raise OrderNotFound(order_id)
    return order

# Checkout: persist the client cart as a pending order
@router.post("", response_model=OrderCommitResponse, status_code=201)
def create_order(
    payload: OrderCreatePayload,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    user_id = current_user.id
    cart = Cart(payload.items)
    service = OrderCommitService(db)

    try:
        order_id = service.commit(
            user_id,
            cart,
            payment_type_id=payload.payment_type_id,
            delivery_address=payload.delivery_address,
            gift_message=payload.gift_message,
            client_total=payload.total,
        )
    except InvalidOrder as e:
        write_log(db, user_id=user_id, action="ORDER_COMMIT", resource="orders", status="FAIL",
                  ip=_client_ip(request), meta=e.details)
        raise HTTPException(status_code=400, detail=e.message)
    except PersistenceError:
        write_log(db, user_id=user_id, action="ORDER_COMMIT", resource="orders", status="FAIL",
                  ip=_client_ip(request), meta={"reason": "persistence"})
        # Database detail stays in the server log
        raise HTTPException(status_code=500, detail="The order could not be processed, please try again")

    order = db.query(Order).filter(Order.id == order_id).first()
    write_log(db, user_id=user_id, action="ORDER_COMMIT", resource="orders", status="SUCCESS",
              ip=_client_ip(request), meta={"order_id": order_id, "total": order.total})

    return OrderCommitResponse(order_id=order.id, total=round(order.total, 2), status=order.status)


# List own orders, newest first
@router.get("", response_model=OrdersPage)
def list_my_orders(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    q = db.query(Order).filter(Order.user_id == current_user.id)
    total = q.count()
    rows = q.options(
        joinedload(Order.items), joinedload(Order.payment_type)
    ).order_by(Order.created_at.desc(), Order.id.desc()).offset((page - 1) * page_size).limit(page_size).all()
    items = [_order_to_out(o) for o in rows]
    return {"items": items, "total": total, "page": page, "page_size": page_size}


# Get details of a specific order
@router.get("/{order_id}", response_model=OrderResponse)
def get_order_detail(
    order_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    try:
        return _order_to_out(_get_own_order(db, order_id, current_user))
    except OrderNotFound:
        raise HTTPException(status_code=404, detail="Order not found")


# Download the PDF receipt, rendering it on first request
@router.get("/{order_id}/receipt")
def download_receipt(
    order_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    try:
        order = _get_own_order(db, order_id, current_user)
    except OrderNotFound:
        raise HTTPException(status_code=404, detail="Order not found")

    pdf_path = get_receipt_path(order.id)
    if not pdf_path.exists():
        try:
            generate_receipt_pdf(order, list(order.items), pdf_path, user=current_user)
        except Exception as e:
            logger.exception("Receipt generation failed for order %s: %s", order.id, e)
            raise HTTPException(status_code=500, detail="Could not generate receipt")

    write_log(db, user_id=current_user.id, action="RECEIPT_DOWNLOAD", resource="orders", status="SUCCESS",
              ip=_client_ip(request), meta={"order_id": order.id})

    return FileResponse(
        path=str(pdf_path),
        media_type="application/pdf",
        filename=f"Pedido_{order.id}.pdf",
    )
