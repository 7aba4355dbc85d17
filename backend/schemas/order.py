from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

from schemas.cart import CartEntry


# Output schema for an individual order line item
class OrderItemOut(BaseModel):
    product_type: str
    product_id: int
    product_name: str
    quantity: int
    unit_price: float
    line_total: float


# Checkout payload as submitted by the storefront
class OrderCreatePayload(BaseModel):
    total: Optional[float] = None
    payment_type_id: Optional[int] = None
    items: List[CartEntry] = []
    gift_message: Optional[str] = Field(None, max_length=500)
    delivery_address: Optional[str] = None

# Output schema representing the full order details
class OrderResponse(BaseModel):
    id: int
    status: str
    total: float
    payment_type: Optional[str] = None
    delivery_address: str
    gift_message: Optional[str] = None
    created_at: Optional[datetime] = None
    items: List[OrderItemOut]

# Schema for paginated order lists
class OrdersPage(BaseModel):
    items: List[OrderResponse]
    total: int
    page: int
    page_size: int

# Response schema for a committed order
class OrderCommitResponse(BaseModel):
    order_id: int
    total: float
    status: str
