from pydantic import BaseModel
from typing import List, Optional

# Candy as shown in the shop
class CandyOut(BaseModel):
    id: int
    name: str
    unit_price: float
    type: Optional[str] = None
    stock: int

    class Config:
        from_attributes = True

# One line of a basket's fixed content
class BasketContentOut(BaseModel):
    candy_id: int
    name: str
    quantity: int

# Basket metadata
class BasketOut(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    base_price: float
    size: Optional[str] = None
    customization_limit: int

    class Config:
        from_attributes = True

# Basket metadata plus fixed content
class BasketDetail(BasketOut):
    contents: List[BasketContentOut] = []

class PaymentTypeOut(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True
