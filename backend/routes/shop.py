from typing import List
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from database import get_db
from exceptions import CatalogItemNotFound
from schemas.catalog import BasketOut, BasketDetail, BasketContentOut, CandyOut, PaymentTypeOut
from services.catalog import CatalogStore

router = APIRouter(
    prefix="/shop",
    tags=["Shop"]
)

# List active baskets, cheapest first
@router.get("/baskets", response_model=List[BasketOut])
def list_baskets(db: Session = Depends(get_db)):
    return CatalogStore(db).active_baskets()

# Basket metadata with its fixed content
@router.get("/baskets/{basket_id}", response_model=BasketDetail)
def get_basket(basket_id: int, db: Session = Depends(get_db)):
    catalog = CatalogStore(db)
    try:
        basket = catalog.get_basket(basket_id)
    except CatalogItemNotFound:
        raise HTTPException(status_code=404, detail="Basket not found")

    contents = [
        BasketContentOut(candy_id=it.candy_id, name=it.candy.name if it.candy else "", quantity=it.quantity)
        for it in catalog.basket_contents(basket.id)
    ]
    return BasketDetail(
        id=basket.id,
        name=basket.name,
        description=basket.description,
        base_price=basket.base_price,
        size=basket.size,
        customization_limit=basket.customization_limit,
        contents=contents,
    )

# Active candies with stock, available as extras or standalone
@router.get("/candies", response_model=List[CandyOut])
def list_candies(db: Session = Depends(get_db)):
    return CatalogStore(db).available_candies()

@router.get("/payment-types", response_model=List[PaymentTypeOut])
def list_payment_types(db: Session = Depends(get_db)):
    return CatalogStore(db).payment_types()
