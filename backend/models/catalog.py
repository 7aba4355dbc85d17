# backend/models/catalog.py
from sqlalchemy import Column, Integer, String, Float, Boolean, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from database import Base

# Candy
# Single catalog candy. Stock is informative only: ordering does not decrement it.
class Candy(Base):
    __tablename__ = "candies"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    unit_price = Column(Float, CheckConstraint("unit_price >= 0"), nullable=False)
    type = Column(String, nullable=True) # e.g. chocolate, caramelo, gomita
    active = Column(Boolean, default=True, nullable=False)
    stock = Column(Integer, CheckConstraint("stock >= 0"), default=0, nullable=False)


# Predefined basket with a fixed content and an allowance of extra candies
class Basket(Base):
    __tablename__ = "baskets"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    description = Column(String, nullable=True)
    base_price = Column(Float, CheckConstraint("base_price >= 0"), nullable=False)
    size = Column(String, nullable=True)
    # Max number of extra candy units a customer may add
    customization_limit = Column(Integer, CheckConstraint("customization_limit >= 0"), default=0, nullable=False)
    active = Column(Boolean, default=True, nullable=False)

    items = relationship("BasketItem", back_populates="basket", cascade="all, delete-orphan",
                         order_by="BasketItem.id")


# One candy (with quantity) of a basket's fixed content
class BasketItem(Base):
    __tablename__ = "basket_items"

    id = Column(Integer, primary_key=True, index=True)
    basket_id = Column(Integer, ForeignKey("baskets.id"), index=True, nullable=False)
    candy_id = Column(Integer, ForeignKey("candies.id"), nullable=False)
    quantity = Column(Integer, CheckConstraint("quantity > 0"), nullable=False, default=1)

    basket = relationship("Basket", back_populates="items")
    candy = relationship("Candy")


# Payment method label. No payment is processed, the label is stored on the order.
class PaymentType(Base):
    __tablename__ = "payment_types"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, unique=True)
