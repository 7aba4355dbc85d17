# backend/models/users.py
from sqlalchemy import Column, Integer, String, DateTime, UniqueConstraint, func
from database import Base

# Represents a shop customer identified by name + phone
class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    phone = Column(String, nullable=False)
    email = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        # The same person cannot register twice with the same phone
        UniqueConstraint("name", "phone", name="uq_user_name_phone"),
    )
