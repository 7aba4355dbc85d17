from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime

# Schema for login credentials (name + phone)
class UserLogin(BaseModel):
    name: str = Field(min_length=1)
    phone: str = Field(min_length=1)

# Schema for registration requests
class UserCreate(UserLogin):
    email: Optional[EmailStr] = None

# Output schema for user profile details
class UserResponse(BaseModel):
    id: int
    name: str
    phone: str
    email: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

# Schema for JWT authentication token response
class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
