from typing import Optional
from pydantic import BaseModel, EmailStr, Field

from storefront.schemas.user import UserResponse


class LoginRequest(BaseModel):
    """Login request schema."""
    email: EmailStr
    password: str

    class Config:
        json_schema_extra = {
            "example": {
                "email": "user@example.com",
                "password": "strongpassword123"
            }
        }


class RegisterRequest(BaseModel):
    """Register request schema."""
    name: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=6)

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Jane Doe",
                "email": "user@example.com",
                "password": "strongpassword123"
            }
        }


class AuthResponse(BaseModel):
    """Login / register response carrying the bearer token."""
    success: bool = True
    token: str
    user: UserResponse
    message: Optional[str] = None
