from datetime import datetime
from pydantic import BaseModel, EmailStr


class UserResponse(BaseModel):
    """Schema for user response. Never carries the password hash."""
    id: str
    name: str
    email: EmailStr
    role: str
    email_verified: bool = False
    created_at: datetime

    class Config:
        from_attributes = True
        json_schema_extra = {
            "example": {
                "id": "user123",
                "name": "Jane Doe",
                "email": "user@example.com",
                "role": "customer",
                "email_verified": False,
                "created_at": "2024-01-01T00:00:00"
            }
        }
