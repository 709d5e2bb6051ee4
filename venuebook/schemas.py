from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class UserResponse(BaseModel):
    id: int
    email: str
    name: Optional[str] = None
    phone: Optional[str] = None
    role: str
    is_verified: bool = False
    business_name: Optional[str] = None
    business_description: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


def user_payload(user) -> dict:
    """Public representation of a user (never includes the password hash)"""
    return UserResponse.model_validate(user).model_dump()
