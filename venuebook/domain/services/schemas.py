"""Service domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel


class ServicePrice(BaseModel):
    amount: Optional[float] = None
    currency: Optional[str] = None
    unit: Optional[str] = None


class ServiceCreate(BaseModel):
    """Schema for creating or updating a service"""

    title: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    price: Optional[ServicePrice] = None
    duration: Optional[int] = None
    locationOptions: Optional[list[str]] = None
    capacity: Optional[int] = None
    isPaused: Optional[bool] = None


class AvailabilitySlot(BaseModel):
    dayOfWeek: str
    startTime: str
    endTime: str


class AvailabilityReplace(BaseModel):
    availability: list[AvailabilitySlot] = []


class CustomFormUpdate(BaseModel):
    formSchema: Optional[dict[str, Any]] = None


class ServiceResponse(BaseModel):
    id: int
    provider_id: int
    title: str
    category: str
    description: str
    price_amount: float
    price_currency: Optional[str] = None
    price_unit: Optional[str] = None
    duration: int
    location_options: Optional[list] = None
    capacity: Optional[int] = None
    is_paused: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
