"""Booking domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel


class BookingNotes(BaseModel):
    client: Optional[str] = None
    provider: Optional[str] = None
    internal: Optional[str] = None


class BookingCreate(BaseModel):
    """Schema for creating a service booking (serviceId) or a venue booking (venueId)"""

    serviceId: Optional[int] = None
    venueId: Optional[int] = None
    providerId: Optional[int] = None
    petId: Optional[int] = None
    startTime: Optional[str] = None
    endTime: Optional[str] = None
    location: Optional[str] = None
    notes: Optional[BookingNotes] = None
    customFormData: Optional[dict[str, Any]] = None
    # Venue bookings
    eventName: Optional[str] = None
    eventType: Optional[str] = None
    expectedAttendance: Optional[int] = None
    pricingTier: Optional[str] = None


class BookingUpdate(BaseModel):
    startTime: Optional[str] = None
    endTime: Optional[str] = None
    status: Optional[str] = None
    notes: Optional[BookingNotes] = None
    assignedStaff: Optional[int] = None


class CancelRequest(BaseModel):
    reason: Optional[str] = None


class ReviewCreate(BaseModel):
    rating: Optional[int] = None
    comment: Optional[str] = None


class ReviewResponse(BaseModel):
    id: int
    booking_id: int
    client_id: int
    provider_id: Optional[int] = None
    rating: int
    comment: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class BookingResponse(BaseModel):
    id: int
    service_id: Optional[int] = None
    venue_id: Optional[int] = None
    provider_id: Optional[int] = None
    client_id: int
    pet_id: Optional[int] = None
    assigned_staff_id: Optional[int] = None
    start_time: datetime
    end_time: datetime
    location: Optional[str] = None
    status: str
    total_price_amount: Optional[float] = None
    total_price_currency: Optional[str] = None
    payment_status: str
    client_notes: Optional[str] = None
    provider_notes: Optional[str] = None
    internal_notes: Optional[str] = None
    custom_form_data: Optional[dict] = None
    event_name: Optional[str] = None
    event_type: Optional[str] = None
    expected_attendance: Optional[int] = None
    pricing_tier: Optional[str] = None
    cancellation_reason: Optional[str] = None
    cancellation_time: Optional[datetime] = None
    cancellation_by: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
