"""Booking router - FastAPI endpoints for bookings and reviews"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user, require_roles
from ...database import get_db
from ...email_service import (
    notify,
    send_booking_cancelled_email,
    send_booking_completed_email,
    send_booking_confirmed_email,
    send_new_booking_notification,
)
from ...models import ROLE_CLIENT, User
from .schemas import BookingCreate, BookingUpdate, CancelRequest, ReviewCreate, ReviewResponse
from .service import BookingService, booking_payload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookings", tags=["Bookings"])
reviews_router = APIRouter(prefix="/reviews", tags=["Bookings"])


def get_booking_service(db: Session = Depends(get_db)) -> BookingService:
    """Dependency injection for BookingService"""
    return BookingService(db)


@router.get("")
async def list_bookings(
    status: Optional[str] = Query(None),
    startDate: Optional[str] = Query(None),
    endDate: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    """Bookings visible to the caller, newest start time first"""
    bookings = service.list_bookings(current_user, status, startDate, endDate)
    return {"bookings": [booking_payload(b) for b in bookings]}


@router.get("/calendar")
async def get_booking_calendar(
    view: str = Query("month"),
    date: Optional[str] = Query(None, description="Anchor date, YYYY-MM-DD"),
    current_user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    return service.get_calendar(current_user, view, date)


@router.get("/{booking_id}")
async def get_booking(
    booking_id: int,
    current_user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    booking = service.get_booking(booking_id, current_user)
    return {"booking": booking_payload(booking, detailed=True)}


@router.post("", status_code=201)
async def create_booking(
    data: BookingCreate,
    current_user: User = Depends(require_roles(ROLE_CLIENT)),
    service: BookingService = Depends(get_booking_service),
):
    booking = service.create_booking(data, current_user)
    await notify(send_new_booking_notification, booking)
    return {"message": "Booking created successfully", "booking": booking_payload(booking)}


@router.put("/{booking_id}")
async def update_booking(
    booking_id: int,
    data: BookingUpdate,
    current_user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    booking, previous_status = service.update_booking(booking_id, data, current_user)
    if booking.status == "confirmed" and previous_status != "confirmed":
        await notify(send_booking_confirmed_email, booking)
    return {"message": "Booking updated successfully", "booking": booking_payload(booking)}


@router.put("/{booking_id}/cancel")
async def cancel_booking(
    booking_id: int,
    data: Optional[CancelRequest] = None,
    current_user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    reason = data.reason if data else None
    booking, recipient = service.cancel_booking(booking_id, reason, current_user)
    if recipient is not None:
        await notify(send_booking_cancelled_email, booking, recipient)
    return {"message": "Booking cancelled successfully", "booking": booking_payload(booking)}


@router.put("/{booking_id}/complete")
async def complete_booking(
    booking_id: int,
    current_user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    booking = service.complete_booking(booking_id, current_user)
    await notify(send_booking_completed_email, booking)
    return {"message": "Booking marked as completed", "booking": booking_payload(booking)}


@router.post("/{booking_id}/review", status_code=201)
async def add_review(
    booking_id: int,
    data: ReviewCreate,
    current_user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    review = service.add_review(booking_id, data, current_user)
    return {"message": "Review added successfully", "review": ReviewResponse.model_validate(review)}


@reviews_router.get("/provider/{provider_id}")
async def get_provider_reviews(
    provider_id: int,
    service: BookingService = Depends(get_booking_service),
):
    reviews = service.provider_reviews(provider_id)
    average = round(sum(r["rating"] for r in reviews) / len(reviews), 2) if reviews else None
    return {"reviews": reviews, "averageRating": average, "count": len(reviews)}
