"""Booking service - Business logic for service and venue bookings"""

import logging
from datetime import datetime
from typing import Any, Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...config import DEFAULT_CURRENCY, VENUE_DEFAULT_CURRENCY
from ...models import BOOKING_STATUSES, ROLE_ADMIN, Booking, Pet, Review, Service, User, Venue
from ...security_utils import strip_html
from ...shared.validators import parse_datetime, utcnow
from . import calendar
from .repository import BookingRepository
from .schemas import BookingCreate, BookingResponse, BookingUpdate, ReviewCreate, ReviewResponse

logger = logging.getLogger(__name__)

PRICING_TIERS = ("commercial", "community", "standard")


def booking_payload(booking: Booking, detailed: bool = False) -> dict[str, Any]:
    data = BookingResponse.model_validate(booking).model_dump()
    if booking.service is not None:
        data["service"] = {
            "id": booking.service.id,
            "title": booking.service.title,
            "category": booking.service.category,
            "duration": booking.service.duration,
        }
    if booking.venue is not None:
        data["venue"] = {"id": booking.venue.id, "name": booking.venue.name}
    if detailed:
        data["review"] = (
            ReviewResponse.model_validate(booking.review).model_dump() if booking.review else None
        )
        if booking.client is not None:
            data["client"] = {
                "id": booking.client.id,
                "name": booking.client.name,
                "email": booking.client.email,
                "phone": booking.client.phone,
            }
    return data


def _parse_window(start_value, end_value) -> tuple[datetime, datetime]:
    try:
        start = parse_datetime(start_value)
        end = parse_datetime(end_value)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Invalid date: {e}") from e
    if end <= start:
        raise HTTPException(status_code=400, detail="End time must be after start time")
    return start, end


class BookingService:
    """Service layer for booking business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = BookingRepository()

    @staticmethod
    def is_provider_side(booking: Booking, user: User) -> bool:
        return user.role == ROLE_ADMIN or booking.provider_id == user.id

    def list_bookings(
        self,
        user: User,
        status: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> list[Booking]:
        start = end = None
        # The date filter only applies when both ends are given
        if start_date and end_date:
            start, end = _parse_window(start_date, end_date)
        return self.repo.list_bookings(self.db, user, status=status, start=start, end=end)

    def get_booking(self, booking_id: int, user: User) -> Booking:
        booking = self.repo.get_booking(self.db, booking_id)
        if not booking:
            raise HTTPException(status_code=404, detail="Booking not found")
        if user.role != ROLE_ADMIN and user.id not in (booking.client_id, booking.provider_id):
            raise HTTPException(status_code=403, detail="Not authorized to access this booking")
        return booking

    def _check_pet(self, pet_id: Optional[int], user: User) -> Optional[int]:
        if pet_id is None:
            return None
        pet = self.db.query(Pet).filter(Pet.id == pet_id).first()
        if not pet or pet.owner_id != user.id:
            raise HTTPException(status_code=404, detail="Pet not found")
        return pet.id

    def create_booking(self, data: BookingCreate, user: User) -> Booking:
        if data.venueId is not None:
            return self.create_venue_booking(data, user)

        if not data.serviceId or not data.startTime or not data.endTime or not data.location:
            raise HTTPException(
                status_code=400,
                detail="Missing required fields: serviceId, startTime, endTime, and location are required",
            )

        service = self.db.query(Service).filter(Service.id == data.serviceId).first()
        if not service:
            raise HTTPException(status_code=404, detail="Service not found")
        if data.providerId is not None and data.providerId != service.provider_id:
            if not self.db.query(User.id).filter(User.id == data.providerId).first():
                raise HTTPException(status_code=404, detail="Provider not found")
            raise HTTPException(status_code=400, detail="providerId does not match the service provider")

        start, end = _parse_window(data.startTime, data.endTime)
        notes = data.notes

        booking = self.repo.create_booking(
            self.db,
            service_id=service.id,
            provider_id=service.provider_id,
            client_id=user.id,
            pet_id=self._check_pet(data.petId, user),
            start_time=start,
            end_time=end,
            location=data.location,
            status="pending",
            total_price_amount=service.price_amount,
            total_price_currency=service.price_currency or DEFAULT_CURRENCY,
            payment_status="pending",
            client_notes=strip_html(notes.client) if notes else None,
            provider_notes=strip_html(notes.provider) if notes else None,
            internal_notes=strip_html(notes.internal) if notes else None,
            custom_form_data=data.customFormData,
        )
        logger.info(f"Booking {booking.id} created for service {service.id} by client {user.id}")
        return booking

    def create_venue_booking(self, data: BookingCreate, user: User) -> Booking:
        if not data.startTime or not data.endTime:
            raise HTTPException(
                status_code=400,
                detail="Missing required fields: venueId, startTime, and endTime are required",
            )

        venue = self.db.query(Venue).filter(Venue.id == data.venueId).first()
        if not venue or not venue.is_active:
            raise HTTPException(status_code=404, detail="Venue not found")

        tier = (data.pricingTier or "standard").lower()
        if tier not in PRICING_TIERS:
            raise HTTPException(
                status_code=400, detail=f"pricingTier must be one of: {', '.join(PRICING_TIERS)}"
            )

        start, end = _parse_window(data.startTime, data.endTime)
        hourly_rate = getattr(venue, f"price_{tier}") or 0
        hours = (end - start).total_seconds() / 3600
        notes = data.notes

        booking = self.repo.create_booking(
            self.db,
            venue_id=venue.id,
            provider_id=venue.owner_id,
            client_id=user.id,
            start_time=start,
            end_time=end,
            location=data.location or venue.name,
            status="pending",
            total_price_amount=round(hourly_rate * hours, 2),
            total_price_currency=venue.price_currency or VENUE_DEFAULT_CURRENCY,
            payment_status="pending",
            client_notes=strip_html(notes.client) if notes else None,
            custom_form_data=data.customFormData,
            event_name=data.eventName,
            event_type=data.eventType,
            expected_attendance=data.expectedAttendance,
            pricing_tier=tier,
        )
        logger.info(f"Venue booking {booking.id} created for venue {venue.id} by client {user.id}")
        return booking

    def update_booking(self, booking_id: int, data: BookingUpdate, user: User) -> tuple[Booking, str]:
        """Apply an update; returns the booking and its status before the update"""
        booking = self.get_booking(booking_id, user)
        previous_status = booking.status
        provider_side = self.is_provider_side(booking, user)
        updates: dict[str, Any] = {}

        if data.status is not None or data.assignedStaff is not None:
            if not provider_side:
                raise HTTPException(
                    status_code=403,
                    detail="Only the provider can change the booking status or assigned staff",
                )
            if data.status is not None:
                if data.status not in BOOKING_STATUSES:
                    raise HTTPException(status_code=400, detail=f"Invalid status '{data.status}'")
                updates["status"] = data.status
            if data.assignedStaff is not None:
                if not self.db.query(User.id).filter(User.id == data.assignedStaff).first():
                    raise HTTPException(status_code=404, detail="Staff member not found")
                updates["assigned_staff_id"] = data.assignedStaff

        if data.startTime or data.endTime:
            start, end = _parse_window(
                data.startTime or booking.start_time, data.endTime or booking.end_time
            )
            updates["start_time"] = start
            updates["end_time"] = end

        if data.notes is not None:
            if user.id == booking.client_id and data.notes.client is not None:
                updates["client_notes"] = strip_html(data.notes.client)
            if provider_side:
                if data.notes.provider is not None:
                    updates["provider_notes"] = strip_html(data.notes.provider)
                if data.notes.internal is not None:
                    updates["internal_notes"] = strip_html(data.notes.internal)

        booking = self.repo.update_booking(self.db, booking, **updates)
        return booking, previous_status

    def cancel_booking(self, booking_id: int, reason: Optional[str], user: User) -> tuple[Booking, Optional[User]]:
        """Cancel; returns the booking and the other party to notify"""
        booking = self.get_booking(booking_id, user)
        if booking.status in ("cancelled", "completed"):
            raise HTTPException(status_code=400, detail=f"Cannot cancel a {booking.status} booking")

        cancelled_by_client = user.id == booking.client_id
        booking = self.repo.update_booking(
            self.db,
            booking,
            status="cancelled",
            cancellation_reason=strip_html(reason) or "No reason provided",
            cancellation_time=utcnow(),
            cancellation_by="client" if cancelled_by_client else "provider",
        )
        logger.info(f"Booking {booking.id} cancelled by {booking.cancellation_by} {user.id}")
        recipient = booking.provider if cancelled_by_client else booking.client
        return booking, recipient

    def complete_booking(self, booking_id: int, user: User) -> Booking:
        booking = self.get_booking(booking_id, user)
        if not self.is_provider_side(booking, user):
            raise HTTPException(status_code=403, detail="Not authorized to complete this booking")
        if booking.status == "cancelled":
            raise HTTPException(status_code=400, detail="Cannot complete a cancelled booking")
        return self.repo.update_booking(self.db, booking, status="completed")

    def add_review(self, booking_id: int, data: ReviewCreate, user: User) -> Review:
        if data.rating is None or not 1 <= data.rating <= 5:
            raise HTTPException(status_code=400, detail="Rating must be between 1 and 5")

        booking = self.repo.get_booking(self.db, booking_id)
        if not booking:
            raise HTTPException(status_code=404, detail="Booking not found")
        if booking.client_id != user.id:
            raise HTTPException(status_code=403, detail="Not authorized to review this booking")
        if booking.status != "completed":
            raise HTTPException(status_code=400, detail="Can only review completed bookings")
        if self.repo.get_review_for_booking(self.db, booking.id):
            raise HTTPException(status_code=409, detail="This booking has already been reviewed")

        return self.repo.create_review(
            self.db,
            booking_id=booking.id,
            client_id=user.id,
            provider_id=booking.provider_id,
            rating=data.rating,
            comment=strip_html(data.comment) or "",
        )

    def provider_reviews(self, provider_id: int) -> list[dict[str, Any]]:
        reviews = self.repo.provider_reviews(self.db, provider_id)
        result = []
        for review in reviews:
            item = ReviewResponse.model_validate(review).model_dump()
            booking = review.booking
            item["booking"] = {
                "id": booking.id,
                "start_time": booking.start_time,
                "service": booking.service.title if booking.service else None,
                "venue": booking.venue.name if booking.venue else None,
            }
            result.append(item)
        return result

    def get_calendar(self, user: User, view: str = "month", anchor: Optional[str] = None) -> dict[str, Any]:
        if view not in calendar.VIEWS:
            raise HTTPException(
                status_code=400, detail=f"view must be one of: {', '.join(calendar.VIEWS)}"
            )
        try:
            day = parse_datetime(anchor).date() if anchor else utcnow().date()
        except ValueError as e:
            raise HTTPException(status_code=400, detail=f"Invalid date: {e}") from e

        first, last = calendar.view_range(view, day)
        bookings = self.repo.list_bookings(
            self.db,
            user,
            start=datetime.combine(first, datetime.min.time()),
            end=datetime.combine(last, datetime.max.time()),
        )
        # Grid cells list appointments in start order
        appointments = [booking_payload(b) for b in reversed(bookings)]
        result = calendar.build_view(view, day, appointments)
        result["upcoming"] = calendar.upcoming(appointments)
        return result
