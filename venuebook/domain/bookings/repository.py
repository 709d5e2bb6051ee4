"""Booking repository - Database operations for bookings and reviews"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import ROLE_ADMIN, ROLE_CLIENT, Booking, Review, User


class BookingRepository:
    """Repository for booking database operations"""

    @staticmethod
    def scoped_query(db: Session, user: User):
        """Bookings visible to the user: own (client), provided (business), all (admin)"""
        query = db.query(Booking).options(joinedload(Booking.service), joinedload(Booking.venue))
        if user.role == ROLE_ADMIN:
            return query
        if user.role == ROLE_CLIENT:
            return query.filter(Booking.client_id == user.id)
        return query.filter(Booking.provider_id == user.id)

    @staticmethod
    def list_bookings(
        db: Session,
        user: User,
        status: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[Booking]:
        query = BookingRepository.scoped_query(db, user)
        if status:
            query = query.filter(Booking.status == status)
        if start is not None and end is not None:
            query = query.filter(Booking.start_time >= start, Booking.start_time <= end)
        return query.order_by(Booking.start_time.desc(), Booking.id.desc()).all()

    @staticmethod
    def get_booking(db: Session, booking_id: int) -> Optional[Booking]:
        return db.query(Booking).filter(Booking.id == booking_id).first()

    @staticmethod
    def create_booking(db: Session, **booking_data) -> Booking:
        booking = Booking(**booking_data)
        db.add(booking)
        db.commit()
        db.refresh(booking)
        return booking

    @staticmethod
    def update_booking(db: Session, booking: Booking, **updates) -> Booking:
        for key, value in updates.items():
            if hasattr(booking, key):
                setattr(booking, key, value)
        db.commit()
        db.refresh(booking)
        return booking

    @staticmethod
    def create_review(db: Session, **review_data) -> Review:
        review = Review(**review_data)
        db.add(review)
        db.commit()
        db.refresh(review)
        return review

    @staticmethod
    def get_review_for_booking(db: Session, booking_id: int) -> Optional[Review]:
        return db.query(Review).filter(Review.booking_id == booking_id).first()

    @staticmethod
    def provider_reviews(db: Session, provider_id: int) -> list[Review]:
        return (
            db.query(Review)
            .options(joinedload(Review.booking))
            .filter(Review.provider_id == provider_id)
            .order_by(Review.created_at.desc(), Review.id.desc())
            .all()
        )
