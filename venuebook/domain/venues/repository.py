"""Venue repository - Database operations for venues and their children"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ...models import (
    Booking,
    DocumentType,
    Equipment,
    Venue,
    VenueEquipment,
    VenueHold,
    VenueImage,
    VenueLayout,
)


class VenueRepository:
    """Repository for venue database operations"""

    @staticmethod
    def list_venues(
        db: Session,
        category: Optional[str] = None,
        min_capacity: Optional[int] = None,
        location: Optional[str] = None,
        indoor_outdoor: Optional[str] = None,
        include_inactive: bool = False,
    ) -> list[Venue]:
        query = db.query(Venue)
        if not include_inactive:
            query = query.filter(Venue.is_active.is_(True))
        if category:
            query = query.filter(Venue.category == category)
        if min_capacity is not None:
            query = query.filter(Venue.capacity >= min_capacity)
        if location:
            query = query.filter(Venue.location.ilike(f"%{location}%"))
        if indoor_outdoor:
            query = query.filter(Venue.indoor_outdoor == indoor_outdoor)
        return query.order_by(Venue.name).all()

    @staticmethod
    def get_venue(db: Session, venue_id: int) -> Optional[Venue]:
        return db.query(Venue).filter(Venue.id == venue_id).first()

    @staticmethod
    def save(db: Session, obj):
        """Add (if new), commit and refresh a single row"""
        db.add(obj)
        db.commit()
        db.refresh(obj)
        return obj

    @staticmethod
    def delete(db: Session, obj) -> None:
        db.delete(obj)
        db.commit()

    @staticmethod
    def update(db: Session, obj, **updates):
        for key, value in updates.items():
            if hasattr(obj, key):
                setattr(obj, key, value)
        db.commit()
        db.refresh(obj)
        return obj

    # Children ---------------------------------------------------------------

    @staticmethod
    def get_child(db: Session, model, venue_id: int, child_id: int):
        return db.query(model).filter(model.venue_id == venue_id, model.id == child_id).first()

    @staticmethod
    def clear_default_layout(db: Session, venue_id: int, keep_id: Optional[int] = None) -> None:
        query = db.query(VenueLayout).filter(
            VenueLayout.venue_id == venue_id, VenueLayout.is_default.is_(True)
        )
        if keep_id is not None:
            query = query.filter(VenueLayout.id != keep_id)
        query.update({VenueLayout.is_default: False}, synchronize_session="fetch")

    @staticmethod
    def clear_primary_image(db: Session, venue_id: int, keep_id: Optional[int] = None) -> None:
        query = db.query(VenueImage).filter(
            VenueImage.venue_id == venue_id, VenueImage.is_primary.is_(True)
        )
        if keep_id is not None:
            query = query.filter(VenueImage.id != keep_id)
        query.update({VenueImage.is_primary: False}, synchronize_session="fetch")

    @staticmethod
    def get_equipment_link(db: Session, venue_id: int, equipment_id: int) -> Optional[VenueEquipment]:
        return (
            db.query(VenueEquipment)
            .filter(VenueEquipment.venue_id == venue_id, VenueEquipment.equipment_id == equipment_id)
            .first()
        )

    # Catalogues ---------------------------------------------------------------

    @staticmethod
    def get_equipment(db: Session, equipment_id: int) -> Optional[Equipment]:
        return db.query(Equipment).filter(Equipment.id == equipment_id).first()

    @staticmethod
    def list_equipment(db: Session) -> list[Equipment]:
        return db.query(Equipment).order_by(Equipment.name).all()

    @staticmethod
    def list_document_types(db: Session) -> list[DocumentType]:
        return db.query(DocumentType).order_by(DocumentType.name).all()

    # Time-range queries ---------------------------------------------------------

    @staticmethod
    def overlapping_bookings(
        db: Session, venue_id: int, start: datetime, end: datetime, include_cancelled: bool = False
    ) -> list[Booking]:
        query = db.query(Booking).filter(
            Booking.venue_id == venue_id,
            Booking.start_time < end,
            Booking.end_time > start,
        )
        if not include_cancelled:
            query = query.filter(Booking.status != "cancelled")
        return query.order_by(Booking.start_time).all()

    @staticmethod
    def overlapping_holds(db: Session, venue_id: int, start: datetime, end: datetime) -> list[VenueHold]:
        return (
            db.query(VenueHold)
            .filter(
                VenueHold.venue_id == venue_id,
                VenueHold.start_time < end,
                VenueHold.end_time > start,
            )
            .order_by(VenueHold.start_time)
            .all()
        )

    @staticmethod
    def upcoming_confirmed_bookings(db: Session, venue_id: int, now: datetime, limit: int = 10) -> list[Booking]:
        return (
            db.query(Booking)
            .filter(
                Booking.venue_id == venue_id,
                Booking.status == "confirmed",
                Booking.start_time >= now,
            )
            .order_by(Booking.start_time)
            .limit(limit)
            .all()
        )

    @staticmethod
    def upcoming_public_holds(db: Session, venue_id: int, now: datetime, limit: int = 10) -> list[VenueHold]:
        return (
            db.query(VenueHold)
            .filter(
                VenueHold.venue_id == venue_id,
                VenueHold.hold_type != "private",
                VenueHold.start_time >= now,
            )
            .order_by(VenueHold.start_time)
            .limit(limit)
            .all()
        )

    @staticmethod
    def bookings_in_range(db: Session, venue_id: int, start: datetime, end: datetime) -> list[Booking]:
        return (
            db.query(Booking)
            .filter(
                Booking.venue_id == venue_id,
                Booking.start_time >= start,
                Booking.start_time <= end,
            )
            .order_by(Booking.start_time)
            .all()
        )
