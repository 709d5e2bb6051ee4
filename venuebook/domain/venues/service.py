"""Venue service - Business logic for venues, their configuration and reporting"""

import logging
from datetime import date, datetime, timedelta
from typing import Any, Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...auth import is_manager
from ...config import VENUE_DEFAULT_CURRENCY
from ...models import (
    BOOKING_STATUSES,
    Booking,
    DocumentType,
    Equipment,
    User,
    Venue,
    VenueAvailability,
    VenueBond,
    VenueEquipment,
    VenueForm,
    VenueHold,
    VenueImage,
    VenueLayout,
)
from ...shared.validators import parse_datetime, utcnow, validate_day_of_week, validate_time_range
from .repository import VenueRepository
from .schemas import (
    AvailabilityCreate,
    BondCreate,
    DocumentTypeCreate,
    EquipmentCreate,
    FormCreate,
    HoldCreate,
    ImageCreate,
    LayoutCreate,
    VenueCreate,
    VenueEquipmentCreate,
    VenueEquipmentUpdate,
)

logger = logging.getLogger(__name__)

GROUP_BY_OPTIONS = ("month", "week", "day")
PRICING_TIERS = ("commercial", "community", "standard")


def _period_key(moment: datetime, group_by: str) -> str:
    if group_by == "day":
        return moment.strftime("%Y-%m-%d")
    if group_by == "week":
        year, week, _ = moment.isocalendar()
        return f"{year}-W{week:02d}"
    return moment.strftime("%Y-%m")


def _slot_hours(start: str, end: str) -> float:
    start_h, start_m = (int(part) for part in start.split(":"))
    end_h, end_m = (int(part) for part in end.split(":"))
    return max(0, (end_h * 60 + end_m) - (start_h * 60 + start_m)) / 60


def _hours(start: datetime, end: datetime) -> float:
    return max(0.0, (end - start).total_seconds() / 3600)


def equipment_link_payload(link: VenueEquipment) -> dict[str, Any]:
    """Catalogue item merged with the venue-specific quantity and notes"""
    item = link.equipment
    return {
        "id": item.id,
        "linkId": link.id,
        "name": item.name,
        "description": item.description,
        "category": item.category,
        "daily_fee": item.daily_fee,
        "price_currency": item.price_currency,
        "setup_required": item.setup_required,
        "quantity_available": link.quantity_available,
        "notes": link.notes,
    }


class VenueService:
    """Service layer for venue business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = VenueRepository()

    # ========================================================================
    # VENUES
    # ========================================================================

    def list_venues(
        self,
        user: Optional[User],
        category: Optional[str] = None,
        capacity: Optional[int] = None,
        location: Optional[str] = None,
        amenities: Optional[str] = None,
        indoor_outdoor: Optional[str] = None,
        include_inactive: bool = False,
    ) -> list[Venue]:
        venues = self.repo.list_venues(
            self.db,
            category=category,
            min_capacity=capacity,
            location=location,
            indoor_outdoor=indoor_outdoor,
            include_inactive=include_inactive and is_manager(user),
        )
        if amenities:
            wanted = [a.strip() for a in amenities.split(",") if a.strip()]
            venues = [v for v in venues if all(a in (v.amenities or []) for a in wanted)]
        return venues

    def get_venue(self, venue_id: int, user: Optional[User] = None, manage: bool = False) -> Venue:
        """Fetch a venue; inactive venues are only visible to managers"""
        venue = self.repo.get_venue(self.db, venue_id)
        if not venue:
            raise HTTPException(status_code=404, detail="Venue not found")
        if not venue.is_active and not (manage or is_manager(user)):
            raise HTTPException(status_code=404, detail="Venue not found")
        return venue

    def get_upcoming_events(self, venue: Venue, limit: int = 10) -> list[dict[str, Any]]:
        """Confirmed bookings and non-private holds starting from now, soonest first"""
        now = utcnow()
        events = [
            {
                "id": b.id,
                "type": "booking",
                "title": b.event_name or "Booking",
                "eventType": b.event_type,
                "start": b.start_time,
                "end": b.end_time,
            }
            for b in self.repo.upcoming_confirmed_bookings(self.db, venue.id, now, limit)
        ]
        events += [
            {
                "id": h.id,
                "type": "hold",
                "title": f"{h.hold_type}: {h.hold_reason or 'No reason provided'}",
                "eventType": None,
                "start": h.start_time,
                "end": h.end_time,
            }
            for h in self.repo.upcoming_public_holds(self.db, venue.id, now, limit)
        ]
        events.sort(key=lambda e: e["start"])
        return events[:limit]

    def create_venue(self, data: VenueCreate, user: User) -> Venue:
        if not data.name or not data.location or not data.address or data.capacity is None:
            raise HTTPException(
                status_code=400,
                detail="Missing required fields: name, location, address, and capacity are required",
            )

        columns = {k: v for k, v in data.to_columns().items() if v is not None}
        columns.setdefault("price_currency", VENUE_DEFAULT_CURRENCY)
        venue = self.repo.save(self.db, Venue(owner_id=user.id, **columns))
        logger.info(f"Venue {venue.id} created by user {user.id}")
        return venue

    def update_venue(self, venue_id: int, data: VenueCreate) -> Venue:
        venue = self.get_venue(venue_id, manage=True)
        updates = data.to_columns(exclude_unset=True)
        for required in ("name", "location", "address", "capacity"):
            if required in updates and updates[required] in (None, ""):
                raise HTTPException(status_code=400, detail=f"{required} cannot be empty")
        return self.repo.update(self.db, venue, **updates)

    def delete_venue(self, venue_id: int) -> None:
        venue = self.get_venue(venue_id, manage=True)
        if self.db.query(Booking.id).filter(Booking.venue_id == venue.id).first():
            raise HTTPException(
                status_code=409,
                detail="Venue has bookings and cannot be deleted. Deactivate it instead.",
            )
        self.repo.delete(self.db, venue)
        logger.info(f"Venue {venue_id} deleted")

    def _child(self, model, venue_id: int, child_id: int, label: str):
        self.get_venue(venue_id, manage=True)
        child = self.repo.get_child(self.db, model, venue_id, child_id)
        if not child:
            raise HTTPException(status_code=404, detail=f"{label} not found")
        return child

    # ========================================================================
    # LAYOUTS
    # ========================================================================

    def add_layout(self, venue_id: int, data: LayoutCreate) -> VenueLayout:
        venue = self.get_venue(venue_id, manage=True)
        if not data.name or data.capacity is None:
            raise HTTPException(
                status_code=400, detail="Missing required fields: name and capacity are required"
            )
        if data.isDefault:
            self.repo.clear_default_layout(self.db, venue.id)
        layout = VenueLayout(
            venue_id=venue.id,
            name=data.name,
            description=data.description,
            capacity=data.capacity,
            layout_image=data.layoutImage,
            layout_details=data.layoutDetails or {},
            is_default=bool(data.isDefault),
        )
        return self.repo.save(self.db, layout)

    def update_layout(self, venue_id: int, layout_id: int, data: LayoutCreate) -> VenueLayout:
        layout = self._child(VenueLayout, venue_id, layout_id, "Layout")
        fields = data.model_dump(exclude_unset=True)
        if fields.get("isDefault"):
            self.repo.clear_default_layout(self.db, venue_id, keep_id=layout.id)
        mapping = {
            "name": "name",
            "description": "description",
            "capacity": "capacity",
            "layoutImage": "layout_image",
            "layoutDetails": "layout_details",
            "isDefault": "is_default",
        }
        return self.repo.update(
            self.db, layout, **{mapping[k]: v for k, v in fields.items() if k in mapping}
        )

    def delete_layout(self, venue_id: int, layout_id: int) -> None:
        self.repo.delete(self.db, self._child(VenueLayout, venue_id, layout_id, "Layout"))

    # ========================================================================
    # EQUIPMENT
    # ========================================================================

    def add_equipment(self, venue_id: int, data: VenueEquipmentCreate) -> VenueEquipment:
        venue = self.get_venue(venue_id, manage=True)
        if not data.equipmentId:
            raise HTTPException(status_code=400, detail="Missing required field: equipmentId")

        equipment = self.repo.get_equipment(self.db, data.equipmentId)
        if not equipment:
            raise HTTPException(status_code=404, detail="Equipment not found")
        if self.repo.get_equipment_link(self.db, venue.id, equipment.id):
            raise HTTPException(
                status_code=409, detail="Equipment is already associated with this venue"
            )

        link = VenueEquipment(
            venue_id=venue.id,
            equipment_id=equipment.id,
            quantity_available=(
                data.quantityAvailable
                if data.quantityAvailable is not None
                else equipment.quantity_available
            ),
            notes=data.notes,
        )
        return self.repo.save(self.db, link)

    def update_equipment(self, venue_id: int, equipment_id: int, data: VenueEquipmentUpdate) -> VenueEquipment:
        self.get_venue(venue_id, manage=True)
        link = self.repo.get_equipment_link(self.db, venue_id, equipment_id)
        if not link:
            raise HTTPException(status_code=404, detail="Equipment is not associated with this venue")
        fields = data.model_dump(exclude_unset=True)
        updates = {}
        if "quantityAvailable" in fields:
            updates["quantity_available"] = fields["quantityAvailable"]
        if "notes" in fields:
            updates["notes"] = fields["notes"]
        return self.repo.update(self.db, link, **updates)

    def remove_equipment(self, venue_id: int, equipment_id: int) -> None:
        self.get_venue(venue_id, manage=True)
        link = self.repo.get_equipment_link(self.db, venue_id, equipment_id)
        if not link:
            raise HTTPException(status_code=404, detail="Equipment is not associated with this venue")
        self.repo.delete(self.db, link)

    def list_equipment_catalogue(self) -> list[Equipment]:
        return self.repo.list_equipment(self.db)

    def create_equipment(self, data: EquipmentCreate) -> Equipment:
        if not data.name:
            raise HTTPException(status_code=400, detail="Missing required field: name is required")
        equipment = Equipment(
            name=data.name,
            description=data.description,
            category=data.category,
            daily_fee=data.dailyFee if data.dailyFee is not None else 0,
            price_currency=data.priceCurrency or VENUE_DEFAULT_CURRENCY,
            quantity_available=data.quantityAvailable if data.quantityAvailable is not None else 1,
            setup_required=bool(data.setupRequired),
            setup_instructions=data.setupInstructions,
            is_active=data.isActive if data.isActive is not None else True,
        )
        return self.repo.save(self.db, equipment)

    # ========================================================================
    # AVAILABILITY
    # ========================================================================

    def _availability_fields(self, data: AvailabilityCreate, partial: bool) -> dict[str, Any]:
        fields = data.model_dump(exclude_unset=partial)
        if not partial:
            if not (data.dayOfWeek or data.specificDate) or not data.startTime or not data.endTime:
                raise HTTPException(
                    status_code=400,
                    detail="Missing required fields: dayOfWeek or specificDate, startTime, and endTime are required",
                )
        updates: dict[str, Any] = {}
        try:
            if fields.get("dayOfWeek"):
                updates["day_of_week"] = validate_day_of_week(fields["dayOfWeek"])
            if "specificDate" in fields:
                updates["specific_date"] = fields["specificDate"]
            if fields.get("startTime") or fields.get("endTime"):
                start = fields.get("startTime")
                end = fields.get("endTime")
                if not start or not end:
                    raise ValueError("startTime and endTime must be provided together")
                updates["start_time"], updates["end_time"] = validate_time_range(start, end)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e
        if fields.get("isAvailable") is not None:
            updates["is_available"] = fields["isAvailable"]
        if "reason" in fields:
            updates["reason"] = fields["reason"]
        return updates

    def add_availability(self, venue_id: int, data: AvailabilityCreate) -> VenueAvailability:
        venue = self.get_venue(venue_id, manage=True)
        fields = self._availability_fields(data, partial=False)
        fields.setdefault("is_available", True)
        return self.repo.save(self.db, VenueAvailability(venue_id=venue.id, **fields))

    def update_availability(self, venue_id: int, availability_id: int, data: AvailabilityCreate) -> VenueAvailability:
        row = self._child(VenueAvailability, venue_id, availability_id, "Availability")
        return self.repo.update(self.db, row, **self._availability_fields(data, partial=True))

    def delete_availability(self, venue_id: int, availability_id: int) -> None:
        self.repo.delete(
            self.db, self._child(VenueAvailability, venue_id, availability_id, "Availability")
        )

    def check_availability(
        self, venue_id: int, start_time: Optional[str], end_time: Optional[str]
    ) -> dict[str, Any]:
        """Report bookings and holds overlapping the window. Nothing is reserved or blocked."""
        if not start_time or not end_time:
            raise HTTPException(
                status_code=400,
                detail="Missing required fields: startTime and endTime are required",
            )
        start, end = self._parse_range(start_time, end_time)
        venue = self.get_venue(venue_id, manage=True)

        conflicts = self.repo.overlapping_bookings(self.db, venue.id, start, end)
        holds = self.repo.overlapping_holds(self.db, venue.id, start, end)
        return {
            "isAvailable": not conflicts and not holds,
            "conflicts": {"count": len(conflicts)} if conflicts else None,
            "holds": [
                {
                    "holdType": h.hold_type,
                    "startTime": h.start_time,
                    "endTime": h.end_time,
                    "reason": h.hold_reason,
                }
                for h in holds
            ],
        }

    # ========================================================================
    # BONDS, IMAGES, FORMS, HOLDS
    # ========================================================================

    def add_bond(self, venue_id: int, data: BondCreate) -> VenueBond:
        venue = self.get_venue(venue_id, manage=True)
        if not data.name or data.amount is None:
            raise HTTPException(
                status_code=400, detail="Missing required fields: name and amount are required"
            )
        bond = VenueBond(
            venue_id=venue.id,
            name=data.name,
            amount=data.amount,
            currency=data.currency or venue.price_currency or VENUE_DEFAULT_CURRENCY,
            description=data.description,
            is_refundable=data.isRefundable if data.isRefundable is not None else True,
        )
        return self.repo.save(self.db, bond)

    def update_bond(self, venue_id: int, bond_id: int, data: BondCreate) -> VenueBond:
        bond = self._child(VenueBond, venue_id, bond_id, "Bond")
        mapping = {
            "name": "name",
            "amount": "amount",
            "currency": "currency",
            "description": "description",
            "isRefundable": "is_refundable",
        }
        fields = data.model_dump(exclude_unset=True)
        return self.repo.update(
            self.db, bond, **{mapping[k]: v for k, v in fields.items() if k in mapping}
        )

    def delete_bond(self, venue_id: int, bond_id: int) -> None:
        self.repo.delete(self.db, self._child(VenueBond, venue_id, bond_id, "Bond"))

    def add_image(self, venue_id: int, data: ImageCreate) -> VenueImage:
        venue = self.get_venue(venue_id, manage=True)
        if not data.url:
            raise HTTPException(status_code=400, detail="Missing required field: url is required")

        # The first image of a venue becomes its primary image
        make_primary = bool(data.isPrimary) or not venue.venue_images
        if make_primary:
            self.repo.clear_primary_image(self.db, venue.id)
        sort_order = data.sortOrder
        if sort_order is None:
            sort_order = max((img.sort_order or 0 for img in venue.venue_images), default=-1) + 1
        image = VenueImage(
            venue_id=venue.id,
            url=data.url,
            caption=data.caption,
            is_primary=make_primary,
            sort_order=sort_order,
        )
        return self.repo.save(self.db, image)

    def update_image(self, venue_id: int, image_id: int, data: ImageCreate) -> VenueImage:
        image = self._child(VenueImage, venue_id, image_id, "Image")
        fields = data.model_dump(exclude_unset=True)
        if fields.get("isPrimary"):
            self.repo.clear_primary_image(self.db, venue_id, keep_id=image.id)
        mapping = {"url": "url", "caption": "caption", "isPrimary": "is_primary", "sortOrder": "sort_order"}
        return self.repo.update(
            self.db, image, **{mapping[k]: v for k, v in fields.items() if k in mapping}
        )

    def set_primary_image(self, venue_id: int, image_id: int) -> VenueImage:
        image = self._child(VenueImage, venue_id, image_id, "Image")
        self.repo.clear_primary_image(self.db, venue_id, keep_id=image.id)
        return self.repo.update(self.db, image, is_primary=True)

    def delete_image(self, venue_id: int, image_id: int) -> None:
        self.repo.delete(self.db, self._child(VenueImage, venue_id, image_id, "Image"))

    def add_form(self, venue_id: int, data: FormCreate) -> VenueForm:
        venue = self.get_venue(venue_id, manage=True)
        if not data.formName or not data.formSchema:
            raise HTTPException(
                status_code=400,
                detail="Missing required fields: formName and formSchema are required",
            )
        form = VenueForm(
            venue_id=venue.id,
            form_name=data.formName,
            form_description=data.formDescription,
            form_schema=data.formSchema,
            is_required=data.isRequired if data.isRequired is not None else True,
            applies_to=data.appliesTo,
        )
        return self.repo.save(self.db, form)

    def add_hold(self, venue_id: int, data: HoldCreate) -> VenueHold:
        venue = self.get_venue(venue_id, manage=True)
        if not data.holdType or not data.startTime or not data.endTime:
            raise HTTPException(
                status_code=400,
                detail="Missing required fields: holdType, startTime, and endTime are required",
            )
        start, end = self._parse_range(data.startTime, data.endTime)
        hold = VenueHold(
            venue_id=venue.id,
            hold_type=data.holdType,
            hold_reason=data.holdReason,
            start_time=start,
            end_time=end,
            held_by_name=data.heldByName,
        )
        return self.repo.save(self.db, hold)

    def delete_hold(self, venue_id: int, hold_id: int) -> None:
        self.repo.delete(self.db, self._child(VenueHold, venue_id, hold_id, "Hold"))

    # ========================================================================
    # CALENDAR & STATISTICS
    # ========================================================================

    @staticmethod
    def _parse_range(start_value, end_value) -> tuple[datetime, datetime]:
        try:
            start = parse_datetime(start_value)
            end = parse_datetime(end_value)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=f"Invalid date: {e}") from e
        if end <= start:
            raise HTTPException(status_code=400, detail="End time must be after start time")
        return start, end

    def get_calendar(self, venue_id: int, start_date: Optional[str], end_date: Optional[str]) -> dict[str, Any]:
        if not start_date or not end_date:
            raise HTTPException(
                status_code=400,
                detail="Missing required fields: startDate and endDate are required",
            )
        start, end = self._parse_range(start_date, end_date)
        venue = self.get_venue(venue_id, manage=True)

        bookings = self.repo.overlapping_bookings(self.db, venue.id, start, end)
        holds = self.repo.overlapping_holds(self.db, venue.id, start, end)

        events = [
            {
                "id": b.id,
                "title": b.event_name or "Booking",
                "start": b.start_time,
                "end": b.end_time,
                "type": "booking",
                "status": b.status,
                "customer": b.client.name if b.client else None,
                "customerId": b.client_id,
                "attendance": b.expected_attendance,
                "eventType": b.event_type,
            }
            for b in bookings
        ]
        events.extend(
            {
                "id": h.id,
                "title": f"{h.hold_type}: {h.hold_reason or 'No reason provided'}",
                "start": h.start_time,
                "end": h.end_time,
                "type": "hold",
                "holdType": h.hold_type,
                "heldBy": h.held_by_name,
            }
            for h in holds
        )

        return {"venue": {"id": venue.id, "name": venue.name}, "calendarEvents": events}

    def _available_hours(self, venue: Venue, start: datetime, end: datetime) -> float:
        """Open hours in the window from the venue's availability rules, or the whole window"""
        rules = venue.availability
        if not rules:
            return _hours(start, end)

        total = 0.0
        day: date = start.date()
        while day <= end.date():
            specific = [r for r in rules if r.specific_date == day]
            if specific:
                day_rules = specific
            else:
                weekday = day.strftime("%A").lower()
                day_rules = [r for r in rules if r.specific_date is None and r.day_of_week == weekday]
            total += sum(_slot_hours(r.start_time, r.end_time) for r in day_rules if r.is_available)
            day += timedelta(days=1)
        return total

    def get_statistics(
        self,
        venue_id: int,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        group_by: Optional[str] = None,
    ) -> dict[str, Any]:
        group_by = group_by or "month"
        if group_by not in GROUP_BY_OPTIONS:
            raise HTTPException(
                status_code=400, detail=f"groupBy must be one of: {', '.join(GROUP_BY_OPTIONS)}"
            )
        venue = self.get_venue(venue_id, manage=True)

        now = utcnow()
        start, end = self._parse_range(
            start_date or now - timedelta(days=30), end_date or now
        )

        bookings = self.repo.bookings_in_range(self.db, venue.id, start, end)
        active = [b for b in bookings if b.status != "cancelled"]

        periods: dict[str, dict[str, Any]] = {}
        for booking in bookings:
            key = _period_key(booking.start_time, group_by)
            bucket = periods.setdefault(
                key, {"period": key, "total": 0, **{status: 0 for status in BOOKING_STATUSES}}
            )
            bucket["total"] += 1
            bucket[booking.status] = bucket.get(booking.status, 0) + 1

        revenue = {tier: 0.0 for tier in PRICING_TIERS}
        for booking in active:
            tier = booking.pricing_tier or "standard"
            revenue[tier] = revenue.get(tier, 0.0) + (booking.total_price_amount or 0)

        booked_hours = sum(_hours(b.start_time, b.end_time) for b in active)
        available_hours = self._available_hours(venue, start, end)

        return {
            "venue": {"id": venue.id, "name": venue.name},
            "statistics": list(periods.values()),
            "totalAttendance": sum(b.expected_attendance or 0 for b in active),
            "revenueByCombos": revenue,
            "utilization": {
                "bookedHours": round(booked_hours, 2),
                "availableHours": round(available_hours, 2),
                "rate": round(booked_hours / available_hours, 4) if available_hours else 0.0,
            },
        }

    # ========================================================================
    # DOCUMENT TYPES
    # ========================================================================

    def list_document_types(self) -> list[DocumentType]:
        return self.repo.list_document_types(self.db)

    def create_document_type(self, data: DocumentTypeCreate) -> DocumentType:
        if not data.name:
            raise HTTPException(status_code=400, detail="Missing required field: name is required")
        document_type = DocumentType(
            name=data.name,
            description=data.description,
            venue_categories=data.venueCategories or [],
            event_types=data.eventTypes or [],
            is_mandatory=bool(data.isMandatory),
        )
        return self.repo.save(self.db, document_type)
