import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from pydantic import BaseModel
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from ..auth import require_roles
from ..database import get_db
from ..domain.bookings.service import booking_payload
from ..models import ROLE_ADMIN, ROLE_BUSINESS, ROLE_CLIENT, ROLE_VENUE_MANAGER, Booking, User
from ..shared.validators import validate_email, validate_phone

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/customers", tags=["Customers"])

require_provider = require_roles(ROLE_BUSINESS, ROLE_VENUE_MANAGER)


class CustomerUpsert(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


def customer_payload(customer: User, booking_count: Optional[int] = None) -> dict:
    data = {
        "id": customer.id,
        "name": customer.name,
        "email": customer.email,
        "phone": customer.phone,
        "created_at": customer.created_at,
    }
    if booking_count is not None:
        data["bookingCount"] = booking_count
    return data


def upsert_customer(db: Session, name: str, email: str, phone: Optional[str] = None) -> tuple[User, bool]:
    """
    Find a user by email and refresh their contact details, or create a client.

    Returns:
        (user, created)
    """
    try:
        email = validate_email(email)
        phone = validate_phone(phone) if phone else None
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    customer = db.query(User).filter(User.email == email).first()
    created = customer is None
    if created:
        customer = User(email=email, name=name, phone=phone, role=ROLE_CLIENT)
        db.add(customer)
    elif customer.password_hash is None:
        customer.name = name
        if phone:
            customer.phone = phone
    else:
        # Registered accounts own their profile; only blanks are filled in
        customer.name = customer.name or name
        customer.phone = customer.phone or phone
    db.commit()
    db.refresh(customer)
    return customer, created


def _bookings_with(db: Session, caller: User, customer_id: int):
    query = db.query(Booking).filter(Booking.client_id == customer_id)
    if caller.role != ROLE_ADMIN:
        query = query.filter(Booking.provider_id == caller.id)
    return query


def _get_customer(db: Session, caller: User, customer_id: int) -> User:
    customer = (
        db.query(User).filter(User.id == customer_id, User.role == ROLE_CLIENT).first()
    )
    if not customer:
        raise HTTPException(status_code=404, detail="Customer not found")
    if caller.role != ROLE_ADMIN and not _bookings_with(db, caller, customer.id).first():
        raise HTTPException(status_code=403, detail="Not authorized to view this customer")
    return customer


@router.get("")
async def list_customers(
    search: Optional[str] = Query(None),
    current_user: User = Depends(require_provider),
    db: Session = Depends(get_db),
):
    """Clients who have booked with the caller (admins: every client)"""
    counts = db.query(Booking.client_id, func.count(Booking.id)).group_by(Booking.client_id)
    if current_user.role != ROLE_ADMIN:
        counts = counts.filter(Booking.provider_id == current_user.id)
    booking_counts = dict(counts.all())

    query = db.query(User).filter(User.role == ROLE_CLIENT)
    if current_user.role != ROLE_ADMIN:
        if not booking_counts:
            return {"customers": []}
        query = query.filter(User.id.in_(booking_counts.keys()))
    if search:
        pattern = f"%{search.strip()}%"
        query = query.filter(
            or_(User.name.ilike(pattern), User.email.ilike(pattern), User.phone.ilike(pattern))
        )

    customers = query.order_by(User.name, User.id).all()
    return {"customers": [customer_payload(c, booking_counts.get(c.id, 0)) for c in customers]}


@router.get("/{customer_id}")
async def get_customer(
    customer_id: int,
    current_user: User = Depends(require_provider),
    db: Session = Depends(get_db),
):
    customer = _get_customer(db, current_user, customer_id)
    booking_count = _bookings_with(db, current_user, customer.id).count()
    data = customer_payload(customer, booking_count)
    data["pets"] = [{"id": p.id, "name": p.name, "type": p.type, "breed": p.breed} for p in customer.pets]
    return {"customer": data}


@router.post("")
async def create_or_update_customer(
    data: CustomerUpsert,
    response: Response,
    db: Session = Depends(get_db),
):
    """Public upsert by email, used by booking pages before a booking is made"""
    name = (data.name or "").strip()
    if not name or not data.email:
        raise HTTPException(status_code=400, detail="Missing required fields: name and email are required")

    customer, created = upsert_customer(db, name, data.email, data.phone)
    response.status_code = 201 if created else 200
    logger.info(f"Customer {customer.id} {'created' if created else 'updated'}")
    return {
        "message": "Customer created successfully" if created else "Customer updated successfully",
        "customer": customer_payload(customer),
    }


@router.get("/{customer_id}/bookings")
async def get_customer_bookings(
    customer_id: int,
    current_user: User = Depends(require_provider),
    db: Session = Depends(get_db),
):
    customer = _get_customer(db, current_user, customer_id)
    bookings = (
        _bookings_with(db, current_user, customer.id)
        .order_by(Booking.start_time.desc(), Booking.id.desc())
        .all()
    )
    return {"bookings": [booking_payload(b) for b in bookings]}
