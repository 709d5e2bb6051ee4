import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, field_validator
from sqlalchemy.orm import Session

from ..auth import get_current_user, require_roles
from ..database import get_db
from ..models import DAYS_OF_WEEK, ROLE_ADMIN, ROLE_BUSINESS, BusinessHours, Service, User
from ..schemas import user_payload
from ..shared.validators import validate_day_of_week, validate_phone, validate_time_range

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])


class ProfileUpdate(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    businessName: Optional[str] = None
    businessDescription: Optional[str] = None

    @field_validator("phone")
    @classmethod
    def validate_phone_field(cls, v):
        if v:
            return validate_phone(v)
        return v


class TimeSlot(BaseModel):
    start: str
    end: str


def _service_summary(service: Service) -> dict:
    return {
        "id": service.id,
        "title": service.title,
        "category": service.category,
        "description": service.description,
        "price_amount": service.price_amount,
        "price_currency": service.price_currency,
        "duration": service.duration,
    }


@router.get("/me")
async def get_me(current_user: User = Depends(get_current_user)):
    return {"user": user_payload(current_user)}


@router.put("/profile")
async def update_profile(
    data: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if data.name is not None:
        current_user.name = data.name
    if data.phone is not None:
        current_user.phone = data.phone
    if data.businessName is not None:
        current_user.business_name = data.businessName
    if data.businessDescription is not None:
        current_user.business_description = data.businessDescription

    db.commit()
    db.refresh(current_user)
    return {"message": "Profile updated successfully", "user": user_payload(current_user)}


@router.get("")
async def list_users(
    role: Optional[str] = Query(None),
    _: User = Depends(require_roles(ROLE_ADMIN)),
    db: Session = Depends(get_db),
):
    query = db.query(User)
    if role:
        query = query.filter(User.role == role)
    return {"users": [user_payload(u) for u in query.order_by(User.id).all()]}


@router.get("/business/{business_id}")
async def get_business_profile(business_id: int, db: Session = Depends(get_db)):
    """Public business profile with weekly hours and active services"""
    business = (
        db.query(User).filter(User.id == business_id, User.role == ROLE_BUSINESS).first()
    )
    if not business:
        raise HTTPException(status_code=404, detail="Business not found")

    hours: dict[str, list[dict]] = {day: [] for day in DAYS_OF_WEEK}
    for row in business.business_hours:
        hours.setdefault(row.day_of_week, []).append({"start": row.start_time, "end": row.end_time})
    for slots in hours.values():
        slots.sort(key=lambda slot: slot["start"])

    services = (
        db.query(Service)
        .filter(Service.provider_id == business.id, Service.is_paused.is_(False))
        .order_by(Service.id)
        .all()
    )

    return {
        "business": {
            "id": business.id,
            "name": business.name,
            "email": business.email,
            "phone": business.phone,
            "businessName": business.business_name,
            "businessDescription": business.business_description,
            "businessHours": hours,
            "services": [_service_summary(s) for s in services],
        }
    }


@router.put("/business-hours")
async def update_business_hours(
    data: dict[str, list[TimeSlot]],
    current_user: User = Depends(require_roles(ROLE_BUSINESS)),
    db: Session = Depends(get_db),
):
    """Replace the weekly opening hours"""
    rows = []
    try:
        for day, slots in data.items():
            day_name = validate_day_of_week(day)
            for slot in slots:
                start, end = validate_time_range(slot.start, slot.end)
                rows.append(
                    BusinessHours(
                        business_id=current_user.id,
                        day_of_week=day_name,
                        start_time=start,
                        end_time=end,
                    )
                )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    db.query(BusinessHours).filter(BusinessHours.business_id == current_user.id).delete()
    db.add_all(rows)
    db.commit()
    logger.info(f"Business {current_user.id} hours replaced with {len(rows)} slot(s)")

    return {"message": "Business hours updated successfully", "slots": len(rows)}
