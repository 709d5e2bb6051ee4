"""Service catalogue - Business logic for bookable services"""

import logging
from typing import Any, Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...config import DEFAULT_CURRENCY
from ...models import ROLE_ADMIN, Booking, Service, ServiceAvailability, User
from ...shared.validators import validate_day_of_week, validate_time_range
from .repository import ServiceRepository
from .schemas import AvailabilitySlot, ServiceCreate, ServiceResponse

logger = logging.getLogger(__name__)


def service_payload(service: Service, detailed: bool = False) -> dict[str, Any]:
    data = ServiceResponse.model_validate(service).model_dump()
    if detailed:
        data["availability"] = [
            {"dayOfWeek": a.day_of_week, "startTime": a.start_time, "endTime": a.end_time}
            for a in service.availability
        ]
        data["customForm"] = service.custom_form.form_schema if service.custom_form else None
    return data


class CatalogueService:
    """Service layer for the services a business offers"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ServiceRepository()

    def list_services(
        self,
        user: Optional[User],
        category: Optional[str] = None,
        provider_id: Optional[int] = None,
    ) -> list[Service]:
        return self.repo.list_services(
            self.db,
            category=category,
            provider_id=provider_id,
            viewer_id=user.id if user else None,
            include_paused=bool(user) and user.role == ROLE_ADMIN,
        )

    def get_service(self, service_id: int, user: Optional[User] = None) -> Service:
        service = self.repo.get_service(self.db, service_id)
        if not service:
            raise HTTPException(status_code=404, detail="Service not found")
        if service.is_paused and not (user and self._can_manage(service, user)):
            raise HTTPException(status_code=404, detail="Service not found")
        return service

    @staticmethod
    def _can_manage(service: Service, user: User) -> bool:
        return user.role == ROLE_ADMIN or service.provider_id == user.id

    def get_owned_service(self, service_id: int, user: User) -> Service:
        service = self.repo.get_service(self.db, service_id)
        if not service:
            raise HTTPException(status_code=404, detail="Service not found")
        if not self._can_manage(service, user):
            raise HTTPException(status_code=403, detail="Not authorized to manage this service")
        return service

    def create_service(self, data: ServiceCreate, user: User) -> Service:
        price = data.price
        if (
            not data.title
            or not data.category
            or not data.description
            or price is None
            or price.amount is None
            or data.duration is None
        ):
            raise HTTPException(
                status_code=400,
                detail="Missing required fields: title, category, description, price amount, and duration are required",
            )
        if data.duration <= 0 or price.amount < 0:
            raise HTTPException(status_code=400, detail="Duration must be positive and price non-negative")

        service = self.repo.create_service(
            self.db,
            provider_id=user.id,
            title=data.title,
            category=data.category,
            description=data.description,
            price_amount=price.amount,
            price_currency=price.currency or DEFAULT_CURRENCY,
            price_unit=price.unit or "per_session",
            duration=data.duration,
            location_options=data.locationOptions or [],
            capacity=data.capacity or 1,
            is_paused=bool(data.isPaused),
        )
        logger.info(f"Service {service.id} created by provider {user.id}")
        return service

    def update_service(self, service_id: int, data: ServiceCreate, user: User) -> Service:
        service = self.get_owned_service(service_id, user)
        fields = data.model_dump(exclude_unset=True)
        mapping = {
            "title": "title",
            "category": "category",
            "description": "description",
            "duration": "duration",
            "locationOptions": "location_options",
            "capacity": "capacity",
            "isPaused": "is_paused",
        }
        updates = {mapping[k]: v for k, v in fields.items() if k in mapping and v is not None}
        if data.price is not None:
            if data.price.amount is not None:
                updates["price_amount"] = data.price.amount
            if data.price.currency:
                updates["price_currency"] = data.price.currency
            if data.price.unit:
                updates["price_unit"] = data.price.unit
        return self.repo.update_service(self.db, service, **updates)

    def delete_service(self, service_id: int, user: User) -> None:
        service = self.get_owned_service(service_id, user)
        if self.db.query(Booking.id).filter(Booking.service_id == service.id).first():
            raise HTTPException(
                status_code=409,
                detail="Service has bookings and cannot be deleted. Pause it instead.",
            )
        self.repo.delete_service(self.db, service)

    def replace_availability(self, service_id: int, slots: list[AvailabilitySlot], user: User) -> Service:
        service = self.get_owned_service(service_id, user)
        rows = []
        try:
            for slot in slots:
                start, end = validate_time_range(slot.startTime, slot.endTime)
                rows.append(
                    ServiceAvailability(
                        service_id=service.id,
                        day_of_week=validate_day_of_week(slot.dayOfWeek),
                        start_time=start,
                        end_time=end,
                    )
                )
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e

        self.repo.replace_availability(self.db, service, rows)
        return service

    def update_custom_form(self, service_id: int, form_schema: Optional[dict], user: User):
        service = self.get_owned_service(service_id, user)
        if not form_schema:
            raise HTTPException(status_code=400, detail="formSchema is required")
        return self.repo.upsert_custom_form(self.db, service, form_schema)
