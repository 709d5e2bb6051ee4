"""Widget service - API keys, customization, widget tokens and widget bookings"""

import logging
from typing import Any, Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...config import DEFAULT_CURRENCY
from ...models import ApiKey, Booking, Service, User, WidgetSettings
from ...routes.customers import upsert_customer
from ...security_utils import (
    create_widget_token,
    generate_api_credentials,
    strip_html,
    verify_jwt_token,
    verify_widget_signature,
)
from ...shared.validators import parse_datetime, utcnow
from . import booking_flow
from .embed import CALENDAR_STYLES, build_embed_code
from .repository import WidgetRepository
from .schemas import SETTINGS_FIELDS, WidgetSettingsResponse, WidgetSettingsUpdate

logger = logging.getLogger(__name__)


def decode_widget_token(token: Optional[str]) -> Optional[dict[str, Any]]:
    """Payload of a valid widget token, None for anything else (including access tokens)"""
    if not token:
        return None
    payload = verify_jwt_token(token)
    if not payload or payload.get("widget") is not True or not payload.get("businessId"):
        return None
    return payload


def settings_payload(settings: Optional[WidgetSettings]) -> Optional[dict[str, Any]]:
    if settings is None:
        return None
    return WidgetSettingsResponse.model_validate(settings).model_dump()


class WidgetService:
    """Service layer for the embeddable booking widget"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = WidgetRepository()

    # ------------------------------------------------------------------
    # API keys
    # ------------------------------------------------------------------

    def create_api_key(self, user: User, name: Optional[str] = None) -> ApiKey:
        key, secret = generate_api_credentials()
        api_key = self.repo.create_api_key(
            self.db,
            business_id=user.id,
            name=(name or "").strip() or "Widget API Key",
            key=key,
            secret=secret,
        )
        logger.info(f"Widget API key {api_key.id} created for business {user.id}")
        return api_key

    def list_api_keys(self, user: User) -> list[ApiKey]:
        return self.repo.list_api_keys(self.db, user.id)

    def delete_api_key(self, key_id: int, user: User) -> None:
        api_key = self.repo.get_api_key(self.db, key_id, user.id)
        if not api_key:
            raise HTTPException(status_code=404, detail="API key not found")
        self.repo.delete_api_key(self.db, api_key)
        logger.info(f"Widget API key {key_id} revoked by business {user.id}")

    # ------------------------------------------------------------------
    # Settings and embed code
    # ------------------------------------------------------------------

    def get_settings(self, user: User) -> Optional[WidgetSettings]:
        return self.repo.get_settings(self.db, user.id)

    def update_settings(self, user: User, data: WidgetSettingsUpdate) -> WidgetSettings:
        fields = data.model_dump(exclude_unset=True)
        if fields.get("calendarStyle") and fields["calendarStyle"] not in CALENDAR_STYLES:
            raise HTTPException(
                status_code=400,
                detail=f"calendarStyle must be one of: {', '.join(CALENDAR_STYLES)}",
            )

        settings = self.repo.get_settings(self.db, user.id) or WidgetSettings(
            business_id=user.id, features={}
        )
        for key, value in fields.items():
            if key == "features":
                # Replace the dict so the JSON column is flagged dirty
                settings.features = {**(settings.features or {}), **(value or {})}
            elif key in ("logoUrl", "headerText"):
                setattr(settings, SETTINGS_FIELDS[key], strip_html(value))
            else:
                setattr(settings, SETTINGS_FIELDS[key], value)
        return self.repo.save_settings(self.db, settings)

    def get_embed_code(self, user: User, overrides: dict[str, Any]) -> str:
        api_key = overrides.get("apiKey")
        if not api_key:
            keys = self.repo.list_api_keys(self.db, user.id)
            if not keys:
                raise HTTPException(
                    status_code=400,
                    detail="No API key found. Please generate an API key first.",
                )
            api_key = keys[0].key

        options: dict[str, Any] = {}
        settings = self.repo.get_settings(self.db, user.id)
        if settings is not None:
            options = {key: getattr(settings, column) for key, column in SETTINGS_FIELDS.items()}
        options.update({k: v for k, v in overrides.items() if k != "apiKey" and v})

        try:
            return build_embed_code(api_key, options)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e

    # ------------------------------------------------------------------
    # Public widget access
    # ------------------------------------------------------------------

    def issue_token(self, key: Optional[str], customization: Optional[dict]) -> dict[str, Any]:
        if not key:
            raise HTTPException(status_code=400, detail="API key is required")
        api_key = self.repo.find_by_key(self.db, key)
        if not api_key:
            logger.warning("Widget token requested with an unknown API key")
            raise HTTPException(status_code=401, detail="Invalid API key")

        api_key.last_used_at = utcnow()
        self.db.commit()

        business = api_key.business
        return {
            "token": create_widget_token(business.id, customization or {}),
            "businessName": business.business_name or business.name,
            "businessId": business.id,
        }

    def validate_signature(self, key: Optional[str], signature: Optional[str], payload: Any) -> bool:
        if not key:
            raise HTTPException(status_code=400, detail="API key is required")
        api_key = self.repo.find_by_key(self.db, key)
        if not api_key:
            return False
        return verify_widget_signature(api_key.secret, payload, signature)

    def get_business(self, business_id: int) -> User:
        business = self.repo.get_business(self.db, business_id)
        if not business:
            raise HTTPException(status_code=404, detail="Business not found")
        return business

    def bookable_services(self, business_id: int) -> dict[int, Service]:
        return {s.id: s for s in self.repo.active_services(self.db, business_id)}

    # ------------------------------------------------------------------
    # Booking wizard
    # ------------------------------------------------------------------

    def booking_step(
        self,
        business_id: int,
        state: Optional[dict],
        data: Optional[dict],
        action: Optional[str] = "next",
    ) -> dict[str, Any]:
        try:
            if action == "back":
                return booking_flow.back(state)
            if action not in (None, "next"):
                raise ValueError("action must be 'next' or 'back'")
            return booking_flow.advance(state, data, self.bookable_services(business_id))
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e

    def submit_booking(self, business_id: int, state: Optional[dict]) -> Booking:
        services = self.bookable_services(business_id)
        try:
            fields, errors = booking_flow.validate_submission(state, services)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e
        if errors:
            raise HTTPException(status_code=400, detail={"message": "Booking is incomplete", "errors": errors})

        service = services[fields["serviceId"]]
        customer, _ = upsert_customer(self.db, fields["name"], fields["email"], fields.get("phone"))

        booking = Booking(
            service_id=service.id,
            provider_id=business_id,
            client_id=customer.id,
            start_time=parse_datetime(fields["startTime"]),
            end_time=parse_datetime(fields["endTime"]),
            location=(service.location_options or ["at_provider"])[0],
            status="pending",
            total_price_amount=service.price_amount,
            total_price_currency=service.price_currency or DEFAULT_CURRENCY,
            payment_status="pending",
            client_notes=strip_html(fields.get("notes")),
        )
        self.db.add(booking)
        self.db.commit()
        self.db.refresh(booking)
        logger.info(f"Widget booking {booking.id} created for business {business_id}")
        return booking
