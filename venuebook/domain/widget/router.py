"""Widget router - management endpoints for businesses and public endpoints for the embed"""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from ...auth import require_roles, security
from ...database import get_db
from ...email_service import notify, send_new_booking_notification
from ...models import ROLE_BUSINESS, User
from ...rate_limiter import create_rate_limiter
from ..bookings.service import booking_payload
from ..services.service import service_payload
from .schemas import (
    ApiKeyCreate,
    ApiKeyResponse,
    BookingStepRequest,
    SignatureRequest,
    TokenRequest,
    WidgetSettingsUpdate,
)
from .service import WidgetService, decode_widget_token, settings_payload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/widget", tags=["Widget"])

require_business = require_roles(ROLE_BUSINESS)

widget_token_limit = create_rate_limiter(limit=60, window_seconds=60, key_prefix="widget_token")
widget_booking_limit = create_rate_limiter(limit=30, window_seconds=60, key_prefix="widget_booking")


def get_widget_service(db: Session = Depends(get_db)) -> WidgetService:
    """Dependency injection for WidgetService"""
    return WidgetService(db)


async def get_widget_session(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> dict[str, Any]:
    """Decoded widget token from the Authorization header, 401 otherwise"""
    if not credentials:
        raise HTTPException(status_code=401, detail="No token provided")
    payload = decode_widget_token(credentials.credentials)
    if not payload:
        raise HTTPException(status_code=401, detail="Invalid widget token")
    return payload


# ============================================================================
# BUSINESS MANAGEMENT
# ============================================================================


@router.post("/api-key", status_code=201)
async def create_api_key(
    data: Optional[ApiKeyCreate] = None,
    current_user: User = Depends(require_business),
    service: WidgetService = Depends(get_widget_service),
):
    api_key = service.create_api_key(current_user, data.name if data else None)
    return {
        "message": "API key generated successfully",
        "id": api_key.id,
        "apiKey": api_key.key,
        "apiSecret": api_key.secret,
    }


@router.get("/api-keys")
async def list_api_keys(
    current_user: User = Depends(require_business),
    service: WidgetService = Depends(get_widget_service),
):
    return {"apiKeys": [ApiKeyResponse.model_validate(k) for k in service.list_api_keys(current_user)]}


@router.delete("/api-keys/{key_id}")
async def delete_api_key(
    key_id: int,
    current_user: User = Depends(require_business),
    service: WidgetService = Depends(get_widget_service),
):
    service.delete_api_key(key_id, current_user)
    return {"message": "API key revoked successfully"}


@router.get("/settings")
async def get_widget_settings(
    current_user: User = Depends(require_business),
    service: WidgetService = Depends(get_widget_service),
):
    return {"settings": settings_payload(service.get_settings(current_user))}


@router.put("/settings")
async def update_widget_settings(
    data: WidgetSettingsUpdate,
    current_user: User = Depends(require_business),
    service: WidgetService = Depends(get_widget_service),
):
    settings = service.update_settings(current_user, data)
    return {"message": "Widget settings saved successfully", "settings": settings_payload(settings)}


@router.get("/embed-code")
async def get_embed_code(
    apiKey: Optional[str] = Query(None),
    primaryColor: Optional[str] = Query(None),
    layout: Optional[str] = Query(None),
    current_user: User = Depends(require_business),
    service: WidgetService = Depends(get_widget_service),
):
    embed_code = service.get_embed_code(
        current_user, {"apiKey": apiKey, "primaryColor": primaryColor, "layout": layout}
    )
    return {"message": "Embed code generated successfully", "embedCode": embed_code}


# ============================================================================
# PUBLIC WIDGET ENDPOINTS
# ============================================================================


@router.post("/token")
async def issue_widget_token(
    data: TokenRequest,
    _: None = Depends(widget_token_limit),
    service: WidgetService = Depends(get_widget_service),
):
    return service.issue_token(data.apiKey, data.customization)


@router.get("/verify-token")
async def verify_widget_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
):
    payload = decode_widget_token(credentials.credentials if credentials else None)
    if not payload:
        return JSONResponse(status_code=401, content={"error": "Invalid token", "valid": False})
    return {
        "valid": True,
        "businessId": payload["businessId"],
        "customization": payload.get("customization") or {},
    }


@router.get("/services")
async def list_widget_services(
    session: dict = Depends(get_widget_session),
    service: WidgetService = Depends(get_widget_service),
):
    business = service.get_business(session["businessId"])
    services = service.bookable_services(business.id)
    return {
        "services": [service_payload(s) for s in services.values()],
        "business": {
            "id": business.id,
            "name": business.business_name or business.name,
            "description": business.business_description,
        },
    }


@router.post("/validate-signature")
async def validate_signature(
    data: SignatureRequest,
    service: WidgetService = Depends(get_widget_service),
):
    return {"valid": service.validate_signature(data.apiKey, data.signature, data.payload)}


@router.post("/booking/step")
async def booking_step(
    data: BookingStepRequest,
    session: dict = Depends(get_widget_session),
    service: WidgetService = Depends(get_widget_service),
):
    state = service.booking_step(session["businessId"], data.state, data.data, data.action)
    return {"state": state}


@router.post("/booking", status_code=201)
async def submit_widget_booking(
    data: BookingStepRequest,
    _: None = Depends(widget_booking_limit),
    session: dict = Depends(get_widget_session),
    service: WidgetService = Depends(get_widget_service),
):
    booking = service.submit_booking(session["businessId"], data.state)
    await notify(send_new_booking_notification, booking)
    return {"message": "Booking request submitted successfully", "booking": booking_payload(booking)}
