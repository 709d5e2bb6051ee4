"""Service router - FastAPI endpoints for the services catalogue"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_optional_user, require_roles
from ...database import get_db
from ...models import ROLE_BUSINESS, User
from .schemas import AvailabilityReplace, CustomFormUpdate, ServiceCreate
from .service import CatalogueService, service_payload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/services", tags=["Services"])

require_business = require_roles(ROLE_BUSINESS)


def get_catalogue_service(db: Session = Depends(get_db)) -> CatalogueService:
    """Dependency injection for CatalogueService"""
    return CatalogueService(db)


@router.get("")
async def list_services(
    category: Optional[str] = Query(None),
    providerId: Optional[int] = Query(None),
    current_user: Optional[User] = Depends(get_optional_user),
    service: CatalogueService = Depends(get_catalogue_service),
):
    services = service.list_services(current_user, category, providerId)
    return {"services": [service_payload(s) for s in services]}


@router.get("/{service_id}")
async def get_service(
    service_id: int,
    current_user: Optional[User] = Depends(get_optional_user),
    service: CatalogueService = Depends(get_catalogue_service),
):
    return {"service": service_payload(service.get_service(service_id, current_user), detailed=True)}


@router.post("", status_code=201)
async def create_service(
    data: ServiceCreate,
    current_user: User = Depends(require_business),
    service: CatalogueService = Depends(get_catalogue_service),
):
    created = service.create_service(data, current_user)
    return {"message": "Service created successfully", "service": service_payload(created)}


@router.put("/{service_id}")
async def update_service(
    service_id: int,
    data: ServiceCreate,
    current_user: User = Depends(require_business),
    service: CatalogueService = Depends(get_catalogue_service),
):
    updated = service.update_service(service_id, data, current_user)
    return {"message": "Service updated successfully", "service": service_payload(updated)}


@router.delete("/{service_id}")
async def delete_service(
    service_id: int,
    current_user: User = Depends(require_business),
    service: CatalogueService = Depends(get_catalogue_service),
):
    service.delete_service(service_id, current_user)
    return {"message": "Service deleted successfully"}


@router.put("/{service_id}/availability")
async def replace_service_availability(
    service_id: int,
    data: AvailabilityReplace,
    current_user: User = Depends(require_business),
    service: CatalogueService = Depends(get_catalogue_service),
):
    updated = service.replace_availability(service_id, data.availability, current_user)
    return {
        "message": "Service availability updated successfully",
        "service": service_payload(updated, detailed=True),
    }


@router.put("/{service_id}/custom-form")
async def update_custom_form(
    service_id: int,
    data: CustomFormUpdate,
    current_user: User = Depends(require_business),
    service: CatalogueService = Depends(get_catalogue_service),
):
    form = service.update_custom_form(service_id, data.formSchema, current_user)
    return {"message": "Custom form saved successfully", "customForm": form.form_schema}
