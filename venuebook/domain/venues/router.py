"""Venue router - FastAPI endpoints for venues, equipment and document types"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_optional_user, require_roles
from ...database import get_db
from ...models import ROLE_VENUE_MANAGER, User
from .schemas import (
    AvailabilityCreate,
    AvailabilityResponse,
    BondCreate,
    BondResponse,
    DocumentTypeCreate,
    DocumentTypeResponse,
    EquipmentCreate,
    EquipmentResponse,
    FormCreate,
    FormResponse,
    HoldCreate,
    HoldResponse,
    ImageCreate,
    ImageResponse,
    LayoutCreate,
    LayoutResponse,
    VenueCreate,
    VenueEquipmentCreate,
    VenueEquipmentUpdate,
    VenueResponse,
)
from .service import VenueService, equipment_link_payload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/venues", tags=["Venues"])
equipment_router = APIRouter(prefix="/equipment", tags=["Venues"])
document_types_router = APIRouter(prefix="/document-types", tags=["Venues"])

require_manager = require_roles(ROLE_VENUE_MANAGER)


def get_venue_service(db: Session = Depends(get_db)) -> VenueService:
    """Dependency injection for VenueService"""
    return VenueService(db)


def _venue(venue) -> dict:
    return VenueResponse.model_validate(venue).model_dump()


# ============================================================================
# VENUES
# ============================================================================


@router.get("")
async def list_venues(
    category: Optional[str] = Query(None),
    capacity: Optional[int] = Query(None, description="Minimum capacity"),
    location: Optional[str] = Query(None),
    amenities: Optional[str] = Query(None, description="Comma separated, all must match"),
    indoor_outdoor: Optional[str] = Query(None),
    includeInactive: bool = Query(False),
    current_user: Optional[User] = Depends(get_optional_user),
    service: VenueService = Depends(get_venue_service),
):
    venues = service.list_venues(
        current_user,
        category=category,
        capacity=capacity,
        location=location,
        amenities=amenities,
        indoor_outdoor=indoor_outdoor,
        include_inactive=includeInactive,
    )
    return {"venues": [_venue(v) for v in venues]}


@router.get("/{venue_id}")
async def get_venue(
    venue_id: int,
    current_user: Optional[User] = Depends(get_optional_user),
    service: VenueService = Depends(get_venue_service),
):
    """Venue with layouts, equipment, availability, upcoming events and forms"""
    venue = service.get_venue(venue_id, current_user)
    return {
        "venue": _venue(venue),
        "layouts": [LayoutResponse.model_validate(x) for x in venue.layouts],
        "equipment": [equipment_link_payload(x) for x in venue.equipment_links],
        "availability": [AvailabilityResponse.model_validate(x) for x in venue.availability],
        "upcomingEvents": service.get_upcoming_events(venue),
        "forms": [FormResponse.model_validate(x) for x in venue.forms],
    }


@router.post("", status_code=201)
async def create_venue(
    data: VenueCreate,
    current_user: User = Depends(require_manager),
    service: VenueService = Depends(get_venue_service),
):
    venue = service.create_venue(data, current_user)
    return {"message": "Venue created successfully", "venue": _venue(venue)}


@router.put("/{venue_id}")
async def update_venue(
    venue_id: int,
    data: VenueCreate,
    _: User = Depends(require_manager),
    service: VenueService = Depends(get_venue_service),
):
    venue = service.update_venue(venue_id, data)
    return {"message": "Venue updated successfully", "venue": _venue(venue)}


@router.delete("/{venue_id}")
async def delete_venue(
    venue_id: int,
    _: User = Depends(require_manager),
    service: VenueService = Depends(get_venue_service),
):
    service.delete_venue(venue_id)
    return {"message": "Venue deleted successfully"}


# ============================================================================
# LAYOUTS
# ============================================================================


@router.get("/{venue_id}/layouts")
async def list_layouts(
    venue_id: int,
    current_user: Optional[User] = Depends(get_optional_user),
    service: VenueService = Depends(get_venue_service),
):
    venue = service.get_venue(venue_id, current_user)
    return {"layouts": [LayoutResponse.model_validate(x) for x in venue.layouts]}


@router.post("/{venue_id}/layouts", status_code=201)
async def add_layout(
    venue_id: int,
    data: LayoutCreate,
    _: User = Depends(require_manager),
    service: VenueService = Depends(get_venue_service),
):
    layout = service.add_layout(venue_id, data)
    return {"message": "Venue layout added successfully", "layout": LayoutResponse.model_validate(layout)}


@router.put("/{venue_id}/layouts/{layout_id}")
async def update_layout(
    venue_id: int,
    layout_id: int,
    data: LayoutCreate,
    _: User = Depends(require_manager),
    service: VenueService = Depends(get_venue_service),
):
    layout = service.update_layout(venue_id, layout_id, data)
    return {"message": "Venue layout updated successfully", "layout": LayoutResponse.model_validate(layout)}


@router.delete("/{venue_id}/layouts/{layout_id}")
async def delete_layout(
    venue_id: int,
    layout_id: int,
    _: User = Depends(require_manager),
    service: VenueService = Depends(get_venue_service),
):
    service.delete_layout(venue_id, layout_id)
    return {"message": "Venue layout deleted successfully"}


# ============================================================================
# EQUIPMENT
# ============================================================================


@router.get("/{venue_id}/equipment")
async def list_venue_equipment(
    venue_id: int,
    current_user: Optional[User] = Depends(get_optional_user),
    service: VenueService = Depends(get_venue_service),
):
    venue = service.get_venue(venue_id, current_user)
    return {"equipment": [equipment_link_payload(x) for x in venue.equipment_links]}


@router.post("/{venue_id}/equipment", status_code=201)
async def add_venue_equipment(
    venue_id: int,
    data: VenueEquipmentCreate,
    _: User = Depends(require_manager),
    service: VenueService = Depends(get_venue_service),
):
    link = service.add_equipment(venue_id, data)
    return {"message": "Equipment added to venue successfully", "equipment": equipment_link_payload(link)}


@router.put("/{venue_id}/equipment/{equipment_id}")
async def update_venue_equipment(
    venue_id: int,
    equipment_id: int,
    data: VenueEquipmentUpdate,
    _: User = Depends(require_manager),
    service: VenueService = Depends(get_venue_service),
):
    link = service.update_equipment(venue_id, equipment_id, data)
    return {"message": "Venue equipment updated successfully", "equipment": equipment_link_payload(link)}


@router.delete("/{venue_id}/equipment/{equipment_id}")
async def remove_venue_equipment(
    venue_id: int,
    equipment_id: int,
    _: User = Depends(require_manager),
    service: VenueService = Depends(get_venue_service),
):
    service.remove_equipment(venue_id, equipment_id)
    return {"message": "Equipment removed from venue successfully"}


# ============================================================================
# AVAILABILITY
# ============================================================================


@router.get("/{venue_id}/availability")
async def list_availability(
    venue_id: int,
    current_user: Optional[User] = Depends(get_optional_user),
    service: VenueService = Depends(get_venue_service),
):
    venue = service.get_venue(venue_id, current_user)
    return {"availability": [AvailabilityResponse.model_validate(x) for x in venue.availability]}


@router.post("/{venue_id}/availability", status_code=201)
async def add_availability(
    venue_id: int,
    data: AvailabilityCreate,
    _: User = Depends(require_manager),
    service: VenueService = Depends(get_venue_service),
):
    row = service.add_availability(venue_id, data)
    return {
        "message": "Venue availability updated successfully",
        "availability": AvailabilityResponse.model_validate(row),
    }


@router.put("/{venue_id}/availability/{availability_id}")
async def update_availability(
    venue_id: int,
    availability_id: int,
    data: AvailabilityCreate,
    _: User = Depends(require_manager),
    service: VenueService = Depends(get_venue_service),
):
    row = service.update_availability(venue_id, availability_id, data)
    return {
        "message": "Venue availability updated successfully",
        "availability": AvailabilityResponse.model_validate(row),
    }


@router.delete("/{venue_id}/availability/{availability_id}")
async def delete_availability(
    venue_id: int,
    availability_id: int,
    _: User = Depends(require_manager),
    service: VenueService = Depends(get_venue_service),
):
    service.delete_availability(venue_id, availability_id)
    return {"message": "Venue availability deleted successfully"}


@router.get("/{venue_id}/check-availability")
async def check_availability(
    venue_id: int,
    startTime: Optional[str] = Query(None),
    endTime: Optional[str] = Query(None),
    service: VenueService = Depends(get_venue_service),
):
    return service.check_availability(venue_id, startTime, endTime)


# ============================================================================
# BONDS
# ============================================================================


@router.get("/{venue_id}/bonds")
async def list_bonds(
    venue_id: int,
    current_user: Optional[User] = Depends(get_optional_user),
    service: VenueService = Depends(get_venue_service),
):
    venue = service.get_venue(venue_id, current_user)
    return {"bonds": [BondResponse.model_validate(x) for x in venue.bonds]}


@router.post("/{venue_id}/bonds", status_code=201)
async def add_bond(
    venue_id: int,
    data: BondCreate,
    _: User = Depends(require_manager),
    service: VenueService = Depends(get_venue_service),
):
    bond = service.add_bond(venue_id, data)
    return {"message": "Venue bond added successfully", "bond": BondResponse.model_validate(bond)}


@router.put("/{venue_id}/bonds/{bond_id}")
async def update_bond(
    venue_id: int,
    bond_id: int,
    data: BondCreate,
    _: User = Depends(require_manager),
    service: VenueService = Depends(get_venue_service),
):
    bond = service.update_bond(venue_id, bond_id, data)
    return {"message": "Venue bond updated successfully", "bond": BondResponse.model_validate(bond)}


@router.delete("/{venue_id}/bonds/{bond_id}")
async def delete_bond(
    venue_id: int,
    bond_id: int,
    _: User = Depends(require_manager),
    service: VenueService = Depends(get_venue_service),
):
    service.delete_bond(venue_id, bond_id)
    return {"message": "Venue bond deleted successfully"}


# ============================================================================
# IMAGES
# ============================================================================


@router.get("/{venue_id}/images")
async def list_images(
    venue_id: int,
    current_user: Optional[User] = Depends(get_optional_user),
    service: VenueService = Depends(get_venue_service),
):
    venue = service.get_venue(venue_id, current_user)
    return {"images": [ImageResponse.model_validate(x) for x in venue.venue_images]}


@router.post("/{venue_id}/images", status_code=201)
async def add_image(
    venue_id: int,
    data: ImageCreate,
    _: User = Depends(require_manager),
    service: VenueService = Depends(get_venue_service),
):
    image = service.add_image(venue_id, data)
    return {"message": "Venue image added successfully", "image": ImageResponse.model_validate(image)}


@router.put("/{venue_id}/images/{image_id}")
async def update_image(
    venue_id: int,
    image_id: int,
    data: ImageCreate,
    _: User = Depends(require_manager),
    service: VenueService = Depends(get_venue_service),
):
    image = service.update_image(venue_id, image_id, data)
    return {"message": "Venue image updated successfully", "image": ImageResponse.model_validate(image)}


@router.put("/{venue_id}/images/{image_id}/set-primary")
async def set_primary_image(
    venue_id: int,
    image_id: int,
    _: User = Depends(require_manager),
    service: VenueService = Depends(get_venue_service),
):
    image = service.set_primary_image(venue_id, image_id)
    return {"message": "Primary image updated successfully", "image": ImageResponse.model_validate(image)}


@router.delete("/{venue_id}/images/{image_id}")
async def delete_image(
    venue_id: int,
    image_id: int,
    _: User = Depends(require_manager),
    service: VenueService = Depends(get_venue_service),
):
    service.delete_image(venue_id, image_id)
    return {"message": "Venue image deleted successfully"}


# ============================================================================
# FORMS & HOLDS
# ============================================================================


@router.get("/{venue_id}/forms")
async def list_forms(
    venue_id: int,
    current_user: Optional[User] = Depends(get_optional_user),
    service: VenueService = Depends(get_venue_service),
):
    venue = service.get_venue(venue_id, current_user)
    return {"forms": [FormResponse.model_validate(x) for x in venue.forms]}


@router.post("/{venue_id}/forms", status_code=201)
async def add_form(
    venue_id: int,
    data: FormCreate,
    _: User = Depends(require_manager),
    service: VenueService = Depends(get_venue_service),
):
    form = service.add_form(venue_id, data)
    return {"message": "Venue form added successfully", "form": FormResponse.model_validate(form)}


@router.get("/{venue_id}/holds")
async def list_holds(
    venue_id: int,
    _: User = Depends(require_manager),
    service: VenueService = Depends(get_venue_service),
):
    venue = service.get_venue(venue_id, manage=True)
    return {"holds": [HoldResponse.model_validate(x) for x in venue.holds]}


@router.post("/{venue_id}/holds", status_code=201)
async def add_hold(
    venue_id: int,
    data: HoldCreate,
    _: User = Depends(require_manager),
    service: VenueService = Depends(get_venue_service),
):
    hold = service.add_hold(venue_id, data)
    return {"message": "Venue hold added successfully", "hold": HoldResponse.model_validate(hold)}


@router.delete("/{venue_id}/holds/{hold_id}")
async def delete_hold(
    venue_id: int,
    hold_id: int,
    _: User = Depends(require_manager),
    service: VenueService = Depends(get_venue_service),
):
    service.delete_hold(venue_id, hold_id)
    return {"message": "Venue hold deleted successfully"}


# ============================================================================
# CALENDAR & STATISTICS
# ============================================================================


@router.get("/{venue_id}/calendar")
async def get_venue_calendar(
    venue_id: int,
    startDate: Optional[str] = Query(None),
    endDate: Optional[str] = Query(None),
    _: User = Depends(require_manager),
    service: VenueService = Depends(get_venue_service),
):
    return service.get_calendar(venue_id, startDate, endDate)


@router.get("/{venue_id}/statistics")
async def get_venue_statistics(
    venue_id: int,
    startDate: Optional[str] = Query(None),
    endDate: Optional[str] = Query(None),
    groupBy: Optional[str] = Query(None),
    _: User = Depends(require_manager),
    service: VenueService = Depends(get_venue_service),
):
    return service.get_statistics(venue_id, startDate, endDate, groupBy)


# ============================================================================
# EQUIPMENT CATALOGUE & DOCUMENT TYPES
# ============================================================================


@equipment_router.get("")
async def list_equipment(
    _: User = Depends(require_manager),
    service: VenueService = Depends(get_venue_service),
):
    return {"equipment": [EquipmentResponse.model_validate(x) for x in service.list_equipment_catalogue()]}


@equipment_router.post("", status_code=201)
async def create_equipment(
    data: EquipmentCreate,
    _: User = Depends(require_manager),
    service: VenueService = Depends(get_venue_service),
):
    equipment = service.create_equipment(data)
    return {"message": "Equipment created successfully", "equipment": EquipmentResponse.model_validate(equipment)}


@document_types_router.get("")
async def list_document_types(service: VenueService = Depends(get_venue_service)):
    return {"documentTypes": [DocumentTypeResponse.model_validate(x) for x in service.list_document_types()]}


@document_types_router.post("", status_code=201)
async def create_document_type(
    data: DocumentTypeCreate,
    _: User = Depends(require_manager),
    service: VenueService = Depends(get_venue_service),
):
    document_type = service.create_document_type(data)
    return {
        "message": "Document type added successfully",
        "documentType": DocumentTypeResponse.model_validate(document_type),
    }
