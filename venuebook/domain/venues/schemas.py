"""Venue domain schemas - Pydantic models for validation"""

from datetime import date, datetime
from typing import Any, Optional

from pydantic import BaseModel

# Request field name -> Venue column
VENUE_FIELDS = {
    "name": "name",
    "description": "description",
    "category": "category",
    "location": "location",
    "address": "address",
    "capacity": "capacity",
    "areaSize": "area_size",
    "indoorOutdoor": "indoor_outdoor",
    "amenities": "amenities",
    "accessibilityFeatures": "accessibility_features",
    "images": "images",
    "floorPlans": "floor_plans",
    "mapCoordinates": "map_coordinates",
    "priceCommercial": "price_commercial",
    "priceCommunity": "price_community",
    "priceStandard": "price_standard",
    "priceCurrency": "price_currency",
    "bondRequired": "bond_required",
    "bondAmount": "bond_amount",
    "minBookingTime": "min_booking_time",
    "maxBookingTime": "max_booking_time",
    "bookingIncrement": "booking_increment",
    "bufferTime": "buffer_time",
    "advanceBookingMin": "advance_booking_min",
    "advanceBookingMax": "advance_booking_max",
    "autoConfirmThreshold": "auto_confirm_threshold",
    "minNoticeForCancellation": "min_notice_for_cancellation",
    "isActive": "is_active",
}


class VenueCreate(BaseModel):
    """Schema for creating or updating a venue; required fields are checked by the service"""

    name: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    location: Optional[str] = None
    address: Optional[str] = None
    capacity: Optional[int] = None
    areaSize: Optional[float] = None
    indoorOutdoor: Optional[str] = None
    amenities: Optional[list[str]] = None
    accessibilityFeatures: Optional[list[str]] = None
    images: Optional[list[str]] = None
    floorPlans: Optional[list[str]] = None
    mapCoordinates: Optional[dict[str, Any]] = None
    priceCommercial: Optional[float] = None
    priceCommunity: Optional[float] = None
    priceStandard: Optional[float] = None
    priceCurrency: Optional[str] = None
    bondRequired: Optional[bool] = None
    bondAmount: Optional[float] = None
    minBookingTime: Optional[int] = None
    maxBookingTime: Optional[int] = None
    bookingIncrement: Optional[int] = None
    bufferTime: Optional[int] = None
    advanceBookingMin: Optional[int] = None
    advanceBookingMax: Optional[int] = None
    autoConfirmThreshold: Optional[int] = None
    minNoticeForCancellation: Optional[int] = None
    isActive: Optional[bool] = None

    def to_columns(self, exclude_unset: bool = False) -> dict[str, Any]:
        data = self.model_dump(exclude_unset=exclude_unset)
        return {VENUE_FIELDS[key]: value for key, value in data.items() if key in VENUE_FIELDS}


class VenueResponse(BaseModel):
    id: int
    owner_id: Optional[int] = None
    name: str
    description: Optional[str] = None
    category: Optional[str] = None
    location: str
    address: str
    capacity: int
    area_size: Optional[float] = None
    indoor_outdoor: Optional[str] = None
    amenities: Optional[list] = None
    accessibility_features: Optional[list] = None
    images: Optional[list] = None
    floor_plans: Optional[list] = None
    map_coordinates: Optional[dict] = None
    price_commercial: Optional[float] = None
    price_community: Optional[float] = None
    price_standard: Optional[float] = None
    price_currency: Optional[str] = None
    bond_required: Optional[bool] = None
    bond_amount: Optional[float] = None
    min_booking_time: Optional[int] = None
    max_booking_time: Optional[int] = None
    booking_increment: Optional[int] = None
    buffer_time: Optional[int] = None
    advance_booking_min: Optional[int] = None
    advance_booking_max: Optional[int] = None
    auto_confirm_threshold: Optional[int] = None
    min_notice_for_cancellation: Optional[int] = None
    is_active: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class LayoutCreate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    capacity: Optional[int] = None
    layoutImage: Optional[str] = None
    layoutDetails: Optional[dict[str, Any]] = None
    isDefault: Optional[bool] = None


class LayoutResponse(BaseModel):
    id: int
    venue_id: int
    name: str
    description: Optional[str] = None
    capacity: int
    layout_image: Optional[str] = None
    layout_details: Optional[dict] = None
    is_default: bool

    class Config:
        from_attributes = True


class EquipmentCreate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    dailyFee: Optional[float] = None
    priceCurrency: Optional[str] = None
    quantityAvailable: Optional[int] = None
    setupRequired: Optional[bool] = None
    setupInstructions: Optional[str] = None
    isActive: Optional[bool] = None


class EquipmentResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    category: Optional[str] = None
    daily_fee: float
    price_currency: str
    quantity_available: int
    setup_required: bool
    setup_instructions: Optional[str] = None
    is_active: bool

    class Config:
        from_attributes = True


class VenueEquipmentCreate(BaseModel):
    equipmentId: Optional[int] = None
    quantityAvailable: Optional[int] = None
    notes: Optional[str] = None


class VenueEquipmentUpdate(BaseModel):
    quantityAvailable: Optional[int] = None
    notes: Optional[str] = None


class AvailabilityCreate(BaseModel):
    dayOfWeek: Optional[str] = None
    specificDate: Optional[date] = None
    startTime: Optional[str] = None
    endTime: Optional[str] = None
    isAvailable: Optional[bool] = None
    reason: Optional[str] = None


class AvailabilityResponse(BaseModel):
    id: int
    venue_id: int
    day_of_week: Optional[str] = None
    specific_date: Optional[date] = None
    start_time: str
    end_time: str
    is_available: bool
    reason: Optional[str] = None

    class Config:
        from_attributes = True


class HoldCreate(BaseModel):
    holdType: Optional[str] = None
    holdReason: Optional[str] = None
    startTime: Optional[datetime] = None
    endTime: Optional[datetime] = None
    heldByName: Optional[str] = None


class HoldResponse(BaseModel):
    id: int
    venue_id: int
    hold_type: str
    hold_reason: Optional[str] = None
    start_time: datetime
    end_time: datetime
    held_by_name: Optional[str] = None

    class Config:
        from_attributes = True


class BondCreate(BaseModel):
    name: Optional[str] = None
    amount: Optional[float] = None
    currency: Optional[str] = None
    description: Optional[str] = None
    isRefundable: Optional[bool] = None


class BondResponse(BaseModel):
    id: int
    venue_id: int
    name: str
    amount: float
    currency: str
    description: Optional[str] = None
    is_refundable: bool

    class Config:
        from_attributes = True


class ImageCreate(BaseModel):
    url: Optional[str] = None
    caption: Optional[str] = None
    isPrimary: Optional[bool] = None
    sortOrder: Optional[int] = None


class ImageResponse(BaseModel):
    id: int
    venue_id: int
    url: str
    caption: Optional[str] = None
    is_primary: bool
    sort_order: int

    class Config:
        from_attributes = True


class FormCreate(BaseModel):
    formName: Optional[str] = None
    formDescription: Optional[str] = None
    formSchema: Optional[dict[str, Any]] = None
    isRequired: Optional[bool] = None
    appliesTo: Optional[list[str]] = None


class FormResponse(BaseModel):
    id: int
    venue_id: int
    form_name: str
    form_description: Optional[str] = None
    form_schema: dict
    is_required: bool
    applies_to: Optional[list] = None

    class Config:
        from_attributes = True


class DocumentTypeCreate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    venueCategories: Optional[list[str]] = None
    eventTypes: Optional[list[str]] = None
    isMandatory: Optional[bool] = None


class DocumentTypeResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    venue_categories: list
    event_types: list
    is_mandatory: bool

    class Config:
        from_attributes = True
