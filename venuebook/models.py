from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base

ROLE_ADMIN = "admin"
ROLE_VENUE_MANAGER = "venue_manager"
ROLE_BUSINESS = "business"
ROLE_CLIENT = "client"
ROLES = (ROLE_ADMIN, ROLE_VENUE_MANAGER, ROLE_BUSINESS, ROLE_CLIENT)

BOOKING_STATUSES = ("pending", "confirmed", "completed", "cancelled", "no_show")
PAYMENT_STATUSES = ("pending", "paid", "refunded", "failed")
DAYS_OF_WEEK = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=True)  # null for customers created from the booking page
    name = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    role = Column(String(50), default=ROLE_CLIENT, nullable=False, index=True)
    is_verified = Column(Boolean, default=False, nullable=False)
    business_name = Column(String(255), nullable=True)
    business_description = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    business_hours = relationship(
        "BusinessHours", back_populates="business", cascade="all, delete-orphan"
    )
    api_keys = relationship("ApiKey", back_populates="business", cascade="all, delete-orphan")
    widget_settings = relationship(
        "WidgetSettings", back_populates="business", uselist=False, cascade="all, delete-orphan"
    )
    pets = relationship("Pet", back_populates="owner", cascade="all, delete-orphan")
    services = relationship("Service", back_populates="provider")


class BusinessHours(Base):
    __tablename__ = "business_hours"

    id = Column(Integer, primary_key=True, index=True)
    business_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    day_of_week = Column(String(10), nullable=False)
    start_time = Column(String(5), nullable=False)  # HH:MM
    end_time = Column(String(5), nullable=False)  # HH:MM

    business = relationship("User", back_populates="business_hours")


class ApiKey(Base):
    __tablename__ = "api_keys"

    id = Column(Integer, primary_key=True, index=True)
    business_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(255), default="Widget API Key")
    key = Column(String(64), unique=True, index=True, nullable=False)
    secret = Column(String(128), nullable=False)
    last_used_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    business = relationship("User", back_populates="api_keys")


class WidgetSettings(Base):
    __tablename__ = "widget_settings"

    id = Column(Integer, primary_key=True, index=True)
    business_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False)
    primary_color = Column(String(20), nullable=True)  # e.g., #RRGGBB
    secondary_color = Column(String(20), nullable=True)
    text_color = Column(String(20), nullable=True)
    font_family = Column(String(100), nullable=True)
    border_radius = Column(String(20), nullable=True)
    layout = Column(String(50), nullable=True)
    logo_url = Column(String(500), nullable=True)
    header_text = Column(String(255), nullable=True)
    button_style = Column(String(50), nullable=True)
    dark_mode = Column(Boolean, nullable=True)
    calendar_style = Column(String(20), nullable=True)  # standard, compact, expanded
    features = Column(JSON, default=dict)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    business = relationship("User", back_populates="widget_settings")


class Pet(Base):
    __tablename__ = "pets"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    type = Column(String(50), default="dog")
    breed = Column(String(255), nullable=True)
    age = Column(Integer, nullable=True)
    gender = Column(String(20), default="unspecified")
    special_requirements = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    emergency_contact = Column(JSON, nullable=True)  # {name, phone, relation}
    custom_fields = Column(JSON, default=dict)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    owner = relationship("User", back_populates="pets")


class Service(Base):
    __tablename__ = "services"

    id = Column(Integer, primary_key=True, index=True)
    provider_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    category = Column(String(100), nullable=False)
    description = Column(Text, nullable=False)
    price_amount = Column(Float, nullable=False)
    price_currency = Column(String(3), default="USD")
    price_unit = Column(String(20), default="per_session")
    duration = Column(Integer, nullable=False)  # minutes
    location_options = Column(JSON, default=list)
    capacity = Column(Integer, default=1)
    is_paused = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    provider = relationship("User", back_populates="services")
    availability = relationship(
        "ServiceAvailability", back_populates="service", cascade="all, delete-orphan"
    )
    custom_form = relationship(
        "ServiceCustomForm", back_populates="service", uselist=False, cascade="all, delete-orphan"
    )


class ServiceAvailability(Base):
    __tablename__ = "service_availability"

    id = Column(Integer, primary_key=True, index=True)
    service_id = Column(Integer, ForeignKey("services.id"), nullable=False, index=True)
    day_of_week = Column(String(10), nullable=False)
    start_time = Column(String(5), nullable=False)
    end_time = Column(String(5), nullable=False)

    service = relationship("Service", back_populates="availability")


class ServiceCustomForm(Base):
    __tablename__ = "service_custom_forms"

    id = Column(Integer, primary_key=True, index=True)
    service_id = Column(Integer, ForeignKey("services.id"), unique=True, nullable=False)
    form_schema = Column(JSON, nullable=False)

    service = relationship("Service", back_populates="custom_form")


class Venue(Base):
    __tablename__ = "venues"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(100), nullable=True, index=True)
    location = Column(String(255), nullable=False)
    address = Column(String(500), nullable=False)
    capacity = Column(Integer, nullable=False)
    area_size = Column(Float, nullable=True)
    indoor_outdoor = Column(String(20), nullable=True)  # indoor, outdoor, both
    amenities = Column(JSON, default=list)
    accessibility_features = Column(JSON, default=list)
    images = Column(JSON, default=list)
    floor_plans = Column(JSON, default=list)
    map_coordinates = Column(JSON, nullable=True)
    # Hourly prices per pricing tier
    price_commercial = Column(Float, nullable=True)
    price_community = Column(Float, nullable=True)
    price_standard = Column(Float, nullable=True)
    price_currency = Column(String(3), default="NZD")
    bond_required = Column(Boolean, default=False)
    bond_amount = Column(Float, default=0)
    # Booking rules, all in minutes
    min_booking_time = Column(Integer, nullable=True)
    max_booking_time = Column(Integer, nullable=True)
    booking_increment = Column(Integer, default=30)
    buffer_time = Column(Integer, default=0)
    advance_booking_min = Column(Integer, nullable=True)
    advance_booking_max = Column(Integer, nullable=True)
    auto_confirm_threshold = Column(Integer, nullable=True)
    min_notice_for_cancellation = Column(Integer, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    layouts = relationship("VenueLayout", back_populates="venue", cascade="all, delete-orphan")
    equipment_links = relationship(
        "VenueEquipment", back_populates="venue", cascade="all, delete-orphan"
    )
    availability = relationship(
        "VenueAvailability", back_populates="venue", cascade="all, delete-orphan"
    )
    holds = relationship("VenueHold", back_populates="venue", cascade="all, delete-orphan")
    bonds = relationship("VenueBond", back_populates="venue", cascade="all, delete-orphan")
    venue_images = relationship(
        "VenueImage",
        back_populates="venue",
        cascade="all, delete-orphan",
        order_by="VenueImage.sort_order",
    )
    forms = relationship("VenueForm", back_populates="venue", cascade="all, delete-orphan")


class VenueLayout(Base):
    __tablename__ = "venue_layouts"

    id = Column(Integer, primary_key=True, index=True)
    venue_id = Column(Integer, ForeignKey("venues.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    capacity = Column(Integer, nullable=False)
    layout_image = Column(String(500), nullable=True)
    layout_details = Column(JSON, default=dict)
    is_default = Column(Boolean, default=False, nullable=False)

    venue = relationship("Venue", back_populates="layouts")


class Equipment(Base):
    __tablename__ = "equipment"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(100), nullable=True)
    daily_fee = Column(Float, default=0)
    price_currency = Column(String(3), default="NZD")
    quantity_available = Column(Integer, default=1)
    setup_required = Column(Boolean, default=False)
    setup_instructions = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, server_default=func.now())


class VenueEquipment(Base):
    __tablename__ = "venue_equipment"
    __table_args__ = (UniqueConstraint("venue_id", "equipment_id", name="uq_venue_equipment"),)

    id = Column(Integer, primary_key=True, index=True)
    venue_id = Column(Integer, ForeignKey("venues.id"), nullable=False, index=True)
    equipment_id = Column(Integer, ForeignKey("equipment.id"), nullable=False)
    quantity_available = Column(Integer, default=1)
    notes = Column(Text, nullable=True)

    venue = relationship("Venue", back_populates="equipment_links")
    equipment = relationship("Equipment")


class VenueAvailability(Base):
    __tablename__ = "venue_availability"

    id = Column(Integer, primary_key=True, index=True)
    venue_id = Column(Integer, ForeignKey("venues.id"), nullable=False, index=True)
    day_of_week = Column(String(10), nullable=True)
    specific_date = Column(Date, nullable=True)
    start_time = Column(String(5), nullable=False)
    end_time = Column(String(5), nullable=False)
    is_available = Column(Boolean, default=True, nullable=False)
    reason = Column(String(500), nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    venue = relationship("Venue", back_populates="availability")


class VenueHold(Base):
    __tablename__ = "venue_holds"

    id = Column(Integer, primary_key=True, index=True)
    venue_id = Column(Integer, ForeignKey("venues.id"), nullable=False, index=True)
    hold_type = Column(String(50), nullable=False)  # maintenance, tentative, private
    hold_reason = Column(String(500), nullable=True)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    held_by_name = Column(String(255), nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    venue = relationship("Venue", back_populates="holds")


class VenueBond(Base):
    __tablename__ = "venue_bonds"

    id = Column(Integer, primary_key=True, index=True)
    venue_id = Column(Integer, ForeignKey("venues.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    amount = Column(Float, nullable=False)
    currency = Column(String(3), default="NZD")
    description = Column(Text, nullable=True)
    is_refundable = Column(Boolean, default=True, nullable=False)

    venue = relationship("Venue", back_populates="bonds")


class VenueImage(Base):
    __tablename__ = "venue_images"

    id = Column(Integer, primary_key=True, index=True)
    venue_id = Column(Integer, ForeignKey("venues.id"), nullable=False, index=True)
    url = Column(String(1000), nullable=False)
    caption = Column(String(500), nullable=True)
    is_primary = Column(Boolean, default=False, nullable=False)
    sort_order = Column(Integer, default=0)

    venue = relationship("Venue", back_populates="venue_images")


class VenueForm(Base):
    __tablename__ = "venue_forms"

    id = Column(Integer, primary_key=True, index=True)
    venue_id = Column(Integer, ForeignKey("venues.id"), nullable=False, index=True)
    form_name = Column(String(255), nullable=False)
    form_description = Column(Text, nullable=True)
    form_schema = Column(JSON, nullable=False)
    is_required = Column(Boolean, default=True, nullable=False)
    applies_to = Column(JSON, nullable=True)

    venue = relationship("Venue", back_populates="forms")


class DocumentType(Base):
    __tablename__ = "document_types"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    venue_categories = Column(JSON, default=list)
    event_types = Column(JSON, default=list)
    is_mandatory = Column(Boolean, default=False, nullable=False)


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    # A booking is for either a service or a venue
    service_id = Column(Integer, ForeignKey("services.id"), nullable=True, index=True)
    venue_id = Column(Integer, ForeignKey("venues.id"), nullable=True, index=True)
    provider_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    client_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    pet_id = Column(Integer, ForeignKey("pets.id"), nullable=True)
    assigned_staff_id = Column(Integer, nullable=True)
    start_time = Column(DateTime, nullable=False, index=True)
    end_time = Column(DateTime, nullable=False)
    location = Column(String(255), nullable=True)  # at_provider, at_client, or venue name
    status = Column(String(20), default="pending", nullable=False, index=True)
    total_price_amount = Column(Float, default=0)
    total_price_currency = Column(String(3), default="USD")
    payment_status = Column(String(20), default="pending", nullable=False)
    client_notes = Column(Text, nullable=True)
    provider_notes = Column(Text, nullable=True)
    internal_notes = Column(Text, nullable=True)
    custom_form_data = Column(JSON, nullable=True)
    # Venue bookings
    event_name = Column(String(255), nullable=True)
    event_type = Column(String(100), nullable=True)
    expected_attendance = Column(Integer, nullable=True)
    pricing_tier = Column(String(20), nullable=True)  # commercial, community, standard
    cancellation_reason = Column(Text, nullable=True)
    cancellation_time = Column(DateTime, nullable=True)
    cancellation_by = Column(String(20), nullable=True)  # client, provider
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    service = relationship("Service")
    venue = relationship("Venue")
    pet = relationship("Pet")
    provider = relationship("User", foreign_keys=[provider_id])
    client = relationship("User", foreign_keys=[client_id])
    review = relationship("Review", back_populates="booking", uselist=False)
    reminders = relationship(
        "BookingReminder", back_populates="booking", cascade="all, delete-orphan"
    )


class BookingReminder(Base):
    __tablename__ = "booking_reminders"

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(Integer, ForeignKey("bookings.id"), nullable=False, index=True)
    type = Column(String(20), default="email", nullable=False)
    sent_at = Column(DateTime, nullable=False)

    booking = relationship("Booking", back_populates="reminders")


class Review(Base):
    __tablename__ = "reviews"

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(Integer, ForeignKey("bookings.id"), unique=True, nullable=False)
    client_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    provider_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    rating = Column(Integer, nullable=False)  # 1-5
    comment = Column(Text, default="")
    created_at = Column(DateTime, server_default=func.now())

    booking = relationship("Booking", back_populates="review")


class Payment(Base):
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(Integer, ForeignKey("bookings.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    amount = Column(Float, nullable=False)
    currency = Column(String(3), default="USD")
    status = Column(String(20), default="pending", nullable=False)  # pending, completed, refunded
    client_secret = Column(String(128), nullable=False)
    refund_reason = Column(Text, nullable=True)
    refunded_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    booking = relationship("Booking")
