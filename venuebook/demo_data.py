"""
Demo business and services for local development.

Run directly with:
    python -m venuebook.demo_data
"""

import logging

from sqlalchemy.orm import Session

from .database import Base, SessionLocal, engine
from .models import ROLE_BUSINESS, Service, User

logger = logging.getLogger(__name__)

DEMO_EMAIL = "demo@venuebook.dev"

DEMO_BUSINESS = {
    "email": DEMO_EMAIL,
    "name": "Demo Business",
    "role": ROLE_BUSINESS,
    "is_verified": True,
    "phone": "5551234567",
    "business_name": "Pawsome Dog Services",
    "business_description": "Full-service dog care center offering grooming, training, boarding, and more.",
}

DEMO_SERVICES = [
    {
        "title": "Basic Dog Grooming",
        "description": "Complete grooming service including bath, brush, nail trim, ear cleaning, and basic haircut.",
        "category": "Grooming",
        "price_amount": 45.0,
        "duration": 60,
        "location_options": ["In-store"],
        "capacity": 1,
    },
    {
        "title": "Deluxe Dog Grooming",
        "description": "Premium grooming package with specialized shampoo, conditioner, teeth brushing, and styled haircut.",
        "category": "Grooming",
        "price_amount": 65.0,
        "duration": 90,
        "location_options": ["In-store"],
        "capacity": 1,
    },
    {
        "title": "Dog Walking - 30 min",
        "description": "A 30-minute walk for your dog with personalized attention and exercise.",
        "category": "Exercise",
        "price_amount": 25.0,
        "duration": 30,
        "location_options": ["Home visit"],
        "capacity": 3,
    },
    {
        "title": "Dog Training Session",
        "description": "One-hour training session focusing on basic commands, leash training, and behavior correction.",
        "category": "Training",
        "price_amount": 75.0,
        "duration": 60,
        "location_options": ["In-store", "Home visit"],
        "capacity": 1,
    },
    {
        "title": "Overnight Pet Sitting",
        "description": "Overnight care for your dog in your home, including feeding, walks, and companionship.",
        "category": "Boarding",
        "price_amount": 85.0,
        "duration": 720,  # 12 hours
        "location_options": ["Home visit"],
        "capacity": 1,
    },
    {
        "title": "Nail Trim",
        "description": "Quick and stress-free nail trimming service for your dog.",
        "category": "Grooming",
        "price_amount": 15.0,
        "duration": 15,
        "location_options": ["In-store"],
        "capacity": 1,
    },
    {
        "title": "Teeth Cleaning",
        "description": "Professional teeth cleaning to maintain your dog's dental health and fresh breath.",
        "category": "Health",
        "price_amount": 40.0,
        "duration": 30,
        "location_options": ["In-store"],
        "capacity": 1,
    },
]


def seed_demo_data(db: Session) -> User:
    """
    Create the demo business and its services if they are missing.

    Safe to call on every startup: an existing demo business keeps its data and
    services are only added when it has none.
    """
    business = db.query(User).filter(User.email == DEMO_EMAIL).first()
    if business is None:
        business = User(**DEMO_BUSINESS)
        db.add(business)
        db.commit()
        db.refresh(business)
        logger.info(f"Demo business created with ID {business.id}")
    else:
        logger.info(f"Demo business already exists with ID {business.id}")

    if db.query(Service.id).filter(Service.provider_id == business.id).first():
        logger.info("Services already exist for demo business")
        return business

    for data in DEMO_SERVICES:
        db.add(Service(provider_id=business.id, price_currency="USD", **data))
    db.commit()
    logger.info(f"Added {len(DEMO_SERVICES)} demo services")
    return business


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        seed_demo_data(session)
    finally:
        session.close()
