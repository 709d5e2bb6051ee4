import itertools
import os
from datetime import timedelta

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key-for-venuebook"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SECURITY_HEADERS_ENABLED"] = "false"
os.environ["LOAD_DEMO_DATA"] = "false"
os.environ.pop("RESEND_API_KEY", None)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from venuebook import email_service  # noqa: E402
from venuebook.database import Base, SessionLocal, engine  # noqa: E402
from venuebook.main import app  # noqa: E402
from venuebook.models import (  # noqa: E402
    ROLE_BUSINESS,
    ROLE_CLIENT,
    ROLE_VENUE_MANAGER,
    Booking,
    Service,
    User,
    Venue,
)
from venuebook.security_utils import create_access_token, hash_password  # noqa: E402

PASSWORD = "password123"
_counter = itertools.count(1)
# bcrypt is slow; every fixture user shares one hash
_password_hash = hash_password(PASSWORD)


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def sent_emails(monkeypatch):
    """Capture outgoing email instead of calling Resend"""
    sent = []

    async def fake_send_email(to, subject, mjml_content, from_address=None):
        sent.append({"to": to, "subject": subject, "body": mjml_content})
        return {"id": f"email-{len(sent)}"}

    monkeypatch.setattr(email_service, "send_email", fake_send_email)
    return sent


@pytest.fixture
def make_user(db):
    def _make(role=ROLE_CLIENT, email=None, name=None, registered=True, **extra):
        number = next(_counter)
        user = User(
            email=email or f"{role}{number}@example.com",
            name=name or f"{role.replace('_', ' ').title()} {number}",
            role=role,
            is_verified=True,
            password_hash=_password_hash if registered else None,
            **extra,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def auth_headers():
    def _headers(user):
        return {"Authorization": f"Bearer {create_access_token(user.id, user.role)}"}

    return _headers


@pytest.fixture
def business(make_user):
    return make_user(ROLE_BUSINESS, business_name="Pawsome Dog Services")


@pytest.fixture
def manager(make_user):
    return make_user(ROLE_VENUE_MANAGER)


@pytest.fixture
def customer(make_user):
    return make_user(ROLE_CLIENT)


@pytest.fixture
def grooming(db, business):
    service = Service(
        provider_id=business.id,
        title="Basic Dog Grooming",
        category="Grooming",
        description="Bath, brush and nail trim.",
        price_amount=45.0,
        price_currency="USD",
        duration=60,
        location_options=["In-store"],
        capacity=1,
    )
    db.add(service)
    db.commit()
    db.refresh(service)
    return service


@pytest.fixture
def hall(db, manager):
    venue = Venue(
        owner_id=manager.id,
        name="Riverside Community Hall",
        category="Hall",
        location="Wellington",
        address="12 River Road",
        capacity=150,
        price_standard=80.0,
        price_community=40.0,
        price_commercial=120.0,
        price_currency="NZD",
        amenities=["kitchen", "stage"],
    )
    db.add(venue)
    db.commit()
    db.refresh(venue)
    return venue


@pytest.fixture
def make_booking(db):
    def _make(client_user, start, hours=1, status="confirmed", **fields):
        booking = Booking(
            client_id=client_user.id,
            start_time=start,
            end_time=start + timedelta(hours=hours),
            status=status,
            payment_status=fields.pop("payment_status", "pending"),
            **fields,
        )
        db.add(booking)
        db.commit()
        db.refresh(booking)
        return booking

    return _make
