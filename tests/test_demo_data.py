from venuebook.demo_data import DEMO_EMAIL, DEMO_SERVICES, seed_demo_data
from venuebook.models import ROLE_BUSINESS, Service, User


def test_seed_demo_data(db):
    business = seed_demo_data(db)

    assert business.email == DEMO_EMAIL
    assert business.role == ROLE_BUSINESS
    services = db.query(Service).filter(Service.provider_id == business.id).all()
    assert len(services) == len(DEMO_SERVICES) == 7
    assert {s.price_currency for s in services} == {"USD"}


def test_seed_demo_data_is_idempotent(db):
    first = seed_demo_data(db)
    second = seed_demo_data(db)

    assert first.id == second.id
    assert db.query(User).filter(User.email == DEMO_EMAIL).count() == 1
    assert db.query(Service).count() == len(DEMO_SERVICES)


def test_demo_business_is_public(client, db):
    business = seed_demo_data(db)

    response = client.get(f"/users/business/{business.id}")

    assert response.status_code == 200
    assert response.json()["business"]["businessName"] == "Pawsome Dog Services"
    assert len(response.json()["business"]["services"]) == 7
