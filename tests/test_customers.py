from datetime import timedelta

from venuebook.models import ROLE_ADMIN, ROLE_BUSINESS, ROLE_CLIENT, Pet
from venuebook.shared.validators import utcnow


def test_upsert_creates_guest_customer(client):
    response = client.post(
        "/customers", json={"name": "Sam Guest", "email": "Sam@Example.com", "phone": "555-123-4567"}
    )

    assert response.status_code == 201
    customer = response.json()["customer"]
    assert customer["email"] == "sam@example.com"
    assert customer["phone"] == "5551234567"


def test_upsert_updates_guest_customer(client):
    client.post("/customers", json={"name": "Sam Guest", "email": "sam@example.com"})

    response = client.post("/customers", json={"name": "Samantha", "email": "sam@example.com", "phone": "5550001111"})

    assert response.status_code == 200
    assert response.json()["customer"]["name"] == "Samantha"
    assert response.json()["customer"]["phone"] == "5550001111"


def test_upsert_only_fills_blanks_for_registered_accounts(client, make_user):
    user = make_user(ROLE_CLIENT, email="owner@example.com", name="Real Name")

    response = client.post(
        "/customers", json={"name": "Someone Else", "email": "owner@example.com", "phone": "5550001111"}
    )

    assert response.status_code == 200
    customer = response.json()["customer"]
    assert customer["id"] == user.id
    assert customer["name"] == "Real Name"
    assert customer["phone"] == "5550001111"


def test_upsert_validation(client):
    assert client.post("/customers", json={"email": "a@example.com"}).status_code == 400
    assert client.post("/customers", json={"name": "   ", "email": "a@example.com"}).status_code == 400
    assert client.post("/customers", json={"name": "A", "email": "nope"}).status_code == 400
    assert client.post("/customers", json={"name": "A", "email": "a@example.com", "phone": "1"}).status_code == 400


def test_list_customers_scoped_to_provider(client, business, customer, make_user, make_booking, auth_headers):
    other_business = make_user(ROLE_BUSINESS)
    other_client = make_user(ROLE_CLIENT, name="Zed")
    start = utcnow() + timedelta(days=1)
    make_booking(customer, start, provider_id=business.id)
    make_booking(customer, start + timedelta(days=1), provider_id=business.id)
    make_booking(other_client, start, provider_id=other_business.id)

    customers = client.get("/customers", headers=auth_headers(business)).json()["customers"]
    assert [(c["id"], c["bookingCount"]) for c in customers] == [(customer.id, 2)]

    assert client.get("/customers", headers=auth_headers(customer)).status_code == 403

    admin = make_user(ROLE_ADMIN)
    everyone = client.get("/customers", headers=auth_headers(admin)).json()["customers"]
    assert {c["id"] for c in everyone} == {customer.id, other_client.id}


def test_search_customers(client, business, make_user, make_booking, auth_headers):
    start = utcnow() + timedelta(days=1)
    for name in ("Alice Walker", "Bob Stone"):
        make_booking(make_user(ROLE_CLIENT, name=name), start, provider_id=business.id)

    found = client.get("/customers", params={"search": "walk"}, headers=auth_headers(business)).json()["customers"]
    assert [c["name"] for c in found] == ["Alice Walker"]


def test_provider_without_bookings_sees_no_customers(client, business, customer, auth_headers):
    assert client.get("/customers", headers=auth_headers(business)).json() == {"customers": []}


def test_customer_detail_and_bookings(client, db, business, customer, make_user, make_booking, auth_headers):
    db.add(Pet(owner_id=customer.id, name="Biscuit", breed="Beagle"))
    db.commit()
    start = utcnow() + timedelta(days=1)
    first = make_booking(customer, start, provider_id=business.id)
    second = make_booking(customer, start + timedelta(days=2), provider_id=business.id)
    headers = auth_headers(business)

    detail = client.get(f"/customers/{customer.id}", headers=headers).json()["customer"]
    assert detail["bookingCount"] == 2
    assert detail["pets"][0]["name"] == "Biscuit"

    bookings = client.get(f"/customers/{customer.id}/bookings", headers=headers).json()["bookings"]
    assert [b["id"] for b in bookings] == [second.id, first.id]

    stranger = make_user(ROLE_BUSINESS)
    assert client.get(f"/customers/{customer.id}", headers=auth_headers(stranger)).status_code == 403
    assert client.get("/customers/999", headers=headers).status_code == 404
