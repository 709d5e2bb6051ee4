from datetime import timedelta

from venuebook.models import ROLE_BUSINESS, ROLE_CLIENT, Booking
from venuebook.shared.validators import utcnow


def create_pet(client, headers, **fields):
    body = {"name": "Biscuit", "breed": "Beagle", "age": 3}
    body.update(fields)
    return client.post("/pets", json=body, headers=headers)


def test_create_and_list_pets(client, customer, auth_headers):
    headers = auth_headers(customer)
    response = create_pet(
        client,
        headers,
        emergencyContact={"name": "Jo", "phone": "5550001111", "relation": "sister"},
        customFields={"microchip": "985112"},
    )

    assert response.status_code == 201
    pet = response.json()["pet"]
    assert pet["owner_id"] == customer.id
    assert pet["type"] == "dog"
    assert pet["emergency_contact"]["relation"] == "sister"
    assert pet["custom_fields"] == {"microchip": "985112"}

    create_pet(client, headers, name="Alfie")
    assert [p["name"] for p in client.get("/pets", headers=headers).json()["pets"]] == ["Alfie", "Biscuit"]


def test_pet_name_required(client, customer, auth_headers):
    assert create_pet(client, auth_headers(customer), name=" ").status_code == 400

    pet_id = create_pet(client, auth_headers(customer)).json()["pet"]["id"]
    response = client.put(f"/pets/{pet_id}", json={"name": ""}, headers=auth_headers(customer))
    assert response.status_code == 400


def test_update_pet(client, customer, make_user, auth_headers):
    pet_id = create_pet(client, auth_headers(customer)).json()["pet"]["id"]

    response = client.put(f"/pets/{pet_id}", json={"age": 4, "notes": "Hates baths"}, headers=auth_headers(customer))
    assert response.status_code == 200
    assert response.json()["pet"]["age"] == 4
    assert response.json()["pet"]["name"] == "Biscuit"

    other = make_user(ROLE_CLIENT)
    assert client.put(f"/pets/{pet_id}", json={"age": 1}, headers=auth_headers(other)).status_code == 403


def test_provider_can_read_pets_of_their_clients(client, customer, make_user, make_booking, auth_headers):
    provider = make_user(ROLE_BUSINESS)
    stranger = make_user(ROLE_BUSINESS)
    pet_id = create_pet(client, auth_headers(customer)).json()["pet"]["id"]
    make_booking(customer, utcnow() + timedelta(days=1), provider_id=provider.id)

    assert client.get(f"/pets/{pet_id}", headers=auth_headers(provider)).status_code == 200
    assert client.get(f"/pets/{pet_id}", headers=auth_headers(stranger)).status_code == 403
    assert client.get("/pets/999", headers=auth_headers(customer)).status_code == 404


def test_delete_pet_detaches_bookings(client, db, customer, make_booking, auth_headers):
    pet_id = create_pet(client, auth_headers(customer)).json()["pet"]["id"]
    booking = make_booking(customer, utcnow() + timedelta(days=1), pet_id=pet_id)

    assert client.delete(f"/pets/{pet_id}", headers=auth_headers(customer)).status_code == 200

    db.expire_all()
    assert db.get(Booking, booking.id).pet_id is None
    assert client.get("/pets", headers=auth_headers(customer)).json()["pets"] == []
