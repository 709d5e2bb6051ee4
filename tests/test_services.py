from datetime import timedelta

from venuebook.models import ROLE_BUSINESS
from venuebook.shared.validators import utcnow

SERVICE = {
    "title": "Puppy Training",
    "category": "Training",
    "description": "Basic commands for puppies under six months.",
    "price": {"amount": 60},
    "duration": 45,
    "locationOptions": ["In-store", "Home visit"],
}


def test_create_service(client, business, auth_headers):
    response = client.post("/services", json=SERVICE, headers=auth_headers(business))

    assert response.status_code == 201
    service = response.json()["service"]
    assert service["provider_id"] == business.id
    assert service["price_amount"] == 60
    assert service["price_currency"] == "USD"
    assert service["price_unit"] == "per_session"
    assert service["capacity"] == 1
    assert service["is_paused"] is False


def test_create_service_validation(client, business, customer, auth_headers):
    headers = auth_headers(business)
    for field in ("title", "category", "description", "price", "duration"):
        body = {k: v for k, v in SERVICE.items() if k != field}
        assert client.post("/services", json=body, headers=headers).status_code == 400

    assert client.post("/services", json={**SERVICE, "price": {}}, headers=headers).status_code == 400
    assert client.post("/services", json={**SERVICE, "duration": 0}, headers=headers).status_code == 400
    assert client.post("/services", json=SERVICE, headers=auth_headers(customer)).status_code == 403


def test_list_and_filter_services(client, grooming, business, auth_headers):
    client.post("/services", json=SERVICE, headers=auth_headers(business))

    titles = [s["title"] for s in client.get("/services").json()["services"]]
    assert titles == ["Basic Dog Grooming", "Puppy Training"]

    training = client.get("/services", params={"category": "Training"}).json()["services"]
    assert [s["title"] for s in training] == ["Puppy Training"]

    assert client.get("/services", params={"providerId": 999}).json()["services"] == []


def test_paused_services_hidden_from_others(client, grooming, business, make_user, auth_headers):
    client.put(f"/services/{grooming.id}", json={"isPaused": True}, headers=auth_headers(business))

    assert client.get("/services").json()["services"] == []
    assert client.get(f"/services/{grooming.id}").status_code == 404

    own = client.get("/services", headers=auth_headers(business)).json()["services"]
    assert [s["id"] for s in own] == [grooming.id]
    assert client.get(f"/services/{grooming.id}", headers=auth_headers(business)).status_code == 200

    other_business = make_user(ROLE_BUSINESS)
    assert client.get("/services", headers=auth_headers(other_business)).json()["services"] == []


def test_update_service(client, grooming, business, make_user, auth_headers):
    response = client.put(
        f"/services/{grooming.id}",
        json={"title": "Full Groom", "price": {"amount": 55, "currency": "NZD"}},
        headers=auth_headers(business),
    )

    assert response.status_code == 200
    service = response.json()["service"]
    assert service["title"] == "Full Groom"
    assert service["price_amount"] == 55
    assert service["price_currency"] == "NZD"
    assert service["duration"] == 60

    other_business = make_user(ROLE_BUSINESS)
    forbidden = client.put(f"/services/{grooming.id}", json={"title": "Mine"}, headers=auth_headers(other_business))
    assert forbidden.status_code == 403
    assert client.put("/services/999", json={"title": "x"}, headers=auth_headers(business)).status_code == 404


def test_delete_service(client, grooming, business, customer, make_booking, auth_headers):
    headers = auth_headers(business)
    make_booking(customer, utcnow() + timedelta(days=1), service_id=grooming.id)
    assert client.delete(f"/services/{grooming.id}", headers=headers).status_code == 409

    created = client.post("/services", json=SERVICE, headers=headers).json()["service"]
    assert client.delete(f"/services/{created['id']}", headers=headers).status_code == 200
    assert client.get(f"/services/{created['id']}").status_code == 404


def test_replace_availability(client, grooming, business, auth_headers):
    headers = auth_headers(business)
    url = f"/services/{grooming.id}/availability"

    first = client.put(
        url,
        json={"availability": [{"dayOfWeek": "Monday", "startTime": "09:00", "endTime": "12:00"}]},
        headers=headers,
    )
    assert first.status_code == 200
    assert first.json()["service"]["availability"] == [
        {"dayOfWeek": "monday", "startTime": "09:00", "endTime": "12:00"}
    ]

    second = client.put(
        url,
        json={"availability": [{"dayOfWeek": "friday", "startTime": "13:00", "endTime": "15:00"}]},
        headers=headers,
    )
    assert [a["dayOfWeek"] for a in second.json()["service"]["availability"]] == ["friday"]

    bad = client.put(
        url, json={"availability": [{"dayOfWeek": "friday", "startTime": "15:00", "endTime": "13:00"}]}, headers=headers
    )
    assert bad.status_code == 400


def test_custom_form(client, grooming, business, auth_headers):
    headers = auth_headers(business)
    url = f"/services/{grooming.id}/custom-form"
    schema = {"fields": [{"name": "coat", "type": "select", "options": ["short", "long"]}]}

    response = client.put(url, json={"formSchema": schema}, headers=headers)
    assert response.status_code == 200
    assert response.json()["customForm"] == schema

    client.put(url, json={"formSchema": {"fields": []}}, headers=headers)
    detail = client.get(f"/services/{grooming.id}").json()["service"]
    assert detail["customForm"] == {"fields": []}

    assert client.put(url, json={}, headers=headers).status_code == 400
