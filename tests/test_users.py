from venuebook.models import ROLE_ADMIN


def test_update_profile(client, customer, auth_headers):
    response = client.put(
        "/users/profile",
        json={"name": "Jamie Client", "phone": "+64 21 555 0101"},
        headers=auth_headers(customer),
    )

    assert response.status_code == 200
    user = response.json()["user"]
    assert user["name"] == "Jamie Client"
    assert user["phone"] == "+64215550101"


def test_update_profile_rejects_bad_phone(client, customer, auth_headers):
    response = client.put("/users/profile", json={"phone": "12"}, headers=auth_headers(customer))
    assert response.status_code == 422


def test_list_users_is_admin_only(client, make_user, customer, business, auth_headers):
    admin = make_user(ROLE_ADMIN)

    assert client.get("/users", headers=auth_headers(customer)).status_code == 403

    response = client.get("/users", params={"role": "business"}, headers=auth_headers(admin))
    assert response.status_code == 200
    assert [u["id"] for u in response.json()["users"]] == [business.id]


def test_business_hours_and_public_profile(client, business, grooming, auth_headers):
    response = client.put(
        "/users/business-hours",
        json={
            "Monday": [{"start": "13:00", "end": "17:00"}, {"start": "09:00", "end": "12:00"}],
            "saturday": [{"start": "10:00", "end": "14:00"}],
        },
        headers=auth_headers(business),
    )
    assert response.status_code == 200
    assert response.json()["slots"] == 3

    profile = client.get(f"/users/business/{business.id}").json()["business"]
    assert profile["businessName"] == "Pawsome Dog Services"
    assert profile["businessHours"]["monday"] == [
        {"start": "09:00", "end": "12:00"},
        {"start": "13:00", "end": "17:00"},
    ]
    assert profile["businessHours"]["sunday"] == []
    assert [s["title"] for s in profile["services"]] == ["Basic Dog Grooming"]


def test_business_hours_replace_previous(client, business, auth_headers):
    headers = auth_headers(business)
    client.put("/users/business-hours", json={"monday": [{"start": "09:00", "end": "17:00"}]}, headers=headers)
    client.put("/users/business-hours", json={"tuesday": [{"start": "10:00", "end": "11:00"}]}, headers=headers)

    hours = client.get(f"/users/business/{business.id}").json()["business"]["businessHours"]
    assert hours["monday"] == []
    assert hours["tuesday"] == [{"start": "10:00", "end": "11:00"}]


def test_business_hours_validation(client, business, customer, auth_headers):
    headers = auth_headers(business)
    bad_day = client.put("/users/business-hours", json={"funday": []}, headers=headers)
    assert bad_day.status_code == 400

    backwards = client.put(
        "/users/business-hours", json={"monday": [{"start": "17:00", "end": "09:00"}]}, headers=headers
    )
    assert backwards.status_code == 400

    not_business = client.put("/users/business-hours", json={}, headers=auth_headers(customer))
    assert not_business.status_code == 403


def test_business_profile_not_found(client, customer):
    assert client.get(f"/users/business/{customer.id}").status_code == 404
