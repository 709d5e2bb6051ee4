from datetime import timedelta

import pytest

from venuebook.models import ROLE_ADMIN, ROLE_CLIENT, Booking
from venuebook.shared.validators import utcnow


@pytest.fixture
def booking(customer, business, grooming, make_booking):
    return make_booking(
        customer,
        utcnow() + timedelta(days=2),
        service_id=grooming.id,
        provider_id=business.id,
        total_price_amount=45.0,
        total_price_currency="USD",
    )


def create_intent(client, headers, booking_id):
    return client.post("/payments/create-intent", json={"bookingId": booking_id}, headers=headers)


def test_payment_lifecycle(client, db, customer, make_user, booking, auth_headers):
    headers = auth_headers(customer)

    intent = create_intent(client, headers, booking.id)
    assert intent.status_code == 200
    data = intent.json()
    assert data["bookingId"] == booking.id
    assert data["clientSecret"].startswith("pi_")
    assert "_secret_" in data["clientSecret"]

    confirmed = client.post(f"/payments/{data['paymentId']}/confirm", headers=headers)
    assert confirmed.status_code == 200
    assert confirmed.json()["payment"]["status"] == "completed"
    assert confirmed.json()["payment"]["amount"] == 45.0

    db.expire_all()
    assert db.get(Booking, booking.id).payment_status == "paid"
    assert create_intent(client, headers, booking.id).status_code == 400
    assert client.post(f"/payments/{data['paymentId']}/confirm", headers=headers).status_code == 400

    admin = make_user(ROLE_ADMIN)
    refunded = client.post(
        "/payments/refund",
        json={"paymentId": data["paymentId"], "reason": "Groomer unavailable"},
        headers=auth_headers(admin),
    )
    assert refunded.status_code == 200
    assert refunded.json()["payment"]["status"] == "refunded"
    assert refunded.json()["payment"]["refund_reason"] == "Groomer unavailable"
    assert refunded.json()["payment"]["refunded_at"] is not None

    db.expire_all()
    assert db.get(Booking, booking.id).payment_status == "refunded"


def test_create_intent_checks(client, db, customer, make_user, booking, auth_headers):
    headers = auth_headers(customer)
    assert client.post("/payments/create-intent", json={}, headers=headers).status_code == 400
    assert create_intent(client, headers, 999).status_code == 404

    other = make_user(ROLE_CLIENT)
    assert create_intent(client, auth_headers(other), booking.id).status_code == 403

    booking.status = "cancelled"
    db.commit()
    assert create_intent(client, headers, booking.id).status_code == 400


def test_confirm_requires_payment_owner(client, customer, make_user, booking, auth_headers):
    payment_id = create_intent(client, auth_headers(customer), booking.id).json()["paymentId"]

    other = make_user(ROLE_CLIENT)
    assert client.post(f"/payments/{payment_id}/confirm", headers=auth_headers(other)).status_code == 403
    assert client.post("/payments/999/confirm", headers=auth_headers(customer)).status_code == 404

    admin = make_user(ROLE_ADMIN)
    assert client.post(f"/payments/{payment_id}/confirm", headers=auth_headers(admin)).status_code == 200


def test_refund_checks(client, customer, make_user, booking, auth_headers):
    admin = make_user(ROLE_ADMIN)
    payment_id = create_intent(client, auth_headers(customer), booking.id).json()["paymentId"]

    assert client.post("/payments/refund", json={"paymentId": payment_id}, headers=auth_headers(customer)).status_code == 403
    assert client.post("/payments/refund", json={}, headers=auth_headers(admin)).status_code == 400
    assert client.post("/payments/refund", json={"paymentId": 999}, headers=auth_headers(admin)).status_code == 404
    # still pending
    assert client.post("/payments/refund", json={"paymentId": payment_id}, headers=auth_headers(admin)).status_code == 400


def test_payment_history(client, customer, make_user, booking, auth_headers):
    create_intent(client, auth_headers(customer), booking.id)
    create_intent(client, auth_headers(customer), booking.id)

    own = client.get("/payments/history", headers=auth_headers(customer)).json()["payments"]
    assert len(own) == 2

    other = make_user(ROLE_CLIENT)
    assert client.get("/payments/history", headers=auth_headers(other)).json()["payments"] == []

    admin = make_user(ROLE_ADMIN)
    assert len(client.get("/payments/history", headers=auth_headers(admin)).json()["payments"]) == 2
