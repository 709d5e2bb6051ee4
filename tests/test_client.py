from datetime import timedelta

import httpx
import pytest

from venuebook.client import (
    MOCK_USER,
    SIGNED_IN,
    SIGNED_OUT,
    ApiError,
    AuthenticationRequired,
    AuthSession,
    PortalClient,
)
from venuebook.shared.validators import utcnow


class FakeApi:
    """Records requests and answers from a (method, path) -> (status, body) table"""

    def __init__(self, routes):
        self.routes = routes
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status, body = self.routes.get((request.method, request.url.path), (404, {"detail": "Not Found"}))
        if body is None:
            return httpx.Response(status)
        return httpx.Response(status, json=body)


def make_client(routes, **kwargs):
    api = FakeApi(routes)
    return PortalClient("http://api.test/", transport=httpx.MockTransport(api), **kwargs), api


def test_login_sets_bearer_token():
    client, api = make_client(
        {
            ("POST", "/auth/login"): (200, {"user": {"id": 5}, "token": "abc"}),
            ("GET", "/venues"): (200, {"venues": [{"id": 1}]}),
        }
    )

    client.login("kim@example.com", "password123")
    assert client.token == "abc"
    assert client.list_venues() == [{"id": 1}]
    assert api.requests[-1].headers["Authorization"] == "Bearer abc"


def test_none_params_are_dropped():
    client, api = make_client({("GET", "/bookings"): (200, {"bookings": []})})

    client.list_bookings(status="confirmed")

    assert dict(api.requests[0].url.params) == {"status": "confirmed"}


def test_unauthorized_clears_token_and_notifies():
    calls = []
    client, _ = make_client(
        {("GET", "/auth/session"): (401, {"detail": "Invalid authentication credentials"})},
        token="stale",
        on_unauthorized=lambda: calls.append("401"),
    )

    with pytest.raises(AuthenticationRequired) as exc_info:
        client.get_session()

    assert exc_info.value.status == 401
    assert exc_info.value.message == "Invalid authentication credentials"
    assert client.token is None
    assert calls == ["401"]


def test_error_message_from_detail_or_error():
    client, _ = make_client(
        {
            ("POST", "/bookings"): (400, {"detail": {"message": "Booking is incomplete", "errors": {}}}),
            ("DELETE", "/venues/3"): (409, {"error": "Venue has bookings"}),
            ("GET", "/venues/4"): (500, None),
        }
    )

    with pytest.raises(ApiError) as exc_info:
        client.create_booking({})
    assert (exc_info.value.status, exc_info.value.message) == (400, "Booking is incomplete")

    with pytest.raises(ApiError) as exc_info:
        client.delete_venue(3)
    assert (exc_info.value.status, exc_info.value.message) == (409, "Venue has bookings")

    with pytest.raises(ApiError) as exc_info:
        client.get_venue(4)
    assert exc_info.value.status == 500


def test_empty_body_returns_none():
    client, _ = make_client({("PUT", "/bookings/1/complete"): (204, None)})

    assert client.complete_booking(1) is None


def test_mock_mode():
    client = PortalClient("http://api.test", mock=True)

    login = client.login("anyone@example.com", "whatever")
    assert login["user"] == MOCK_USER
    assert client.token == "mock-token"

    assert len(client.list_services()) == 7
    assert client.get_service(1)["title"]
    assert set(client.get_venue(1)) == {"venue", "layouts", "equipment", "availability", "upcomingEvents", "forms"}
    assert client.get_venue_calendar(1, "2030-01-01", "2030-01-31")["calendarEvents"][0]["title"] == "Birthday party"
    assert "mock-api-key" in client.get_embed_code()

    created = client.create_venue({"name": "Pop-up Space", "priceStandard": 50})
    assert created == {
        "message": "Venue created successfully",
        "venue": {"name": "Pop-up Space", "price_standard": 50, "id": 1000},
    }
    assert client.get_venue(1000)["venue"]["name"] == "Pop-up Space"

    updated = client.update_booking(2, {"status": "confirmed"})
    assert updated["message"] == "Booking updated successfully"
    assert updated["booking"]["status"] == "confirmed"
    assert updated["booking"]["event_name"] == "Birthday party"
    assert client.get_booking(2)["status"] == "confirmed"

    with pytest.raises(ApiError) as exc_info:
        client.get_booking(99)
    assert exc_info.value.status == 404


def test_auth_session_events():
    client = PortalClient("http://api.test", mock=True)
    session = AuthSession(client)
    events = []
    unsubscribe = session.on_auth_state_change(lambda event, user: events.append((event, user and user["id"])))

    session.login("anyone@example.com", "whatever")
    session.refresh()
    session.logout()
    unsubscribe()
    session.login("anyone@example.com", "whatever")

    assert events == [(SIGNED_IN, MOCK_USER["id"]), (SIGNED_OUT, None)]
    assert session.current_user == MOCK_USER


def test_auth_session_signs_out_on_401():
    client, _ = make_client(
        {
            ("POST", "/auth/login"): (200, {"user": {"id": 5}, "token": "abc"}),
            ("GET", "/auth/session"): (401, {"detail": "Token expired"}),
        }
    )
    session = AuthSession(client)
    events = []
    session.on_auth_state_change(lambda event, user: events.append(event))

    session.login("kim@example.com", "password123")
    assert session.refresh() is None

    assert events == [SIGNED_IN, SIGNED_OUT]
    assert session.current_user is None
    assert client.token is None


def test_refresh_without_token():
    client, api = make_client({})
    session = AuthSession(client)

    assert session.refresh() is None
    assert api.requests == []


def test_mock_writes_use_api_envelopes(client, customer, grooming, auth_headers):
    start = utcnow() + timedelta(days=2)
    body = {
        "serviceId": grooming.id,
        "startTime": start.replace(microsecond=0).isoformat(),
        "endTime": (start + timedelta(hours=1)).replace(microsecond=0).isoformat(),
        "location": "at_provider",
    }
    real = client.post("/bookings", json=body, headers=auth_headers(customer)).json()

    mock = PortalClient("http://api.test", mock=True).create_booking(body)

    assert set(mock) == set(real) == {"message", "booking"}
    assert mock["message"] == real["message"]
    assert mock["booking"]["service_id"] == real["booking"]["service_id"]
    assert mock["booking"]["status"] == real["booking"]["status"] == "pending"


def test_mock_booking_lifecycle():
    client = PortalClient("http://api.test", mock=True)

    cancelled = client.cancel_booking(1)
    assert cancelled["booking"]["status"] == "cancelled"
    assert cancelled["booking"]["cancellation_reason"] == "No reason provided"

    assert client.complete_booking(2)["booking"]["status"] == "completed"
    review = client.review_booking(2, 5, "Lovely hall")["review"]
    assert (review["booking_id"], review["rating"]) == (2, 5)

    assert client.delete_venue(2) == {"message": "Venue deleted successfully"}
    with pytest.raises(ApiError):
        client.get_venue(2)


def test_mock_customer_upsert():
    client = PortalClient("http://api.test", mock=True)

    created = client.upsert_customer("Robin", "robin@example.com")
    assert created["message"] == "Customer created successfully"
    assert created["customer"]["email"] == "robin@example.com"

    updated = client.upsert_customer("Jamie C", "Jamie@Example.com", "5550001111")
    assert updated["message"] == "Customer updated successfully"
    assert updated["customer"]["id"] == 2
    assert updated["customer"]["phone"] == "5550001111"


def test_mock_data_is_per_client():
    first = PortalClient("http://api.test", mock=True)
    first.delete_venue(1)

    assert len(PortalClient("http://api.test", mock=True).list_venues()) == 2
