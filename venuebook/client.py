"""
REST client for the VenueBook API.

    client = PortalClient("http://localhost:8000")
    session = AuthSession(client)
    session.login("owner@example.com", "secret-password")
    venues = client.list_venues()

With mock=True every call is answered locally from the demo catalogue, which
keeps front-end development and scripts working without a running server.
"""

import itertools
import logging
from typing import Any, Callable, Optional

import httpx

from .demo_data import DEMO_BUSINESS, DEMO_SERVICES

logger = logging.getLogger(__name__)

SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"


class ApiError(Exception):
    """Non-2xx response from the API"""

    def __init__(self, status: int, message: str):
        super().__init__(f"{status}: {message}")
        self.status = status
        self.message = message


class AuthenticationRequired(ApiError):
    """401 response; the stored token has been cleared and the caller should log in again"""


def _error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(data, dict):
        detail = data.get("detail") or data.get("error") or data.get("message")
        if isinstance(detail, dict):
            return detail.get("message") or str(detail)
        if detail:
            return str(detail)
    return response.reason_phrase


# ============================================================================
# MOCK DATA
# ============================================================================

MOCK_USER = {
    "id": 1,
    "email": DEMO_BUSINESS["email"],
    "name": DEMO_BUSINESS["name"],
    "phone": DEMO_BUSINESS["phone"],
    "role": DEMO_BUSINESS["role"],
    "is_verified": True,
    "business_name": DEMO_BUSINESS["business_name"],
    "business_description": DEMO_BUSINESS["business_description"],
}

MOCK_SERVICES = [
    {
        "id": index,
        "provider_id": MOCK_USER["id"],
        "title": service["title"],
        "category": service["category"],
        "description": service["description"],
        "price_amount": service["price_amount"],
        "price_currency": "USD",
        "price_unit": "per_session",
        "duration": service["duration"],
        "location_options": list(service["location_options"]),
        "capacity": service["capacity"],
        "is_paused": False,
    }
    for index, service in enumerate(DEMO_SERVICES, start=1)
]

MOCK_VENUES = [
    {
        "id": 1,
        "name": "Riverside Community Hall",
        "description": "Main hall with a stage and kitchen access.",
        "category": "Hall",
        "location": "Wellington",
        "address": "12 River Road, Wellington",
        "capacity": 150,
        "price_standard": 85.0,
        "price_currency": "NZD",
        "is_active": True,
    },
    {
        "id": 2,
        "name": "Harbour Meeting Room",
        "description": "Meeting room for up to 20 people with a projector.",
        "category": "Meeting Room",
        "location": "Wellington",
        "address": "3 Quay Street, Wellington",
        "capacity": 20,
        "price_standard": 35.0,
        "price_currency": "NZD",
        "is_active": True,
    },
]

MOCK_BOOKINGS = [
    {
        "id": 1,
        "service_id": 1,
        "venue_id": None,
        "provider_id": MOCK_USER["id"],
        "client_id": 2,
        "start_time": "2030-01-15T10:00:00",
        "end_time": "2030-01-15T11:00:00",
        "location": "In-store",
        "status": "confirmed",
        "total_price_amount": 45.0,
        "total_price_currency": "USD",
        "payment_status": "pending",
    },
    {
        "id": 2,
        "service_id": None,
        "venue_id": 1,
        "provider_id": MOCK_USER["id"],
        "client_id": 2,
        "start_time": "2030-01-20T18:00:00",
        "end_time": "2030-01-20T22:00:00",
        "location": "Riverside Community Hall",
        "status": "pending",
        "event_name": "Birthday party",
        "total_price_amount": 340.0,
        "total_price_currency": "NZD",
        "payment_status": "pending",
    },
]

MOCK_CUSTOMERS = [
    {"id": 2, "name": "Jamie Client", "email": "jamie@example.com", "phone": "5559876543", "bookingCount": 2},
]


# collection path -> (response key, seed items)
MOCK_COLLECTIONS = {
    "services": ("service", MOCK_SERVICES),
    "venues": ("venue", MOCK_VENUES),
    "bookings": ("booking", MOCK_BOOKINGS),
    "customers": ("customer", MOCK_CUSTOMERS),
}


def _find(items: list[dict], item_id: Any) -> Optional[dict]:
    return next((item for item in items if str(item["id"]) == str(item_id)), None)


def _find_by(items: list[dict], field: str, value: Any) -> Optional[dict]:
    if value is None:
        return None
    return next((item for item in items if str(item.get(field, "")).lower() == str(value).lower()), None)


def _snake_case(name: str) -> str:
    return "".join(f"_{c.lower()}" if c.isupper() else c for c in name)


# ============================================================================
# CLIENT
# ============================================================================


class PortalClient:
    """
    Thin wrapper over the REST API.

    Args:
        base_url: API root, e.g. http://localhost:8000
        token: Bearer token to start with
        mock: Answer every call from local demo data without network I/O
        transport: Optional httpx transport (tests pass httpx.MockTransport)
        on_unauthorized: Called after a 401 clears the stored token
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        mock: bool = False,
        transport: Optional[httpx.BaseTransport] = None,
        on_unauthorized: Optional[Callable[[], None]] = None,
        timeout: float = 30.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.mock = mock
        self.on_unauthorized = on_unauthorized
        self.token: Optional[str] = None
        self._mock_ids = itertools.count(1000)
        # per-client copy so mock writes show up in later reads
        self._mock_store = {
            name: [dict(item) for item in items] for name, (_, items) in MOCK_COLLECTIONS.items()
        }
        self._http = httpx.Client(
            base_url=self.base_url,
            headers={"Content-Type": "application/json"},
            transport=transport,
            timeout=timeout,
        )
        self.set_auth_token(token)

    def close(self) -> None:
        self._http.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    # ------------------------------------------------------------------
    # Token handling
    # ------------------------------------------------------------------

    def set_auth_token(self, token: Optional[str]) -> None:
        if not token:
            return
        self.token = token
        self._http.headers["Authorization"] = f"Bearer {token}"

    def remove_auth_token(self) -> None:
        self.token = None
        self._http.headers.pop("Authorization", None)

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def request(
        self,
        method: str,
        path: str,
        json: Optional[dict] = None,
        params: Optional[dict] = None,
    ) -> Any:
        """
        Send a request and return the decoded JSON body.

        Raises:
            AuthenticationRequired: On 401, after clearing the token
            ApiError: On any other non-2xx status
        """
        if self.mock:
            return self._mock_response(method.upper(), path, json, params)

        if params:
            params = {k: v for k, v in params.items() if v is not None}
        response = self._http.request(method, path, json=json, params=params or None)

        if response.status_code == 401:
            message = _error_message(response)
            logger.warning(f"API {method} {path} unauthorized: {message}")
            self.remove_auth_token()
            if self.on_unauthorized:
                self.on_unauthorized()
            raise AuthenticationRequired(401, message)

        if response.is_error:
            message = _error_message(response)
            logger.error(f"API {method} {path} failed with {response.status_code}: {message}")
            raise ApiError(response.status_code, message)

        if not response.content:
            return None
        return response.json()

    def _mock_response(self, method: str, path: str, json: Optional[dict], params: Optional[dict]) -> Any:
        parts = [p for p in path.strip("/").split("/") if p]

        if method != "GET":
            if parts[:1] == ["auth"]:
                if parts[1:] in (["login"], ["register"]):
                    return {"user": dict(MOCK_USER), "token": "mock-token"}
                return {"message": "OK"}
            return self._mock_write(method, parts, dict(json or {}))

        if parts == ["auth", "session"]:
            return {"user": dict(MOCK_USER), "expires_at": None}
        if len(parts) == 1 and parts[0] in self._mock_store:
            return {parts[0]: list(self._mock_store[parts[0]])}
        if parts == ["widget", "embed-code"]:
            return {
                "message": "Embed code generated successfully",
                "embedCode": '<div id="venuebook-widget"></div>\n'
                f'<script src="{self.base_url}/widget.js" data-api-key="mock-api-key" async></script>',
            }
        if len(parts) == 3 and parts[0] == "venues" and parts[2] == "calendar":
            venue = _find(self._mock_store["venues"], parts[1])
            if venue is None:
                raise ApiError(404, "Venue not found")
            events = [
                {"id": b["id"], "title": b.get("event_name") or "Booking", "start": b["start_time"],
                 "end": b["end_time"], "type": "booking", "status": b["status"]}
                for b in self._mock_store["bookings"]
                if b["venue_id"] == venue["id"]
            ]
            return {"venue": {"id": venue["id"], "name": venue["name"]}, "calendarEvents": events}
        if len(parts) == 2:
            if parts[0] in MOCK_COLLECTIONS:
                key = MOCK_COLLECTIONS[parts[0]][0]
                item = _find(self._mock_store[parts[0]], parts[1])
                if item is None:
                    raise ApiError(404, f"{key.title()} not found")
                if key == "venue":
                    return {
                        "venue": item,
                        "layouts": [],
                        "equipment": [],
                        "availability": [],
                        "upcomingEvents": [],
                        "forms": [],
                    }
                return {key: item}

        raise ApiError(404, f"No mock data for {method} {path}")

    def _mock_write(self, method: str, parts: list[str], payload: dict) -> Any:
        """Apply a write to the mock store and answer with the API's envelope"""
        if not parts or parts[0] not in MOCK_COLLECTIONS:
            raise ApiError(404, f"No mock data for {method} /{'/'.join(parts)}")
        key = MOCK_COLLECTIONS[parts[0]][0]
        label = key.title()
        items = self._mock_store[parts[0]]
        fields = {_snake_case(k): v for k, v in payload.items()}

        if len(parts) == 1 and method == "POST":
            # customers are upserted by email
            existing = _find_by(items, "email", fields.get("email")) if key == "customer" else None
            if existing is not None:
                existing.update({k: v for k, v in fields.items() if v is not None})
                return {"message": f"{label} updated successfully", key: dict(existing)}
            item = {**fields, "id": next(self._mock_ids)}
            if key == "booking":
                item.setdefault("status", "pending")
            items.append(item)
            return {"message": f"{label} created successfully", key: dict(item)}

        item = _find(items, parts[1]) if len(parts) > 1 else None
        if item is None:
            raise ApiError(404, f"{label} not found")

        if len(parts) == 2 and method == "PUT":
            item.update(fields)
            return {"message": f"{label} updated successfully", key: dict(item)}
        if len(parts) == 2 and method == "DELETE":
            items.remove(item)
            return {"message": f"{label} deleted successfully"}

        action = parts[2] if len(parts) == 3 else None
        if key == "booking" and method == "PUT" and action == "cancel":
            item.update(status="cancelled", cancellation_reason=payload.get("reason") or "No reason provided")
            return {"message": "Booking cancelled successfully", "booking": dict(item)}
        if key == "booking" and method == "PUT" and action == "complete":
            item["status"] = "completed"
            return {"message": "Booking marked as completed", "booking": dict(item)}
        if key == "booking" and method == "POST" and action == "review":
            review = {
                "id": next(self._mock_ids),
                "booking_id": item["id"],
                "client_id": item.get("client_id"),
                "provider_id": item.get("provider_id"),
                "rating": payload.get("rating"),
                "comment": payload.get("comment"),
            }
            return {"message": "Review added successfully", "review": review}

        raise ApiError(404, f"No mock data for {method} /{'/'.join(parts)}")

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    def register(self, email: str, password: str, name: str, role: str = "client", **extra) -> dict:
        data = self.request(
            "POST", "/auth/register", json={"email": email, "password": password, "name": name, "role": role, **extra}
        )
        self.set_auth_token(data.get("token"))
        return data

    def login(self, email: str, password: str) -> dict:
        data = self.request("POST", "/auth/login", json={"email": email, "password": password})
        self.set_auth_token(data.get("token"))
        return data

    def logout(self) -> None:
        try:
            if self.token:
                self.request("POST", "/auth/logout")
        finally:
            self.remove_auth_token()

    def verify_email(self, token: str) -> dict:
        return self.request("POST", "/auth/verify-email", json={"token": token})

    def forgot_password(self, email: str) -> dict:
        return self.request("POST", "/auth/forgot-password", json={"email": email})

    def reset_password(self, token: str, new_password: str) -> dict:
        return self.request("POST", "/auth/reset-password", json={"token": token, "newPassword": new_password})

    def get_session(self) -> dict:
        return self.request("GET", "/auth/session")

    # ------------------------------------------------------------------
    # Venues
    # ------------------------------------------------------------------

    def list_venues(self, **filters) -> list[dict]:
        return self.request("GET", "/venues", params=filters)["venues"]

    def get_venue(self, venue_id: int) -> dict:
        return self.request("GET", f"/venues/{venue_id}")

    def create_venue(self, venue: dict) -> dict:
        return self.request("POST", "/venues", json=venue)

    def update_venue(self, venue_id: int, updates: dict) -> dict:
        return self.request("PUT", f"/venues/{venue_id}", json=updates)

    def delete_venue(self, venue_id: int) -> dict:
        return self.request("DELETE", f"/venues/{venue_id}")

    def get_venue_calendar(self, venue_id: int, start_date: str, end_date: str) -> dict:
        return self.request(
            "GET", f"/venues/{venue_id}/calendar", params={"startDate": start_date, "endDate": end_date}
        )

    # ------------------------------------------------------------------
    # Bookings
    # ------------------------------------------------------------------

    def list_bookings(self, status: Optional[str] = None, start_date: Optional[str] = None, end_date: Optional[str] = None) -> list[dict]:
        params = {"status": status, "startDate": start_date, "endDate": end_date}
        return self.request("GET", "/bookings", params=params)["bookings"]

    def get_booking(self, booking_id: int) -> dict:
        return self.request("GET", f"/bookings/{booking_id}")["booking"]

    def create_booking(self, booking: dict) -> dict:
        return self.request("POST", "/bookings", json=booking)

    def update_booking(self, booking_id: int, updates: dict) -> dict:
        return self.request("PUT", f"/bookings/{booking_id}", json=updates)

    def cancel_booking(self, booking_id: int, reason: Optional[str] = None) -> dict:
        return self.request("PUT", f"/bookings/{booking_id}/cancel", json={"reason": reason})

    def complete_booking(self, booking_id: int) -> dict:
        return self.request("PUT", f"/bookings/{booking_id}/complete")

    def review_booking(self, booking_id: int, rating: int, comment: Optional[str] = None) -> dict:
        return self.request("POST", f"/bookings/{booking_id}/review", json={"rating": rating, "comment": comment})

    # ------------------------------------------------------------------
    # Customers, services, widget
    # ------------------------------------------------------------------

    def list_customers(self, search: Optional[str] = None) -> list[dict]:
        return self.request("GET", "/customers", params={"search": search})["customers"]

    def get_customer(self, customer_id: int) -> dict:
        return self.request("GET", f"/customers/{customer_id}")["customer"]

    def upsert_customer(self, name: str, email: str, phone: Optional[str] = None) -> dict:
        return self.request("POST", "/customers", json={"name": name, "email": email, "phone": phone})

    def list_services(self, category: Optional[str] = None, provider_id: Optional[int] = None) -> list[dict]:
        return self.request("GET", "/services", params={"category": category, "providerId": provider_id})["services"]

    def get_service(self, service_id: int) -> dict:
        return self.request("GET", f"/services/{service_id}")["service"]

    def get_embed_code(self, api_key: Optional[str] = None, primary_color: Optional[str] = None, layout: Optional[str] = None) -> str:
        params = {"apiKey": api_key, "primaryColor": primary_color, "layout": layout}
        return self.request("GET", "/widget/embed-code", params=params)["embedCode"]


# ============================================================================
# AUTH SESSION
# ============================================================================


class AuthSession:
    """
    Tracks the signed-in user of a PortalClient and notifies listeners.

    Listeners are called with (event, user) where event is SIGNED_IN or SIGNED_OUT.
    A 401 from any call signs the session out.
    """

    def __init__(self, client: PortalClient):
        self.client = client
        self.current_user: Optional[dict] = None
        self._listeners: list[Callable[[str, Optional[dict]], None]] = []
        previous = client.on_unauthorized

        def handle_unauthorized():
            if previous:
                previous()
            self._set_user(None)

        client.on_unauthorized = handle_unauthorized

    def on_auth_state_change(self, callback: Callable[[str, Optional[dict]], None]) -> Callable[[], None]:
        """Register a listener; returns a function that removes it"""
        self._listeners.append(callback)

        def unsubscribe():
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _set_user(self, user: Optional[dict]) -> None:
        changed = user != self.current_user
        self.current_user = user
        if not changed:
            return
        event = SIGNED_IN if user else SIGNED_OUT
        for listener in list(self._listeners):
            try:
                listener(event, user)
            except Exception as e:
                logger.error(f"Auth state listener failed: {str(e)}")

    def login(self, email: str, password: str) -> dict:
        data = self.client.login(email, password)
        self._set_user(data.get("user"))
        return data

    def register(self, email: str, password: str, name: str, role: str = "client", **extra) -> dict:
        data = self.client.register(email, password, name, role, **extra)
        self._set_user(data.get("user"))
        return data

    def logout(self) -> None:
        try:
            self.client.logout()
        finally:
            self._set_user(None)

    def reset_password_for_email(self, email: str) -> dict:
        return self.client.forgot_password(email)

    def refresh(self) -> Optional[dict]:
        """Re-read the session from the API; None when there is no valid token"""
        if not self.client.token and not self.client.mock:
            self._set_user(None)
            return None
        try:
            data = self.client.get_session()
        except AuthenticationRequired:
            return None
        self._set_user(data.get("user"))
        return self.current_user
