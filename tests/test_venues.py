from datetime import date, datetime, timedelta

from venuebook.models import VenueAvailability, VenueHold
from venuebook.shared.validators import utcnow

VENUE = {
    "name": "Harbour Room",
    "location": "Wellington",
    "address": "3 Quay Street",
    "capacity": 20,
    "priceStandard": 35,
    "amenities": ["projector"],
}


def test_create_venue(client, manager, auth_headers):
    response = client.post("/venues", json=VENUE, headers=auth_headers(manager))

    assert response.status_code == 201
    venue = response.json()["venue"]
    assert venue["owner_id"] == manager.id
    assert venue["price_currency"] == "NZD"
    assert venue["price_standard"] == 35
    assert venue["is_active"] is True


def test_create_venue_requires_fields_and_role(client, manager, customer, auth_headers):
    missing = {k: v for k, v in VENUE.items() if k != "capacity"}
    assert client.post("/venues", json=missing, headers=auth_headers(manager)).status_code == 400
    assert client.post("/venues", json=VENUE, headers=auth_headers(customer)).status_code == 403
    assert client.post("/venues", json=VENUE).status_code == 401


def test_list_venues_filters(client, hall):
    assert [v["id"] for v in client.get("/venues").json()["venues"]] == [hall.id]
    assert client.get("/venues", params={"capacity": 200}).json()["venues"] == []
    assert len(client.get("/venues", params={"amenities": "kitchen,stage"}).json()["venues"]) == 1
    assert client.get("/venues", params={"amenities": "kitchen,pool"}).json()["venues"] == []
    assert len(client.get("/venues", params={"location": "welling"}).json()["venues"]) == 1


def test_inactive_venues_hidden_from_public(client, db, hall, manager, auth_headers):
    hall.is_active = False
    db.commit()

    assert client.get("/venues").json()["venues"] == []
    assert client.get(f"/venues/{hall.id}").status_code == 404

    managed = client.get(
        "/venues", params={"includeInactive": True}, headers=auth_headers(manager)
    ).json()["venues"]
    assert [v["id"] for v in managed] == [hall.id]
    assert client.get(f"/venues/{hall.id}", headers=auth_headers(manager)).status_code == 200


def test_venue_detail(client, hall, customer, make_booking):
    soon = utcnow() + timedelta(days=3)
    make_booking(customer, soon, venue_id=hall.id, event_name="Quiz night")
    make_booking(customer, soon + timedelta(days=1), status="pending", venue_id=hall.id)
    make_booking(customer, utcnow() - timedelta(days=3), venue_id=hall.id)

    data = client.get(f"/venues/{hall.id}").json()

    assert data["venue"]["name"] == "Riverside Community Hall"
    assert set(data) == {"venue", "layouts", "equipment", "availability", "upcomingEvents", "forms"}
    assert [e["title"] for e in data["upcomingEvents"]] == ["Quiz night"]


def test_upcoming_events_include_public_holds(client, db, hall, customer, make_booking):
    soon = utcnow() + timedelta(days=3)
    make_booking(customer, soon, venue_id=hall.id, event_name="Quiz night")
    for hold_type, days in (("maintenance", 1), ("private", 2), ("tentative", -2)):
        start = utcnow() + timedelta(days=days)
        db.add(
            VenueHold(
                venue_id=hall.id,
                hold_type=hold_type,
                hold_reason="Floor polishing" if hold_type == "maintenance" else None,
                start_time=start,
                end_time=start + timedelta(hours=4),
            )
        )
    db.commit()

    events = client.get(f"/venues/{hall.id}").json()["upcomingEvents"]

    assert [(e["type"], e["title"]) for e in events] == [
        ("hold", "maintenance: Floor polishing"),
        ("booking", "Quiz night"),
    ]


def test_update_venue(client, hall, manager, auth_headers):
    headers = auth_headers(manager)
    response = client.put(f"/venues/{hall.id}", json={"capacity": 180}, headers=headers)
    assert response.status_code == 200
    assert response.json()["venue"]["capacity"] == 180
    assert response.json()["venue"]["name"] == "Riverside Community Hall"

    assert client.put(f"/venues/{hall.id}", json={"name": ""}, headers=headers).status_code == 400


def test_delete_venue(client, hall, manager, customer, make_booking, auth_headers):
    headers = auth_headers(manager)
    make_booking(customer, utcnow() + timedelta(days=1), venue_id=hall.id)

    assert client.delete(f"/venues/{hall.id}", headers=headers).status_code == 409

    empty_id = client.post("/venues", json=VENUE, headers=headers).json()["venue"]["id"]
    assert client.delete(f"/venues/{empty_id}", headers=headers).status_code == 200
    assert client.get(f"/venues/{empty_id}").status_code == 404
    assert client.delete(f"/venues/{empty_id}", headers=headers).status_code == 404


def test_layouts_keep_a_single_default(client, hall, manager, auth_headers):
    headers = auth_headers(manager)
    url = f"/venues/{hall.id}/layouts"
    first = client.post(url, json={"name": "Theatre", "capacity": 150, "isDefault": True}, headers=headers)
    client.post(url, json={"name": "Banquet", "capacity": 100, "isDefault": True}, headers=headers)

    assert first.status_code == 201
    layouts = {x["name"]: x["is_default"] for x in client.get(url).json()["layouts"]}
    assert layouts == {"Theatre": False, "Banquet": True}

    assert client.post(url, json={"name": "Cabaret"}, headers=headers).status_code == 400


def test_venue_equipment(client, hall, manager, customer, auth_headers):
    headers = auth_headers(manager)
    created = client.post(
        "/equipment", json={"name": "Projector", "quantityAvailable": 2, "dailyFee": 25}, headers=headers
    )
    assert created.status_code == 201
    equipment_id = created.json()["equipment"]["id"]
    assert created.json()["equipment"]["price_currency"] == "NZD"

    url = f"/venues/{hall.id}/equipment"
    added = client.post(url, json={"equipmentId": equipment_id}, headers=headers)
    assert added.status_code == 201
    assert added.json()["equipment"]["quantity_available"] == 2

    assert client.post(url, json={"equipmentId": equipment_id}, headers=headers).status_code == 409
    assert client.post(url, json={"equipmentId": 999}, headers=headers).status_code == 404

    updated = client.put(f"{url}/{equipment_id}", json={"quantityAvailable": 1, "notes": "HDMI only"}, headers=headers)
    assert updated.json()["equipment"]["notes"] == "HDMI only"
    assert [e["name"] for e in client.get(url).json()["equipment"]] == ["Projector"]

    assert client.delete(f"{url}/{equipment_id}", headers=headers).status_code == 200
    assert client.get(url).json()["equipment"] == []

    assert client.get("/equipment", headers=auth_headers(customer)).status_code == 403
    assert len(client.get("/equipment", headers=headers).json()["equipment"]) == 1


def test_availability_rules(client, hall, manager, auth_headers):
    headers = auth_headers(manager)
    url = f"/venues/{hall.id}/availability"

    response = client.post(url, json={"dayOfWeek": "Monday", "startTime": "09:00", "endTime": "17:00"}, headers=headers)
    assert response.status_code == 201
    assert response.json()["availability"]["day_of_week"] == "monday"
    assert response.json()["availability"]["is_available"] is True

    assert client.post(url, json={"startTime": "09:00", "endTime": "17:00"}, headers=headers).status_code == 400
    assert (
        client.post(url, json={"dayOfWeek": "monday", "startTime": "18:00", "endTime": "09:00"}, headers=headers).status_code
        == 400
    )
    assert (
        client.post(url, json={"dayOfWeek": "monday", "startTime": "9am", "endTime": "17:00"}, headers=headers).status_code
        == 400
    )

    closed = client.post(
        url,
        json={"specificDate": "2030-12-25", "startTime": "00:00", "endTime": "23:59", "isAvailable": False, "reason": "Christmas"},
        headers=headers,
    )
    assert closed.json()["availability"]["specific_date"] == "2030-12-25"
    assert len(client.get(url).json()["availability"]) == 2


def test_bonds_and_forms(client, hall, manager, auth_headers):
    headers = auth_headers(manager)

    bond = client.post(f"/venues/{hall.id}/bonds", json={"name": "Damage bond", "amount": 500}, headers=headers)
    assert bond.status_code == 201
    assert bond.json()["bond"]["currency"] == "NZD"
    assert bond.json()["bond"]["is_refundable"] is True
    assert client.post(f"/venues/{hall.id}/bonds", json={"name": "No amount"}, headers=headers).status_code == 400

    form = client.post(
        f"/venues/{hall.id}/forms",
        json={"formName": "Alcohol plan", "formSchema": {"fields": [{"name": "licence"}]}},
        headers=headers,
    )
    assert form.status_code == 201
    assert client.get(f"/venues/{hall.id}").json()["forms"][0]["form_name"] == "Alcohol plan"


def test_first_image_becomes_primary(client, hall, manager, auth_headers):
    headers = auth_headers(manager)
    url = f"/venues/{hall.id}/images"

    first = client.post(url, json={"url": "https://cdn.example.com/a.jpg"}, headers=headers).json()["image"]
    second = client.post(url, json={"url": "https://cdn.example.com/b.jpg"}, headers=headers).json()["image"]

    assert first["is_primary"] is True
    assert second["is_primary"] is False
    assert second["sort_order"] == first["sort_order"] + 1

    response = client.put(f"{url}/{second['id']}/set-primary", headers=headers)
    assert response.status_code == 200
    assert client.put(f"{url}/{first['id']}/primary", headers=headers).status_code == 404

    images = {img["id"]: img["is_primary"] for img in client.get(url).json()["images"]}
    assert images == {first["id"]: False, second["id"]: True}


def test_document_types(client, manager, customer, auth_headers):
    body = {"name": "Public liability insurance", "venueCategories": ["Hall"], "isMandatory": True}
    assert client.post("/document-types", json=body, headers=auth_headers(customer)).status_code == 403
    assert client.post("/document-types", json=body, headers=auth_headers(manager)).status_code == 201

    types = client.get("/document-types").json()["documentTypes"]
    assert [t["name"] for t in types] == ["Public liability insurance"]
    assert types[0]["is_mandatory"] is True


def _schedule(client, hall, manager, customer, make_booking, auth_headers):
    make_booking(
        customer,
        datetime(2030, 3, 5, 10),
        hours=2,
        venue_id=hall.id,
        provider_id=manager.id,
        event_name="Quiz night",
        expected_attendance=50,
        pricing_tier="community",
        total_price_amount=80,
    )
    make_booking(
        customer,
        datetime(2030, 3, 5, 14),
        status="cancelled",
        venue_id=hall.id,
        expected_attendance=30,
        total_price_amount=80,
    )
    make_booking(
        customer,
        datetime(2030, 4, 2, 9),
        hours=2,
        status="completed",
        venue_id=hall.id,
        expected_attendance=20,
        total_price_amount=160,
    )
    hold = client.post(
        f"/venues/{hall.id}/holds",
        json={"holdType": "maintenance", "holdReason": "Floor polish", "startTime": "2030-03-05T15:00:00", "endTime": "2030-03-05T18:00:00"},
        headers=auth_headers(manager),
    )
    assert hold.status_code == 201


def test_check_availability(client, hall, manager, customer, make_booking, auth_headers):
    _schedule(client, hall, manager, customer, make_booking, auth_headers)
    url = f"/venues/{hall.id}/check-availability"

    overlap = client.get(url, params={"startTime": "2030-03-05T11:00:00", "endTime": "2030-03-05T13:00:00"}).json()
    assert overlap["isAvailable"] is False
    assert overlap["conflicts"] == {"count": 1}
    assert overlap["holds"] == []

    # the cancelled booking at 14:00 does not count, the hold from 15:00 does
    held = client.get(url, params={"startTime": "2030-03-05T14:00:00", "endTime": "2030-03-05T15:30:00"}).json()
    assert held["isAvailable"] is False
    assert held["conflicts"] is None
    assert held["holds"][0]["holdType"] == "maintenance"

    free = client.get(url, params={"startTime": "2030-03-06T10:00:00", "endTime": "2030-03-06T12:00:00"}).json()
    assert free == {"isAvailable": True, "conflicts": None, "holds": []}


def test_check_availability_validation(client, hall):
    url = f"/venues/{hall.id}/check-availability"
    assert client.get(url, params={"startTime": "2030-03-05T11:00:00"}).status_code == 400
    assert client.get(url, params={"startTime": "tomorrow", "endTime": "later"}).status_code == 400
    assert (
        client.get(url, params={"startTime": "2030-03-05T13:00:00", "endTime": "2030-03-05T11:00:00"}).status_code
        == 400
    )


def test_venue_calendar(client, hall, manager, customer, make_booking, auth_headers):
    _schedule(client, hall, manager, customer, make_booking, auth_headers)
    headers = auth_headers(manager)
    url = f"/venues/{hall.id}/calendar"

    data = client.get(url, params={"startDate": "2030-03-01", "endDate": "2030-03-31"}, headers=headers).json()

    assert data["venue"] == {"id": hall.id, "name": "Riverside Community Hall"}
    events = {(e["type"], e["title"]) for e in data["calendarEvents"]}
    assert events == {("booking", "Quiz night"), ("hold", "maintenance: Floor polish")}

    assert client.get(url, params={"startDate": "2030-03-01"}, headers=headers).status_code == 400
    assert client.get(url, params={"startDate": "2030-03-01", "endDate": "2030-03-31"}).status_code == 401


def test_venue_statistics(client, hall, manager, customer, make_booking, auth_headers):
    _schedule(client, hall, manager, customer, make_booking, auth_headers)

    data = client.get(
        f"/venues/{hall.id}/statistics",
        params={"startDate": "2030-03-01", "endDate": "2030-04-30", "groupBy": "month"},
        headers=auth_headers(manager),
    ).json()

    periods = {p["period"]: p for p in data["statistics"]}
    assert periods["2030-03"]["total"] == 2
    assert periods["2030-03"]["confirmed"] == 1
    assert periods["2030-03"]["cancelled"] == 1
    assert periods["2030-04"]["completed"] == 1
    assert data["totalAttendance"] == 70
    assert data["revenueByCombos"] == {"commercial": 0.0, "community": 80.0, "standard": 160.0}
    # no availability rules: the whole 60 day window counts as open
    assert data["utilization"] == {"bookedHours": 4.0, "availableHours": 1440.0, "rate": 0.0028}


def test_venue_statistics_uses_availability_rules(client, db, hall, manager, customer, make_booking, auth_headers):
    day = date(2030, 3, 5)
    db.add(VenueAvailability(venue_id=hall.id, specific_date=day, start_time="09:00", end_time="17:00"))
    db.add(
        VenueAvailability(
            venue_id=hall.id, day_of_week=day.strftime("%A").lower(), start_time="08:00", end_time="20:00"
        )
    )
    db.commit()
    make_booking(customer, datetime(2030, 3, 5, 10), hours=2, venue_id=hall.id)

    data = client.get(
        f"/venues/{hall.id}/statistics",
        params={"startDate": "2030-03-05", "endDate": "2030-03-06", "groupBy": "day"},
        headers=auth_headers(manager),
    ).json()

    # the date-specific rule replaces the weekly rule for that day
    assert data["utilization"] == {"bookedHours": 2.0, "availableHours": 8.0, "rate": 0.25}
    assert data["statistics"][0]["period"] == "2030-03-05"


def test_venue_statistics_rejects_bad_group(client, hall, manager, auth_headers):
    response = client.get(
        f"/venues/{hall.id}/statistics", params={"groupBy": "year"}, headers=auth_headers(manager)
    )
    assert response.status_code == 400
