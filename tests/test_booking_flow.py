from datetime import datetime
from types import SimpleNamespace

import pytest

from venuebook.domain.widget import booking_flow

NOW = datetime(2030, 3, 1, 9, 0)
SERVICES = {7: SimpleNamespace(id=7, duration=90)}


def walk(*steps):
    state = None
    for data in steps:
        state = booking_flow.advance(state, data, SERVICES, now=NOW)
    return state


def test_new_wizard_starts_at_service_step():
    state = booking_flow.advance(None, None, SERVICES, now=NOW)

    assert state["step"] == 1
    assert set(state["errors"]) == {"serviceId"}


def test_unknown_or_malformed_service():
    assert "serviceId" in walk({"serviceId": 8})["errors"]
    assert "serviceId" in walk({"serviceId": "seven"})["errors"]
    assert walk({"serviceId": "7"})["data"] == {"serviceId": 7}


def test_datetime_step_derives_end_time():
    state = walk({"serviceId": 7}, {"startTime": "2030-03-05T10:00:00"})

    assert state["step"] == 3
    assert state["data"]["startTime"] == "2030-03-05T10:00:00"
    assert state["data"]["endTime"] == "2030-03-05T11:30:00"


@pytest.mark.parametrize("start", ["not a date", "2030-02-28T10:00:00", None])
def test_datetime_step_rejects_bad_or_past_times(start):
    state = walk({"serviceId": 7}, {"startTime": start})

    assert state["step"] == 2
    assert set(state["errors"]) == {"startTime"}


def test_details_step_validates_contact_fields():
    state = walk({"serviceId": 7}, {"startTime": "2030-03-05T10:00:00"}, {"name": " ", "email": "nope"})
    assert state["step"] == 3
    assert set(state["errors"]) == {"name", "email"}

    state = booking_flow.advance(
        state, {"name": "Kim", "email": "Kim@Example.com", "phone": "+64 21 555 0101"}, SERVICES, now=NOW
    )
    assert state["step"] == 4
    assert state["errors"] == {}
    assert state["data"]["email"] == "kim@example.com"
    assert state["data"]["phone"] == "+64215550101"


def test_only_current_step_is_validated():
    # a bad email entered early is ignored until the details step
    state = walk({"serviceId": 7, "email": "nope"})

    assert state["step"] == 2
    assert state["errors"] == {}


def test_cannot_advance_past_confirm():
    state = walk({"serviceId": 7}, {"startTime": "2030-03-05T10:00:00"}, {"name": "Kim", "email": "kim@example.com"})
    again = booking_flow.advance(state, {}, SERVICES, now=NOW)

    assert again["step"] == booking_flow.LAST_STEP
    assert "step" in again["errors"]


def test_back_stops_at_first_step():
    assert booking_flow.back(None)["step"] == 1
    assert booking_flow.back({"step": 3, "data": {"serviceId": 7}}) == {
        "step": 2,
        "data": {"serviceId": 7},
        "errors": {},
    }


@pytest.mark.parametrize("state", [{"step": 0}, {"step": 5}, {"step": "two"}, {"step": 1, "data": "serviceId"}])
def test_normalise_state_rejects_invalid_state(state):
    with pytest.raises(ValueError):
        booking_flow.normalise_state(state)


def test_validate_submission():
    state = walk({"serviceId": 7}, {"startTime": "2030-03-05T10:00:00"}, {"name": "Kim", "email": "kim@example.com"})

    fields, errors = booking_flow.validate_submission(state, SERVICES, now=NOW)

    assert errors == {}
    assert fields == {
        "serviceId": 7,
        "startTime": "2030-03-05T10:00:00",
        "endTime": "2030-03-05T11:30:00",
        "name": "Kim",
        "email": "kim@example.com",
    }


def test_validate_submission_rechecks_every_step():
    state = walk({"serviceId": 7}, {"startTime": "2030-03-05T10:00:00"}, {"name": "Kim", "email": "kim@example.com"})

    # the slot has passed and the service is no longer offered
    _, errors = booking_flow.validate_submission(state, {}, now=datetime(2030, 4, 1))
    assert set(errors) == {"serviceId", "startTime"}


def test_validate_submission_requires_confirm_step():
    fields, errors = booking_flow.validate_submission({"step": 2, "data": {"serviceId": 7}}, SERVICES, now=NOW)

    assert fields == {}
    assert errors == {"step": "Complete every step before submitting"}
