"""
Widget booking wizard.

The embedded form walks a visitor through four steps:

    1 service   pick one of the business's active services
    2 datetime  pick a start time; the end follows from the service duration
    3 details   name, email and an optional phone number
    4 confirm   review and submit

State is a plain dict the widget round-trips on every call:

    {"step": 2, "data": {"serviceId": 7}, "errors": {}}

Only the fields of the current step are validated when advancing. Nothing is
reserved until the final submission creates the booking.
"""

from datetime import datetime, timedelta
from typing import Any, Callable, Optional

from ...models import Service
from ...shared.validators import parse_datetime, utcnow, validate_email, validate_phone

STEPS = ("service", "datetime", "details", "confirm")
FIRST_STEP = 1
LAST_STEP = len(STEPS)


def new_state() -> dict[str, Any]:
    return {"step": FIRST_STEP, "data": {}, "errors": {}}


def normalise_state(state: Optional[dict[str, Any]]) -> dict[str, Any]:
    """
    Coerce a client-supplied state into the canonical shape.

    Raises:
        ValueError: If the step is not a number between 1 and 4
    """
    if not state:
        return new_state()
    try:
        step = int(state.get("step", FIRST_STEP))
    except (TypeError, ValueError) as e:
        raise ValueError("Invalid wizard step") from e
    if not FIRST_STEP <= step <= LAST_STEP:
        raise ValueError(f"Wizard step must be between {FIRST_STEP} and {LAST_STEP}")
    data = state.get("data") or {}
    if not isinstance(data, dict):
        raise ValueError("Wizard data must be an object")
    return {"step": step, "data": dict(data), "errors": {}}


def step_name(state: dict[str, Any]) -> str:
    return STEPS[state["step"] - 1]


def _lookup_service(services, service_id) -> Optional[Service]:
    try:
        return services.get(int(service_id)) if service_id is not None else None
    except (TypeError, ValueError):
        return None


def _validate_service(data, services, now):
    service = _lookup_service(services, data.get("serviceId"))
    if service is None:
        return {}, {"serviceId": "Please choose one of the available services"}
    return {"serviceId": service.id}, {}


def _validate_datetime(data, services, now):
    try:
        start = parse_datetime(data.get("startTime"))
    except ValueError:
        return {}, {"startTime": "Please choose a valid date and time"}
    if start < now:
        return {}, {"startTime": "Please choose a time in the future"}

    service = _lookup_service(services, data.get("serviceId"))
    if service is None:
        return {}, {"serviceId": "Please choose one of the available services"}
    end = start + timedelta(minutes=service.duration)
    return {"startTime": start.isoformat(), "endTime": end.isoformat()}, {}


def _validate_details(data, services, now):
    fields, errors = {}, {}

    name = (data.get("name") or "").strip()
    if not name:
        errors["name"] = "Name is required"
    else:
        fields["name"] = name

    if not data.get("email"):
        errors["email"] = "Email is required"
    else:
        try:
            fields["email"] = validate_email(data["email"])
        except ValueError as e:
            errors["email"] = str(e)

    if data.get("phone"):
        try:
            fields["phone"] = validate_phone(data["phone"])
        except ValueError as e:
            errors["phone"] = str(e)

    if data.get("notes"):
        fields["notes"] = str(data["notes"])

    return fields, errors


def _validate_confirm(data, services, now):
    return {}, {}


VALIDATORS: dict[str, Callable] = {
    "service": _validate_service,
    "datetime": _validate_datetime,
    "details": _validate_details,
    "confirm": _validate_confirm,
}


def advance(
    state: Optional[dict[str, Any]],
    data: Optional[dict[str, Any]],
    services: dict[int, Service],
    now: Optional[datetime] = None,
) -> dict[str, Any]:
    """
    Validate the current step's fields and move forward one step.

    Args:
        state: Wizard state from the previous call (None starts a new wizard)
        data: Fields entered on the current step
        services: Bookable services of the business, keyed by id
        now: Reference time for "not in the past" checks

    Returns:
        The next state, or the same step with per-field errors
    """
    state = normalise_state(state)
    now = now or utcnow()
    name = step_name(state)

    if state["step"] == LAST_STEP:
        state["errors"] = {"step": "Already at the final step, submit the booking"}
        return state

    merged = {**state["data"], **(data or {})}
    fields, errors = VALIDATORS[name](merged, services, now)
    if errors:
        state["errors"] = errors
        return state

    state["data"].update(fields)
    state["step"] += 1
    return state


def back(state: Optional[dict[str, Any]]) -> dict[str, Any]:
    state = normalise_state(state)
    state["step"] = max(FIRST_STEP, state["step"] - 1)
    return state


def validate_submission(
    state: Optional[dict[str, Any]],
    services: dict[int, Service],
    now: Optional[datetime] = None,
) -> tuple[dict[str, Any], dict[str, str]]:
    """
    Re-check every step before the booking is created.

    Returns:
        (fields, errors) with the cleaned values of all steps
    """
    state = normalise_state(state)
    if step_name(state) != "confirm":
        return {}, {"step": "Complete every step before submitting"}

    now = now or utcnow()
    data = dict(state["data"])
    fields, errors = {}, {}
    for name in STEPS:
        step_fields, step_errors = VALIDATORS[name](data, services, now)
        data.update(step_fields)
        fields.update(step_fields)
        errors.update(step_errors)
    return fields, errors
