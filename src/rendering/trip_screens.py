"""Command renderers for the trip status, estimate and receipt screens."""

from __future__ import annotations

from src.data.models import Receipt, RideEstimate, TripRecord
from src.rendering.commands import EXPIRE_ON_SCREEN_ENTER, ChangeScreen, Command, SetText
from src.rendering.screens import (
    ELEMENT_STATUS_PLACEHOLDER,
    ICON_CLOCK,
    ICON_MULTIPLIER,
    ICON_PIN,
    ICON_PRICE,
    ICON_PROFILE,
    ScreenId,
)

UNKNOWN_DESTINATION = "Unknown destination"
NO_DESTINATION = "No destination set"


def _join(*parts: object) -> str:
    return " ".join(str(part) for part in parts)


def format_multiplier(surge: float) -> str:
    """One decimal, truncated: 1.45 -> "1.4"."""
    whole = int(surge)
    tenths = int(round(surge * 10, 6)) % 10
    return f"{whole}.{tenths}"


def _driver_name(trip: TripRecord) -> str:
    return trip.driver.name if trip.driver else ""


def _vehicle_name(trip: TripRecord) -> str:
    if not trip.vehicle:
        return ""
    return _join(trip.vehicle.make, trip.vehicle.model).strip()


def _license_plate(trip: TripRecord) -> str:
    return trip.vehicle.license_plate.upper() if trip.vehicle else ""


def render_searching(trip: TripRecord, destination_name: str | None = None) -> list[Command]:
    return []


def render_arriving(trip: TripRecord, destination_name: str | None = None) -> list[Command]:
    screen = ScreenId.ARRIVING
    plate = _license_plate(trip)
    # With a plate the driver line moves below it.
    driver_element, plate_element = (6, 5) if plate else (5, 6)
    eta = trip.eta if trip.eta is not None else "?"
    return [
        SetText(2, _join(ICON_CLOCK, eta, "MIN"), screen_id=screen),
        SetText(3, _join(ICON_MULTIPLIER, format_multiplier(trip.surge_multiplier), "x"), screen_id=screen),
        SetText(4, _vehicle_name(trip), screen_id=screen),
        SetText(driver_element, _join(ICON_PROFILE, _driver_name(trip)), screen_id=screen),
        SetText(plate_element, plate, screen_id=screen),
    ]


def render_ready(trip: TripRecord, destination_name: str | None = None) -> list[Command]:
    screen = ScreenId.READY
    return [
        SetText(3, _join(ICON_PROFILE, _driver_name(trip)), screen_id=screen),
        SetText(4, _vehicle_name(trip), screen_id=screen),
        SetText(5, _license_plate(trip), screen_id=screen),
    ]


def render_trip(trip: TripRecord, destination_name: str | None = None) -> list[Command]:
    screen = ScreenId.TRIP
    destination = trip.destination
    place = (destination_name if destination is not None else None) or UNKNOWN_DESTINATION
    if destination is not None and destination.eta is not None:
        eta_text = _join(ICON_CLOCK, destination.eta, "MIN")
    else:
        eta_text = _join(ICON_CLOCK, "-")
    return [
        SetText(3, _join(ICON_PIN, place), screen_id=screen),
        SetText(4, _join(ICON_PROFILE, _driver_name(trip)), screen_id=screen),
        SetText(5, eta_text, screen_id=screen),
    ]


def clear_status_screen(screen: ScreenId, ttl: int) -> list[Command]:
    """Re-arm the screen's placeholder element; the device re-polls when it expires."""
    return [SetText(ELEMENT_STATUS_PLACEHOLDER, "", screen_id=screen, ttl=ttl)]


def render_receipt(destination_name: str, receipt: Receipt) -> list[Command]:
    screen = ScreenId.RECEIPT
    return [
        SetText(2, _join(ICON_PIN, destination_name), screen_id=screen),
        SetText(3, _join(ICON_PRICE, receipt.total_charged), screen_id=screen),
        ChangeScreen(screen, alert=True),
    ]


def render_estimate(
    estimate: RideEstimate,
    pickup_address: str,
    product_name: str,
    with_place: bool,
) -> list[Command]:
    """Estimate screen for a saved place or for the device location."""
    if with_place:
        placeholder = SetText(
            1, "", screen_id=ScreenId.LOADING_ESTIMATE_PLACE, ttl=EXPIRE_ON_SCREEN_ENTER
        )
        screen = ScreenId.ESTIMATE_PLACE
    else:
        placeholder = SetText(0, "", screen_id=ScreenId.RETRIEVE_LOCATION, ttl=EXPIRE_ON_SCREEN_ENTER)
        screen = ScreenId.ESTIMATE_LOCATION
    pickup = estimate.pickup_estimate if estimate.pickup_estimate is not None else "?"
    # Only surge-free estimates reach this screen.
    multiplier = "1.0"
    return [
        placeholder,
        SetText(1, pickup_address, screen_id=screen),
        SetText(2, _join(ICON_CLOCK, pickup, "MIN"), screen_id=screen),
        SetText(3, _join(ICON_MULTIPLIER, multiplier, "x"), screen_id=screen),
        SetText(4, f"Request {product_name}", screen_id=screen),
        ChangeScreen(screen),
    ]


__all__ = [
    "NO_DESTINATION",
    "UNKNOWN_DESTINATION",
    "clear_status_screen",
    "format_multiplier",
    "render_arriving",
    "render_estimate",
    "render_ready",
    "render_receipt",
    "render_searching",
    "render_trip",
]
