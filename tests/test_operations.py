from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from unittest.mock import MagicMock

import pytest

from src.data.models import Location, Place, Product, RideEstimate, TripRecord
from src.data.ride_client import RideClient
from src.errors import FailureKind, ProviderError
from src.logic import recovery
from src.logic.operations import (
    REJECT_BAD_REQUEST,
    REJECT_INVALID_AUTH_TOKENS,
    STATUS_UPDATE_METHODS,
    CompanionService,
    Invocation,
)
from src.logic.status import TripStatus
from src.rendering.commands import ChangeScreen, ChangeScreenAction, SetList, SetText
from src.rendering.screens import Animation, ChooseLocationOption, ScreenId

LOCATION = {"latitude": 42.0, "longitude": -71.0}


@pytest.fixture()
def executor():
    with ThreadPoolExecutor(max_workers=4) as pool:
        yield pool


@pytest.fixture()
def client() -> MagicMock:
    client = MagicMock(spec=RideClient)
    client.get_current_trip.return_value = None
    client.get_profile.return_value = "user-1"
    client.get_product_details.return_value = Product(product_id="X", display_name="uberX")
    client.get_place.return_value = Place(address="1 Main St")
    client.estimate_by_place.return_value = RideEstimate(pickup_estimate=4, surge_multiplier=1.0)
    client.estimate_by_location.return_value = RideEstimate(pickup_estimate=6, surge_multiplier=1.0)
    client.request_ride_at_place.return_value = TripRecord(request_id="r9", status="processing")
    client.request_ride_at_location.return_value = TripRecord(request_id="r9", status="processing")
    return client


@pytest.fixture()
def places() -> MagicMock:
    places = MagicMock()
    places.resolve_place_name.return_value = "Elm Street"
    return places


@pytest.fixture()
def reconciler() -> MagicMock:
    return MagicMock()


@pytest.fixture()
def service(client, places, reconciler, executor) -> CompanionService:
    return CompanionService(places, reconciler, executor, lambda token: client)


def _invoke(service: CompanionService, method: str, **overrides):
    body = {
        "method": method,
        "arguments": {},
        "authTokens": {"access_token": "token"},
        "userSettings": {"Product": "X"},
        "location": LOCATION,
    }
    body.update(overrides)
    return service.handle(Invocation.from_json(body))


def test_invocation_from_json() -> None:
    invocation = Invocation.from_json(
        {
            "method": "estimate",
            "arguments": {"id": "1"},
            "authTokens": {"access_token": "t"},
            "userSettings": {"Product": {"name": "uberX", "value": "X"}},
            "location": {"lat": 1.0, "lng": 2.0},
        }
    )

    assert invocation.access_token == "t"
    assert invocation.pickup_option == ChooseLocationOption.HOME
    assert invocation.product_id == "X"
    assert invocation.location == Location(1.0, 2.0)


def test_missing_tokens_are_rejected(service) -> None:
    reply = _invoke(service, "estimate", authTokens=None)

    assert reply.reject_code == REJECT_INVALID_AUTH_TOKENS
    assert reply.to_json()["error"]["code"] == 901


def test_unknown_method_is_bad_request(service) -> None:
    reply = _invoke(service, "launchRocket")

    assert reply.reject_code == REJECT_BAD_REQUEST


def test_config_lists_products(service, client) -> None:
    client.get_products_for_location.return_value = {"X": "uberX", "Y": "XL"}

    reply = _invoke(service, "config")

    assert reply.settings["Product"]["type"] == "autocomplete"
    assert reply.settings["Product"]["options"] == [
        {"name": "uberX", "value": "X"},
        {"name": "XL", "value": "Y"},
    ]
    assert reply.to_json() == {"settings": reply.settings}


def test_config_without_location_has_no_products(service, client) -> None:
    reply = _invoke(service, "config", location=None)

    assert reply.settings["Product"]["options"] == []
    client.get_products_for_location.assert_not_called()


def test_config_failure_is_bad_request(service, client) -> None:
    client.get_products_for_location.side_effect = ProviderError(FailureKind.GENERIC_PROVIDER_FAILURE, "down")

    reply = _invoke(service, "config")

    assert reply.reject_code == REJECT_BAD_REQUEST
    assert reply.reject_message == "down"


def test_choose_location_lists_saved_places(service, client) -> None:
    client.get_available_places.return_value = {"home": Place(address="1 Main St")}

    reply = _invoke(service, "loadChooseLocation")

    assert len(reply.commands) == 1
    set_list = reply.commands[0]
    assert isinstance(set_list, SetList)
    assert [(item.item_id, item.label) for item in set_list.items] == [(0, "Locate Me"), (1, "Home: 1 Main St")]
    assert set_list.items[0].action == ChangeScreenAction(ScreenId.RETRIEVE_LOCATION)
    assert set_list.items[1].action == ChangeScreenAction(ScreenId.LOADING_ESTIMATE_PLACE)


def test_choose_location_jumps_to_active_trip(service, client, reconciler) -> None:
    client.get_current_trip.return_value = TripRecord(request_id="r1", status="accepted")

    reply = _invoke(service, "loadChooseLocation")

    assert reply.commands == [ChangeScreen(ScreenId.ARRIVING)]
    reconciler.remember_trip.assert_called_once_with(client, "r1")
    client.get_available_places.assert_not_called()


def test_estimate_at_home(service, client) -> None:
    reply = _invoke(service, "estimate", arguments={"id": 1})

    client.estimate_by_place.assert_called_once_with("X", "home")
    client.get_place.assert_called_once_with("home")
    assert reply.commands[-1] == ChangeScreen(ScreenId.ESTIMATE_PLACE)
    assert SetText(1, "1 Main St", screen_id=ScreenId.ESTIMATE_PLACE) in reply.commands
    assert SetText(4, "Request uberX", screen_id=ScreenId.ESTIMATE_PLACE) in reply.commands


def test_estimate_at_device_location(service, client, places) -> None:
    reply = _invoke(service, "estimate", arguments={"id": 0})

    client.estimate_by_location.assert_called_once_with("X", Location(42.0, -71.0))
    places.resolve_place_name.assert_called_once_with(Location(42.0, -71.0))
    assert reply.commands[-1] == ChangeScreen(ScreenId.ESTIMATE_LOCATION)
    assert SetText(1, "Elm Street", screen_id=ScreenId.ESTIMATE_LOCATION) in reply.commands


def test_estimate_without_location(service, client) -> None:
    reply = _invoke(service, "estimate", arguments={"id": 0}, location=None)

    assert reply.commands == recovery.location_unavailable()
    client.estimate_by_location.assert_not_called()


def test_estimate_with_malformed_location(service, client) -> None:
    reply = _invoke(service, "estimate", arguments={"id": 0}, location={"latitude": "n/a", "longitude": 2.0})

    assert reply.commands == recovery.location_unavailable()
    client.estimate_by_location.assert_not_called()


@pytest.mark.parametrize("option", [0, 1, 2])
def test_estimate_with_surge_asks_for_confirmation(service, client, option: int) -> None:
    surge = RideEstimate(pickup_estimate=3, surge_multiplier=1.4)
    client.estimate_by_place.return_value = surge
    client.estimate_by_location.return_value = surge

    reply = _invoke(service, "estimate", arguments={"id": option})

    assert reply.commands == recovery.surge_confirmation_required()
    client.request_ride_at_place.assert_not_called()
    client.request_ride_at_location.assert_not_called()


@pytest.mark.parametrize("option", [0, 1, 2])
def test_request_with_surge_never_requests(service, client, option: int) -> None:
    surge = RideEstimate(pickup_estimate=3, surge_multiplier=1.4)
    client.estimate_by_place.return_value = surge
    client.estimate_by_location.return_value = surge

    reply = _invoke(service, "requestRide", arguments={"id": option})

    assert reply.commands == recovery.surge_confirmation_required()
    client.request_ride_at_place.assert_not_called()
    client.request_ride_at_location.assert_not_called()


def test_estimate_failure_routes_through_recovery(service, client) -> None:
    client.get_product_details.side_effect = ProviderError(FailureKind.INVALID_PRODUCT, "404")

    reply = _invoke(service, "estimate", arguments={"id": 2})

    assert reply.commands == recovery.invalid_product()


def test_estimate_without_product_setting(service, client) -> None:
    reply = _invoke(service, "estimate", userSettings={})

    assert reply.commands == recovery.invalid_product()


def test_request_ride_at_work(service, client, reconciler) -> None:
    reply = _invoke(service, "requestRide", arguments={"id": 2})

    client.request_ride_at_place.assert_called_once_with("X", "work")
    reconciler.remember_trip.assert_called_once_with(client, "r9")
    assert reply.commands == [ChangeScreen(ScreenId.SEARCHING)]


def test_request_ride_without_location(service, client) -> None:
    reply = _invoke(service, "requestRide", location=None)

    assert reply.commands == recovery.location_unavailable()
    client.request_ride_at_location.assert_not_called()


def test_request_ride_no_drivers(service, client) -> None:
    client.request_ride_at_location.side_effect = ProviderError(FailureKind.NO_DRIVERS_AVAILABLE, "409")

    reply = _invoke(service, "requestRide")

    assert reply.commands == recovery.no_drivers_available()


def test_request_ride_surge_error_from_provider(service, client) -> None:
    client.request_ride_at_location.side_effect = ProviderError(FailureKind.SURGE_ACTIVE, "409 surge")

    reply = _invoke(service, "requestRide")

    assert reply.commands == recovery.surge_confirmation_required()


def test_cancel_without_trip(service, client) -> None:
    assert _invoke(service, "cancelRideRequest").commands == []
    client.cancel_trip.assert_not_called()


def test_cancel_in_progress_trip_is_refused(service, client) -> None:
    client.get_current_trip.return_value = TripRecord(request_id="r1", status="in_progress")

    reply = _invoke(service, "cancelRideRequest")

    assert reply.commands == [ChangeScreen(ScreenId.TRIP, animation=Animation.NONE)]
    client.cancel_trip.assert_not_called()


def test_cancel_trip(service, client) -> None:
    client.get_current_trip.return_value = TripRecord(request_id="r1", status="accepted")

    reply = _invoke(service, "cancelRideRequest")

    client.cancel_trip.assert_called_once_with("r1")
    assert reply.commands == recovery.trip_canceled()


@pytest.mark.parametrize(("method", "expected"), sorted(STATUS_UPDATE_METHODS.items()))
def test_status_methods_reconcile(service, client, reconciler, method: str, expected: TripStatus) -> None:
    reconciler.reconcile.return_value = [ChangeScreen(ScreenId.COVER)]

    reply = _invoke(service, method)

    reconciler.reconcile.assert_called_once_with(client, expected)
    assert reply.commands == [ChangeScreen(ScreenId.COVER)]


def test_rate_limit_renders_provider_error(service, reconciler) -> None:
    reconciler.reconcile.side_effect = ProviderError(FailureKind.RATE_LIMITED, "429")

    reply = _invoke(service, "getTripUpdates")

    assert reply.commands == recovery.provider_internal_error()


def test_provider_auth_failure_is_rejected(service, reconciler) -> None:
    reconciler.reconcile.side_effect = ProviderError(FailureKind.AUTH_INVALID, "401")

    reply = _invoke(service, "getTripUpdates")

    assert reply.reject_code == REJECT_INVALID_AUTH_TOKENS


def test_unexpected_failure_renders_internal_error(service, reconciler) -> None:
    reconciler.reconcile.side_effect = KeyError("boom")

    reply = _invoke(service, "getSearchingUpdates")

    assert reply.commands == recovery.internal_error()
    assert reply.to_json()["commands"][-1] == {"type": "changeScreen", "screenId": 9, "alert": True}
