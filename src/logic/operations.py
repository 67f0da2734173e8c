"""Device method handlers: one invocation in, one command batch out."""

from __future__ import annotations

from concurrent.futures import Executor
from dataclasses import dataclass, field
import logging
from typing import Any, Callable

from src.data.fanout import run_concurrently
from src.data.models import Location, Place
from src.data.places_client import PlacesClient
from src.data.ride_client import PLACE_HOME, PLACE_WORK, RideClient
from src.errors import FailureKind, ProviderError
from src.logic import recovery
from src.logic.reconcile import TripReconciler
from src.logic.status import TripStatus, classify, resolve_binding
from src.rendering.commands import (
    EXPIRE_ON_SCREEN_ENTER,
    ChangeScreen,
    ChangeScreenAction,
    Command,
    ListItem,
    SetList,
    serialize_batch,
)
from src.rendering.screens import Animation, ChooseLocationOption, ScreenId
from src.rendering.trip_screens import render_estimate

logger = logging.getLogger(__name__)

REJECT_INVALID_AUTH_TOKENS = 901
REJECT_BAD_REQUEST = 400

PRODUCT_SETTING = "Product"
PRODUCT_HINT = "Select the Uber product you'd like to use."

STATUS_UPDATE_METHODS = {
    "getSearchingUpdates": TripStatus.PROCESSING,
    "getArrivingUpdates": TripStatus.ACCEPTED,
    "getReadyUpdates": TripStatus.ARRIVING,
    "getTripUpdates": TripStatus.IN_PROGRESS,
}

_SAVED_PLACES = {
    ChooseLocationOption.HOME: PLACE_HOME,
    ChooseLocationOption.WORK: PLACE_WORK,
}


@dataclass(frozen=True)
class Invocation:
    """One remote method call from the watch, as forwarded by the companion platform."""

    method: str
    arguments: dict[str, Any] = field(default_factory=dict)
    access_token: str | None = None
    user_settings: dict[str, Any] = field(default_factory=dict)
    location: Location | None = None

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> Invocation:
        auth_tokens = data.get("authTokens") or {}
        return cls(
            method=str(data.get("method") or ""),
            arguments=data.get("arguments") or {},
            access_token=auth_tokens.get("access_token") if isinstance(auth_tokens, dict) else None,
            user_settings=data.get("userSettings") or {},
            location=Location.from_json(data.get("location")),
        )

    @property
    def pickup_option(self) -> ChooseLocationOption:
        try:
            return ChooseLocationOption(int(self.arguments.get("id")))
        except (TypeError, ValueError):
            return ChooseLocationOption.LOCATE

    @property
    def product_id(self) -> str | None:
        value = self.user_settings.get(PRODUCT_SETTING)
        if isinstance(value, dict):
            value = value.get("value")
        return str(value) if value else None


@dataclass(frozen=True)
class Reply:
    """What goes back to the companion platform for one invocation."""

    commands: list[Command] = field(default_factory=list)
    settings: dict[str, Any] | None = None
    reject_code: int | None = None
    reject_message: str = ""

    @classmethod
    def reject(cls, code: int, message: str) -> Reply:
        return cls(reject_code=code, reject_message=message)

    def to_json(self) -> dict[str, Any]:
        if self.reject_code is not None:
            return {"error": {"code": self.reject_code, "message": self.reject_message}}
        if self.settings is not None:
            return {"settings": self.settings}
        return {"commands": serialize_batch(self.commands)}


class CompanionService:
    """Dispatches watch invocations to their handlers."""

    def __init__(
        self,
        places: PlacesClient,
        reconciler: TripReconciler,
        executor: Executor,
        client_factory: Callable[[str], RideClient],
    ) -> None:
        self._places = places
        self._reconciler = reconciler
        self._executor = executor
        self._client_factory = client_factory
        self._handlers: dict[str, Callable[[RideClient, Invocation], list[Command]]] = {
            "loadChooseLocation": self.load_choose_location,
            "estimate": self.estimate,
            "requestRide": self.request_ride,
            "cancelRideRequest": self.cancel_ride_request,
        }
        for method, expected in STATUS_UPDATE_METHODS.items():
            self._handlers[method] = self._status_updates(expected)

    def handle(self, invocation: Invocation) -> Reply:
        if not invocation.access_token:
            return Reply.reject(REJECT_INVALID_AUTH_TOKENS, "Invalid auth tokens.")
        client = self._client_factory(invocation.access_token)

        if invocation.method == "config":
            return self.render_config(client, invocation)

        handler = self._handlers.get(invocation.method)
        if handler is None:
            return Reply.reject(REJECT_BAD_REQUEST, "Invalid method name.")

        try:
            commands = handler(client, invocation)
        except ProviderError as exc:
            if exc.kind == FailureKind.AUTH_INVALID:
                return Reply.reject(REJECT_INVALID_AUTH_TOKENS, "Invalid auth tokens.")
            commands = recovery.recover_from(exc)
        except Exception:
            logger.exception("Unhandled failure in %s", invocation.method)
            commands = recovery.internal_error()
        return Reply(commands=commands)

    def render_config(self, client: RideClient, invocation: Invocation) -> Reply:
        """Settings page: the product picker for the watch's current location."""
        try:
            products = client.get_products_for_location(invocation.location) if invocation.location else {}
        except ProviderError as exc:
            if exc.kind == FailureKind.AUTH_INVALID:
                return Reply.reject(REJECT_INVALID_AUTH_TOKENS, "Invalid auth tokens.")
            return Reply.reject(REJECT_BAD_REQUEST, exc.detail or str(exc))
        options = [{"name": name, "value": product_id} for product_id, name in products.items()]
        settings = {
            PRODUCT_SETTING: {"type": "autocomplete", "hint": PRODUCT_HINT, "options": options},
        }
        return Reply(settings=settings)

    def load_choose_location(self, client: RideClient, invocation: Invocation) -> list[Command]:
        trip = client.get_current_trip()
        if trip is not None:
            self._reconciler.remember_trip(client, trip.request_id)
            return [ChangeScreen(resolve_binding(classify(trip)).screen)]

        places = client.get_available_places(self._executor)
        items = [
            ListItem(
                ChooseLocationOption.LOCATE,
                "Locate Me",
                ChangeScreenAction(ScreenId.RETRIEVE_LOCATION),
            )
        ]
        for option, label in ((ChooseLocationOption.HOME, "Home"), (ChooseLocationOption.WORK, "Work")):
            place = places.get(_SAVED_PLACES[option])
            if place is not None:
                items.append(
                    ListItem(
                        option,
                        f"{label}: {place.address}",
                        ChangeScreenAction(ScreenId.LOADING_ESTIMATE_PLACE),
                    )
                )
        return [SetList(items, ttl=EXPIRE_ON_SCREEN_ENTER)]

    def estimate(self, client: RideClient, invocation: Invocation) -> list[Command]:
        product_id = invocation.product_id
        if not product_id:
            return recovery.invalid_product()
        option = invocation.pickup_option
        place_id = _SAVED_PLACES.get(option)

        if place_id is not None:
            estimate_call = lambda: client.estimate_by_place(product_id, place_id)
            address_call = lambda: _address(client.get_place(place_id))
        else:
            location = invocation.location
            if location is None:
                return recovery.location_unavailable()
            estimate_call = lambda: client.estimate_by_location(product_id, location)
            address_call = lambda: self._places.resolve_place_name(location)

        estimate, address, product = run_concurrently(
            self._executor,
            estimate_call,
            address_call,
            lambda: client.get_product_details(product_id),
        )
        if estimate.surge_active:
            logger.info("Surge %.1fx active for product %s", estimate.surge_multiplier, product_id)
            return recovery.surge_confirmation_required()
        return render_estimate(estimate, address, product.display_name, with_place=place_id is not None)

    def request_ride(self, client: RideClient, invocation: Invocation) -> list[Command]:
        product_id = invocation.product_id
        if not product_id:
            return recovery.invalid_product()
        place_id = _SAVED_PLACES.get(invocation.pickup_option)
        location = invocation.location
        if place_id is None and location is None:
            return recovery.location_unavailable()

        # Surge must be confirmed in the provider's own app; never request through it.
        if place_id is not None:
            estimate = client.estimate_by_place(product_id, place_id)
        else:
            estimate = client.estimate_by_location(product_id, location)
        if estimate.surge_active:
            return recovery.surge_confirmation_required()

        if place_id is not None:
            trip = client.request_ride_at_place(product_id, place_id)
        else:
            trip = client.request_ride_at_location(product_id, location)
        self._reconciler.remember_trip(client, trip.request_id)
        return [ChangeScreen(ScreenId.SEARCHING)]

    def cancel_ride_request(self, client: RideClient, invocation: Invocation) -> list[Command]:
        trip = client.get_current_trip()
        if trip is None:
            return []
        if trip.status == TripStatus.IN_PROGRESS.value:
            # Too late to cancel once the rider is on board.
            return [ChangeScreen(ScreenId.TRIP, animation=Animation.NONE)]
        client.cancel_trip(trip.request_id)
        return recovery.trip_canceled()

    def _status_updates(self, expected: TripStatus) -> Callable[[RideClient, Invocation], list[Command]]:
        def handler(client: RideClient, invocation: Invocation) -> list[Command]:
            return self._reconciler.reconcile(client, expected)

        return handler


def _address(place: Place | None) -> str:
    return place.address if place is not None else ""


__all__ = [
    "CompanionService",
    "Invocation",
    "REJECT_BAD_REQUEST",
    "REJECT_INVALID_AUTH_TOKENS",
    "Reply",
    "STATUS_UPDATE_METHODS",
]
