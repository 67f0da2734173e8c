"""Reconcile the status a watch is showing with the provider's current trip."""

from __future__ import annotations

from concurrent.futures import Executor, Future
import logging

from src.data.fanout import DeferredCall, fire_and_forget
from src.data.models import TripRecord
from src.data.places_client import PlacesClient
from src.data.ride_client import RideClient
from src.data.trip_store import JsonTripStore
from src.errors import FailureKind, ProviderError, StorageError
from src.logic import recovery
from src.logic.status import StatusBinding, TripStatus, classify, is_canceled, resolve_binding
from src.rendering.commands import ChangeScreen, Command
from src.rendering.screens import ScreenId
from src.rendering.trip_screens import NO_DESTINATION, render_receipt

logger = logging.getLogger(__name__)

# Shown when a trip ended but no trip id was ever recorded for the user.
NEUTRAL_SCREEN = ScreenId.COVER


class TripReconciler:
    """Turns one status poll into an ordered command batch.

    Content commands always precede the screen change that reveals them.
    """

    def __init__(
        self,
        places: PlacesClient,
        store: JsonTripStore,
        executor: Executor,
        status_ttl_seconds: int = 30,
        receipt_delay_seconds: float = 15.0,
    ) -> None:
        self._places = places
        self._store = store
        self._executor = executor
        self._status_ttl_seconds = status_ttl_seconds
        self._receipt_delay_seconds = receipt_delay_seconds

    def reconcile(self, client: RideClient, expected: TripStatus) -> list[Command]:
        """Refresh the expected status screen, or jump to the one the trip is really in."""
        trip = client.get_current_trip()
        if trip is None:
            return self.resolve_ended(client)

        self.remember_trip(client, trip.request_id)
        status = classify(trip, expected)
        binding = resolve_binding(status)
        commands = self.render_status(trip, binding)
        if status != expected:
            logger.info("Trip %s moved from %s to %s between polls", trip.request_id, expected.value, status.value)
            commands.append(ChangeScreen(binding.screen, alert=True))
        return commands

    def render_status(self, trip: TripRecord, binding: StatusBinding) -> list[Command]:
        destination_name = None
        if binding.needs_destination and trip.destination is not None:
            destination_name = self._places.resolve_place_name(trip.destination.location)
        commands = list(binding.update_renderer(trip, destination_name))
        commands.extend(binding.clear_renderer(self._status_ttl_seconds))
        return commands

    def resolve_ended(self, client: RideClient) -> list[Command]:
        """Show the receipt, or the cancellation alert, for the trip that just ended."""
        user_id = client.get_profile()
        try:
            trip_id = self._store.get_last_trip_id(user_id)
        except StorageError as exc:
            logger.warning("Cannot read last trip id for user %s: %s", user_id, exc)
            trip_id = None
        if not trip_id:
            logger.info("No current trip and no last trip on record for user %s", user_id)
            return [ChangeScreen(NEUTRAL_SCREEN)]

        receipt_call = DeferredCall(self._receipt_delay_seconds, lambda: client.get_trip_receipt(trip_id))
        try:
            trip = client.get_trip_details(trip_id)
            if is_canceled(trip):
                receipt_call.abandon()
                return recovery.trip_canceled()

            name_future: Future | None = None
            if trip.destination is not None:
                name_future = self._executor.submit(
                    self._places.resolve_place_name, trip.destination.location
                )
            receipt = receipt_call.result()
            destination_name = name_future.result() if name_future is not None else NO_DESTINATION
        except ProviderError as exc:
            receipt_call.abandon()
            if exc.kind == FailureKind.GENERIC_PROVIDER_FAILURE:
                logger.warning("Cannot resolve ended trip %s: %s", trip_id, exc.detail)
                return recovery.receipt_unavailable()
            raise
        except Exception:
            receipt_call.abandon()
            raise
        return render_receipt(destination_name, receipt)

    def remember_trip(self, client: RideClient, trip_id: str) -> Future | None:
        """Record the trip id for the token owner in the background."""
        if not trip_id:
            return None
        return fire_and_forget(self._executor, "remember last trip", self._store_trip, client, trip_id)

    def _store_trip(self, client: RideClient, trip_id: str) -> None:
        user_id = client.get_profile()
        self._store.set_last_trip_id(user_id, trip_id)


__all__ = ["NEUTRAL_SCREEN", "TripReconciler"]
