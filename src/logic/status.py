"""Trip lifecycle classification and the status-to-screen binding table."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from functools import partial
from types import MappingProxyType
from typing import Callable, Mapping

from src.data.models import TripRecord
from src.rendering.commands import Command
from src.rendering.screens import ScreenId
from src.rendering.trip_screens import (
    clear_status_screen,
    render_arriving,
    render_ready,
    render_searching,
    render_trip,
)


class TripStatus(str, Enum):
    """Lifecycle of a ride as the watch sees it.

    ENDED is never reported by the provider: it means no current trip was
    found while the watch still expected one.
    """

    NONE = "none"
    PROCESSING = "processing"
    ACCEPTED = "accepted"
    ARRIVING = "arriving"
    IN_PROGRESS = "in_progress"
    ENDED = "ended"


ACTIVE_STATUSES = (
    TripStatus.PROCESSING,
    TripStatus.ACCEPTED,
    TripStatus.ARRIVING,
    TripStatus.IN_PROGRESS,
)

CANCELED_STATUSES = frozenset({"driver_canceled", "rider_canceled"})

UpdateRenderer = Callable[[TripRecord, str | None], list[Command]]
ClearRenderer = Callable[[int], list[Command]]


@dataclass(frozen=True)
class StatusBinding:
    """Which screen shows a status and how its fields are rendered."""

    status: TripStatus
    screen: ScreenId
    update_renderer: UpdateRenderer
    clear_renderer: ClearRenderer
    needs_destination: bool = False


_BINDINGS: Mapping[TripStatus, StatusBinding] = MappingProxyType(
    {
        TripStatus.PROCESSING: StatusBinding(
            TripStatus.PROCESSING,
            ScreenId.SEARCHING,
            render_searching,
            partial(clear_status_screen, ScreenId.SEARCHING),
        ),
        TripStatus.ACCEPTED: StatusBinding(
            TripStatus.ACCEPTED,
            ScreenId.ARRIVING,
            render_arriving,
            partial(clear_status_screen, ScreenId.ARRIVING),
        ),
        TripStatus.ARRIVING: StatusBinding(
            TripStatus.ARRIVING,
            ScreenId.READY,
            render_ready,
            partial(clear_status_screen, ScreenId.READY),
        ),
        TripStatus.IN_PROGRESS: StatusBinding(
            TripStatus.IN_PROGRESS,
            ScreenId.TRIP,
            render_trip,
            partial(clear_status_screen, ScreenId.TRIP),
            needs_destination=True,
        ),
    }
)


def classify(trip: TripRecord | None, expected: TripStatus | None = None) -> TripStatus:
    """Classify a fetched trip, or its absence given what the watch expected."""
    if trip is None:
        if expected is None or expected in (TripStatus.NONE, TripStatus.ENDED):
            return TripStatus.NONE
        return TripStatus.ENDED
    try:
        status = TripStatus(trip.status)
    except ValueError:
        return TripStatus.IN_PROGRESS
    if status not in ACTIVE_STATUSES:
        return TripStatus.IN_PROGRESS
    return status


def resolve_binding(status: TripStatus | str | None) -> StatusBinding:
    """Binding for a status; anything unbound falls back to the searching screen."""
    try:
        key = TripStatus(status)
    except ValueError:
        return _BINDINGS[TripStatus.PROCESSING]
    return _BINDINGS.get(key, _BINDINGS[TripStatus.PROCESSING])


def is_canceled(trip: TripRecord) -> bool:
    return trip.status in CANCELED_STATUSES


__all__ = [
    "ACTIVE_STATUSES",
    "CANCELED_STATUSES",
    "StatusBinding",
    "TripStatus",
    "classify",
    "is_canceled",
    "resolve_binding",
]
