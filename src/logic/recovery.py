"""Map failures to the alert screens the watch shows for them."""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Callable, Mapping

from src.errors import FailureKind, ProviderError
from src.rendering.commands import (
    EXPIRE_ON_SCREEN_ENTER,
    Action,
    ChangeScreen,
    ChangeScreenAction,
    Command,
    ListItem,
    RetryAction,
    SetBitmap,
    SetList,
    SetText,
)
from src.rendering.screens import (
    ELEMENT_ERROR_ICON,
    ELEMENT_ERROR_MESSAGE,
    ELEMENT_ERROR_TITLE,
    Bitmap,
    ScreenId,
)

logger = logging.getLogger(__name__)

TITLE_ALERT = "Alert"
TITLE_ERROR = "Error"
TITLE_SURGE = "Surge pricing"

MESSAGE_NO_LOCATION = "Cannot retrieve location"
MESSAGE_NO_DRIVERS = "No cars available"
MESSAGE_SURGE = "Confirmation on the Uber app is required"
MESSAGE_INVALID_PRODUCT = "Please reconfigure or reinstall the app"
MESSAGE_PROVIDER_ERROR = "Uber internal server error"
MESSAGE_INTERNAL_ERROR = "Internal server error"
MESSAGE_TRIP_CANCELED = "Trip canceled"
MESSAGE_RECEIPT_ERROR = "Error retrieving the receipt"

_TO_CHOOSE_LOCATION = ChangeScreenAction(ScreenId.CHOOSE_LOCATION)
_TO_COVER = ChangeScreenAction(ScreenId.COVER)


def alert_batch(
    title: str,
    message: str,
    actions: list[tuple[str, Action]],
    icon: Bitmap = Bitmap.ALERT,
) -> list[Command]:
    """Fill the error screen, then switch to it with an alert."""
    screen = ScreenId.ERROR
    items = [ListItem(index, label, action) for index, (label, action) in enumerate(actions)]
    return [
        SetBitmap(ELEMENT_ERROR_ICON, icon, screen_id=screen),
        SetText(ELEMENT_ERROR_TITLE, title, screen_id=screen),
        SetText(ELEMENT_ERROR_MESSAGE, message, screen_id=screen),
        SetList(items, ttl=EXPIRE_ON_SCREEN_ENTER, screen_id=screen),
        ChangeScreen(screen, alert=True),
    ]


def location_unavailable() -> list[Command]:
    return alert_batch(TITLE_ALERT, MESSAGE_NO_LOCATION, [("Back", _TO_CHOOSE_LOCATION)])


def no_drivers_available() -> list[Command]:
    return alert_batch(TITLE_ALERT, MESSAGE_NO_DRIVERS, [("Back", _TO_CHOOSE_LOCATION)])


def surge_confirmation_required() -> list[Command]:
    return alert_batch(
        TITLE_SURGE,
        MESSAGE_SURGE,
        [("Retry", RetryAction()), ("Back", _TO_CHOOSE_LOCATION)],
        icon=Bitmap.SURGE,
    )


def invalid_product() -> list[Command]:
    return alert_batch(TITLE_ERROR, MESSAGE_INVALID_PRODUCT, [("OK", _TO_COVER)], icon=Bitmap.ERROR)


def provider_internal_error() -> list[Command]:
    return alert_batch(TITLE_ERROR, MESSAGE_PROVIDER_ERROR, [("OK", _TO_COVER)], icon=Bitmap.ERROR)


def internal_error() -> list[Command]:
    return alert_batch(TITLE_ERROR, MESSAGE_INTERNAL_ERROR, [("OK", _TO_COVER)], icon=Bitmap.ERROR)


def trip_canceled() -> list[Command]:
    return alert_batch(TITLE_ALERT, MESSAGE_TRIP_CANCELED, [("OK", _TO_CHOOSE_LOCATION)])


def receipt_unavailable() -> list[Command]:
    return alert_batch(TITLE_ERROR, MESSAGE_RECEIPT_ERROR, [("OK", _TO_CHOOSE_LOCATION)], icon=Bitmap.ERROR)


_RECOVERY: Mapping[FailureKind, Callable[[], list[Command]]] = MappingProxyType(
    {
        FailureKind.LOCATION_UNAVAILABLE: location_unavailable,
        FailureKind.RATE_LIMITED: provider_internal_error,
        FailureKind.NO_DRIVERS_AVAILABLE: no_drivers_available,
        FailureKind.SURGE_ACTIVE: surge_confirmation_required,
        FailureKind.INVALID_PRODUCT: invalid_product,
    }
)


def recover(kind: FailureKind) -> list[Command]:
    """Alert batch for a failure kind; unlisted kinds get the provider error screen."""
    return _RECOVERY.get(kind, provider_internal_error)()


def recover_from(error: ProviderError) -> list[Command]:
    logger.info(
        "Recovering from provider failure %s (status %s): %s",
        error.kind.value,
        error.status_code if error.status_code is not None else "n/a",
        error.detail,
    )
    return recover(error.kind)


__all__ = [
    "alert_batch",
    "internal_error",
    "invalid_product",
    "location_unavailable",
    "no_drivers_available",
    "provider_internal_error",
    "receipt_unavailable",
    "recover",
    "recover_from",
    "surge_confirmation_required",
    "trip_canceled",
]
