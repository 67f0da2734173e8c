"""Watch-face screen ids, element ids and glyphs shared by the renderers."""

from __future__ import annotations

from enum import Enum, IntEnum


class ScreenId(IntEnum):
    """Watch-face ids as registered with the device companion app."""

    COVER = 0
    CHOOSE_LOCATION = 1
    RETRIEVE_LOCATION = 2
    ESTIMATE_LOCATION = 3
    SEARCHING = 4
    ARRIVING = 5
    READY = 6
    TRIP = 7
    RECEIPT = 8
    ERROR = 9
    ESTIMATE_PLACE = 10
    LOADING_ESTIMATE_PLACE = 12


class Animation(str, Enum):
    NONE = "none"


class Bitmap(str, Enum):
    """Bitmap resources bundled with the watch app."""

    ALERT = "icon_alert"
    ERROR = "icon_error"
    SURGE = "icon_surge"


class ChooseLocationOption(IntEnum):
    """List item ids on the choose-location screen, echoed back as `arguments.id`."""

    LOCATE = 0
    HOME = 1
    WORK = 2


# Glyphs from the watch app's icon font.
ICON_CLOCK = "\ue02b"
ICON_MULTIPLIER = "\ue022"
ICON_PROFILE = "\ue023"
ICON_PIN = "\ue021"
ICON_PRICE = "\ue020"

# Element 1 is the TTL-bound placeholder on every trip status screen.
ELEMENT_STATUS_PLACEHOLDER = 1

ELEMENT_ERROR_ICON = 0
ELEMENT_ERROR_TITLE = 1
ELEMENT_ERROR_MESSAGE = 2


__all__ = [
    "Animation",
    "Bitmap",
    "ChooseLocationOption",
    "ELEMENT_ERROR_ICON",
    "ELEMENT_ERROR_MESSAGE",
    "ELEMENT_ERROR_TITLE",
    "ELEMENT_STATUS_PLACEHOLDER",
    "ICON_CLOCK",
    "ICON_MULTIPLIER",
    "ICON_PIN",
    "ICON_PRICE",
    "ICON_PROFILE",
    "ScreenId",
]
