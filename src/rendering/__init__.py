"""Command protocol and screen renderers for the watch app."""

from src.rendering.commands import (
    EXPIRE_ON_SCREEN_ENTER,
    NO_EXPIRE,
    ChangeScreen,
    ChangeScreenAction,
    Command,
    ListItem,
    RetryAction,
    SetBitmap,
    SetList,
    SetText,
    serialize_batch,
)
from src.rendering.screens import Animation, Bitmap, ChooseLocationOption, ScreenId

__all__ = [
    "Animation",
    "Bitmap",
    "ChangeScreen",
    "ChangeScreenAction",
    "ChooseLocationOption",
    "Command",
    "EXPIRE_ON_SCREEN_ENTER",
    "ListItem",
    "NO_EXPIRE",
    "RetryAction",
    "ScreenId",
    "SetBitmap",
    "SetList",
    "SetText",
    "serialize_batch",
]
