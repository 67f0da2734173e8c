"""Declarative UI commands sent back to the watch.

Every command serializes to a JSON object with a `type` discriminator. The
vocabulary only grows: new command kinds or optional fields may be added, but
existing names and fields are never renamed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Union

from src.rendering.screens import Animation, Bitmap, ScreenId

# TTL sentinels; positive values are seconds.
NO_EXPIRE = 0
EXPIRE_ON_SCREEN_ENTER = -1


def encode_ttl(ttl: int | None) -> int | None:
    """Validate a TTL and return its wire value."""
    if ttl is None:
        return None
    if isinstance(ttl, bool) or not isinstance(ttl, int):
        raise ValueError(f"TTL must be an integer, got {ttl!r}")
    if ttl in (NO_EXPIRE, EXPIRE_ON_SCREEN_ENTER) or ttl > 0:
        return ttl
    raise ValueError(f"TTL must be positive, NO_EXPIRE or EXPIRE_ON_SCREEN_ENTER, got {ttl}")


def _put_optional(payload: dict[str, Any], key: str, value: Any) -> dict[str, Any]:
    if value is not None:
        payload[key] = value
    return payload


@dataclass(frozen=True)
class ChangeScreenAction:
    screen_id: ScreenId

    def to_dict(self) -> dict[str, Any]:
        return {"type": "changeScreen", "screenId": int(self.screen_id)}


@dataclass(frozen=True)
class RetryAction:
    """Re-issue the element request that produced the current screen."""

    def to_dict(self) -> dict[str, Any]:
        return {"type": "retry"}


Action = Union[ChangeScreenAction, RetryAction]


@dataclass(frozen=True)
class ListItem:
    item_id: int
    label: str
    action: Action | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"id": int(self.item_id), "label": self.label}
        if self.action is not None:
            payload["onSelect"] = self.action.to_dict()
        return payload


@dataclass(frozen=True)
class ChangeScreen:
    type: ClassVar[str] = "changeScreen"

    screen_id: ScreenId
    animation: Animation | None = None
    alert: bool = False

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"type": self.type, "screenId": int(self.screen_id)}
        if self.animation is not None:
            payload["animation"] = self.animation.value
        if self.alert:
            payload["alert"] = True
        return payload


@dataclass(frozen=True)
class SetText:
    type: ClassVar[str] = "setText"

    element_id: int
    value: str
    screen_id: ScreenId | None = None
    ttl: int | None = None

    def __post_init__(self) -> None:
        encode_ttl(self.ttl)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"type": self.type, "elementId": self.element_id, "value": self.value}
        _put_optional(payload, "screenId", None if self.screen_id is None else int(self.screen_id))
        return _put_optional(payload, "ttl", encode_ttl(self.ttl))


@dataclass(frozen=True)
class SetBitmap:
    type: ClassVar[str] = "setBitmap"

    element_id: int
    resource_id: Bitmap
    screen_id: ScreenId | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "type": self.type,
            "elementId": self.element_id,
            "resourceId": self.resource_id.value,
        }
        return _put_optional(payload, "screenId", None if self.screen_id is None else int(self.screen_id))


@dataclass(frozen=True)
class SetList:
    type: ClassVar[str] = "setList"

    items: tuple[ListItem, ...] = field(default_factory=tuple)
    ttl: int | None = None
    screen_id: ScreenId | None = None

    def __post_init__(self) -> None:
        encode_ttl(self.ttl)
        object.__setattr__(self, "items", tuple(self.items))

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"type": self.type, "items": [item.to_dict() for item in self.items]}
        _put_optional(payload, "ttl", encode_ttl(self.ttl))
        return _put_optional(payload, "screenId", None if self.screen_id is None else int(self.screen_id))


Command = Union[ChangeScreen, SetText, SetBitmap, SetList]


def serialize_batch(commands: list[Command]) -> list[dict[str, Any]]:
    return [command.to_dict() for command in commands]


__all__ = [
    "Action",
    "ChangeScreen",
    "ChangeScreenAction",
    "Command",
    "EXPIRE_ON_SCREEN_ENTER",
    "ListItem",
    "NO_EXPIRE",
    "RetryAction",
    "SetBitmap",
    "SetList",
    "SetText",
    "encode_ttl",
    "serialize_batch",
]
