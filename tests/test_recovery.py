from __future__ import annotations

import logging

import pytest

from src.errors import FailureKind, ProviderError
from src.logic import recovery
from src.rendering.commands import ChangeScreen, ChangeScreenAction, RetryAction, SetList, SetText
from src.rendering.screens import ScreenId


def _message(commands) -> str:
    return commands[2].value


def _actions(commands) -> list:
    set_list = next(command for command in commands if isinstance(command, SetList))
    return [item.action for item in set_list.items]


@pytest.mark.parametrize(
    ("kind", "message", "actions"),
    [
        (
            FailureKind.LOCATION_UNAVAILABLE,
            recovery.MESSAGE_NO_LOCATION,
            [ChangeScreenAction(ScreenId.CHOOSE_LOCATION)],
        ),
        (FailureKind.RATE_LIMITED, recovery.MESSAGE_PROVIDER_ERROR, [ChangeScreenAction(ScreenId.COVER)]),
        (
            FailureKind.NO_DRIVERS_AVAILABLE,
            recovery.MESSAGE_NO_DRIVERS,
            [ChangeScreenAction(ScreenId.CHOOSE_LOCATION)],
        ),
        (
            FailureKind.SURGE_ACTIVE,
            recovery.MESSAGE_SURGE,
            [RetryAction(), ChangeScreenAction(ScreenId.CHOOSE_LOCATION)],
        ),
        (FailureKind.INVALID_PRODUCT, recovery.MESSAGE_INVALID_PRODUCT, [ChangeScreenAction(ScreenId.COVER)]),
        (
            FailureKind.GENERIC_PROVIDER_FAILURE,
            recovery.MESSAGE_PROVIDER_ERROR,
            [ChangeScreenAction(ScreenId.COVER)],
        ),
        (
            FailureKind.PERSISTENCE_UNAVAILABLE,
            recovery.MESSAGE_PROVIDER_ERROR,
            [ChangeScreenAction(ScreenId.COVER)],
        ),
    ],
)
def test_recover_maps_kind_to_alert(kind: FailureKind, message: str, actions: list) -> None:
    commands = recovery.recover(kind)

    assert _message(commands) == message
    assert _actions(commands) == actions


def test_alert_batch_fills_error_screen_before_switching() -> None:
    commands = recovery.surge_confirmation_required()

    assert commands[-1] == ChangeScreen(ScreenId.ERROR, alert=True)
    assert [command for command in commands if isinstance(command, ChangeScreen)] == [commands[-1]]
    assert all(command.screen_id == ScreenId.ERROR for command in commands[:-1])
    assert commands[1] == SetText(1, recovery.TITLE_SURGE, screen_id=ScreenId.ERROR)


def test_recover_from_uses_error_kind() -> None:
    error = ProviderError(FailureKind.NO_DRIVERS_AVAILABLE, "409")

    assert recovery.recover_from(error) == recovery.no_drivers_available()


def test_recover_from_logs_provider_status(caplog) -> None:
    error = ProviderError(FailureKind.RATE_LIMITED, "slow down", status_code=429)

    with caplog.at_level(logging.INFO, logger="src.logic.recovery"):
        recovery.recover_from(error)

    assert "rate_limited (status 429): slow down" in caplog.text


def test_trip_canceled_returns_to_choose_location() -> None:
    commands = recovery.trip_canceled()

    assert _message(commands) == "Trip canceled"
    assert _actions(commands) == [ChangeScreenAction(ScreenId.CHOOSE_LOCATION)]


def test_internal_error_dismisses_to_cover() -> None:
    commands = recovery.internal_error()

    assert _message(commands) == "Internal server error"
    assert _actions(commands) == [ChangeScreenAction(ScreenId.COVER)]
