from __future__ import annotations

import json
import threading
from unittest.mock import MagicMock

import pytest
import requests

from src.logic.operations import Invocation, Reply
from src.rendering.commands import ChangeScreen
from src.rendering.screens import ScreenId
from src.server import create_server


@pytest.fixture()
def service() -> MagicMock:
    service = MagicMock()
    service.handle.return_value = Reply(commands=[ChangeScreen(ScreenId.SEARCHING)])
    return service


@pytest.fixture()
def base_url(service):
    server = create_server(service, "127.0.0.1", 0)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    host, port = server.server_address[:2]
    yield f"http://{host}:{port}"
    server.shutdown()
    server.server_close()


def test_healthz(base_url) -> None:
    response = requests.get(f"{base_url}/healthz", timeout=5)

    assert response.status_code == 200
    assert response.text == "ok"


def test_invocation_round_trip(base_url, service) -> None:
    body = {
        "method": "requestRide",
        "arguments": {"id": 0},
        "authTokens": {"access_token": "token"},
        "userSettings": {"Product": "X"},
        "location": {"latitude": 1.0, "longitude": 2.0},
    }

    response = requests.post(base_url, json=body, timeout=5)

    assert response.status_code == 200
    assert response.json() == {"commands": [{"type": "changeScreen", "screenId": 4}]}
    invocation = service.handle.call_args[0][0]
    assert isinstance(invocation, Invocation)
    assert invocation.method == "requestRide"


def test_reject_maps_to_http_status(base_url, service) -> None:
    service.handle.return_value = Reply.reject(901, "Invalid auth tokens.")

    response = requests.post(base_url, json={"method": "estimate"}, timeout=5)

    assert response.status_code == 401
    assert response.json() == {"error": {"code": 901, "message": "Invalid auth tokens."}}


def test_invalid_json_is_bad_request(base_url, service) -> None:
    response = requests.post(base_url, data=b"{nope", headers={"Content-Type": "application/json"}, timeout=5)

    assert response.status_code == 400
    assert json.loads(response.text)["error"]["code"] == 400
    service.handle.assert_not_called()


def test_malformed_location_still_gets_a_reply(base_url, service) -> None:
    body = {
        "method": "estimate",
        "authTokens": {"access_token": "token"},
        "location": {"latitude": "n/a", "longitude": 2.0},
    }

    response = requests.post(base_url, json=body, timeout=5)

    assert response.status_code == 200
    invocation = service.handle.call_args[0][0]
    assert invocation.location is None
