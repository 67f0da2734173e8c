"""Ride provider REST API client."""

from __future__ import annotations

from concurrent.futures import Executor
from typing import Any

import requests

from src.data.fanout import run_concurrently
from src.data.models import Location, Place, Product, Receipt, RideEstimate, TripRecord
from src.errors import FailureKind, ProviderError

SANDBOX_API_BASE = "https://sandbox-api.uber.com"
PRODUCTION_API_BASE = "https://api.uber.com"

PLACE_HOME = "home"
PLACE_WORK = "work"


def _has_api_error(body: Any, status: int, code: str) -> bool:
    errors = body.get("errors") if isinstance(body, dict) else None
    for error in errors or []:
        if not isinstance(error, dict):
            continue
        if str(error.get("status")) == str(status) and error.get("code") == code:
            return True
    return False


def _error_codes(body: Any) -> set[str]:
    if not isinstance(body, dict):
        return set()
    codes = {str(error.get("code")) for error in body.get("errors") or [] if isinstance(error, dict)}
    if body.get("code"):
        codes.add(str(body["code"]))
    return codes


def classify_response(status_code: int, reason: str, body: Any) -> FailureKind | None:
    """Map a provider HTTP response to a failure kind; None means success."""
    if 200 <= status_code < 300:
        return None
    if status_code == 401:
        return FailureKind.AUTH_INVALID
    if status_code == 429:
        return FailureKind.RATE_LIMITED
    if status_code == 409:
        if reason.lower() == "surge" or "surge" in _error_codes(body):
            return FailureKind.SURGE_ACTIVE
        return FailureKind.NO_DRIVERS_AVAILABLE
    if status_code == 404 and "not_found" in _error_codes(body):
        return FailureKind.INVALID_PRODUCT
    return FailureKind.GENERIC_PROVIDER_FAILURE


class RideClient:
    """Thin wrapper around the ride provider API using requests, bound to one user's token."""

    def __init__(self, access_token: str, sandbox: bool = True, timeout_seconds: int = 10) -> None:
        self._access_token = access_token
        self._base_url = SANDBOX_API_BASE if sandbox else PRODUCTION_API_BASE
        self._timeout_seconds = timeout_seconds

    def get_products_for_location(self, location: Location) -> dict[str, str]:
        """Return {product_id: display_name} for products available at a location."""
        params = {"latitude": location.latitude, "longitude": location.longitude}
        body = self._send("GET", "/v1/products", params=params)
        products = (body or {}).get("products", []) or []
        return {
            str(product.get("product_id")): str(product.get("display_name"))
            for product in products
            if isinstance(product, dict)
        }

    def get_current_trip(self) -> TripRecord | None:
        body = self._send("GET", "/v1/requests/current", missing_code="no_current_trip")
        if body is None:
            return None
        return TripRecord.from_json(body)

    def get_trip_details(self, trip_id: str) -> TripRecord:
        return TripRecord.from_json(self._send("GET", f"/v1/requests/{trip_id}") or {})

    def get_trip_receipt(self, trip_id: str) -> Receipt:
        return Receipt.from_json(self._send("GET", f"/v1/requests/{trip_id}/receipt") or {})

    def get_place(self, place_id: str) -> Place | None:
        """Fetch a saved place ("home" or "work"); None when the user has not set it."""
        body = self._send("GET", f"/v1/places/{place_id}", missing_code="unknown_place_id")
        if body is None:
            return None
        return Place.from_json(body)

    def get_available_places(self, executor: Executor | None = None) -> dict[str, Place]:
        """Return the saved places the user has, keyed by place id."""
        place_ids = [PLACE_WORK, PLACE_HOME]
        calls = [lambda place_id=place_id: self.get_place(place_id) for place_id in place_ids]
        if executor is not None:
            results = run_concurrently(executor, *calls)
        else:
            results = [call() for call in calls]
        return {place_id: place for place_id, place in zip(place_ids, results) if place is not None}

    def estimate_by_location(self, product_id: str, location: Location) -> RideEstimate:
        body = self._send(
            "POST",
            "/v1/requests/estimate",
            json_body={
                "product_id": product_id,
                "start_latitude": location.latitude,
                "start_longitude": location.longitude,
            },
        )
        return RideEstimate.from_json(body or {})

    def estimate_by_place(self, product_id: str, place_id: str) -> RideEstimate:
        body = self._send(
            "POST",
            "/v1/requests/estimate",
            json_body={"product_id": product_id, "start_place_id": place_id},
        )
        return RideEstimate.from_json(body or {})

    def request_ride_at_location(self, product_id: str, location: Location) -> TripRecord:
        body = self._send(
            "POST",
            "/v1/requests",
            json_body={
                "product_id": product_id,
                "start_latitude": location.latitude,
                "start_longitude": location.longitude,
            },
        )
        return TripRecord.from_json(body or {})

    def request_ride_at_place(self, product_id: str, place_id: str) -> TripRecord:
        body = self._send(
            "POST",
            "/v1/requests",
            json_body={"product_id": product_id, "start_place_id": place_id},
        )
        return TripRecord.from_json(body or {})

    def cancel_trip(self, trip_id: str) -> None:
        self._send("DELETE", f"/v1/requests/{trip_id}", json_body={})

    def get_profile(self) -> str:
        """Return the provider's stable user id for the token owner."""
        body = self._send("GET", "/v1/me") or {}
        user_id = body.get("uuid")
        if not user_id:
            raise ProviderError(FailureKind.GENERIC_PROVIDER_FAILURE, "Profile response has no uuid")
        return str(user_id)

    def get_product_details(self, product_id: str) -> Product:
        return Product.from_json(self._send("GET", f"/v1/products/{product_id}") or {})

    def _send(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json_body: dict[str, Any] | None = None,
        missing_code: str | None = None,
    ) -> dict[str, Any] | None:
        url = f"{self._base_url}/{path.lstrip('/')}"
        headers = {
            "Authorization": f"Bearer {self._access_token}",
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        try:
            response = requests.request(
                method,
                url,
                headers=headers,
                params=params,
                json=json_body,
                timeout=self._timeout_seconds,
            )
        except requests.RequestException as exc:
            raise ProviderError(
                FailureKind.GENERIC_PROVIDER_FAILURE, f"Ride API request failed: {exc}"
            ) from exc

        if response.status_code == 204:
            return None

        try:
            body = response.json()
        except ValueError:
            body = None

        if missing_code and response.status_code == 404 and _has_api_error(body, 404, missing_code):
            return None

        kind = classify_response(response.status_code, response.reason or "", body)
        if kind is not None:
            detail = f"Status {response.status_code}"
            body_text = (response.text or "").strip()
            if body_text:
                detail = f"{detail}, Body: {body_text}"
            raise ProviderError(kind, f"Ride API {method} {path} failed: {detail}", response.status_code)

        if body is None:
            raise ProviderError(FailureKind.GENERIC_PROVIDER_FAILURE, "Ride API response was not valid JSON")
        return body


__all__ = ["PLACE_HOME", "PLACE_WORK", "RideClient", "classify_response"]
