"""Reverse place-name lookup backed by the Google Places web service."""

from __future__ import annotations

import logging
from typing import Any

import requests

from src.data.models import Location

PLACES_API_BASE = "https://maps.googleapis.com/maps/api"
UNKNOWN_PLACE = "Unknown place."

logger = logging.getLogger(__name__)


class PlacesClientError(Exception):
    """Raised when a Places API request fails or returns a non-200 response."""


class PlacesClient:
    """Thin wrapper around the Places nearby-search and details endpoints."""

    def __init__(self, api_key: str, radius_meters: int = 10, search_types: str = "route") -> None:
        self._api_key = api_key
        self._radius_meters = radius_meters
        self._search_types = search_types
        self._timeout_seconds = 10

    def search_places(self, location: Location) -> list[dict[str, Any]]:
        """Return raw nearby-search results around a location."""
        params = {
            "key": self._api_key,
            "location": f"{location.latitude},{location.longitude}",
            "radius": self._radius_meters,
            "types": self._search_types,
        }
        response_json = self._get("/place/nearbysearch/json", params=params)
        results = response_json.get("results")
        if not isinstance(results, list):
            return []
        return [result for result in results if isinstance(result, dict)]

    def get_place_details(self, place_id: str) -> dict[str, Any]:
        params = {"key": self._api_key, "placeid": place_id}
        response_json = self._get("/place/details/json", params=params)
        result = response_json.get("result")
        return result if isinstance(result, dict) else {}

    def resolve_place_name(self, location: Location) -> str:
        """Best-effort display name for a location; never raises."""
        try:
            places = self.search_places(location)
            place = places[0] if places else None
            if not place or not place.get("place_id"):
                return UNKNOWN_PLACE
            details = self.get_place_details(place["place_id"])
        except PlacesClientError as exc:
            logger.warning("Place lookup failed for %s: %s", location, exc)
            return UNKNOWN_PLACE
        name = details.get("name") or place.get("name")
        return str(name) if name else UNKNOWN_PLACE

    def _get(self, path: str, params: dict[str, Any]) -> dict[str, Any]:
        url = f"{PLACES_API_BASE}{path}"
        try:
            response = requests.get(url, params=params, timeout=self._timeout_seconds)
        except requests.RequestException as exc:
            raise PlacesClientError(f"Places API request failed: {exc}") from exc

        if response.status_code != 200:
            body_text = response.text.strip()
            detail = f"Status {response.status_code}"
            if body_text:
                detail = f"{detail}, Body: {body_text}"
            raise PlacesClientError(f"Places API request failed: {detail}")

        try:
            response_json = response.json()
        except ValueError as exc:
            raise PlacesClientError("Places API response was not valid JSON") from exc
        if not isinstance(response_json, dict):
            raise PlacesClientError("Places API response was not a JSON object")
        return response_json


__all__ = ["UNKNOWN_PLACE", "PlacesClient", "PlacesClientError"]
