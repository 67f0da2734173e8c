"""Read-only value objects parsed from ride provider responses."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Location:
    """A latitude/longitude pair as reported by the device or provider."""

    latitude: float
    longitude: float

    @classmethod
    def from_json(cls, data: dict[str, Any] | None) -> Location | None:
        if not isinstance(data, dict):
            return None
        latitude = data.get("latitude", data.get("lat"))
        longitude = data.get("longitude", data.get("lng"))
        if latitude is None or longitude is None:
            return None
        try:
            return cls(latitude=float(latitude), longitude=float(longitude))
        except (TypeError, ValueError):
            return None


@dataclass(frozen=True)
class Driver:
    name: str


@dataclass(frozen=True)
class Vehicle:
    make: str
    model: str
    license_plate: str


@dataclass(frozen=True)
class Destination:
    """Trip destination; `eta` is minutes to arrival, when the provider knows it."""

    latitude: float
    longitude: float
    eta: int | None = None

    @property
    def location(self) -> Location:
        return Location(latitude=self.latitude, longitude=self.longitude)


@dataclass(frozen=True)
class TripRecord:
    """Snapshot of a ride request as returned by the provider."""

    request_id: str
    status: str
    eta: int | None = None
    surge_multiplier: float = 1.0
    driver: Driver | None = None
    vehicle: Vehicle | None = None
    destination: Destination | None = None

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> TripRecord:
        driver_data = data.get("driver") or None
        vehicle_data = data.get("vehicle") or None
        destination_data = data.get("destination") or None

        driver = Driver(name=driver_data.get("name") or "") if driver_data else None
        vehicle = None
        if vehicle_data:
            vehicle = Vehicle(
                make=vehicle_data.get("make") or "",
                model=vehicle_data.get("model") or "",
                license_plate=vehicle_data.get("license_plate") or "",
            )
        destination = None
        if (
            destination_data
            and destination_data.get("latitude") is not None
            and destination_data.get("longitude") is not None
        ):
            destination = Destination(
                latitude=float(destination_data["latitude"]),
                longitude=float(destination_data["longitude"]),
                eta=destination_data.get("eta"),
            )
        surge = data.get("surge_multiplier")
        return cls(
            request_id=str(data.get("request_id") or ""),
            status=str(data.get("status") or ""),
            eta=data.get("eta"),
            surge_multiplier=float(surge) if surge is not None else 1.0,
            driver=driver,
            vehicle=vehicle,
            destination=destination,
        )


@dataclass(frozen=True)
class RideEstimate:
    """Fare/pickup estimate for a product at a pickup point."""

    pickup_estimate: int | None
    surge_multiplier: float

    @property
    def surge_active(self) -> bool:
        return self.surge_multiplier > 1

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> RideEstimate:
        price = data.get("price") or {}
        surge = price.get("surge_multiplier")
        return cls(
            pickup_estimate=data.get("pickup_estimate"),
            surge_multiplier=float(surge) if surge is not None else 1.0,
        )


@dataclass(frozen=True)
class Receipt:
    total_charged: str

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> Receipt:
        return cls(total_charged=str(data.get("total_charged") or ""))


@dataclass(frozen=True)
class Place:
    address: str

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> Place:
        return cls(address=str(data.get("address") or ""))


@dataclass(frozen=True)
class Product:
    product_id: str
    display_name: str

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> Product:
        return cls(
            product_id=str(data.get("product_id") or ""),
            display_name=str(data.get("display_name") or ""),
        )


__all__ = [
    "Destination",
    "Driver",
    "Location",
    "Place",
    "Product",
    "Receipt",
    "RideEstimate",
    "TripRecord",
    "Vehicle",
]
