"""Failure taxonomy shared by the collaborators and the recovery layer."""

from __future__ import annotations

from enum import Enum


class FailureKind(str, Enum):
    """Closed set of failure kinds a device invocation can run into."""

    AUTH_INVALID = "auth_invalid"
    LOCATION_UNAVAILABLE = "location_unavailable"
    RATE_LIMITED = "rate_limited"
    NO_DRIVERS_AVAILABLE = "no_drivers_available"
    SURGE_ACTIVE = "surge_active"
    INVALID_PRODUCT = "invalid_product"
    GENERIC_PROVIDER_FAILURE = "generic_provider_failure"
    PERSISTENCE_UNAVAILABLE = "persistence_unavailable"


class ProviderError(Exception):
    """Raised when a ride-provider operation fails; `kind` says how."""

    def __init__(self, kind: FailureKind, detail: str = "", status_code: int | None = None) -> None:
        super().__init__(detail or kind.value)
        self.kind = kind
        self.detail = detail
        self.status_code = status_code

    def __repr__(self) -> str:
        return f"ProviderError(kind={self.kind.value!r}, detail={self.detail!r})"


class StorageError(Exception):
    """Raised when the last-trip-id store cannot be read or written."""

    kind = FailureKind.PERSISTENCE_UNAVAILABLE


__all__ = ["FailureKind", "ProviderError", "StorageError"]
