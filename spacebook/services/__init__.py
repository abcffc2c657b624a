"""Service layer exposing business logic for routes."""

from . import bookings, expiry, spaces, users

__all__ = ["bookings", "expiry", "spaces", "users"]
