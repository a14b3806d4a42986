"""Route modules exposed by the API package."""

from . import admin, checkin, metrics, ping, visitor

__all__ = ["admin", "checkin", "metrics", "ping", "visitor"]
