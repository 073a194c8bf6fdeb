"""Async client for the Jul Git hosting API."""

from jul_client.client import JulClient, create_client
from jul_client.config import ClientSettings
from jul_client.core.events import EventSubscription
from jul_client.core.transport import JulApiError

__all__ = [
    "ClientSettings",
    "EventSubscription",
    "JulApiError",
    "JulClient",
    "create_client",
]
