"""Fire-and-forget delivery of events to the collection endpoint."""

from __future__ import annotations

from .client import DeliveryClient, encode_event
from .dispatcher import BoundedDispatcher

__all__ = ["BoundedDispatcher", "DeliveryClient", "encode_event"]
