"""Core abstractions for backend negotiation and power state tracking."""

from powerkit.core.types import (
    Backend,
    Capability,
    Fact,
    InhibitorTable,
    ConnectionState,
    DeviceInfo,
)
from powerkit.core.backend import PowerBackend, NO_BACKEND, FAILED_CONNECTION
from powerkit.core.events import EventSink, PowerListener
from powerkit.core.engine import PowerEngine

__all__ = [
    "Backend",
    "Capability",
    "Fact",
    "InhibitorTable",
    "ConnectionState",
    "DeviceInfo",
    "PowerBackend",
    "NO_BACKEND",
    "FAILED_CONNECTION",
    "EventSink",
    "PowerListener",
    "PowerEngine",
]
