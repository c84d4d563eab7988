"""Inbound and outbound event interfaces of the engine."""

from abc import ABC, abstractmethod
from typing import Optional


class EventSink(ABC):
    """Receives notifications pushed by backend adapters."""

    @abstractmethod
    def on_device_added(self, path: str) -> None:
        ...

    @abstractmethod
    def on_device_removed(self, path: str) -> None:
        ...

    @abstractmethod
    def on_property_changed(self, path: Optional[str] = None) -> None:
        """A device (``path``) or the service itself (``None``) changed."""
        ...

    @abstractmethod
    def on_prepare_for_suspend(self, suspending: bool) -> None:
        ...


class PowerListener:
    """Receives engine notifications. All methods default to no-ops so
    consumers override only what they care about."""

    def devices_updated(self) -> None:
        pass

    def lid_closed(self) -> None:
        pass

    def lid_opened(self) -> None:
        pass

    def switched_to_battery(self) -> None:
        pass

    def switched_to_ac(self) -> None:
        pass

    def inhibitors_updated(self) -> None:
        pass

    def device_added(self, path: str) -> None:
        pass

    def device_removed(self, path: str) -> None:
        pass

    def prepare_for_suspend(self, suspending: bool) -> None:
        pass

    def config_updated(self) -> None:
        pass
