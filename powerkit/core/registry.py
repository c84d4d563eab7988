"""Device registry - live set of power-supply devices and their totals."""

import logging
from typing import Callable, Dict, List, Optional

from powerkit.core.device import Device
from powerkit.core.events import PowerListener
from powerkit.core.selector import BackendSelector
from powerkit.core.types import DeviceInfo

log = logging.getLogger(__name__)


class DeviceRegistry:
    """Owns every Device and reconciles them with the device source.

    Add/remove signals are never trusted on their own: removals are
    checked against a fresh device list before anything is destroyed.
    """

    def __init__(self, selector: BackendSelector,
                 on_updated: Callable[[], None],
                 listener: Optional[PowerListener] = None,
                 on_device_changed: Optional[Callable[[str], None]] = None,
                 on_battery: Optional[Callable[[], bool]] = None):
        self._selector = selector
        self._on_updated = on_updated
        self._listener = listener or PowerListener()
        self._on_device_changed = on_device_changed
        self._on_battery = on_battery or (lambda: False)
        self._devices: Dict[str, Device] = {}  # path -> Device

    def __contains__(self, path: str) -> bool:
        return path in self._devices

    def __len__(self) -> int:
        return len(self._devices)

    def get(self, path: str) -> Optional[Device]:
        return self._devices.get(path)

    def paths(self) -> List[str]:
        return list(self._devices)

    def snapshot(self) -> List[DeviceInfo]:
        return [device.snapshot() for device in self._devices.values()]

    # --- Reconciliation ---

    def scan(self) -> None:
        """Track any device the source lists that we do not know yet.

        Known devices are left as they are. Always ends by announcing an
        update, whether or not the set changed.
        """
        source = self._selector.device_source()
        found = self._list_devices(source) if source is not None else None

        for path in found or []:
            if path in self._devices:
                continue
            device = Device(path, source)
            device.refresh()
            device.on_changed = self._handle_device_changed
            self._devices[path] = device
            log.debug("Tracking device %s", path)

        self._on_updated()

    def device_added(self, path: str) -> None:
        source = self._selector.device_source()
        if source is None or self._is_transient(source, path):
            return
        self._listener.device_added(path)
        self.scan()

    def device_removed(self, path: str) -> None:
        source = self._selector.device_source()
        if source is None or self._is_transient(source, path):
            return
        if path in self._devices:
            current = self._list_devices(source)
            if current is not None and path not in current:
                del self._devices[path]
                log.debug("Dropped device %s", path)
                self._listener.device_removed(path)
        self.scan()

    def device_changed(self, path: str) -> None:
        device = self._devices.get(path)
        if device is not None:
            device.refresh()

    def refresh_all(self) -> None:
        for device in list(self._devices.values()):
            device.refresh()

    def refresh_batteries(self) -> None:
        for device in list(self._devices.values()):
            if device.is_battery:
                device.refresh_battery()

    def clear(self) -> None:
        self._devices.clear()

    def rebuild(self) -> None:
        """Drop every device and rescan through the current source.

        Used after the backend list was replaced: existing devices read
        through the old adapter. Devices the new source no longer lists
        are announced as removed.
        """
        source = self._selector.device_source()
        listed = self._list_devices(source) if source is not None else None
        for path in sorted(self._devices):
            if path not in (listed or []):
                log.debug("Dropped device %s", path)
                self._listener.device_removed(path)
        self._devices.clear()
        self.scan()

    # --- Aggregates ---

    def battery_left(self) -> float:
        """Mean charge of all qualifying batteries, 0 when there are none."""
        if self._on_battery():
            self.refresh_batteries()
        batteries = self._qualifying()
        if not batteries:
            return 0.0
        return sum(d.percentage for d in batteries) / len(batteries)

    def time_to_empty(self) -> int:
        if self._on_battery():
            self.refresh_batteries()
        return sum(d.time_to_empty for d in self._qualifying())

    def time_to_full(self) -> int:
        if self._on_battery():
            self.refresh_batteries()
        return sum(d.time_to_full for d in self._qualifying())

    def has_battery(self) -> bool:
        return any(d.is_battery for d in self._devices.values())

    # --- Internal ---

    def _qualifying(self) -> List[Device]:
        return [d for d in self._devices.values() if d.counts_towards_total]

    def _handle_device_changed(self, path: str) -> None:
        if not path:
            return
        if self._on_device_changed is not None:
            self._on_device_changed(path)

    @staticmethod
    def _is_transient(source, path: str) -> bool:
        prefix = source.transient_prefix
        return bool(prefix) and path.startswith(prefix)

    @staticmethod
    def _list_devices(source) -> Optional[List[str]]:
        try:
            return list(source.enumerate_devices())
        except Exception:
            log.debug("Failed to enumerate devices via %s", source.name, exc_info=True)
            return None
