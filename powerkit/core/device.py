"""A single power-supply device backed by a service object."""

import logging
from typing import Any, Callable, Dict, Optional

from powerkit.core.backend import PowerBackend
from powerkit.core.types import DEVICE_KIND_BATTERY, DeviceInfo

log = logging.getLogger(__name__)

BATTERY_PROPERTIES = ("Percentage", "TimeToEmpty", "TimeToFull")

# UPower property name -> (attribute, converter)
_PROPERTY_MAP = {
    "NativePath": ("native_path", str),
    "Type": ("kind", int),
    "IsPresent": ("is_present", bool),
    "IsRechargeable": ("is_rechargeable", bool),
    "Online": ("online", bool),
    "Percentage": ("percentage", float),
    "TimeToEmpty": ("time_to_empty", int),
    "TimeToFull": ("time_to_full", int),
    "State": ("state", int),
    "Vendor": ("vendor", str),
    "Model": ("model", str),
}


class Device:
    """Cached view of one battery, line power or UPS object.

    A failed read keeps the previous values; stale data is preferred
    over dropping the device.
    """

    def __init__(self, path: str, source: PowerBackend,
                 on_changed: Optional[Callable[[str], None]] = None):
        self._path = path
        self._source = source
        self.on_changed = on_changed

        self.native_path = ""
        self.kind = 0
        self.is_present = False
        self.is_rechargeable = False
        self.online = False
        self.percentage = 0.0
        self.time_to_empty = 0
        self.time_to_full = 0
        self.state = 0
        self.vendor = ""
        self.model = ""

    @property
    def path(self) -> str:
        return self._path

    @property
    def is_battery(self) -> bool:
        return self.kind == DEVICE_KIND_BATTERY

    @property
    def counts_towards_total(self) -> bool:
        return self.is_battery and self.is_present and bool(self.native_path)

    def refresh(self) -> bool:
        """Re-read every property. Notifies the owner if anything changed.

        Returns True if the read succeeded.
        """
        before = self.snapshot()
        if not self._read(None):
            return False
        if self.on_changed is not None and self.snapshot() != before:
            self.on_changed(self._path)
        return True

    def refresh_battery(self) -> bool:
        """Re-read only charge level and time estimates."""
        return self._read(BATTERY_PROPERTIES)

    def snapshot(self) -> DeviceInfo:
        return DeviceInfo(
            path=self._path,
            native_path=self.native_path,
            kind=self.kind,
            is_battery=self.is_battery,
            is_present=self.is_present,
            is_rechargeable=self.is_rechargeable,
            online=self.online,
            percentage=self.percentage,
            time_to_empty=self.time_to_empty,
            time_to_full=self.time_to_full,
            state=self.state,
            vendor=self.vendor,
            model=self.model,
        )

    def _read(self, names) -> bool:
        try:
            props = self._source.device_properties(self._path, names)
        except Exception:
            log.debug("Failed to read properties of %s", self._path, exc_info=True)
            return False
        self._apply(props)
        return True

    def _apply(self, props: Dict[str, Any]) -> None:
        for name, value in props.items():
            mapped = _PROPERTY_MAP.get(name)
            if mapped is None:
                continue
            attr, convert = mapped
            try:
                setattr(self, attr, convert(value))
            except (TypeError, ValueError):
                log.debug("Ignoring bad %s=%r on %s", name, value, self._path)

    def __repr__(self) -> str:
        return f"Device({self._path!r}, {self.percentage:.0f}%)"
