"""UPower backend - power devices, lid and power source state via D-Bus.

Also the last-resort suspend/hibernate provider on old UPower releases
that still export SuspendAllowed/HibernateAllowed.
Priority: 30 (lowest).
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from powerkit.backends.dbus_backend import CALL_TIMEOUT, IFACE_PROPS, DBusBackend
from powerkit.core.types import Backend, Capability, Fact

log = logging.getLogger(__name__)

UPOWER_SERVICE = "org.freedesktop.UPower"
UPOWER_PATH = "/org/freedesktop/UPower"
UPOWER_MANAGER = "org.freedesktop.UPower"
UPOWER_DEVICE = "org.freedesktop.UPower.Device"
UPOWER_JOBS = f"{UPOWER_PATH}/jobs"


class UPowerBackend(DBusBackend):
    """Backend using the UPower D-Bus daemon."""

    service = UPOWER_SERVICE
    path = UPOWER_PATH
    interface = UPOWER_MANAGER

    can_methods = {
        Capability.SUSPEND: "SuspendAllowed",
        Capability.HIBERNATE: "HibernateAllowed",
    }
    action_methods = {
        Capability.SUSPEND: "Suspend",
        Capability.HIBERNATE: "Hibernate",
    }
    fact_properties = {
        Fact.DOCKED: "IsDocked",
        Fact.LID_PRESENT: "LidIsPresent",
        Fact.LID_CLOSED: "LidIsClosed",
        Fact.ON_BATTERY: "OnBattery",
    }
    interactive_actions = False

    @property
    def name(self) -> str:
        return "UPower"

    @property
    def kind(self) -> Backend:
        return Backend.UPOWER

    @property
    def priority(self) -> int:
        return 30

    @property
    def provides_devices(self) -> bool:
        return True

    @property
    def transient_prefix(self) -> Optional[str]:
        return UPOWER_JOBS

    def enumerate_devices(self) -> List[str]:
        proxy = self._proxy()
        if proxy is None:
            raise ConnectionError("system bus is not connected")
        return [str(p) for p in proxy.EnumerateDevices(
            dbus_interface=UPOWER_MANAGER, timeout=CALL_TIMEOUT)]

    def device_properties(self, path: str,
                          names: Optional[Iterable[str]] = None) -> Dict[str, Any]:
        proxy = self._proxy(path)
        if proxy is None:
            raise ConnectionError("system bus is not connected")
        if names is None:
            return dict(proxy.GetAll(UPOWER_DEVICE, dbus_interface=IFACE_PROPS,
                                     timeout=CALL_TIMEOUT))
        return {
            name: proxy.Get(UPOWER_DEVICE, name, dbus_interface=IFACE_PROPS,
                            timeout=CALL_TIMEOUT)
            for name in names
        }

    # --- Signals ---

    def _watch(self, bus) -> None:
        self._add_receiver(bus, self._on_device_added, "DeviceAdded",
                           UPOWER_MANAGER, UPOWER_PATH)
        self._add_receiver(bus, self._on_device_removed, "DeviceRemoved",
                           UPOWER_MANAGER, UPOWER_PATH)
        # Pre-0.99 daemons announce changes with these two
        self._add_receiver(bus, self._on_changed, "Changed",
                           UPOWER_MANAGER, UPOWER_PATH)
        self._add_receiver(bus, self._on_changed, "DeviceChanged",
                           UPOWER_MANAGER, UPOWER_PATH)
        self._add_receiver(bus, self._on_notify_sleep, "NotifySleep",
                           UPOWER_MANAGER, UPOWER_PATH)
        self._add_receiver(bus, self._on_notify_resume, "NotifyResume",
                           UPOWER_MANAGER, UPOWER_PATH)
        # Manager and every device object
        self._add_receiver(bus, self._on_properties_changed, "PropertiesChanged",
                           IFACE_PROPS, None, path_keyword="object_path")

    def _on_device_added(self, path, *args) -> None:
        if self._sink is not None:
            self._sink.on_device_added(str(path))

    def _on_device_removed(self, path, *args) -> None:
        if self._sink is not None:
            self._sink.on_device_removed(str(path))

    def _on_changed(self, *args) -> None:
        if self._sink is not None:
            self._sink.on_property_changed(None)

    def _on_notify_sleep(self, *args) -> None:
        self._on_prepare_for_sleep(True)

    def _on_notify_resume(self, *args) -> None:
        self._on_prepare_for_sleep(False)

    def _on_properties_changed(self, interface, changed=None, invalidated=None,
                               object_path=None) -> None:
        if self._sink is None:
            return
        if interface == UPOWER_DEVICE and object_path:
            self._sink.on_property_changed(str(object_path))
        elif interface == UPOWER_MANAGER:
            self._sink.on_property_changed(None)
