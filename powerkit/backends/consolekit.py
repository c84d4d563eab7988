"""ConsoleKit2 backend, used on systems without systemd.

Priority: 20 (between logind and UPower).
"""

from powerkit.backends.dbus_backend import DBusBackend
from powerkit.core.types import Backend, Capability

CONSOLEKIT_SERVICE = "org.freedesktop.ConsoleKit"
CONSOLEKIT_PATH = "/org/freedesktop/ConsoleKit/Manager"
CONSOLEKIT_MANAGER = "org.freedesktop.ConsoleKit.Manager"


class ConsoleKitBackend(DBusBackend):
    """ConsoleKit2 mirrors the logind Manager method names."""

    service = CONSOLEKIT_SERVICE
    path = CONSOLEKIT_PATH
    interface = CONSOLEKIT_MANAGER

    can_methods = {
        Capability.RESTART: "CanReboot",
        Capability.POWER_OFF: "CanPowerOff",
        Capability.SUSPEND: "CanSuspend",
        Capability.HIBERNATE: "CanHibernate",
        Capability.HYBRID_SLEEP: "CanHybridSleep",
    }
    action_methods = {
        Capability.RESTART: "Reboot",
        Capability.POWER_OFF: "PowerOff",
        Capability.SUSPEND: "Suspend",
        Capability.HIBERNATE: "Hibernate",
        Capability.HYBRID_SLEEP: "HybridSleep",
    }

    @property
    def name(self) -> str:
        return "ConsoleKit"

    @property
    def kind(self) -> Backend:
        return Backend.CONSOLEKIT

    @property
    def priority(self) -> int:
        return 20

    def _watch(self, bus) -> None:
        self._add_receiver(bus, self._on_prepare_for_sleep, "PrepareForSleep",
                           self.interface, self.path)
