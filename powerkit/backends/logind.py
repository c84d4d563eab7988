"""systemd-logind backend.

Preferred for every action and for the docked state.
Priority: 10 (highest).
"""

from powerkit.backends.dbus_backend import DBusBackend
from powerkit.core.types import Backend, Capability, Fact

LOGIND_SERVICE = "org.freedesktop.login1"
LOGIND_PATH = "/org/freedesktop/login1"
LOGIND_MANAGER = "org.freedesktop.login1.Manager"


class LogindBackend(DBusBackend):
    """Power actions through the login1 Manager interface."""

    service = LOGIND_SERVICE
    path = LOGIND_PATH
    interface = LOGIND_MANAGER

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
    fact_properties = {
        Fact.DOCKED: "Docked",
    }

    @property
    def name(self) -> str:
        return "logind"

    @property
    def kind(self) -> Backend:
        return Backend.LOGIND

    @property
    def priority(self) -> int:
        return 10

    def _watch(self, bus) -> None:
        self._add_receiver(bus, self._on_prepare_for_sleep, "PrepareForSleep",
                           self.interface, self.path)
