"""Core data types for the power state engine."""

from dataclasses import dataclass
from enum import Enum, auto


class Backend(Enum):
    """Which system service answered a query."""
    LOGIND = auto()
    CONSOLEKIT = auto()
    UPOWER = auto()


class Capability(Enum):
    """A power action a backend may be able to perform."""
    RESTART = "restart"
    POWER_OFF = "power off"
    SUSPEND = "suspend"
    HIBERNATE = "hibernate"
    HYBRID_SLEEP = "hybrid sleep"


class Fact(Enum):
    """A level-valued property read anew on every query."""
    DOCKED = auto()
    LID_PRESENT = auto()
    LID_CLOSED = auto()
    ON_BATTERY = auto()


class InhibitorTable(Enum):
    """The two independent inhibitor tables."""
    SCREEN_SAVER = auto()
    POWER_MANAGEMENT = auto()


class ConnectionState(Enum):
    DISCONNECTED = auto()
    CONNECTING = auto()
    CONNECTED = auto()


# UPower device type numbers
DEVICE_KIND_LINE_POWER = 1
DEVICE_KIND_BATTERY = 2
DEVICE_KIND_UPS = 3


@dataclass(frozen=True)
class DeviceInfo:
    """Read-only copy of a tracked power-supply device."""
    path: str
    native_path: str = ""
    kind: int = 0
    is_battery: bool = False
    is_present: bool = False
    is_rechargeable: bool = False
    online: bool = False
    percentage: float = 0.0
    time_to_empty: int = 0
    time_to_full: int = 0
    state: int = 0
    vendor: str = ""
    model: str = ""

    @property
    def counts_towards_total(self) -> bool:
        """Whether this device is included in battery aggregates.

        Devices without a native path are summaries (UPower's display
        device), not hardware.
        """
        return self.is_battery and self.is_present and bool(self.native_path)
