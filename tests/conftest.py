"""
Pytest configuration and fixtures for powerkit tests.

Backends and the bus connection are replaced by in-memory fakes so the
engine can be driven without a system bus.
"""

from typing import Any, Dict, Iterable, List, Optional

import pytest

from powerkit.core.backend import NO_BACKEND, PowerBackend
from powerkit.core.events import PowerListener
from powerkit.core.types import Backend, Capability, Fact

JOBS_PREFIX = "/org/freedesktop/UPower/jobs"
DEVICES = "/org/freedesktop/UPower/devices"


def battery(percentage: float, native_path: str = "BAT0", present: bool = True,
            time_to_empty: int = 0, time_to_full: int = 0) -> Dict[str, Any]:
    """UPower property dict for a battery device."""
    return {
        "Type": 2,
        "NativePath": native_path,
        "IsPresent": present,
        "Percentage": percentage,
        "TimeToEmpty": time_to_empty,
        "TimeToFull": time_to_full,
        "Model": "Battery",
    }


def line_power(online: bool = True) -> Dict[str, Any]:
    return {"Type": 1, "NativePath": "AC", "Online": online, "IsPresent": False}


class FakeBackend(PowerBackend):
    """In-memory backend. Capabilities are the keys of ``allowed``,
    facts the keys of ``fact_values``."""

    def __init__(self, kind: Backend, priority: int,
                 allowed: Optional[Dict[Capability, bool]] = None,
                 fact_values: Optional[Dict[Fact, bool]] = None,
                 devices: Optional[Dict[str, Dict[str, Any]]] = None,
                 available: bool = True):
        self._kind = kind
        self._priority = priority
        self.allowed = dict(allowed or {})
        self.fact_values = dict(fact_values or {})
        self.devices = devices
        self.available = available
        self.execute_error = ""
        self.executed: List[Capability] = []
        self.can_calls: List[Capability] = []
        self.reads: List[tuple] = []
        self.enumerate_calls = 0
        self.fail_enumerate = False
        self.fail_reads = False
        self.subscribe_count = 0
        self.unsubscribe_count = 0
        self.sink = None

    @property
    def name(self) -> str:
        return self._kind.name.lower()

    @property
    def kind(self) -> Backend:
        return self._kind

    @property
    def priority(self) -> int:
        return self._priority

    @property
    def capabilities(self):
        return frozenset(self.allowed)

    @property
    def facts(self):
        return frozenset(self.fact_values)

    @property
    def provides_devices(self) -> bool:
        return self.devices is not None

    @property
    def transient_prefix(self):
        return JOBS_PREFIX if self.devices is not None else None

    def is_available(self) -> bool:
        return self.available

    def can(self, capability: Capability) -> bool:
        self.can_calls.append(capability)
        return self.allowed.get(capability, False)

    def execute(self, capability: Capability) -> str:
        if capability not in self.allowed:
            return NO_BACKEND
        self.executed.append(capability)
        return self.execute_error

    def fact(self, fact: Fact) -> bool:
        return self.fact_values.get(fact, False)

    def enumerate_devices(self) -> List[str]:
        self.enumerate_calls += 1
        if self.fail_enumerate:
            raise RuntimeError("enumerate failed")
        return list(self.devices or {})

    def device_properties(self, path: str, names: Optional[Iterable[str]] = None):
        self.reads.append((path, None if names is None else tuple(names)))
        if self.fail_reads:
            raise RuntimeError("read failed")
        props = self.devices[path]
        if names is None:
            return dict(props)
        return {name: props[name] for name in names if name in props}

    def subscribe(self, sink) -> None:
        self.subscribe_count += 1
        self.sink = sink

    def unsubscribe(self) -> None:
        self.unsubscribe_count += 1
        self.sink = None


class FakeConnection:
    """Stands in for SystemBus."""

    def __init__(self, live: bool = True):
        self.live = live
        self.can_connect = live
        self.connect_calls = 0
        self.close_calls = 0

    @property
    def bus(self):
        return object() if self.live else None

    def connect(self) -> bool:
        self.connect_calls += 1
        self.live = self.can_connect
        return self.live

    def is_connected(self) -> bool:
        return self.live

    def close(self) -> None:
        self.close_calls += 1


class RecordingListener(PowerListener):
    """Collects every notification as a tuple, in order."""

    def __init__(self):
        self.events: List[tuple] = []

    def names(self) -> List[str]:
        return [e[0] for e in self.events]

    def edges(self) -> List[str]:
        return [n for n in self.names() if n != "devices_updated"]

    def devices_updated(self):
        self.events.append(("devices_updated",))

    def lid_closed(self):
        self.events.append(("lid_closed",))

    def lid_opened(self):
        self.events.append(("lid_opened",))

    def switched_to_battery(self):
        self.events.append(("switched_to_battery",))

    def switched_to_ac(self):
        self.events.append(("switched_to_ac",))

    def inhibitors_updated(self):
        self.events.append(("inhibitors_updated",))

    def device_added(self, path):
        self.events.append(("device_added", path))

    def device_removed(self, path):
        self.events.append(("device_removed", path))

    def prepare_for_suspend(self, suspending):
        self.events.append(("prepare_for_suspend", suspending))

    def config_updated(self):
        self.events.append(("config_updated",))


ALL_ACTIONS = {cap: True for cap in Capability}


@pytest.fixture
def logind():
    return FakeBackend(Backend.LOGIND, 10, allowed=dict(ALL_ACTIONS),
                       fact_values={Fact.DOCKED: False})


@pytest.fixture
def consolekit():
    return FakeBackend(Backend.CONSOLEKIT, 20, allowed=dict(ALL_ACTIONS), available=False)


@pytest.fixture
def upower():
    return FakeBackend(
        Backend.UPOWER, 30,
        allowed={Capability.SUSPEND: True, Capability.HIBERNATE: True},
        fact_values={
            Fact.DOCKED: False,
            Fact.LID_PRESENT: True,
            Fact.LID_CLOSED: False,
            Fact.ON_BATTERY: False,
        },
        devices={},
    )


@pytest.fixture
def listener():
    return RecordingListener()


@pytest.fixture
def connection():
    return FakeConnection()
