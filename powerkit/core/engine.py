"""Power engine - owns every piece of power state for one host process."""

import logging
from typing import Any, Callable, Dict, Iterable, List, Optional

from powerkit.core.backend import PowerBackend
from powerkit.core.events import EventSink, PowerListener
from powerkit.core.inhibitors import InhibitorLedger
from powerkit.core.registry import DeviceRegistry
from powerkit.core.selector import BackendSelector
from powerkit.core.state import StateTracker
from powerkit.core.supervisor import DEFAULT_CHECK_INTERVAL, ConnectionSupervisor
from powerkit.core.types import (
    Backend, Capability, ConnectionState, DeviceInfo, InhibitorTable,
)

log = logging.getLogger(__name__)


class PowerEngine(EventSink):
    """Backend negotiation, device tracking and inhibitor bookkeeping.

    Build it once, call start(), feed it ticks, and call shutdown() when
    done. All methods must be called from a single thread; the host's
    event loop provides the serialization.

    Args:
        connection: System bus wrapper (connect/is_connected/close).
        backends: Backend adapters; order does not matter.
        listener: Receives outbound notifications.
        interval: Seconds between liveness checks.
        backend_factory: Rebuilds the adapter list from a config dict
            on reload_configuration().
    """

    def __init__(self, connection, backends: Iterable[PowerBackend],
                 listener: Optional[PowerListener] = None,
                 interval: int = DEFAULT_CHECK_INTERVAL,
                 backend_factory: Optional[Callable[[Dict[str, Any]], List[PowerBackend]]] = None):
        self._listener = listener or PowerListener()
        self._backend_factory = backend_factory
        self._selector = BackendSelector(backends)
        self._state = StateTracker(self._selector, self._listener)
        self._registry = DeviceRegistry(
            self._selector,
            on_updated=self._state.refresh,
            listener=self._listener,
            on_device_changed=self._handle_device_changed,
            on_battery=self._state.on_battery,
        )
        self._inhibitors = InhibitorLedger(self._listener)
        self._supervisor = ConnectionSupervisor(
            connection, self._selector, self, self._registry.scan, interval,
        )

    # --- Lifecycle ---

    def start(self) -> bool:
        """Connect and populate devices. Returns True if the bus is up."""
        return self._supervisor.setup()

    def tick(self) -> None:
        """Periodic timer entry point."""
        if not self._supervisor.check():
            self._state.refresh()

    def shutdown(self) -> None:
        self._supervisor.shutdown()
        self._registry.clear()
        self._inhibitors.clear()

    @property
    def connection_state(self) -> ConnectionState:
        return self._supervisor.state

    @property
    def interval(self) -> int:
        return self._supervisor.interval

    def reload_configuration(self, config: Dict[str, Any]) -> None:
        polling = config.get("polling", {})
        self._supervisor.interval = int(
            polling.get("check_interval_seconds", self._supervisor.interval)
        )
        if self._backend_factory is not None:
            self._supervisor.replace_backends(self._backend_factory(config))
            self._registry.rebuild()
        log.debug("Configuration reloaded (interval %ds)", self._supervisor.interval)
        self._listener.config_updated()

    # --- EventSink ---

    def on_device_added(self, path: str) -> None:
        self._registry.device_added(str(path))

    def on_device_removed(self, path: str) -> None:
        self._registry.device_removed(str(path))

    def on_property_changed(self, path: Optional[str] = None) -> None:
        if path and path in self._registry:
            self._registry.device_changed(path)
        else:
            self._state.refresh()

    def on_prepare_for_suspend(self, suspending: bool) -> None:
        log.info("Prepare for suspend: %s", suspending)
        self._listener.prepare_for_suspend(bool(suspending))

    # --- Devices ---

    def scan(self) -> None:
        self._registry.scan()

    def devices(self) -> List[DeviceInfo]:
        return self._registry.snapshot()

    def battery_left(self) -> float:
        return self._registry.battery_left()

    def time_to_empty(self) -> int:
        return self._registry.time_to_empty()

    def time_to_full(self) -> int:
        return self._registry.time_to_full()

    def has_battery(self) -> bool:
        return self._registry.has_battery()

    # --- Facts and capabilities ---

    def available_backends(self) -> List[Backend]:
        return self._selector.available()

    def is_docked(self) -> bool:
        return self._state.is_docked()

    def lid_is_present(self) -> bool:
        return self._state.lid_is_present()

    def lid_is_closed(self) -> bool:
        return self._state.lid_is_closed()

    def on_battery(self) -> bool:
        return self._state.on_battery()

    def can_restart(self) -> bool:
        return self._state.can_restart()

    def can_power_off(self) -> bool:
        return self._state.can_power_off()

    def can_suspend(self) -> bool:
        return self._state.can_suspend()

    def can_hibernate(self) -> bool:
        return self._state.can_hibernate()

    def can_hybrid_sleep(self) -> bool:
        return self._state.can_hybrid_sleep()

    # --- Actions ---

    def restart(self) -> str:
        return self._selector.execute(Capability.RESTART)

    def power_off(self) -> str:
        return self._selector.execute(Capability.POWER_OFF)

    def suspend(self) -> str:
        return self._selector.execute(Capability.SUSPEND)

    def hibernate(self) -> str:
        return self._selector.execute(Capability.HIBERNATE)

    def hybrid_sleep(self) -> str:
        return self._selector.execute(Capability.HYBRID_SLEEP)

    # --- Inhibitors ---

    def inhibit_screen_saver(self, application: str, reason: str, cookie: int) -> None:
        self._inhibitors.add(InhibitorTable.SCREEN_SAVER, cookie, application, reason)

    def uninhibit_screen_saver(self, cookie: int) -> None:
        self._inhibitors.remove(InhibitorTable.SCREEN_SAVER, cookie)

    def inhibit_power_management(self, application: str, reason: str, cookie: int) -> None:
        self._inhibitors.add(InhibitorTable.POWER_MANAGEMENT, cookie, application, reason)

    def uninhibit_power_management(self, cookie: int) -> None:
        self._inhibitors.remove(InhibitorTable.POWER_MANAGEMENT, cookie)

    def screen_saver_inhibitors(self) -> List[str]:
        return self._inhibitors.list(InhibitorTable.SCREEN_SAVER)

    def power_management_inhibitors(self) -> List[str]:
        return self._inhibitors.list(InhibitorTable.POWER_MANAGEMENT)

    def has_screen_saver_inhibitors(self) -> bool:
        return self._inhibitors.is_inhibited(InhibitorTable.SCREEN_SAVER)

    def has_power_management_inhibitors(self) -> bool:
        return self._inhibitors.is_inhibited(InhibitorTable.POWER_MANAGEMENT)

    # --- Internal ---

    def _handle_device_changed(self, path: str) -> None:
        self._state.refresh()
