"""Qt power manager - the engine wrapped in a QObject with signals and a timer."""

import logging
from typing import Any, Dict, List, Optional

from PyQt5.QtCore import QObject, QTimer, pyqtSignal

from powerkit.core.engine import PowerEngine
from powerkit.core.events import PowerListener
from powerkit.core.types import DeviceInfo

log = logging.getLogger(__name__)


class _SignalListener(PowerListener):
    """Forwards engine notifications to the manager's Qt signals."""

    def __init__(self, manager: "PowerManager"):
        self._manager = manager

    def devices_updated(self) -> None:
        self._manager.devices_updated.emit()

    def lid_closed(self) -> None:
        self._manager.lid_closed.emit()

    def lid_opened(self) -> None:
        self._manager.lid_opened.emit()

    def switched_to_battery(self) -> None:
        self._manager.switched_to_battery.emit()

    def switched_to_ac(self) -> None:
        self._manager.switched_to_ac.emit()

    def inhibitors_updated(self) -> None:
        self._manager.inhibitors_updated.emit()

    def device_added(self, path: str) -> None:
        self._manager.device_added.emit(path)

    def device_removed(self, path: str) -> None:
        self._manager.device_removed.emit(path)

    def prepare_for_suspend(self, suspending: bool) -> None:
        self._manager.prepare_for_suspend.emit(suspending)

    def config_updated(self) -> None:
        self._manager.config_updated.emit()


class PowerManager(QObject):
    """Qt-aware power manager with signals and a liveness timer.

    Signals:
        devices_updated(): Device set or power state was re-read.
        lid_closed() / lid_opened(): Lid transitions.
        switched_to_battery() / switched_to_ac(): Power source transitions.
        inhibitors_updated(): An inhibitor was added or removed.
        device_added(str) / device_removed(str): Device object paths.
        prepare_for_suspend(bool): True before sleep, False after resume.
        config_updated(): reload_configuration() was applied.
    """

    devices_updated = pyqtSignal()
    lid_closed = pyqtSignal()
    lid_opened = pyqtSignal()
    switched_to_battery = pyqtSignal()
    switched_to_ac = pyqtSignal()
    inhibitors_updated = pyqtSignal()
    device_added = pyqtSignal(str)
    device_removed = pyqtSignal(str)
    prepare_for_suspend = pyqtSignal(bool)
    config_updated = pyqtSignal()

    def __init__(self, connection, backends, interval: int = 60,
                 backend_factory=None, parent=None):
        super().__init__(parent)
        self._engine = PowerEngine(
            connection, backends,
            listener=_SignalListener(self),
            interval=interval,
            backend_factory=backend_factory,
        )
        self._timer = QTimer(self)
        self._timer.timeout.connect(self._engine.tick)

    @property
    def engine(self) -> PowerEngine:
        return self._engine

    @property
    def timer_interval_ms(self) -> int:
        return self._timer.interval()

    # --- Qt lifecycle ---

    def start(self) -> bool:
        """Connect, run the first scan and start the liveness timer."""
        connected = self._engine.start()
        self._timer.start(self._engine.interval * 1000)
        return connected

    def stop(self) -> None:
        self._timer.stop()
        self._engine.shutdown()

    def reload_configuration(self, config: Dict[str, Any]) -> None:
        self._engine.reload_configuration(config)
        if self._timer.isActive():
            self._timer.start(self._engine.interval * 1000)
        else:
            self._timer.setInterval(self._engine.interval * 1000)

    # --- Delegate to engine ---

    def devices(self) -> List[DeviceInfo]:
        return self._engine.devices()

    def battery_left(self) -> float:
        return self._engine.battery_left()

    def time_to_empty(self) -> int:
        return self._engine.time_to_empty()

    def time_to_full(self) -> int:
        return self._engine.time_to_full()

    def has_battery(self) -> bool:
        return self._engine.has_battery()

    def is_docked(self) -> bool:
        return self._engine.is_docked()

    def lid_is_present(self) -> bool:
        return self._engine.lid_is_present()

    def lid_is_closed(self) -> bool:
        return self._engine.lid_is_closed()

    def on_battery(self) -> bool:
        return self._engine.on_battery()

    def can_restart(self) -> bool:
        return self._engine.can_restart()

    def can_power_off(self) -> bool:
        return self._engine.can_power_off()

    def can_suspend(self) -> bool:
        return self._engine.can_suspend()

    def can_hibernate(self) -> bool:
        return self._engine.can_hibernate()

    def can_hybrid_sleep(self) -> bool:
        return self._engine.can_hybrid_sleep()

    def restart(self) -> str:
        return self._engine.restart()

    def power_off(self) -> str:
        return self._engine.power_off()

    def suspend(self) -> str:
        return self._engine.suspend()

    def hibernate(self) -> str:
        return self._engine.hibernate()

    def hybrid_sleep(self) -> str:
        return self._engine.hybrid_sleep()

    def inhibit_screen_saver(self, application: str, reason: str, cookie: int) -> None:
        self._engine.inhibit_screen_saver(application, reason, cookie)

    def uninhibit_screen_saver(self, cookie: int) -> None:
        self._engine.uninhibit_screen_saver(cookie)

    def inhibit_power_management(self, application: str, reason: str, cookie: int) -> None:
        self._engine.inhibit_power_management(application, reason, cookie)

    def uninhibit_power_management(self, cookie: int) -> None:
        self._engine.uninhibit_power_management(cookie)

    def screen_saver_inhibitors(self) -> List[str]:
        return self._engine.screen_saver_inhibitors()

    def power_management_inhibitors(self) -> List[str]:
        return self._engine.power_management_inhibitors()


def create_manager(config: Optional[Dict[str, Any]] = None, parent=None) -> PowerManager:
    """Build a PowerManager on the real system bus with Qt signal dispatch."""
    from powerkit.backends import SystemBus, create_backends
    from powerkit.backends.bus import qt_mainloop
    from powerkit.config import DEFAULTS

    config = config or DEFAULTS
    connection = SystemBus(mainloop_factory=qt_mainloop)
    return PowerManager(
        connection,
        create_backends(connection, config),
        interval=int(config["polling"]["check_interval_seconds"]),
        backend_factory=lambda cfg: create_backends(connection, cfg),
        parent=parent,
    )
