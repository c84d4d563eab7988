"""System bus connection wrapper."""

import logging
from typing import Any, Callable, Optional

log = logging.getLogger(__name__)


def _try_import_dbus():
    """Import dbus lazily so the module is loadable even without dbus-python."""
    try:
        import dbus
        return dbus
    except ImportError:
        return None


class SystemBus:
    """A private connection to the D-Bus system bus.

    Each connect() opens a fresh private connection, so a dead one is
    never handed back by dbus-python's shared-bus cache.

    Args:
        mainloop_factory: Returns a dbus-python main loop to dispatch
            signals on (e.g. the PyQt5 one), or None to skip signals.
    """

    def __init__(self, mainloop_factory: Optional[Callable[[], Any]] = None):
        self._mainloop_factory = mainloop_factory
        self._bus = None

    @property
    def bus(self):
        """The live dbus connection, or None."""
        return self._bus

    def connect(self) -> bool:
        dbus = _try_import_dbus()
        if dbus is None:
            log.debug("dbus-python is not installed")
            return False

        self.close()
        mainloop = self._mainloop_factory() if self._mainloop_factory else None
        try:
            if mainloop is not None:
                self._bus = dbus.SystemBus(mainloop=mainloop, private=True)
            else:
                self._bus = dbus.SystemBus(private=True)
        except Exception:
            log.debug("Could not connect to system D-Bus", exc_info=True)
            self._bus = None
            return False
        return True

    def is_connected(self) -> bool:
        if self._bus is None:
            return False
        try:
            return bool(self._bus.get_is_connected())
        except Exception:
            return False

    def close(self) -> None:
        if self._bus is None:
            return
        try:
            self._bus.close()
        except Exception:
            log.debug("Error closing system D-Bus connection", exc_info=True)
        self._bus = None


def qt_mainloop():
    """dbus-python main loop integration for PyQt5, if it was built."""
    try:
        from dbus.mainloop.pyqt5 import DBusQtMainLoop
    except ImportError:
        log.warning("dbus.mainloop.pyqt5 unavailable; relying on polling only")
        return None
    return DBusQtMainLoop()
