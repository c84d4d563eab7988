"""Connection supervisor - keeps the system bus connection and signal
subscriptions alive.

The bus gives no dependable disconnect callback, so liveness is polled
from a timer and the whole setup is redone when the connection is found
dead.
"""

import logging
from typing import Callable

from powerkit.core.events import EventSink
from powerkit.core.selector import BackendSelector
from powerkit.core.types import ConnectionState

log = logging.getLogger(__name__)

DEFAULT_CHECK_INTERVAL = 60  # seconds


class ConnectionSupervisor:

    def __init__(self, connection, selector: BackendSelector, sink: EventSink,
                 scan: Callable[[], None],
                 interval: int = DEFAULT_CHECK_INTERVAL):
        self._connection = connection
        self._selector = selector
        self._sink = sink
        self._scan = scan
        self.interval = interval
        self._state = ConnectionState.DISCONNECTED
        self._subscribed = False

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def subscribed(self) -> bool:
        return self._subscribed

    def setup(self) -> bool:
        """Connect, subscribe every backend once, then scan devices.

        Returns True if the connection came up. A live connection is kept
        as it is; otherwise subscriptions are dropped before reconnecting,
        since connect() replaces the bus they were registered on.
        """
        if self._state is ConnectionState.CONNECTED and self._is_connected():
            return True

        self._unsubscribe()
        self._state = ConnectionState.CONNECTING
        try:
            connected = self._connection.connect()
        except Exception:
            log.exception("System bus connection failed")
            connected = False

        if not connected:
            log.debug("System bus not available")
            self._state = ConnectionState.DISCONNECTED
            return False

        self._subscribe()
        self._state = ConnectionState.CONNECTED
        log.info("Connected to system bus")
        self._scan()
        return True

    def check(self) -> bool:
        """Periodic liveness probe. Returns True if it did any work."""
        if not self._is_connected():
            if self._state is ConnectionState.CONNECTED:
                log.warning("Lost system bus connection, reconnecting")
            self._unsubscribe()
            self._state = ConnectionState.DISCONNECTED
            self.setup()
            return True
        if self._selector.device_source() is None:
            self._scan()
            return True
        return False

    def replace_backends(self, backends) -> None:
        """Swap the backend list, moving subscriptions to the new set."""
        self._unsubscribe()
        self._selector.set_backends(backends)
        if self._state is ConnectionState.CONNECTED:
            self._subscribe()

    def shutdown(self) -> None:
        self._unsubscribe()
        try:
            self._connection.close()
        except Exception:
            log.debug("Error closing system bus connection", exc_info=True)
        self._state = ConnectionState.DISCONNECTED

    def _is_connected(self) -> bool:
        try:
            return bool(self._connection.is_connected())
        except Exception:
            log.debug("Connection liveness check failed", exc_info=True)
            return False

    def _subscribe(self) -> None:
        if self._subscribed:
            return
        for backend in self._selector.backends:
            try:
                backend.subscribe(self._sink)
            except Exception:
                log.exception("Failed to subscribe to %s signals", backend.name)
        self._subscribed = True

    def _unsubscribe(self) -> None:
        if not self._subscribed:
            return
        for backend in self._selector.backends:
            try:
                backend.unsubscribe()
            except Exception:
                log.debug("Failed to unsubscribe from %s", backend.name, exc_info=True)
        self._subscribed = False
