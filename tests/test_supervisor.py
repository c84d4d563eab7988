"""
Unit tests for ConnectionSupervisor.

Tests cover the connection state machine, guarded resubscription and
the liveness check.
"""

from unittest.mock import MagicMock

import pytest

from powerkit.backends.logind import LogindBackend
from powerkit.core.selector import BackendSelector
from powerkit.core.supervisor import ConnectionSupervisor
from powerkit.core.types import ConnectionState

from conftest import FakeConnection


class ReopeningConnection:
    """Opens a fresh bus on every connect(), as SystemBus does."""

    def __init__(self):
        self.buses = []
        self.bus = None

    def connect(self):
        self.close()
        self.bus = MagicMock()
        self.bus.get_is_connected.return_value = True
        self.buses.append(self.bus)
        return True

    def is_connected(self):
        return self.bus is not None and self.bus.get_is_connected()

    def close(self):
        self.bus = None


class Sink:
    def on_device_added(self, path):
        pass

    def on_device_removed(self, path):
        pass

    def on_property_changed(self, path=None):
        pass

    def on_prepare_for_suspend(self, suspending):
        pass


@pytest.fixture
def scans():
    return []


@pytest.fixture
def supervisor(connection, logind, upower, scans):
    return ConnectionSupervisor(
        connection, BackendSelector([logind, upower]), Sink(),
        scan=lambda: scans.append(1),
    )


class TestSetup:

    def test_starts_disconnected(self, supervisor):
        assert supervisor.state is ConnectionState.DISCONNECTED

    def test_connects_subscribes_and_scans(self, supervisor, logind, upower, scans):
        assert supervisor.setup() is True

        assert supervisor.state is ConnectionState.CONNECTED
        assert logind.subscribe_count == 1
        assert upower.subscribe_count == 1
        assert len(scans) == 1

    def test_failed_connection_stays_disconnected(self, logind, scans):
        supervisor = ConnectionSupervisor(
            FakeConnection(live=False), BackendSelector([logind]), Sink(),
            scan=lambda: scans.append(1),
        )

        assert supervisor.setup() is False
        assert supervisor.state is ConnectionState.DISCONNECTED
        assert logind.subscribe_count == 0
        assert scans == []

    def test_connect_exception_is_absorbed(self, logind, scans):
        class Broken(FakeConnection):
            def connect(self):
                raise OSError("no socket")

        supervisor = ConnectionSupervisor(
            Broken(), BackendSelector([logind]), Sink(), scan=lambda: scans.append(1),
        )

        assert supervisor.setup() is False
        assert supervisor.state is ConnectionState.DISCONNECTED

    def test_setup_twice_does_not_duplicate_subscriptions(self, supervisor, connection, logind):
        supervisor.setup()
        supervisor.setup()

        assert logind.subscribe_count == 1
        assert connection.connect_calls == 1
        assert supervisor.state is ConnectionState.CONNECTED

    def test_setup_twice_keeps_receivers_on_live_bus(self, scans):
        connection = ReopeningConnection()
        backend = LogindBackend(connection)
        supervisor = ConnectionSupervisor(
            connection, BackendSelector([backend]), Sink(), scan=lambda: scans.append(1),
        )

        supervisor.setup()
        supervisor.setup()

        assert len(connection.buses) == 1
        assert connection.bus.add_signal_receiver.call_count == 1

    def test_reconnect_moves_receivers_to_new_bus(self, scans):
        connection = ReopeningConnection()
        backend = LogindBackend(connection)
        supervisor = ConnectionSupervisor(
            connection, BackendSelector([backend]), Sink(), scan=lambda: scans.append(1),
        )
        supervisor.setup()
        first = connection.bus
        first.get_is_connected.return_value = False

        supervisor.check()

        assert connection.bus is not first
        assert connection.bus.add_signal_receiver.call_count == 1
        first.add_signal_receiver.return_value.remove.assert_called_once_with()


class TestCheck:

    def test_live_connection_does_nothing(self, supervisor, connection, logind, scans):
        supervisor.setup()

        assert supervisor.check() is False
        assert supervisor.check() is False

        assert logind.subscribe_count == 1
        assert connection.connect_calls == 1
        assert len(scans) == 1

    def test_dead_connection_is_rebuilt(self, supervisor, connection, logind, upower, scans):
        supervisor.setup()
        connection.live = False

        assert supervisor.check() is True

        assert supervisor.state is ConnectionState.CONNECTED
        assert logind.unsubscribe_count == 1
        assert logind.subscribe_count == 2
        assert upower.subscribe_count == 2
        assert len(scans) == 2

    def test_stays_disconnected_until_bus_returns(self, supervisor, connection, logind, scans):
        connection.can_connect = False
        connection.live = False
        supervisor.setup()

        supervisor.check()
        assert supervisor.state is ConnectionState.DISCONNECTED
        assert logind.subscribe_count == 0

        connection.can_connect = True
        supervisor.check()
        assert supervisor.state is ConnectionState.CONNECTED
        assert logind.subscribe_count == 1
        assert len(scans) == 1

    def test_missing_device_source_rescans_only(self, supervisor, upower, logind, scans):
        supervisor.setup()
        upower.available = False

        assert supervisor.check() is True

        assert len(scans) == 2
        assert logind.subscribe_count == 1


class TestLifecycle:

    def test_shutdown_unsubscribes_and_closes(self, supervisor, connection, logind):
        supervisor.setup()
        supervisor.shutdown()

        assert logind.unsubscribe_count == 1
        assert connection.close_calls == 1
        assert supervisor.state is ConnectionState.DISCONNECTED
        assert not supervisor.subscribed

    def test_replace_backends_moves_subscriptions(self, supervisor, logind, upower, consolekit):
        supervisor.setup()

        supervisor.replace_backends([consolekit])

        assert logind.unsubscribe_count == 1
        assert upower.unsubscribe_count == 1
        assert consolekit.subscribe_count == 1
