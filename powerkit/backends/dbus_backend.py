"""Shared plumbing for backends that live on the system bus."""

import logging
from typing import Any, Dict, FrozenSet, List, Optional

from powerkit.core.backend import FAILED_CONNECTION, NO_BACKEND, PowerBackend
from powerkit.core.types import Capability, Fact

log = logging.getLogger(__name__)

IFACE_PROPS = "org.freedesktop.DBus.Properties"
CALL_TIMEOUT = 5.0  # seconds, per D-Bus method call


def _as_bool(reply: Any) -> bool:
    """Interpret a "Can*" reply: logind answers with strings."""
    if isinstance(reply, str):
        return reply.lower() in ("yes", "true")
    return bool(reply)


def _error_text(exc: Exception) -> str:
    get_message = getattr(exc, "get_dbus_message", None)
    if callable(get_message):
        message = get_message()
        if message:
            return str(message)
    return str(exc) or exc.__class__.__name__


class DBusBackend(PowerBackend):
    """A backend addressed as one service/path/interface on the system bus.

    Subclasses fill in the tables below and add their own signals.
    """

    service = ""
    path = ""
    interface = ""

    # Capability -> "Can*" method name
    can_methods: Dict[Capability, str] = {}
    # Capability -> action method name
    action_methods: Dict[Capability, str] = {}
    # Fact -> property name on ``interface``
    fact_properties: Dict[Fact, str] = {}
    # Whether action methods take the "interactive" boolean
    interactive_actions = True

    def __init__(self, connection):
        self._connection = connection
        self._sink = None
        self._matches: List[Any] = []

    @property
    def capabilities(self) -> FrozenSet[Capability]:
        return frozenset(self.action_methods)

    @property
    def facts(self) -> FrozenSet[Fact]:
        return frozenset(self.fact_properties)

    def _get_bus(self):
        return self._connection.bus

    def _proxy(self, path: Optional[str] = None):
        bus = self._get_bus()
        if bus is None:
            return None
        return bus.get_object(self.service, path or self.path, introspect=False)

    def is_available(self) -> bool:
        bus = self._get_bus()
        if bus is None:
            return False
        try:
            if bus.name_has_owner(self.service):
                return True
            return self.service in bus.list_activatable_names()
        except Exception:
            log.debug("Could not address %s", self.service, exc_info=True)
            return False

    def can(self, capability: Capability) -> bool:
        method = self.can_methods.get(capability)
        if method is None:
            return False
        try:
            proxy = self._proxy()
            if proxy is None:
                return False
            reply = getattr(proxy, method)(dbus_interface=self.interface,
                                           timeout=CALL_TIMEOUT)
        except Exception:
            log.debug("%s.%s failed", self.name, method, exc_info=True)
            return False
        return _as_bool(reply)

    def execute(self, capability: Capability) -> str:
        method = self.action_methods.get(capability)
        if method is None:
            return NO_BACKEND
        try:
            proxy = self._proxy()
            if proxy is None:
                return FAILED_CONNECTION
            call = getattr(proxy, method)
            if self.interactive_actions:
                call(True, dbus_interface=self.interface, timeout=CALL_TIMEOUT)
            else:
                call(dbus_interface=self.interface, timeout=CALL_TIMEOUT)
        except Exception as e:
            return _error_text(e)
        return ""

    def fact(self, fact: Fact) -> bool:
        prop = self.fact_properties.get(fact)
        if prop is None:
            return False
        try:
            proxy = self._proxy()
            if proxy is None:
                return False
            return bool(proxy.Get(self.interface, prop, dbus_interface=IFACE_PROPS,
                                  timeout=CALL_TIMEOUT))
        except Exception:
            log.debug("Failed to read %s.%s", self.name, prop, exc_info=True)
            return False

    # --- Signals ---

    def subscribe(self, sink) -> None:
        bus = self._get_bus()
        if bus is None:
            return
        self._sink = sink
        self._watch(bus)
        log.debug("Subscribed to %d %s signal(s)", len(self._matches), self.name)

    def _watch(self, bus) -> None:
        """Register this backend's signal receivers via _add_receiver."""
        pass

    def _add_receiver(self, bus, handler, signal: str, interface: str,
                      path: Optional[str], **kwargs) -> None:
        match = bus.add_signal_receiver(
            handler,
            signal_name=signal,
            dbus_interface=interface,
            bus_name=self.service,
            path=path,
            **kwargs,
        )
        self._matches.append(match)

    def unsubscribe(self) -> None:
        for match in self._matches:
            try:
                match.remove()
            except Exception:
                log.debug("Failed to remove %s signal match", self.name, exc_info=True)
        self._matches.clear()
        self._sink = None

    def _on_prepare_for_sleep(self, suspending) -> None:
        if self._sink is not None:
            self._sink.on_prepare_for_suspend(bool(suspending))
