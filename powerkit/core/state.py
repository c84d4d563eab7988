"""Level-to-edge conversion of lid and power source state."""

import logging
from typing import Optional

from powerkit.core.events import PowerListener
from powerkit.core.selector import BackendSelector
from powerkit.core.types import Capability, Fact

log = logging.getLogger(__name__)


class StateTracker:
    """Turns polled level facts into one event per transition.

    Each refresh compares the fresh readings against the cached ones,
    fires events for those that moved, and only then overwrites the
    cache. Repeated refreshes with no change fire nothing but the
    trailing ``devices_updated``.
    """

    def __init__(self, selector: BackendSelector,
                 listener: Optional[PowerListener] = None):
        self._selector = selector
        self._listener = listener or PowerListener()
        self.was_lid_closed = False
        self.was_on_battery = False
        self.was_docked = False

    def refresh(self) -> None:
        lid_closed = self.lid_is_closed()
        on_battery = self.on_battery()
        docked = self.is_docked()

        if lid_closed != self.was_lid_closed:
            if lid_closed:
                log.info("Lid closed")
                self._listener.lid_closed()
            else:
                log.info("Lid opened")
                self._listener.lid_opened()

        if on_battery != self.was_on_battery:
            if on_battery:
                log.info("Switched to battery")
                self._listener.switched_to_battery()
            else:
                log.info("Switched to AC")
                self._listener.switched_to_ac()

        if docked != self.was_docked:
            log.debug("Docked: %s", docked)

        self.was_lid_closed = lid_closed
        self.was_on_battery = on_battery
        self.was_docked = docked

        self._listener.devices_updated()

    # --- Facts ---

    def is_docked(self) -> bool:
        return self._selector.fact(Fact.DOCKED)

    def lid_is_present(self) -> bool:
        return self._selector.fact(Fact.LID_PRESENT)

    def lid_is_closed(self) -> bool:
        return self._selector.fact(Fact.LID_CLOSED)

    def on_battery(self) -> bool:
        return self._selector.fact(Fact.ON_BATTERY)

    # --- Capabilities ---

    def can_restart(self) -> bool:
        return self._selector.can(Capability.RESTART)

    def can_power_off(self) -> bool:
        return self._selector.can(Capability.POWER_OFF)

    def can_suspend(self) -> bool:
        return self._selector.can(Capability.SUSPEND)

    def can_hibernate(self) -> bool:
        return self._selector.can(Capability.HIBERNATE)

    def can_hybrid_sleep(self) -> bool:
        return self._selector.can(Capability.HYBRID_SLEEP)
