"""Cookie-keyed inhibitor tables."""

import logging
from typing import Dict, List, Optional

from powerkit.core.events import PowerListener
from powerkit.core.types import InhibitorTable

log = logging.getLogger(__name__)


class InhibitorLedger:
    """Applications currently asking to hold off screen saving or sleep.

    Cookies come from the caller and are opaque. Re-using a cookie
    replaces the entry; removing an unknown cookie does nothing.
    """

    def __init__(self, listener: Optional[PowerListener] = None):
        self._listener = listener or PowerListener()
        self._tables: Dict[InhibitorTable, Dict[int, str]] = {
            table: {} for table in InhibitorTable
        }

    def add(self, table: InhibitorTable, cookie: int, application: str,
            reason: str = "") -> None:
        self._tables[table][cookie] = application
        log.debug("%s inhibit %d by %s (%s)", table.name, cookie, application, reason)
        self._listener.inhibitors_updated()

    def remove(self, table: InhibitorTable, cookie: int) -> None:
        entries = self._tables[table]
        if cookie not in entries:
            return
        application = entries.pop(cookie)
        log.debug("%s uninhibit %d by %s", table.name, cookie, application)
        self._listener.inhibitors_updated()

    def list(self, table: InhibitorTable) -> List[str]:
        return list(self._tables[table].values())

    def is_inhibited(self, table: InhibitorTable) -> bool:
        return bool(self._tables[table])

    def clear(self) -> None:
        for entries in self._tables.values():
            entries.clear()
