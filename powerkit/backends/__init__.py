"""Backend implementations."""

from typing import Any, Dict, List, Optional

from powerkit.core.backend import PowerBackend
from powerkit.backends.bus import SystemBus
from powerkit.backends.consolekit import ConsoleKitBackend
from powerkit.backends.logind import LogindBackend
from powerkit.backends.upower import UPowerBackend

__all__ = [
    "SystemBus", "LogindBackend", "ConsoleKitBackend", "UPowerBackend",
    "create_backends",
]


def create_backends(connection, config: Optional[Dict[str, Any]] = None) -> List[PowerBackend]:
    """Create every backend the configuration leaves enabled."""
    enabled = (config or {}).get("backends", {})
    backends: List[PowerBackend] = []
    if enabled.get("logind", True):
        backends.append(LogindBackend(connection))
    if enabled.get("consolekit", True):
        backends.append(ConsoleKitBackend(connection))
    if enabled.get("upower", True):
        backends.append(UPowerBackend(connection))
    return backends
