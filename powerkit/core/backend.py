"""Abstract base class for system power backends."""

from abc import ABC, abstractmethod
from typing import Any, Dict, FrozenSet, Iterable, List, Optional

from powerkit.core.types import Backend, Capability, Fact

NO_BACKEND = "No power backend available"
FAILED_CONNECTION = "Failed to connect to the system bus"


class PowerBackend(ABC):
    """A system service that answers some power queries.

    Implementations:
    - LogindBackend: systemd-logind
    - ConsoleKitBackend: ConsoleKit2
    - UPowerBackend: UPower daemon, also the source of power devices
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name (e.g., 'logind')."""
        ...

    @property
    @abstractmethod
    def kind(self) -> Backend:
        ...

    @property
    @abstractmethod
    def priority(self) -> int:
        """Lower = preferred. logind=10, ConsoleKit=20, UPower=30."""
        ...

    @property
    def capabilities(self) -> FrozenSet[Capability]:
        """Actions this backend knows how to perform."""
        return frozenset()

    @property
    def facts(self) -> FrozenSet[Fact]:
        """Level facts this backend can report."""
        return frozenset()

    @property
    def provides_devices(self) -> bool:
        """Whether this backend can enumerate power-supply devices."""
        return False

    @property
    def transient_prefix(self) -> Optional[str]:
        """Object path prefix of short-lived objects that are not devices."""
        return None

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the service can be addressed right now.

        Must not raise; an unreachable service is simply absent.
        """
        ...

    def can(self, capability: Capability) -> bool:
        """Ask the service whether the action is currently allowed."""
        return False

    def execute(self, capability: Capability) -> str:
        """Perform the action. Returns an empty string on success or a
        human-readable failure reason."""
        return NO_BACKEND

    def fact(self, fact: Fact) -> bool:
        return False

    def enumerate_devices(self) -> List[str]:
        """Return the object paths of all current power-supply devices.

        May raise; callers treat a failure as "list unknown".
        """
        return []

    def device_properties(self, path: str,
                          names: Optional[Iterable[str]] = None) -> Dict[str, Any]:
        """Read properties of one device. ``names=None`` reads all.

        May raise; callers keep their cached values on failure.
        """
        return {}

    def subscribe(self, sink) -> None:
        """Start delivering service signals to an EventSink."""
        pass

    def unsubscribe(self) -> None:
        """Stop delivering signals."""
        pass
