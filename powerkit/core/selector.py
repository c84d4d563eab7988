"""Priority-ordered backend lookup."""

import logging
from typing import Iterable, List, Optional

from powerkit.core.backend import NO_BACKEND, PowerBackend
from powerkit.core.types import Backend, Capability, Fact

log = logging.getLogger(__name__)


class BackendSelector:
    """Decides which backend is authoritative for each capability.

    Backends are walked in priority order and the first one that both
    supports the capability and is reachable wins, even if it then
    answers "no". Reachability is checked on every query and never
    cached.
    """

    def __init__(self, backends: Iterable[PowerBackend] = ()):
        self._backends: List[PowerBackend] = []
        self.set_backends(backends)

    @property
    def backends(self) -> List[PowerBackend]:
        return list(self._backends)

    def set_backends(self, backends: Iterable[PowerBackend]) -> None:
        self._backends = sorted(backends, key=lambda b: b.priority)

    def resolve(self, capability: Capability) -> Optional[PowerBackend]:
        for backend in self._backends:
            if capability in backend.capabilities and backend.is_available():
                return backend
        return None

    def resolve_fact(self, fact: Fact) -> Optional[PowerBackend]:
        for backend in self._backends:
            if fact in backend.facts and backend.is_available():
                return backend
        return None

    def device_source(self) -> Optional[PowerBackend]:
        for backend in self._backends:
            if backend.provides_devices and backend.is_available():
                return backend
        return None

    def available(self) -> List[Backend]:
        return [b.kind for b in self._backends if b.is_available()]

    def can(self, capability: Capability) -> bool:
        backend = self.resolve(capability)
        if backend is None:
            return False
        return backend.can(capability)

    def fact(self, fact: Fact) -> bool:
        backend = self.resolve_fact(fact)
        if backend is None:
            return False
        return backend.fact(fact)

    def execute(self, capability: Capability) -> str:
        """Run an action on the authoritative backend.

        The backend must report the action as allowed first; otherwise
        nothing is called and NO_BACKEND is returned.
        """
        backend = self.resolve(capability)
        if backend is None or not backend.can(capability):
            log.info("No backend can %s", capability.value)
            return NO_BACKEND
        log.info("Requesting %s via %s", capability.value, backend.name)
        error = backend.execute(capability)
        if error:
            log.warning("%s via %s failed: %s", capability.value, backend.name, error)
        return error
