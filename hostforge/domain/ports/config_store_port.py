"""
Config Store Port

Architectural Intent:
- Port interface for persisting a Host aggregate under its store path
- Implemented by JsonConfigStore
"""

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from hostforge.domain.entities.host import Host


@runtime_checkable
class ConfigStorePort(Protocol):
    def exists(self, store_path: str) -> bool:
        """True when ``store_path`` already holds a saved config."""
        ...

    def save(self, host: "Host") -> None: ...

    def load(self, host: "Host") -> None:
        """Rebuild ``host.driver`` and restore persisted fields in place."""
        ...
