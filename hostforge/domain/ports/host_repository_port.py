"""
Host Repository Port

Architectural Intent:
- Port interface for finding and creating Host aggregates by name
- Implemented by HostStore (one store directory per host)
"""

from abc import ABC, abstractmethod
from typing import Any, Mapping, Optional

from hostforge.domain.entities.host import Host


class HostRepositoryPort(ABC):
    """
    Port interface for the collection of hosts.
    """

    @abstractmethod
    def new_host(
        self,
        name: str,
        driver_name: str,
        ca_cert_path: str = "",
        private_key_path: str = "",
        store_path: Optional[str] = None,
        driver_options: Optional[Mapping[str, Any]] = None,
    ) -> Host:
        """
        Builds an unsaved host whose driver carries ``driver_options``.
        Raises HostExistsError when the name is already taken.
        """
        pass

    @abstractmethod
    def load_host(self, name: str, store_path: Optional[str] = None) -> Host:
        pass

    @abstractmethod
    def exists(self, name: str) -> bool:
        pass
