"""
Driver Port

Architectural Intent:
- Port interface every hypervisor or cloud backend implements
- Host, ConfigStore and CertificateBootstrap only ever see this contract
- Implemented by the drivers in hostforge.infrastructure.drivers

Design Decisions:
- Driver methods are synchronous and blocking; the application layer moves
  them onto worker threads when it needs concurrency
- Failures are raised, never returned: ProvisionError from create(),
  DriverOperationError from the other lifecycle calls
"""

from abc import ABC, abstractmethod
from typing import Protocol, runtime_checkable


@runtime_checkable
class RemoteCommand(Protocol):
    """A prepared command bound to one host's remote shell."""

    def run(self) -> None:
        """Execute remotely. Raises RemoteCommandError on failure."""
        ...


class Driver(ABC):
    """
    Port interface for provisioning and reaching a single host.
    """

    @abstractmethod
    def driver_name(self) -> str:
        """Registry name of this driver, also used to pick the daemon config family."""
        pass

    @abstractmethod
    def create(self) -> None:
        pass

    @abstractmethod
    def start(self) -> None:
        pass

    @abstractmethod
    def stop(self) -> None:
        pass

    @abstractmethod
    def upgrade(self) -> None:
        pass

    @abstractmethod
    def remove(self) -> None:
        pass

    @abstractmethod
    def get_ip(self) -> str:
        pass

    @abstractmethod
    def get_url(self) -> str:
        """Docker daemon endpoint, e.g. tcp://10.0.0.5:2376."""
        pass

    @abstractmethod
    def get_docker_config_dir(self) -> str:
        """Remote directory holding the daemon's TLS material."""
        pass

    @abstractmethod
    def get_ssh_command(self, command: str) -> RemoteCommand:
        pass

    def manages_daemon(self) -> bool:
        """True when the driver can reach and restart the host's Docker daemon."""
        return True

    @abstractmethod
    def stop_docker(self) -> None:
        pass

    @abstractmethod
    def start_docker(self) -> None:
        pass
