"""
None Driver

Architectural Intent:
- Tracks a Docker daemon that already exists and is managed elsewhere
- Only knows the daemon URL; it cannot provision, power or reach the host
"""

import logging
from dataclasses import dataclass
from urllib.parse import urlparse

from hostforge.domain.errors import DriverOperationError, ProvisionError
from hostforge.domain.ports.driver_port import RemoteCommand
from hostforge.infrastructure.drivers.base import BaseDriver, config_field

logger = logging.getLogger(__name__)


@dataclass
class NoneDriver(BaseDriver):
    url: str = config_field("", "URL")

    DRIVER_NAME = "none"

    def _unsupported(self, action: str) -> DriverOperationError:
        return DriverOperationError(f"hosts without a driver cannot {action}")

    def create(self) -> None:
        if not self.url:
            raise ProvisionError("the none driver requires a URL")
        parsed = urlparse(self.url)
        if not parsed.scheme or not parsed.hostname:
            raise ProvisionError(f"invalid daemon URL {self.url!r}")
        logger.debug("Registered existing daemon %s", self.url)

    def start(self) -> None:
        raise self._unsupported("be started")

    def stop(self) -> None:
        raise self._unsupported("be stopped")

    def upgrade(self) -> None:
        raise self._unsupported("be upgraded")

    def remove(self) -> None:
        pass

    def get_ip(self) -> str:
        hostname = urlparse(self.url).hostname
        if not hostname:
            raise DriverOperationError(f"no host in daemon URL {self.url!r}")
        return hostname

    def get_url(self) -> str:
        return self.url

    def get_docker_config_dir(self) -> str:
        return ""

    def get_ssh_command(self, command: str) -> RemoteCommand:
        raise self._unsupported("run remote commands")

    def manages_daemon(self) -> bool:
        return False

    def stop_docker(self) -> None:
        raise self._unsupported("restart their daemon")

    def start_docker(self) -> None:
        raise self._unsupported("restart their daemon")
