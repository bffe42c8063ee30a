"""
Generic Driver

Architectural Intent:
- Adopts an existing machine reachable over SSH (bare metal, any cloud VM)
- Installs Docker with the upstream install script on create and upgrade
- Power state belongs to whoever owns the machine, so start/stop are refused
"""

import logging
from dataclasses import dataclass

from hostforge.domain.errors import (
    DriverOperationError,
    ProvisionError,
    RemoteCommandError,
)
from hostforge.domain.ports.driver_port import RemoteCommand
from hostforge.infrastructure.drivers.base import BaseDriver, config_field
from hostforge.infrastructure.drivers.ssh import SSHCommand, open_connection

logger = logging.getLogger(__name__)

DOCKER_PORT = 2376
INSTALL_DOCKER = "curl -fsSL https://get.docker.com | sudo sh"


@dataclass
class GenericDriver(BaseDriver):
    ip_address: str = config_field("", "IPAddress")
    ssh_user: str = config_field("root", "SSHUser")
    ssh_port: int = config_field(22, "SSHPort")
    ssh_key: str = config_field("", "SSHKey")

    DRIVER_NAME = "generic"

    def create(self) -> None:
        if not self.ip_address:
            raise ProvisionError("the generic driver requires an IP address")
        logger.info("Installing Docker on %s", self.ip_address)
        try:
            self.get_ssh_command(f"command -v docker || ({INSTALL_DOCKER})").run()
        except RemoteCommandError as e:
            raise ProvisionError(f"unable to install Docker on {self.ip_address}: {e}") from e

    def start(self) -> None:
        raise DriverOperationError("generic hosts cannot be started by hostforge")

    def stop(self) -> None:
        raise DriverOperationError("generic hosts cannot be stopped by hostforge")

    def upgrade(self) -> None:
        self._run(INSTALL_DOCKER, "upgrade Docker")

    def remove(self) -> None:
        logger.debug("Generic host %s left running on removal", self.ip_address)

    def get_ip(self) -> str:
        if not self.ip_address:
            raise DriverOperationError("IP address is not set")
        return self.ip_address

    def get_url(self) -> str:
        return f"tcp://{self.get_ip()}:{DOCKER_PORT}"

    def get_docker_config_dir(self) -> str:
        return "/etc/docker"

    def get_ssh_command(self, command: str) -> RemoteCommand:
        connection = open_connection(
            self.get_ip(),
            self.ssh_user,
            port=self.ssh_port,
            key_filename=self.ssh_key or None,
        )
        return SSHCommand(connection, command)

    def stop_docker(self) -> None:
        self._run("sudo service docker stop", "stop Docker")

    def start_docker(self) -> None:
        self._run("sudo service docker start", "start Docker")

    def _run(self, command: str, action: str) -> None:
        try:
            self.get_ssh_command(command).run()
        except RemoteCommandError as e:
            raise DriverOperationError(f"unable to {action} on {self.ip_address}: {e}") from e
