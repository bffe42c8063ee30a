"""Global test configuration.

Provides a recording in-memory driver and a registry/store wired to it so
host lifecycle tests never touch VirtualBox or SSH.
"""

from dataclasses import dataclass, field

import pytest

from hostforge.domain.errors import DriverOperationError, ProvisionError, RemoteCommandError
from hostforge.infrastructure.adapters.x509_adapter import X509Adapter
from hostforge.infrastructure.drivers.base import BaseDriver, config_field
from hostforge.infrastructure.drivers.generic import GenericDriver
from hostforge.infrastructure.drivers.none import NoneDriver
from hostforge.infrastructure.drivers.registry import DriverRegistry
from hostforge.infrastructure.drivers.virtualbox import VirtualBoxDriver
from hostforge.infrastructure.repositories.host_store import HostStore


class FakeCommand:
    def __init__(self, driver: "FakeDriver", command: str):
        self.driver = driver
        self.command = command

    def run(self) -> None:
        self.driver.commands.append(self.command)
        for marker in self.driver.fail_commands:
            if marker in self.command:
                raise RemoteCommandError(self.command[:40], "simulated failure", exit_code=1)


@dataclass
class FakeDriver(BaseDriver):
    ip_address: str = config_field("10.0.0.5", "IPAddress")
    memory: int = config_field(1024, "Memory")
    url: str = config_field("", "URL")

    calls: list = field(default_factory=list, compare=False, repr=False)
    commands: list = field(default_factory=list, compare=False, repr=False)
    fail_on: set = field(default_factory=set, compare=False, repr=False)
    fail_commands: set = field(default_factory=set, compare=False, repr=False)
    family: str = field(default="fake", compare=False, repr=False)

    DRIVER_NAME = "fake"

    def driver_name(self) -> str:
        return self.family

    def _call(self, name: str) -> None:
        self.calls.append(name)
        if name in self.fail_on:
            if name == "create":
                raise ProvisionError(f"simulated {name} failure")
            raise DriverOperationError(f"simulated {name} failure")

    def create(self) -> None:
        self._call("create")

    def start(self) -> None:
        self._call("start")

    def stop(self) -> None:
        self._call("stop")

    def upgrade(self) -> None:
        self._call("upgrade")

    def remove(self) -> None:
        self._call("remove")

    def get_ip(self) -> str:
        self._call("get_ip")
        return self.ip_address

    def get_url(self) -> str:
        self._call("get_url")
        return self.url or f"tcp://{self.ip_address}:2376"

    def get_docker_config_dir(self) -> str:
        return "/etc/docker"

    def get_ssh_command(self, command: str) -> FakeCommand:
        return FakeCommand(self, command)

    def stop_docker(self) -> None:
        self._call("stop_docker")

    def start_docker(self) -> None:
        self._call("start_docker")


@pytest.fixture
def fake_driver_cls():
    return FakeDriver


@pytest.fixture
def registry():
    return DriverRegistry({
        "fake": FakeDriver,
        "none": NoneDriver,
        "generic": GenericDriver,
        "virtualbox": VirtualBoxDriver,
    })


@pytest.fixture(scope="session")
def certificates():
    return X509Adapter()


@pytest.fixture
def host_store(tmp_path, registry, certificates):
    return HostStore(str(tmp_path / "machines"), registry=registry, certificates=certificates)


@pytest.fixture
def fake_host(host_store):
    return host_store.new_host("node1", "fake")
