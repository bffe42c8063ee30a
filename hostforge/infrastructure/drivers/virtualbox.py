"""
VirtualBox Driver

Architectural Intent:
- Runs a boot2docker VM on the local machine through the VBoxManage CLI
- SSH and the Docker daemon are reached via NAT port forwards on 127.0.0.1
- A userdata disk carries the generated SSH public key into the VM

Design Decisions:
- VBoxManage failures map to ProvisionError during create and to
  DriverOperationError everywhere else
- Forwarded ports are picked on create and persisted with the host
- The userdata disk starts with a tar entry named after the boot2docker
  format marker so the guest formats it and unpacks the key on first boot
"""

import io
import logging
import os
import socket
import subprocess
import tarfile
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Type

from hostforge.domain.errors import (
    DriverOperationError,
    HostforgeError,
    ProvisionError,
    RemoteCommandError,
)
from hostforge.domain.ports.driver_port import RemoteCommand
from hostforge.infrastructure.adapters.ssh_keys import ensure_ssh_keypair
from hostforge.infrastructure.drivers.base import BaseDriver, config_field
from hostforge.infrastructure.drivers.ssh import SSHCommand, open_connection

logger = logging.getLogger(__name__)

VBOXMANAGE = "VBoxManage"
DOCKER_PORT = 2376
B2D_FORMAT_MARKER = "boot2docker, please format-me"
DOCKER_CONFIG_DIR = "/var/lib/boot2docker"
SHUTDOWN_TIMEOUT = 120
POLL_INTERVAL = 1.0


def _free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


def _userdata_tar(public_key: bytes) -> bytes:
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w") as tar:
        marker = B2D_FORMAT_MARKER.encode()
        info = tarfile.TarInfo(B2D_FORMAT_MARKER)
        info.size = len(marker)
        tar.addfile(info, io.BytesIO(marker))

        ssh_dir = tarfile.TarInfo(".ssh")
        ssh_dir.type = tarfile.DIRTYPE
        ssh_dir.mode = 0o700
        tar.addfile(ssh_dir)

        for name in ("authorized_keys", "authorized_keys2"):
            info = tarfile.TarInfo(f".ssh/{name}")
            info.size = len(public_key)
            info.mode = 0o644
            tar.addfile(info, io.BytesIO(public_key))
    return buf.getvalue()


@dataclass
class VirtualBoxDriver(BaseDriver):
    cpu: int = config_field(1, "CPU")
    memory: int = config_field(1024, "Memory")
    disk_size: int = config_field(20000, "DiskSize")
    boot2docker_iso: str = config_field("", "Boot2DockerISO")
    ssh_user: str = config_field("docker", "SSHUser")
    ssh_port: int = config_field(0, "SSHPort")
    docker_port: int = config_field(0, "DockerPort")

    DRIVER_NAME = "virtualbox"

    def _vbm(self, *args: str, error: Type[HostforgeError] = DriverOperationError) -> str:
        try:
            result = subprocess.run(
                [VBOXMANAGE, *args],
                capture_output=True,
                text=True,
                check=True,
            )
        except FileNotFoundError as e:
            raise error(f"{VBOXMANAGE} not found, is VirtualBox installed?") from e
        except subprocess.CalledProcessError as e:
            raise error(f"{VBOXMANAGE} {args[0]} failed: {e.stderr.strip()}") from e
        return result.stdout

    def get_state(self) -> str:
        out = self._vbm("showvminfo", self.machine_name, "--machinereadable")
        for line in out.splitlines():
            if line.startswith("VMState="):
                return line.split("=", 1)[1].strip('"')
        return "unknown"

    def create(self) -> None:
        if not self.boot2docker_iso or not os.path.isfile(self.boot2docker_iso):
            raise ProvisionError(f"boot2docker ISO not found: {self.boot2docker_iso!r}")

        self.ssh_port = self.ssh_port or _free_port()
        self.docker_port = self.docker_port or _free_port()
        disk = self._make_disk()

        name = self.machine_name
        logger.info("Creating VirtualBox VM %s", name)
        self._vbm(
            "createvm", "--name", name, "--basefolder", self.store_path, "--register",
            error=ProvisionError,
        )
        self._vbm(
            "modifyvm", name,
            "--ostype", "Linux26_64",
            "--cpus", str(self.cpu),
            "--memory", str(self.memory),
            "--acpi", "on",
            "--boot1", "dvd",
            "--nic1", "nat",
            "--natpf1", f"ssh,tcp,127.0.0.1,{self.ssh_port},,22",
            "--natpf1", f"docker,tcp,127.0.0.1,{self.docker_port},,{DOCKER_PORT}",
            error=ProvisionError,
        )
        self._vbm(
            "storagectl", name, "--name", "SATA", "--add", "sata", "--hostiocache", "on",
            error=ProvisionError,
        )
        self._attach_iso(error=ProvisionError)
        self._vbm(
            "storageattach", name, "--storagectl", "SATA", "--port", "1", "--device", "0",
            "--type", "hdd", "--medium", disk,
            error=ProvisionError,
        )
        self._vbm("startvm", name, "--type", "headless", error=ProvisionError)

    def _make_disk(self) -> str:
        try:
            _, public_key_path = ensure_ssh_keypair(Path(self.store_path))
            raw_path = self.resolve_store_path("userdata.tar")
            with open(raw_path, "wb") as f:
                f.write(_userdata_tar(public_key_path.read_bytes()))
        except (OSError, ValueError, TypeError) as e:
            raise ProvisionError(f"unable to prepare userdata disk: {e}") from e

        disk_path = self.resolve_store_path("disk.vdi")
        self._vbm("convertfromraw", raw_path, disk_path, "--format", "VDI", error=ProvisionError)
        self._vbm("modifymedium", "disk", disk_path, "--resize", str(self.disk_size), error=ProvisionError)
        return disk_path

    def _attach_iso(self, error: Type[HostforgeError] = DriverOperationError) -> None:
        self._vbm(
            "storageattach", self.machine_name, "--storagectl", "SATA", "--port", "0",
            "--device", "0", "--type", "dvddrive", "--medium", self.boot2docker_iso,
            error=error,
        )

    def start(self) -> None:
        self._vbm("startvm", self.machine_name, "--type", "headless")

    def stop(self) -> None:
        self._vbm("controlvm", self.machine_name, "acpipowerbutton")
        deadline = time.monotonic() + SHUTDOWN_TIMEOUT
        while self.get_state() != "poweroff":
            if time.monotonic() > deadline:
                raise DriverOperationError(f"VM {self.machine_name} did not power off")
            time.sleep(POLL_INTERVAL)

    def upgrade(self) -> None:
        if self.get_state() == "running":
            self.stop()
        self._attach_iso()
        self.start()

    def remove(self) -> None:
        if self.get_state() in ("running", "paused"):
            self._vbm("controlvm", self.machine_name, "poweroff")
        self._vbm("unregistervm", self.machine_name, "--delete")

    def get_ip(self) -> str:
        if self.get_state() != "running":
            raise DriverOperationError(f"VM {self.machine_name} is not running")
        return "127.0.0.1"

    def get_url(self) -> str:
        return f"tcp://{self.get_ip()}:{self.docker_port}"

    def get_docker_config_dir(self) -> str:
        return DOCKER_CONFIG_DIR

    def get_ssh_command(self, command: str) -> RemoteCommand:
        connection = open_connection(
            "127.0.0.1",
            self.ssh_user,
            port=self.ssh_port,
            key_filename=self.resolve_store_path("id_rsa"),
        )
        return SSHCommand(connection, command)

    def stop_docker(self) -> None:
        self._run("sudo /etc/init.d/docker stop", "stop Docker")

    def start_docker(self) -> None:
        self._run("sudo /etc/init.d/docker start", "start Docker")

    def _run(self, command: str, action: str) -> None:
        try:
            self.get_ssh_command(command).run()
        except RemoteCommandError as e:
            raise DriverOperationError(f"unable to {action} on {self.machine_name}: {e}") from e
