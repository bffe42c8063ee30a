"""
Certificate Bootstrap Service

Architectural Intent:
- Establishes mutual TLS between the operator and a host's Docker daemon
- Issues credentials locally, then pushes them over the driver's remote shell
- Selects the daemon config template by a static lookup on the driver name

Design Decisions:
- Every step depends on the previous one; the first failure aborts the run
- No compensating actions: the whole bootstrap is safe to re-run end-to-end
- Organization name and key size are fixed, not caller-tunable
- Certificate uploads overwrite the remote file, the daemon config is appended
"""

from __future__ import annotations

import logging
import os
import posixpath
import shlex
import shutil
from dataclasses import dataclass
from typing import Sequence

from hostforge.domain.errors import (
    CertCopyError,
    CertGenerationError,
    CredentialUploadError,
    FilesystemError,
    HostforgeError,
    IPResolutionError,
)
from hostforge.domain.ports.certificate_port import CertificatePort
from hostforge.domain.ports.driver_port import Driver

logger = logging.getLogger(__name__)

CERT_ORG = "hostforge"
CERT_BITS = 2048

DAEMON_HOSTS = "--host=unix:///var/run/docker.sock --host=tcp://0.0.0.0:2376"

# Drivers whose OS image reads daemon settings from a profile file
LOCAL_HYPERVISOR_DRIVERS = frozenset({"virtualbox", "vmwarefusion", "vmwarevsphere"})

GENERIC_DAEMON_CONFIG_PATH = "/etc/default/docker"


@dataclass(frozen=True)
class CertificateSet:
    """Credential files of one host, all inside its store path."""
    ca_cert_path: str
    ca_key_path: str
    server_cert_path: str
    server_key_path: str
    client_cert_path: str
    client_key_path: str

    @classmethod
    def in_store(cls, store_path: str) -> CertificateSet:
        return cls(
            ca_cert_path=os.path.join(store_path, "ca.pem"),
            ca_key_path=os.path.join(store_path, "private.pem"),
            server_cert_path=os.path.join(store_path, "server.pem"),
            server_key_path=os.path.join(store_path, "server-key.pem"),
            client_cert_path=os.path.join(store_path, "client.pem"),
            client_key_path=os.path.join(store_path, "client-key.pem"),
        )


@dataclass(frozen=True)
class DaemonConfig:
    """Daemon settings text and the remote file it belongs in."""
    path: str
    content: str


def daemon_config(driver_name: str, docker_config_dir: str) -> DaemonConfig:
    """Render the TLS daemon configuration for a driver family."""
    ca_cert = posixpath.join(docker_config_dir, "ca.pem")
    server_cert = posixpath.join(docker_config_dir, "server.pem")
    server_key = posixpath.join(docker_config_dir, "server-key.pem")

    if driver_name in LOCAL_HYPERVISOR_DRIVERS:
        content = "\n".join([
            f"EXTRA_ARGS='{DAEMON_HOSTS}'",
            f"CACERT={ca_cert}",
            f"SERVERCERT={server_cert}",
            f"SERVERKEY={server_key}",
            "DOCKER_TLS=auto",
        ])
        return DaemonConfig(posixpath.join(docker_config_dir, "profile"), content)

    opts = (
        f"--tlsverify --tlscacert={ca_cert} --tlskey={server_key} "
        f"--tlscert={server_cert} {DAEMON_HOSTS}"
    )
    return DaemonConfig(GENERIC_DAEMON_CONFIG_PATH, f"export DOCKER_OPTS='{opts}'")


def _supplied(path: str) -> bool:
    return bool(path) and os.path.exists(path)


def _copy(src: str, dst: str, what: str) -> None:
    try:
        if os.path.exists(dst) and os.path.samefile(src, dst):
            return
        shutil.copyfile(src, dst)
    except OSError as e:
        raise CertCopyError(f"unable to copy {what} {src} to {dst}: {e}") from e


def _read(path: str) -> str:
    try:
        with open(path) as f:
            return f.read()
    except OSError as e:
        raise FilesystemError(f"unable to read {path}: {e}") from e


class CertificateBootstrap:
    def __init__(self, certificates: CertificatePort):
        self.certificates = certificates

    def generate_certificates(
        self,
        store_path: str,
        server_ips: Sequence[str],
        ca_cert_path: str = "",
        private_key_path: str = "",
    ) -> CertificateSet:
        """Provide a CA in the store and issue fresh server and client certs."""
        certs = CertificateSet.in_store(store_path)

        if _supplied(ca_cert_path) and _supplied(private_key_path):
            logger.debug("copying CA cert %s into %s", ca_cert_path, store_path)
            _copy(ca_cert_path, certs.ca_cert_path, "CA cert")
            _copy(private_key_path, certs.ca_key_path, "private key")
        elif os.path.exists(certs.ca_cert_path) and os.path.exists(certs.ca_key_path):
            logger.debug("reusing CA cert: %s", certs.ca_cert_path)
        else:
            logger.debug("generating self-signed CA cert: %s", certs.ca_cert_path)
            try:
                self.certificates.generate_ca_cert(
                    certs.ca_cert_path, certs.ca_key_path, CERT_ORG, CERT_BITS
                )
            except (OSError, ValueError, TypeError) as e:
                raise CertGenerationError(f"error generating self-signed CA cert: {e}") from e

        logger.debug("generating server cert: %s", certs.server_cert_path)
        self._issue(list(server_ips), certs.server_cert_path, certs.server_key_path, certs, "server")

        logger.debug("generating client cert: %s", certs.client_cert_path)
        self._issue([""], certs.client_cert_path, certs.client_key_path, certs, "client")

        return certs

    def _issue(
        self,
        hosts: list[str],
        cert_path: str,
        key_path: str,
        certs: CertificateSet,
        kind: str,
    ) -> None:
        try:
            self.certificates.generate_cert(
                hosts,
                cert_path,
                key_path,
                certs.ca_cert_path,
                certs.ca_key_path,
                CERT_ORG,
                CERT_BITS,
            )
        except (OSError, ValueError, TypeError) as e:
            raise CertGenerationError(f"error generating {kind} cert: {e}") from e

    def configure_auth(
        self,
        driver: Driver,
        store_path: str,
        ca_cert_path: str = "",
        private_key_path: str = "",
    ) -> CertificateSet:
        try:
            ip = driver.get_ip()
        except HostforgeError as e:
            raise IPResolutionError(f"unable to resolve host IP: {e}") from e
        if not ip:
            raise IPResolutionError("driver reported an empty host IP")

        logger.debug("generating certificates for %s", ip)
        certs = self.generate_certificates(store_path, [ip], ca_cert_path, private_key_path)

        driver.stop_docker()

        config_dir = driver.get_docker_config_dir()
        self._run(driver, f"sudo mkdir -p {shlex.quote(config_dir)}", "create docker config dir")

        uploads = (
            (certs.ca_cert_path, "ca.pem"),
            (certs.server_key_path, "server-key.pem"),
            (certs.server_cert_path, "server.pem"),
        )
        for local_path, name in uploads:
            remote_path = posixpath.join(config_dir, name)
            content = _read(local_path)
            logger.debug("uploading %s to %s", local_path, remote_path)
            self._run(driver, _write_remote(content, remote_path), f"upload {name}")

        config = daemon_config(driver.driver_name(), config_dir)
        logger.debug("writing daemon config to %s", config.path)
        self._run(
            driver,
            _write_remote(config.content, config.path, append=True),
            "write daemon config",
        )

        driver.start_docker()
        return certs

    @staticmethod
    def _run(driver: Driver, command: str, step: str) -> None:
        try:
            driver.get_ssh_command(command).run()
        except HostforgeError as e:
            raise CredentialUploadError(f"{step} failed: {e}") from e


def _write_remote(content: str, remote_path: str, append: bool = False) -> str:
    tee = "tee -a" if append else "tee"
    return f"echo {shlex.quote(content)} | sudo {tee} {shlex.quote(remote_path)} > /dev/null"
