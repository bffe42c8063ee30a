"""
Host Module

Architectural Intent:
- Host aggregate is the consistency boundary for one provisioned node
- Owns its store path exclusively (config file and certificates)
- Lifecycle state lives in the driver; the host delegates and persists
- Persistence and certificate routines are reached through ports

Lifecycle:
- create: refused when the store already holds a config; driver provisions,
  then config is saved. On driver failure nothing is saved and a store
  directory created by this call is removed again
- start / stop / upgrade: pure delegation, driver errors surface unchanged
- remove: driver teardown, then the store directory is deleted
- configure_auth: TLS bootstrap, issued credential paths are persisted
"""

from __future__ import annotations

import logging
import os
import shutil
from typing import Optional, Sequence

from hostforge.domain.errors import (
    FilesystemError,
    HostExistsError,
    HostforgeError,
    StoreNotADirectoryError,
)
from hostforge.domain.ports.certificate_port import CertificatePort
from hostforge.domain.ports.config_store_port import ConfigStorePort
from hostforge.domain.ports.driver_port import Driver
from hostforge.domain.services.certificate_bootstrap import (
    CertificateBootstrap,
    CertificateSet,
)
from hostforge.domain.value_objects.host_name import validate_host_name

logger = logging.getLogger(__name__)


class Host:
    def __init__(
        self,
        name: str,
        store_path: str,
        driver_name: str = "",
        driver: Optional[Driver] = None,
        ca_cert_path: str = "",
        private_key_path: str = "",
        config_store: Optional[ConfigStorePort] = None,
        certificates: Optional[CertificatePort] = None,
    ):
        self.name = name
        self.driver_name = driver_name
        self.driver = driver
        self.ca_cert_path = ca_cert_path
        self.private_key_path = private_key_path
        self.server_cert_path = ""
        self.server_key_path = ""
        self.client_cert_path = ""
        self.client_key_path = ""
        self._store_path = store_path
        self._config_store = config_store
        self._certificates = certificates

    @property
    def store_path(self) -> str:
        return self._store_path

    def _require_driver(self) -> Driver:
        if self.driver is None:
            raise HostforgeError(f"Host {self.name!r} has no driver loaded")
        return self.driver

    def _require_config_store(self) -> ConfigStorePort:
        if self._config_store is None:
            raise HostforgeError(f"Host {self.name!r} is not bound to a config store")
        return self._config_store

    def _bootstrap(self) -> CertificateBootstrap:
        if self._certificates is None:
            raise HostforgeError(f"Host {self.name!r} has no certificate generator")
        return CertificateBootstrap(self._certificates)

    def create(self, name: str) -> None:
        validate_host_name(name)
        driver = self._require_driver()
        if self._require_config_store().exists(self._store_path):
            raise HostExistsError(name, self._store_path)

        created = not os.path.exists(self._store_path)
        try:
            os.makedirs(self._store_path, exist_ok=True)
        except OSError as e:
            raise FilesystemError(f"unable to create store {self._store_path}: {e}") from e

        logger.info(
            "Creating host %s with driver %s", name, self.driver_name, extra={"host": name}
        )
        try:
            driver.create()
        except Exception:
            if created:
                self._discard_store()
            raise
        self.save_config()

    def _discard_store(self) -> None:
        try:
            shutil.rmtree(self._store_path)
        except OSError as e:
            # best effort; the driver error propagates
            logger.warning(
                "Unable to clean up store %s: %s", self._store_path, e, extra={"host": self.name}
            )

    def start(self) -> None:
        self._require_driver().start()

    def stop(self) -> None:
        self._require_driver().stop()

    def upgrade(self) -> None:
        self._require_driver().upgrade()

    def remove(self, force: bool = False) -> None:
        try:
            self._require_driver().remove()
        except Exception as e:
            if not force:
                raise
            # infrastructure may be orphaned; local state is removed anyway
            logger.warning(
                "Ignoring driver error while force-removing %s: %s", self.name, e,
                extra={"host": self.name},
            )
        self._remove_store_path()

    def _remove_store_path(self) -> None:
        try:
            if not os.path.isdir(self._store_path):
                os.stat(self._store_path)
                raise StoreNotADirectoryError(self._store_path)
            shutil.rmtree(self._store_path)
        except OSError as e:
            raise FilesystemError(f"unable to remove store {self._store_path}: {e}") from e
        logger.info("Removed store for host %s", self.name, extra={"host": self.name})

    def get_url(self) -> str:
        return self._require_driver().get_url()

    def generate_certificates(self, server_ips: Sequence[str]) -> CertificateSet:
        certs = self._bootstrap().generate_certificates(
            self._store_path, server_ips, self.ca_cert_path, self.private_key_path
        )
        self._record(certs)
        return certs

    def configure_auth(self) -> CertificateSet:
        certs = self._bootstrap().configure_auth(
            self._require_driver(),
            self._store_path,
            self.ca_cert_path,
            self.private_key_path,
        )
        self._record(certs)
        self.save_config()
        logger.info("Configured TLS auth for host %s", self.name, extra={"host": self.name})
        return certs

    def _record(self, certs: CertificateSet) -> None:
        self.server_cert_path = certs.server_cert_path
        self.server_key_path = certs.server_key_path
        self.client_cert_path = certs.client_cert_path
        self.client_key_path = certs.client_key_path

    def save_config(self) -> None:
        self._require_config_store().save(self)

    def load_config(self) -> None:
        self._require_config_store().load(self)

    def __repr__(self) -> str:
        return (
            f"Host(name={self.name!r}, driver_name={self.driver_name!r}, "
            f"store_path={self._store_path!r})"
        )
