"""
Host Store

Architectural Intent:
- Filesystem repository of hosts: one store directory per host under a root
- Factory for Host aggregates wired to a driver, config store and
  certificate adapter
- new_host / load_host module functions take an explicit store path and use
  the default registry

Design Decisions:
- Driver settings passed to new_host go through BaseDriver.apply_config, so
  they use the same keys and strict types as config.json
- A name whose store already holds a config is never handed out again
"""

from __future__ import annotations

import logging
import os
from typing import Any, Mapping, Optional

from hostforge.domain.entities.host import Host
from hostforge.domain.errors import (
    ConfigNotFoundError,
    FilesystemError,
    HostExistsError,
    MalformedConfigError,
)
from hostforge.domain.ports.certificate_port import CertificatePort
from hostforge.domain.ports.host_repository_port import HostRepositoryPort
from hostforge.domain.value_objects.host_name import validate_host_name
from hostforge.infrastructure.adapters.x509_adapter import X509Adapter
from hostforge.infrastructure.drivers.base import BaseDriver
from hostforge.infrastructure.drivers.registry import DriverRegistry, default_registry
from hostforge.infrastructure.repositories.config_store import CONFIG_FILE, JsonConfigStore

logger = logging.getLogger(__name__)


def _apply_driver_options(driver: BaseDriver, options: Mapping[str, Any]) -> None:
    unknown = sorted(k for k in options if k not in driver.config_fields())
    if unknown:
        raise MalformedConfigError(
            f"options {', '.join(unknown)} do not belong to driver {driver.driver_name()!r}"
        )
    driver.apply_config(options)


class HostStore(HostRepositoryPort):
    """Repository of hosts stored under ``root``."""

    def __init__(
        self,
        root: str,
        registry: DriverRegistry = default_registry,
        certificates: Optional[CertificatePort] = None,
    ) -> None:
        self.root = os.path.expanduser(root)
        self.registry = registry
        self.config_store = JsonConfigStore(registry)
        self.certificates = certificates or X509Adapter()

    def path_for(self, name: str) -> str:
        return os.path.join(self.root, validate_host_name(name))

    def exists(self, name: str) -> bool:
        return self.config_store.exists(self.path_for(name))

    def names(self) -> list[str]:
        """Names of hosts with a saved config, sorted."""
        try:
            entries = sorted(os.listdir(self.root))
        except FileNotFoundError:
            return []
        except OSError as e:
            raise FilesystemError(f"unable to list {self.root}: {e}") from e
        return [
            name for name in entries
            if os.path.isfile(os.path.join(self.root, name, CONFIG_FILE))
        ]

    def new_host(
        self,
        name: str,
        driver_name: str,
        ca_cert_path: str = "",
        private_key_path: str = "",
        store_path: Optional[str] = None,
        driver_options: Optional[Mapping[str, Any]] = None,
    ) -> Host:
        store_path = store_path or self.path_for(name)
        if self.config_store.exists(store_path):
            raise HostExistsError(name, store_path)

        driver = self.registry.new_driver(
            driver_name, name, store_path, ca_cert_path, private_key_path
        )
        if driver_options:
            _apply_driver_options(driver, driver_options)
        return Host(
            name=name,
            store_path=store_path,
            driver_name=driver_name,
            driver=driver,
            ca_cert_path=ca_cert_path,
            private_key_path=private_key_path,
            config_store=self.config_store,
            certificates=self.certificates,
        )

    def load_host(self, name: str, store_path: Optional[str] = None) -> Host:
        store_path = store_path or self.path_for(name)
        if not os.path.exists(store_path):
            raise ConfigNotFoundError(f"Host {name!r} does not exist")
        host = Host(
            name=name,
            store_path=store_path,
            config_store=self.config_store,
            certificates=self.certificates,
        )
        host.load_config()
        return host


def new_host(
    name: str,
    driver_name: str,
    store_path: str,
    ca_cert_path: str = "",
    private_key_path: str = "",
    driver_options: Optional[Mapping[str, Any]] = None,
) -> Host:
    store = HostStore(os.path.dirname(store_path))
    return store.new_host(
        name,
        driver_name,
        ca_cert_path,
        private_key_path,
        store_path=store_path,
        driver_options=driver_options,
    )


def load_host(name: str, store_path: str) -> Host:
    return HostStore(os.path.dirname(store_path)).load_host(name, store_path=store_path)
