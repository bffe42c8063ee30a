"""
Driver Registry

Architectural Intent:
- Maps driver names to driver classes; the one seam where backends are added
- Host, ConfigStore and CertificateBootstrap never name a concrete driver
- Construction only binds context; no infrastructure is touched until a
  lifecycle method is called
"""

from __future__ import annotations

import logging
from typing import Optional

from hostforge.domain.errors import UnknownDriverError
from hostforge.infrastructure.drivers.base import BaseDriver
from hostforge.infrastructure.drivers.generic import GenericDriver
from hostforge.infrastructure.drivers.none import NoneDriver
from hostforge.infrastructure.drivers.virtualbox import VirtualBoxDriver

logger = logging.getLogger(__name__)


class DriverRegistry:
    """Registry of available driver classes keyed by driver name."""

    def __init__(self, drivers: Optional[dict[str, type[BaseDriver]]] = None) -> None:
        self._drivers: dict[str, type[BaseDriver]] = dict(drivers or {})

    def register(self, name: str, driver_cls: type[BaseDriver]) -> None:
        if name in self._drivers and self._drivers[name] is not driver_cls:
            raise ValueError(f"Driver {name!r} is already registered")
        self._drivers[name] = driver_cls
        logger.debug("Driver registered: %s", name)

    def unregister(self, name: str) -> None:
        self._drivers.pop(name, None)

    def names(self) -> list[str]:
        return sorted(self._drivers)

    def __contains__(self, name: object) -> bool:
        return name in self._drivers

    def new_driver(
        self,
        driver_name: str,
        host_name: str,
        store_path: str,
        ca_cert_path: str = "",
        private_key_path: str = "",
    ) -> BaseDriver:
        driver_cls = self._drivers.get(driver_name)
        if driver_cls is None:
            raise UnknownDriverError(driver_name)
        return driver_cls(
            machine_name=host_name,
            store_path=store_path,
            ca_cert_path=ca_cert_path,
            private_key_path=private_key_path,
        )


def _builtin_registry() -> DriverRegistry:
    return DriverRegistry({
        NoneDriver.DRIVER_NAME: NoneDriver,
        GenericDriver.DRIVER_NAME: GenericDriver,
        VirtualBoxDriver.DRIVER_NAME: VirtualBoxDriver,
    })


default_registry = _builtin_registry()


def new_driver(
    driver_name: str,
    host_name: str,
    store_path: str,
    ca_cert_path: str = "",
    private_key_path: str = "",
) -> BaseDriver:
    """Build a driver from the default registry."""
    return default_registry.new_driver(
        driver_name, host_name, store_path, ca_cert_path, private_key_path
    )
