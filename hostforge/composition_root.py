"""
Composition Root

Architectural Intent:
- Dependency injection composition root for hostforge
- Single place where the registry, adapters, store and use cases are wired

Design Decisions:
- Uses a simple dataclass container instead of a DI framework
- Factory function loads config, configures logging and wires dependencies
"""

from dataclasses import dataclass
from typing import Optional

from hostforge.application.use_cases.provision_host import ProvisionHost
from hostforge.application.use_cases.remove_host import RemoveHost
from hostforge.infrastructure.adapters.x509_adapter import X509Adapter
from hostforge.infrastructure.config import HostforgeConfig, load_config
from hostforge.infrastructure.drivers.registry import DriverRegistry, default_registry
from hostforge.infrastructure.logging import configure_logging, parse_level
from hostforge.infrastructure.readiness import DockerReadiness
from hostforge.infrastructure.repositories.host_store import HostStore


@dataclass
class HostforgeContainer:
    """DI container holding all wired dependencies."""

    config: HostforgeConfig
    registry: DriverRegistry
    certificates: X509Adapter
    host_store: HostStore
    readiness: DockerReadiness
    provision_host: ProvisionHost
    remove_host: RemoveHost


def create_container(
    config: Optional[HostforgeConfig] = None,
    registry: DriverRegistry = default_registry,
) -> HostforgeContainer:
    """Create and wire all dependencies."""
    config = config or load_config()
    configure_logging(level=parse_level(config.log_level), json_format=config.log_json)

    certificates = X509Adapter()
    host_store = HostStore(config.store.root, registry=registry, certificates=certificates)
    readiness = DockerReadiness()

    provision_host = ProvisionHost(
        host_store,
        readiness,
        ready_interval=float(config.readiness.interval_seconds),
        ready_timeout=config.readiness.timeout,
    )
    remove_host = RemoveHost(host_store)

    return HostforgeContainer(
        config=config,
        registry=registry,
        certificates=certificates,
        host_store=host_store,
        readiness=readiness,
        provision_host=provision_host,
        remove_host=remove_host,
    )
