"""
Provision Host Use Case

Architectural Intent:
- Orchestrates a new host end to end: create, TLS bootstrap, daemon readiness
- Blocking driver and filesystem work runs in the default executor so
  several hosts can be provisioned concurrently from one event loop
- Each step depends on the previous one; the first failure propagates

Design Decisions:
- Drivers that do not manage their daemon (the none driver) skip the TLS
  bootstrap; their daemon is only waited for
"""

import asyncio
import logging
from typing import Any, Mapping, Optional

from hostforge.domain.entities.host import Host
from hostforge.domain.ports.host_repository_port import HostRepositoryPort
from hostforge.domain.ports.readiness_port import ReadinessPort
from hostforge.domain.value_objects.host_name import validate_host_name

logger = logging.getLogger(__name__)

DEFAULT_READY_INTERVAL = 5.0


class ProvisionHost:
    def __init__(
        self,
        host_repository: HostRepositoryPort,
        readiness: ReadinessPort,
        ready_interval: float = DEFAULT_READY_INTERVAL,
        ready_timeout: Optional[float] = None,
    ):
        self.host_repository = host_repository
        self.readiness = readiness
        self.ready_interval = ready_interval
        self.ready_timeout = ready_timeout

    async def execute(
        self,
        name: str,
        driver_name: str,
        ca_cert_path: str = "",
        private_key_path: str = "",
        ready_timeout: Optional[float] = None,
        driver_options: Optional[Mapping[str, Any]] = None,
    ) -> Host:
        validate_host_name(name)
        loop = asyncio.get_running_loop()

        host = self.host_repository.new_host(
            name,
            driver_name,
            ca_cert_path,
            private_key_path,
            driver_options=driver_options,
        )

        logger.info("Provisioning host %s (%s)", name, driver_name, extra={"host": name})
        await loop.run_in_executor(None, host.create, name)
        if host.driver.manages_daemon():
            await loop.run_in_executor(None, host.configure_auth)
        else:
            logger.info("Skipping TLS bootstrap for %s", name, extra={"host": name})

        url = await loop.run_in_executor(None, host.get_url)
        if ready_timeout is None:
            ready_timeout = self.ready_timeout
        await self.readiness.wait(url, self.ready_interval, ready_timeout)

        logger.info("Host %s is ready at %s", name, url, extra={"host": name})
        return host
