"""
Readiness Waiter

Architectural Intent:
- Blocks a provisioning flow until the Docker daemon accepts TCP connections
- Retries at a fixed interval; the caller decides how long to keep trying

Design Decisions:
- timeout=None waits without bound; callers cancel the task to stop early
- Each connection attempt is itself bounded by the retry interval
"""

import asyncio
import logging
from typing import Optional
from urllib.parse import urlparse

from hostforge.domain.errors import ReadinessTimeoutError
from hostforge.domain.ports.readiness_port import ReadinessPort

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = 5.0


def parse_address(addr: str) -> tuple[str, int]:
    """Split 'host:port', '[::1]:port' or 'tcp://host:port' into (host, port)."""
    if "://" in addr:
        parsed = urlparse(addr)
        if not parsed.hostname or parsed.port is None:
            raise ValueError(f"Address must include host and port: {addr!r}")
        return parsed.hostname, parsed.port

    host, sep, port = addr.rpartition(":")
    if not sep or not host or not port.isdigit():
        raise ValueError(f"Address must be host:port, got {addr!r}")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    return host, int(port)


async def _attempt(host: str, port: int, interval: float) -> bool:
    try:
        _, writer = await asyncio.wait_for(asyncio.open_connection(host, port), timeout=interval)
    except (OSError, asyncio.TimeoutError) as e:
        logger.debug("Daemon at %s:%d not reachable yet: %s", host, port, e)
        return False
    writer.close()
    try:
        await writer.wait_closed()
    except OSError:
        pass
    return True


async def wait_for_docker(
    addr: str,
    *,
    interval: float = DEFAULT_INTERVAL,
    timeout: Optional[float] = None,
) -> None:
    """Return once a TCP connection to ``addr`` succeeds.

    Raises ReadinessTimeoutError if ``timeout`` seconds pass first.
    """
    host, port = parse_address(addr)

    async def _poll() -> None:
        while not await _attempt(host, port, interval):
            await asyncio.sleep(interval)

    logger.info("Waiting for Docker daemon at %s:%d", host, port)
    if timeout is None:
        await _poll()
        return
    try:
        await asyncio.wait_for(_poll(), timeout=timeout)
    except asyncio.TimeoutError as e:
        raise ReadinessTimeoutError(
            f"Docker daemon at {host}:{port} not reachable after {timeout}s"
        ) from e


class DockerReadiness(ReadinessPort):
    """ReadinessPort adapter over wait_for_docker."""

    async def wait(self, addr: str, interval: float, timeout: Optional[float] = None) -> None:
        await wait_for_docker(addr, interval=interval, timeout=timeout)
