"""
Readiness Port

Architectural Intent:
- Port interface for waiting until a host's Docker daemon answers
- Implemented by DockerReadiness (TCP polling)
"""

from abc import ABC, abstractmethod
from typing import Optional


class ReadinessPort(ABC):
    @abstractmethod
    async def wait(self, addr: str, interval: float, timeout: Optional[float] = None) -> None:
        """
        Returns once ``addr`` accepts connections.
        Raises ReadinessTimeoutError if ``timeout`` seconds pass first.
        """
        pass
