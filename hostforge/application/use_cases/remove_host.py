"""
Remove Host Use Case

Architectural Intent:
- Loads a stored host and tears it down, optionally forcing local cleanup
  when the driver cannot confirm the infrastructure is gone
"""

import asyncio

from hostforge.domain.ports.host_repository_port import HostRepositoryPort


class RemoveHost:
    def __init__(self, host_repository: HostRepositoryPort):
        self.host_repository = host_repository

    async def execute(self, name: str, force: bool = False) -> None:
        loop = asyncio.get_running_loop()
        host = await loop.run_in_executor(None, self.host_repository.load_host, name)
        await loop.run_in_executor(None, host.remove, force)
