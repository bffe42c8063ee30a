"""Tests for RemoveHost use case."""

import os

import pytest
from unittest.mock import patch

from hostforge.application.use_cases.remove_host import RemoveHost
from hostforge.domain.errors import ConfigNotFoundError, DriverOperationError


class TestRemoveHost:
    @pytest.mark.asyncio
    async def test_removes_store(self, host_store, fake_host):
        fake_host.create("node1")

        await RemoveHost(host_store).execute("node1")

        assert not os.path.exists(fake_host.store_path)
        assert host_store.names() == []

    @pytest.mark.asyncio
    async def test_driver_failure_keeps_store(self, host_store, fake_host, fake_driver_cls):
        fake_host.create("node1")

        with patch.object(
            fake_driver_cls, "remove", side_effect=DriverOperationError("vm busy"), autospec=True
        ):
            with pytest.raises(DriverOperationError, match="vm busy"):
                await RemoveHost(host_store).execute("node1")

        assert host_store.exists("node1")

    @pytest.mark.asyncio
    async def test_force_cleans_up_anyway(self, host_store, fake_host, fake_driver_cls):
        fake_host.create("node1")

        with patch.object(
            fake_driver_cls, "remove", side_effect=DriverOperationError("vm busy"), autospec=True
        ):
            await RemoveHost(host_store).execute("node1", force=True)

        assert not os.path.exists(fake_host.store_path)

    @pytest.mark.asyncio
    async def test_unknown_host(self, host_store):
        with pytest.raises(ConfigNotFoundError):
            await RemoveHost(host_store).execute("ghost")
