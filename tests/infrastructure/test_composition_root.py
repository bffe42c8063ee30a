"""Tests for composition root DI container."""

import logging

import pytest

from hostforge.composition_root import HostforgeContainer, create_container
from hostforge.domain.ports.host_repository_port import HostRepositoryPort
from hostforge.domain.ports.readiness_port import ReadinessPort
from hostforge.infrastructure.config import (
    HostforgeConfig,
    ReadinessConfig,
    StoreConfig,
)
from hostforge.infrastructure.drivers.registry import default_registry


@pytest.fixture
def config(tmp_path):
    return HostforgeConfig(
        store=StoreConfig(root=str(tmp_path / "machines")),
        readiness=ReadinessConfig(interval_seconds=2, timeout_seconds=30),
        log_level="INFO",
    )


class TestCompositionRoot:
    def test_create_container(self, config):
        container = create_container(config)

        assert isinstance(container, HostforgeContainer)
        assert container.config is config
        assert container.registry is default_registry
        assert container.host_store.root == config.store.root

    def test_store_shares_adapters(self, config):
        container = create_container(config)

        assert container.host_store.certificates is container.certificates
        assert container.host_store.registry is container.registry

    def test_use_cases_wired_to_store(self, config):
        container = create_container(config)

        assert container.provision_host.host_repository is container.host_store
        assert container.remove_host.host_repository is container.host_store
        assert container.provision_host.readiness is container.readiness
        assert container.provision_host.ready_interval == 2.0
        assert container.provision_host.ready_timeout == 30.0

    def test_configures_logging(self, config):
        create_container(config)
        assert logging.getLogger("hostforge").level == logging.INFO

    def test_custom_registry(self, config, registry):
        container = create_container(config, registry=registry)
        assert "fake" in container.host_store.registry

    def test_adapters_implement_ports(self, config):
        container = create_container(config)
        assert isinstance(container.host_store, HostRepositoryPort)
        assert isinstance(container.readiness, ReadinessPort)
