"""Tests for DriverRegistry."""

from unittest.mock import patch

import pytest

from hostforge.domain.errors import UnknownDriverError
from hostforge.domain.ports.driver_port import Driver
from hostforge.infrastructure.drivers.generic import GenericDriver
from hostforge.infrastructure.drivers.none import NoneDriver
from hostforge.infrastructure.drivers.registry import (
    DriverRegistry,
    default_registry,
    new_driver,
)
from hostforge.infrastructure.drivers.virtualbox import VirtualBoxDriver


class TestDefaultRegistry:
    def test_builtin_drivers(self):
        assert default_registry.names() == ["generic", "none", "virtualbox"]

    @pytest.mark.parametrize(
        "name,cls",
        [("none", NoneDriver), ("generic", GenericDriver), ("virtualbox", VirtualBoxDriver)],
    )
    def test_new_driver(self, name, cls):
        driver = new_driver(name, "node1", "/store/node1", "/ca.pem", "/key.pem")

        assert isinstance(driver, cls)
        assert isinstance(driver, Driver)
        assert driver.driver_name() == name
        assert driver.machine_name == "node1"
        assert driver.store_path == "/store/node1"
        assert driver.ca_cert_path == "/ca.pem"
        assert driver.private_key_path == "/key.pem"

    def test_unknown_driver(self):
        with pytest.raises(UnknownDriverError, match="hyperv"):
            new_driver("hyperv", "node1", "/store/node1")

    def test_construction_has_no_side_effects(self, tmp_path):
        with patch("subprocess.run") as mock_run:
            new_driver("virtualbox", "node1", str(tmp_path / "node1"))
        mock_run.assert_not_called()
        assert not (tmp_path / "node1").exists()


class TestRegistration:
    def test_register_new_backend(self, fake_driver_cls):
        registry = DriverRegistry()
        registry.register("fake", fake_driver_cls)

        assert "fake" in registry
        assert isinstance(registry.new_driver("fake", "n", "/s"), fake_driver_cls)

    def test_register_same_class_twice_is_idempotent(self, fake_driver_cls):
        registry = DriverRegistry()
        registry.register("fake", fake_driver_cls)
        registry.register("fake", fake_driver_cls)
        assert registry.names() == ["fake"]

    def test_conflicting_registration(self, fake_driver_cls):
        registry = DriverRegistry({"fake": NoneDriver})
        with pytest.raises(ValueError):
            registry.register("fake", fake_driver_cls)

    def test_unregister(self, registry):
        registry.unregister("fake")
        assert "fake" not in registry
        with pytest.raises(UnknownDriverError):
            registry.new_driver("fake", "n", "/s")
