"""Tests for the filesystem host repository."""

import os
from unittest.mock import MagicMock, patch

import pytest

from hostforge.domain.errors import (
    ConfigNotFoundError,
    HostExistsError,
    InvalidHostNameError,
    MalformedConfigError,
    UnknownDriverError,
)
from hostforge.infrastructure.repositories import host_store as host_store_module
from hostforge.infrastructure.repositories.host_store import HostStore


class TestHostStore:
    def test_root_expands_user(self):
        with patch.dict(os.environ, {"HOME": "/home/ops"}):
            assert HostStore("~/machines").root == "/home/ops/machines"

    def test_path_for(self, host_store):
        assert host_store.path_for("node1") == os.path.join(host_store.root, "node1")

    def test_path_for_rejects_traversal(self, host_store):
        with pytest.raises(InvalidHostNameError):
            host_store.path_for("../etc")

    def test_new_host_is_unsaved(self, host_store):
        host = host_store.new_host("node1", "fake")

        assert host.driver.machine_name == "node1"
        assert host.driver.store_path == host_store.path_for("node1")
        assert not os.path.exists(host.store_path)
        assert not host_store.exists("node1")

    def test_new_host_unknown_driver(self, host_store):
        with pytest.raises(UnknownDriverError):
            host_store.new_host("node1", "hyperv")

    def test_names_lists_saved_hosts(self, host_store):
        assert host_store.names() == []
        for name in ("web2", "web1"):
            host_store.new_host(name, "fake").create(name)
        os.makedirs(host_store.path_for("half_made"))

        assert host_store.names() == ["web1", "web2"]
        assert host_store.exists("web1")
        assert not host_store.exists("half_made")

    def test_load_host_binds_collaborators(self, host_store):
        host_store.new_host("node1", "fake", ca_cert_path="/ca.pem").create("node1")

        host = host_store.load_host("node1")

        assert host._config_store is host_store.config_store
        assert host._certificates is host_store.certificates
        assert host.ca_cert_path == "/ca.pem"
        assert host.driver.ca_cert_path == "/ca.pem"
        assert host.driver.store_path == host.store_path

    def test_load_host_missing(self, host_store):
        with pytest.raises(ConfigNotFoundError, match="ghost"):
            host_store.load_host("ghost")

    def test_new_host_applies_driver_options(self, host_store):
        host = host_store.new_host(
            "node1", "generic", driver_options={"IPAddress": "10.0.0.9", "SSHPort": 2222}
        )

        assert host.driver.ip_address == "10.0.0.9"
        assert host.driver.ssh_port == 2222
        assert host.driver.ssh_user == "root"

    def test_new_host_rejects_foreign_option(self, host_store):
        with pytest.raises(MalformedConfigError, match="Boot2DockerISO"):
            host_store.new_host("node1", "none", driver_options={"Boot2DockerISO": "/b2d.iso"})

    def test_new_host_rejects_mistyped_option(self, host_store):
        with pytest.raises(MalformedConfigError, match="SSHPort"):
            host_store.new_host("node1", "generic", driver_options={"SSHPort": "22"})

    def test_new_host_refuses_existing_name(self, host_store):
        host_store.new_host("node1", "fake").create("node1")

        with pytest.raises(HostExistsError, match="node1"):
            host_store.new_host("node1", "fake")

    def test_existing_virtualbox_key_survives(self, tmp_path, host_store):
        iso = tmp_path / "boot2docker.iso"
        iso.write_bytes(b"iso")
        options = {"Boot2DockerISO": str(iso)}
        vboxmanage = MagicMock(return_value=MagicMock(stdout=""))
        with patch("hostforge.infrastructure.drivers.virtualbox.subprocess.run", vboxmanage):
            host_store.new_host("node1", "virtualbox", driver_options=options).create("node1")
        key_path = os.path.join(host_store.path_for("node1"), "id_rsa")
        with open(key_path, "rb") as f:
            key = f.read()
        calls = vboxmanage.call_count

        with patch("hostforge.infrastructure.drivers.virtualbox.subprocess.run", vboxmanage):
            with pytest.raises(HostExistsError):
                host_store.new_host("node1", "virtualbox", driver_options=options)

        with open(key_path, "rb") as f:
            assert f.read() == key
        assert vboxmanage.call_count == calls


class TestModuleFunctions:
    def test_new_and_load_with_explicit_path(self, tmp_path):
        store_path = str(tmp_path / "elsewhere" / "node1")
        host = host_store_module.new_host(
            "node1", "none", store_path, ca_cert_path="/ca.pem", private_key_path="/key.pem"
        )
        host.driver.url = "tcp://10.1.2.3:2376"
        host.create("node1")

        loaded = host_store_module.load_host("node1", store_path)

        assert loaded.store_path == store_path
        assert loaded.driver_name == "none"
        assert loaded.driver.url == "tcp://10.1.2.3:2376"
        assert loaded.private_key_path == "/key.pem"

    def test_new_host_with_options_and_explicit_path(self, tmp_path):
        store_path = str(tmp_path / "elsewhere" / "node1")
        host = host_store_module.new_host(
            "node1", "none", store_path, driver_options={"URL": "tcp://10.1.2.3:2376"}
        )
        host.create("node1")

        assert host_store_module.load_host("node1", store_path).driver.url == "tcp://10.1.2.3:2376"
        with pytest.raises(HostExistsError):
            host_store_module.new_host("node1", "none", store_path)
