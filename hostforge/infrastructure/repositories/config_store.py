"""
JSON Config Store

Architectural Intent:
- Persists a Host aggregate as <store_path>/config.json
- Decodes in two passes so driver-specific fields land in the right type:
  pass 1 reads the DriverName envelope and builds the driver through the
  registry, pass 2 applies the whole document to the host and that driver

Design Decisions:
- Driver fields are inlined next to the host fields in one flat object
- Keys that belong neither to the host nor to the declared driver make the
  document invalid, so a kind/field mismatch never partially populates
- Writes go to a temp file in the same directory, then os.replace(), mode 0600
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from hostforge.domain.errors import (
    ConfigNotFoundError,
    FilesystemError,
    MalformedConfigError,
)
from hostforge.infrastructure.drivers.base import BaseDriver
from hostforge.infrastructure.drivers.registry import DriverRegistry, default_registry

if TYPE_CHECKING:
    from hostforge.domain.entities.host import Host

logger = logging.getLogger(__name__)

CONFIG_FILE = "config.json"

# config.json key -> Host attribute
HOST_FIELDS = {
    "DriverName": "driver_name",
    "CaCertPath": "ca_cert_path",
    "PrivateKeyPath": "private_key_path",
    "ServerCertPath": "server_cert_path",
    "ServerKeyPath": "server_key_path",
    "ClientCertPath": "client_cert_path",
    "ClientKeyPath": "client_key_path",
}


@dataclass(frozen=True)
class _Envelope:
    driver_name: str

    @classmethod
    def decode(cls, data: Any) -> _Envelope:
        if not isinstance(data, dict):
            raise MalformedConfigError("config document must be a JSON object")
        driver_name = data.get("DriverName")
        if not isinstance(driver_name, str) or not driver_name:
            raise MalformedConfigError("config document has no DriverName")
        return cls(driver_name=driver_name)


class JsonConfigStore:
    """ConfigStorePort implementation writing one JSON document per host."""

    def __init__(self, registry: DriverRegistry = default_registry):
        self.registry = registry

    def config_path(self, store_path: str) -> str:
        return os.path.join(store_path, CONFIG_FILE)

    def exists(self, store_path: str) -> bool:
        return os.path.isfile(self.config_path(store_path))

    def encode(self, host: Host) -> dict[str, Any]:
        if not isinstance(host.driver, BaseDriver):
            raise MalformedConfigError(
                f"host {host.name!r} driver {type(host.driver).__name__} is not serializable"
            )
        data: dict[str, Any] = {
            key: getattr(host, attr) for key, attr in HOST_FIELDS.items()
        }
        for key, value in host.driver.to_config().items():
            if key in data:
                raise MalformedConfigError(f"driver field {key} collides with a host field")
            data[key] = value
        return data

    def save(self, host: Host) -> None:
        data = json.dumps(self.encode(host), indent=2, sort_keys=True)
        path = self.config_path(host.store_path)
        try:
            fd, tmp_path = tempfile.mkstemp(prefix=".config-", dir=host.store_path)
            try:
                with os.fdopen(fd, "w") as f:
                    f.write(data)
                os.chmod(tmp_path, 0o600)
                os.replace(tmp_path, path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except OSError as e:
            raise FilesystemError(f"unable to write {path}: {e}") from e
        logger.debug("Saved config for %s to %s", host.name, path)

    def read(self, store_path: str) -> Any:
        path = self.config_path(store_path)
        if not os.path.isdir(store_path):
            raise ConfigNotFoundError(f"Host store {store_path!r} does not exist")
        try:
            with open(path) as f:
                return json.load(f)
        except FileNotFoundError as e:
            raise ConfigNotFoundError(f"Host config {path!r} does not exist") from e
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise MalformedConfigError(f"unable to decode {path}: {e}") from e
        except OSError as e:
            raise FilesystemError(f"unable to read {path}: {e}") from e

    def load(self, host: Host) -> None:
        data = self.read(host.store_path)

        # First pass: find the driver name and build the driver
        envelope = _Envelope.decode(data)
        driver = self.registry.new_driver(
            envelope.driver_name,
            host.name,
            host.store_path,
            host.ca_cert_path,
            host.private_key_path,
        )

        # Second pass: decode the full document into the host and driver
        driver_keys = driver.config_fields()
        unknown = sorted(k for k in data if k not in HOST_FIELDS and k not in driver_keys)
        if unknown:
            raise MalformedConfigError(
                f"fields {', '.join(unknown)} do not belong to driver {envelope.driver_name!r}"
            )
        host_values = {}
        for key, attr in HOST_FIELDS.items():
            value = data.get(key, "")
            if not isinstance(value, str):
                raise MalformedConfigError(f"host field {key} must be a string")
            host_values[attr] = value
        driver.apply_config(data)
        driver.ca_cert_path = host_values["ca_cert_path"]
        driver.private_key_path = host_values["private_key_path"]

        for attr, value in host_values.items():
            setattr(host, attr, value)
        host.driver = driver
        logger.debug("Loaded host %s with driver %s", host.name, envelope.driver_name)
