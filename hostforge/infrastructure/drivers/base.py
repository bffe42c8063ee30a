"""
Base Driver

Architectural Intent:
- Shared plumbing for the built-in drivers: construction context and the
  typed, persisted field set each driver declares
- Lets the config store decode a document into a pre-selected driver type

Design Decisions:
- Drivers are dataclasses; persisted fields carry their JSON key in metadata
- Construction context (machine name, store path, CA paths) is never persisted
- Decoding is strict on types: a value whose JSON type differs from the
  field's default is rejected rather than coerced
"""

from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass, field
from typing import Any, Mapping

from hostforge.domain.errors import MalformedConfigError
from hostforge.domain.ports.driver_port import Driver


def config_field(default: Any, key: str) -> Any:
    """Declare a driver field persisted under ``key`` in config.json."""
    return field(default=default, metadata={"config_key": key})


@dataclass
class BaseDriver(Driver):
    machine_name: str = ""
    store_path: str = ""
    ca_cert_path: str = ""
    private_key_path: str = ""

    DRIVER_NAME = ""

    def driver_name(self) -> str:
        return self.DRIVER_NAME

    @classmethod
    def config_fields(cls) -> dict[str, dataclasses.Field]:
        return {
            f.metadata["config_key"]: f
            for f in dataclasses.fields(cls)
            if "config_key" in f.metadata
        }

    def to_config(self) -> dict[str, Any]:
        return {key: getattr(self, f.name) for key, f in self.config_fields().items()}

    def apply_config(self, data: Mapping[str, Any]) -> None:
        """Set persisted fields from ``data``; keys absent from ``data`` keep defaults."""
        for key, f in self.config_fields().items():
            if key not in data:
                continue
            value = data[key]
            expected = type(f.default)
            if type(value) is not expected:
                raise MalformedConfigError(
                    f"{self.DRIVER_NAME} field {key} must be {expected.__name__}, "
                    f"got {type(value).__name__}"
                )
            setattr(self, f.name, value)

    def resolve_store_path(self, *parts: str) -> str:
        return os.path.join(self.store_path, *parts)
