"""
Driver Infrastructure

Architectural Intent:
- Built-in Driver implementations and the registry that resolves them
"""

from hostforge.infrastructure.drivers.base import BaseDriver, config_field
from hostforge.infrastructure.drivers.registry import (
    DriverRegistry,
    default_registry,
    new_driver,
)

__all__ = [
    "BaseDriver",
    "config_field",
    "DriverRegistry",
    "default_registry",
    "new_driver",
]
