"""
Domain Ports Package

Architectural Intent:
- Contains port interfaces (abstract contracts) for external dependencies
- Ports define what the domain needs, adapters implement how
- Follows Hexagonal Architecture principles
"""

from hostforge.domain.ports.driver_port import Driver, RemoteCommand
from hostforge.domain.ports.certificate_port import CertificatePort
from hostforge.domain.ports.config_store_port import ConfigStorePort
from hostforge.domain.ports.readiness_port import ReadinessPort

__all__ = [
    "Driver",
    "RemoteCommand",
    "CertificatePort",
    "ConfigStorePort",
    "ReadinessPort",
]
