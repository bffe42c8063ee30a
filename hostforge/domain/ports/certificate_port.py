"""
Certificate Port

Architectural Intent:
- Port interface for the low-level X.509 routines used during bootstrap
- Implemented by X509Adapter (cryptography)
"""

from typing import Protocol, Sequence, runtime_checkable


@runtime_checkable
class CertificatePort(Protocol):
    def generate_ca_cert(self, cert_path: str, key_path: str, org: str, bits: int) -> None:
        """Write a self-signed CA certificate and its private key."""
        ...

    def generate_cert(
        self,
        hosts: Sequence[str],
        cert_path: str,
        key_path: str,
        ca_cert_path: str,
        ca_key_path: str,
        org: str,
        bits: int,
    ) -> None:
        """Write a certificate for ``hosts`` signed by the given CA."""
        ...
