"""
X.509 Adapter

Architectural Intent:
- Infrastructure adapter implementing CertificatePort via cryptography
- Issues the self-signed CA and the CA-signed server/client certificates
  used for Docker daemon mutual TLS

Design Decisions:
- Certificates are valid for 1080 days from issue
- Host entries that parse as IP addresses become IP SANs, other non-empty
  entries become DNS SANs; an empty entry adds nothing (client certs)
- Issued certs carry both server and client auth usage so one CA serves both
- Private keys are written PEM/PKCS#1 with mode 0600
- A CA key that cannot be used (encrypted, unsupported type) is a ValueError
"""

import datetime
import ipaddress
import logging
import os
from typing import Sequence

from cryptography import x509
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import ExtendedKeyUsageOID, NameOID

logger = logging.getLogger(__name__)

VALIDITY = datetime.timedelta(days=1080)


def _write_key(path: str, key: rsa.RSAPrivateKey) -> None:
    data = key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    )
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "wb") as f:
        f.write(data)
    os.chmod(path, 0o600)


def _write_cert(path: str, cert: x509.Certificate) -> None:
    with open(path, "wb") as f:
        f.write(cert.public_bytes(serialization.Encoding.PEM))


def _subject_alt_names(hosts: Sequence[str]) -> list[x509.GeneralName]:
    names: list[x509.GeneralName] = []
    for host in hosts:
        if not host:
            continue
        try:
            names.append(x509.IPAddress(ipaddress.ip_address(host)))
        except ValueError:
            names.append(x509.DNSName(host))
    return names


def _load_ca(cert_path: str, key_path: str):
    with open(cert_path, "rb") as f:
        cert_pem = f.read()
    with open(key_path, "rb") as f:
        key_pem = f.read()
    try:
        cert = x509.load_pem_x509_certificate(cert_pem)
        # encrypted keys raise TypeError since no password is given
        key = serialization.load_pem_private_key(key_pem, password=None)
    except (TypeError, UnsupportedAlgorithm) as e:
        raise ValueError(f"unable to load CA from {cert_path}, {key_path}: {e}") from e
    return cert, key


class X509Adapter:
    """Adapter implementing CertificatePort with the cryptography package."""

    def generate_ca_cert(self, cert_path: str, key_path: str, org: str, bits: int) -> None:
        key = rsa.generate_private_key(public_exponent=65537, key_size=bits)
        name = x509.Name([x509.NameAttribute(NameOID.ORGANIZATION_NAME, org)])
        now = datetime.datetime.now(datetime.UTC)

        cert = (
            x509.CertificateBuilder()
            .subject_name(name)
            .issuer_name(name)
            .public_key(key.public_key())
            .serial_number(x509.random_serial_number())
            .not_valid_before(now)
            .not_valid_after(now + VALIDITY)
            .add_extension(x509.BasicConstraints(ca=True, path_length=None), critical=True)
            .add_extension(
                x509.KeyUsage(
                    digital_signature=True,
                    content_commitment=False,
                    key_encipherment=True,
                    data_encipherment=False,
                    key_agreement=False,
                    key_cert_sign=True,
                    crl_sign=False,
                    encipher_only=False,
                    decipher_only=False,
                ),
                critical=True,
            )
            .sign(key, hashes.SHA256())
        )

        _write_cert(cert_path, cert)
        _write_key(key_path, key)
        logger.debug("Wrote CA cert %s", cert_path)

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
        ca_cert, ca_key = _load_ca(ca_cert_path, ca_key_path)

        key = rsa.generate_private_key(public_exponent=65537, key_size=bits)
        now = datetime.datetime.now(datetime.UTC)

        builder = (
            x509.CertificateBuilder()
            .subject_name(x509.Name([x509.NameAttribute(NameOID.ORGANIZATION_NAME, org)]))
            .issuer_name(ca_cert.subject)
            .public_key(key.public_key())
            .serial_number(x509.random_serial_number())
            .not_valid_before(now)
            .not_valid_after(now + VALIDITY)
            .add_extension(x509.BasicConstraints(ca=False, path_length=None), critical=True)
            .add_extension(
                x509.ExtendedKeyUsage(
                    [ExtendedKeyUsageOID.CLIENT_AUTH, ExtendedKeyUsageOID.SERVER_AUTH]
                ),
                critical=False,
            )
        )
        alt_names = _subject_alt_names(hosts)
        if alt_names:
            builder = builder.add_extension(
                x509.SubjectAlternativeName(alt_names), critical=False
            )

        cert = builder.sign(ca_key, hashes.SHA256())
        _write_cert(cert_path, cert)
        _write_key(key_path, key)
        logger.debug("Wrote cert %s for %s", cert_path, [h for h in hosts if h])
