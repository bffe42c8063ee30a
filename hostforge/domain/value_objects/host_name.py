"""
Host Name Value Object

Architectural Intent:
- Validates proposed host identifiers before any store path is derived
- Pattern compiled once at import time and never mutated
"""

import re

from hostforge.domain.errors import InvalidHostNameError

VALID_HOST_NAME_CHARS = r"[a-zA-Z0-9_]"

_HOST_NAME_RE = re.compile(VALID_HOST_NAME_CHARS + "+")


def validate_host_name(name: str) -> str:
    """Return ``name`` unchanged if valid, otherwise raise InvalidHostNameError."""
    if not isinstance(name, str) or not _HOST_NAME_RE.fullmatch(name):
        raise InvalidHostNameError(name, f"^{VALID_HOST_NAME_CHARS}+$")
    return name
