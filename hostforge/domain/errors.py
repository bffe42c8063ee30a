"""
Domain Errors

Architectural Intent:
- Single exception hierarchy for every host lifecycle failure
- Each error names the failing step (file, remote command, driver call)
- Lower-level causes are chained with ``raise ... from exc``
"""

from typing import Optional


class HostforgeError(Exception):
    """Base exception for all hostforge errors."""


class InvalidHostNameError(HostforgeError, ValueError):
    """Raised when a host name contains characters outside [A-Za-z0-9_]."""

    def __init__(self, name: str, pattern: str) -> None:
        self.name = name
        super().__init__(f"Invalid host name {name!r}, it must match {pattern}")


class UnknownDriverError(HostforgeError, LookupError):
    """Raised when no driver is registered under the requested name."""

    def __init__(self, driver_name: str) -> None:
        self.driver_name = driver_name
        super().__init__(f"Driver {driver_name!r} not found")


class ProvisionError(HostforgeError):
    """Raised by a driver when infrastructure provisioning fails."""


class DriverOperationError(HostforgeError):
    """Raised by a driver when a lifecycle or daemon operation fails."""


class RemoteCommandError(HostforgeError):
    """Raised when a remote command exits non-zero or the session fails."""

    def __init__(self, command: str, detail: str, exit_code: Optional[int] = None) -> None:
        self.command = command
        self.exit_code = exit_code
        super().__init__(f"Remote command failed ({detail}): {command}")


class IPResolutionError(HostforgeError):
    """Raised when the driver cannot report the host IP."""


class CertGenerationError(HostforgeError):
    """Raised when a CA, server or client certificate cannot be generated."""


class CertCopyError(HostforgeError):
    """Raised when a supplied CA certificate or key cannot be copied."""


class CredentialUploadError(HostforgeError):
    """Raised when credentials or daemon config cannot be pushed to the host."""


class ConfigNotFoundError(HostforgeError, FileNotFoundError):
    """Raised when a host has no store directory or no config file."""


class MalformedConfigError(HostforgeError, ValueError):
    """Raised when a config document cannot be decoded into a host."""


class HostExistsError(HostforgeError):
    """Raised when a host is created over a store that already holds a config."""

    def __init__(self, name: str, store_path: str) -> None:
        self.name = name
        self.store_path = store_path
        super().__init__(f"Host {name!r} already exists at {store_path!r}")


class StoreNotADirectoryError(HostforgeError):
    """Raised when a host store path exists but is not a directory."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"{path!r} is not a directory")


class FilesystemError(HostforgeError, OSError):
    """Raised when local store I/O fails."""


class ReadinessTimeoutError(HostforgeError, TimeoutError):
    """Raised when a daemon does not accept connections before the deadline."""
