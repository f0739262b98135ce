"""
Core business exceptions for the dumper application.

This module defines a hierarchy of custom exceptions to allow for granular
error handling and clear separation of failure domains.
"""

from typing import Optional


class DumperError(Exception):
    """Base exception for all component-specific errors."""
    pass


# --- Configuration Errors ---

class ConfigurationError(DumperError):
    """Raised for errors related to application configuration."""
    pass


class ConfigParseError(ConfigurationError):
    """Raised when the stored configuration file cannot be parsed."""
    pass


# --- Infrastructure Errors ---

class InfrastructureError(DumperError):
    """Base class for errors related to external systems (network, processes)."""
    pass


class DownloadError(InfrastructureError):
    """Raised when a download answers with a missing or failing status."""

    def __init__(self, status_code: Optional[int], url: str = ""):
        self.status_code = status_code
        self.url = url
        super().__init__(
            f"Download failed with status {status_code}"
            + (f" for {url}" if url else "")
        )


class RedirectLoopError(InfrastructureError):
    """Raised when a download follows more redirects than allowed."""
    pass


class ExtractionError(InfrastructureError):
    """Raised when an archive cannot be unpacked."""
    pass


class SpawnError(InfrastructureError):
    """Raised when an external executable cannot be started."""
    pass


class SecretStoreError(InfrastructureError):
    """Raised when the system credential store rejects an operation."""
    pass


class ProcessExitError(InfrastructureError):
    """Raised when an external executable exits with a non-zero code."""

    def __init__(self, program: str, code: int, stderr: str = ""):
        self.program = program
        self.code = code
        self.stderr = stderr
        detail = stderr.strip() or "no output on stderr"
        super().__init__(f"{program} exited with code {code}: {detail}")


# --- Domain/Business Logic Errors ---

class DomainError(DumperError):
    """Base class for errors related to business logic failures."""
    pass


class UnsupportedPlatformError(DomainError):
    """Raised when no pinned binary exists for the platform/architecture."""
    pass


class BinaryOverrideNotFound(DomainError):
    """Raised when a user-supplied binary path does not exist."""
    pass


class ChecksumMismatchError(DomainError):
    """Raised when a downloaded archive does not match its pinned digest."""

    def __init__(self, name: str, expected: str, actual: str):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Checksum mismatch for {name}. "
            f"Expected {expected}, got {actual}"
        )


class BinaryNotFoundError(DomainError):
    """Raised when the extracted archive holds no usable executable."""
    pass


class DumpError(DomainError):
    """Raised when a dump terminates abnormally."""

    def __init__(self, message: str, stderr: str = ""):
        self.stderr = stderr
        super().__init__(message)


class CredentialMissingError(DomainError):
    """Raised when no password can be resolved for a target."""
    pass


class ConnectionTestError(DomainError):
    """Raised when the pre-dump connection test fails."""
    pass
