"""
This module defines the core domain models for the application.

These classes represent the pure, technology-agnostic entities and data
structures that the application's business logic operates on, together with
the ports (interfaces) the infrastructure layer implements.
"""

import dataclasses
from pathlib import Path

from abc import ABC, abstractmethod
from typing import Any, Callable, Iterable, Optional, Tuple


# --- Domain Models ---

@dataclasses.dataclass(frozen=True)
class BinaryDescriptor:
    """
    A static record describing where to fetch, how to verify, and how to
    unpack the platform-specific exporter executable.
    """

    version: str
    platform: str
    arch: str
    url: str
    sha256: str
    archive_format: str
    inner_path_hints: Tuple[str, ...] = ()


@dataclasses.dataclass(frozen=True)
class DownloadProgress:
    """Bytes received so far, and the expected total when it is known."""

    received: int
    total: Optional[int] = None


@dataclasses.dataclass(frozen=True)
class DumpRequest:
    """A transient, fully resolved description of a single dump run."""

    target: Any
    password: str
    destination: Path
    gzip: bool
    exclude_tables: Tuple[str, ...]
    flags: Tuple[str, ...]
    binary_path: Path


@dataclasses.dataclass(frozen=True)
class DumpResult:
    """Domain model for a finished export file on disk."""

    destination: Path
    size_bytes: int
    elapsed_seconds: float
    gzip: bool


@dataclasses.dataclass(frozen=True)
class ProbeResult:
    """Outcome of a connection test. Failure is a value, not an exception."""

    ok: bool
    message: Optional[str] = None


DownloadObserver = Callable[[DownloadProgress], None]
DumpObserver = Callable[[int], None]


# --- Ports (Interfaces) ---

class Fetcher(ABC):
    """A port for anything that can stream a URL into a file."""

    @abstractmethod
    async def fetch(
        self,
        url: str,
        destination: Path,
        on_progress: Optional[DownloadObserver] = None,
    ):
        """Streams the body of `url` into `destination`."""
        pass


class Hasher(ABC):
    """A port for hashing file contents."""

    @abstractmethod
    async def digest(self, file_path: Path) -> str:
        """Returns the lowercase hex digest of a file."""
        pass

    @abstractmethod
    async def verify(self, file_path: Path, expected: str):
        """
        Verifies the integrity of a file.
        Raises ChecksumMismatchError on mismatch.
        """
        pass


class Extractor(ABC):
    """A port for unpacking archives and finding files inside them."""

    @abstractmethod
    async def extract(self, archive: Path, archive_format: str, into: Path):
        """Unpacks `archive` into the `into` directory."""
        pass

    @abstractmethod
    def locate(
        self, root: Path, names: Iterable[str], hints: Iterable[str] = ()
    ) -> Optional[Path]:
        """
        Returns the first existing `hints` path relative to `root`, else
        the first file below `root` named one of `names`.
        """
        pass


class ConnectionProbe(ABC):
    """A port for validating reachability and credentials of a target."""

    @abstractmethod
    async def probe(
        self, binary_path: Path, target: Any, password: str
    ) -> ProbeResult:
        """Runs a no-data export and reports whether it succeeded."""
        pass


class DumpExecutor(ABC):
    """A port for running a full export."""

    @abstractmethod
    async def run(
        self,
        request: DumpRequest,
        on_progress: Optional[DumpObserver] = None,
    ) -> DumpResult:
        """Streams a full export to the request's destination."""
        pass


class SecretStore(ABC):
    """
    A port for credential storage. References are opaque strings namespaced
    by storage kind (``<kind>:<payload>``).
    """

    kind: str = ""

    @property
    def available(self) -> bool:
        """Whether the backend can store secrets right now."""
        return True

    @abstractmethod
    def save(self, secret: str, existing_ref: Optional[str] = None) -> str:
        """Stores a secret and returns its reference."""
        pass

    @abstractmethod
    def resolve(self, ref: str) -> Optional[str]:
        """Returns the secret behind a reference, or None."""
        pass

    @abstractmethod
    def delete(self, ref: str):
        """Forgets the secret behind a reference."""
        pass


class ConfigStore(ABC):
    """A port for the persisted set of target definitions."""

    @abstractmethod
    def find(self, key: str) -> Optional[Any]:
        """Returns the target whose id or alias equals `key`, or None."""
        pass

    @abstractmethod
    def put(self, entry: Any) -> Any:
        """Inserts or replaces a target by id and persists the result."""
        pass

    @abstractmethod
    def remove(self, target_id: str):
        """Drops a target by id and persists the result."""
        pass
