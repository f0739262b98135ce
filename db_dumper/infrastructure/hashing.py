"""Infrastructure adapter for content hashing."""

import asyncio
import hashlib
import logging
from pathlib import Path

from ..application.domain import Hasher
from ..application.exceptions import ChecksumMismatchError


class Sha256Hasher(Hasher):
    """An adapter that implements the Hasher port using SHA256."""

    def __init__(self, chunk_size: int = 65536):
        """Initializes the hasher."""
        self.logger = logging.getLogger(self.__class__.__name__)
        self.chunk_size = chunk_size

    def _read_and_hash(self, file_path: Path) -> str:
        hasher = hashlib.sha256()
        with open(file_path, "rb") as f:
            while chunk := f.read(self.chunk_size):
                hasher.update(chunk)
        return hasher.hexdigest()

    async def digest(self, file_path: Path) -> str:
        """Perform the blocking I/O work of hashing a file in a thread."""
        self.logger.info(f"Computing checksum for {Path(file_path).name}...")
        return await asyncio.to_thread(self._read_and_hash, Path(file_path))

    async def verify(self, file_path: Path, expected: str):
        """
        Compare a file's digest with the expected one.

        Args:
            file_path: The file to verify.
            expected: The expected lowercase hex SHA256 digest.

        Raises:
            ChecksumMismatchError: If the digests differ.
            OSError: If the file cannot be read.
        """

        calculated_hash = await self.digest(file_path)

        if calculated_hash != expected.lower():
            raise ChecksumMismatchError(
                Path(file_path).name, expected, calculated_hash
            )

        self.logger.info(
            f"Checksum for {Path(file_path).name} verified successfully."
        )
