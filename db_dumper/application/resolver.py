"""
The binary acquisition pipeline.

BinaryResolver turns a platform/architecture pair into a ready-to-run
mysqldump executable: it downloads the pinned archive, verifies it against
its pinned digest, unpacks it and moves the executable into a per-platform
cache directory where it is reused by every later call.
"""

import asyncio
import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Optional, Union

from .catalog import EXECUTABLE_NAMES, executable_name, resolve_descriptor
from .domain import (
    BinaryDescriptor,
    DownloadObserver,
    Extractor,
    Fetcher,
    Hasher,
)
from .exceptions import (
    BinaryNotFoundError,
    BinaryOverrideNotFound,
    UnsupportedPlatformError,
)


class BinaryResolver:
    """Materializes a cached, verified exporter executable."""

    def __init__(
        self,
        fetcher: Fetcher,
        hasher: Hasher,
        extractor: Extractor,
        cache_root: Union[str, Path],
    ):
        """Initializes the resolver with necessary dependencies (ports)."""
        self.logger = logging.getLogger(self.__class__.__name__)
        self.fetcher = fetcher
        self.hasher = hasher
        self.extractor = extractor
        self.cache_root = Path(cache_root)

    def cache_path(self, platform: str, arch: str) -> Path:
        """`<cache_root>/<platform>-<arch>/mysqldump[.exe]`"""
        return self.cache_root / f"{platform}-{arch}" / executable_name(platform)

    async def ensure_executable(
        self,
        platform: str,
        arch: str,
        override: Optional[Union[str, Path]] = None,
        on_progress: Optional[DownloadObserver] = None,
    ) -> Path:
        """
        Guarantee that an exporter executable exists, downloading only if
        necessary.

        Args:
            platform: Normalized platform name (linux, darwin, win32).
            arch: Normalized architecture name (x64, arm64).
            override: A user-supplied executable, used verbatim.
            on_progress: Optional observer for the archive download.

        Returns:
            The path of a runnable executable.

        Raises:
            BinaryOverrideNotFound: If the override path does not exist.
            UnsupportedPlatformError: If nothing is pinned for the platform.
            ChecksumMismatchError: If the downloaded archive is not the
                                   pinned artifact.
            BinaryNotFoundError: If the archive holds no executable.
        """

        if override:
            resolved = Path(override).expanduser().resolve()
            if not resolved.exists():
                raise BinaryOverrideNotFound(
                    f"Binary override not found at {resolved}"
                )
            self.logger.info(f"Using binary override {resolved}")
            return resolved

        descriptor = resolve_descriptor(platform, arch)
        if descriptor is None:
            raise UnsupportedPlatformError(
                f"Unsupported platform/arch: {platform}-{arch}. "
                f"Please update the binary catalog."
            )

        target = self.cache_path(platform, arch)
        if target.exists():
            self.logger.debug(f"Using cached binary {target}")
            return target

        target.parent.mkdir(parents=True, exist_ok=True)
        tmp_dir = Path(tempfile.mkdtemp(prefix="mysqldump-download-"))
        try:
            await self._materialize(descriptor, tmp_dir, target, on_progress)
        finally:
            shutil.rmtree(tmp_dir, ignore_errors=True)

        self.logger.info(
            f"Installed mysqldump {descriptor.version} at {target}"
        )
        return target

    async def _materialize(
        self,
        descriptor: BinaryDescriptor,
        tmp_dir: Path,
        target: Path,
        on_progress: Optional[DownloadObserver],
    ):
        """Executes the sequential download, verify, extract, install steps."""

        archive_path = tmp_dir / (
            f"mysqldump-{descriptor.platform}-{descriptor.arch}."
            f"{descriptor.archive_format.replace('.', '')}"
        )

        # Step 1: Download
        self.logger.info(f"Downloading {descriptor.url}...")
        await self.fetcher.fetch(descriptor.url, archive_path, on_progress)

        # Step 2: Verify, before anything is unpacked
        await self.hasher.verify(archive_path, descriptor.sha256)

        # Step 3: Extract and locate
        extract_dir = tmp_dir / "extract"
        extract_dir.mkdir()
        await self.extractor.extract(
            archive_path, descriptor.archive_format, extract_dir
        )
        found = self.extractor.locate(
            extract_dir, EXECUTABLE_NAMES, descriptor.inner_path_hints
        )
        if found is None:
            raise BinaryNotFoundError(
                "mysqldump binary not found in downloaded archive. "
                "Check the binary catalog or artifact layout."
            )

        # Step 4: Install under a sibling name, then swap into place
        await asyncio.to_thread(
            self._install, found, target, descriptor.platform != "win32"
        )

    @staticmethod
    def _install(source: Path, target: Path, make_executable: bool):
        staging = target.with_name(target.name + ".part")
        shutil.move(str(source), str(staging))
        if make_executable:
            staging.chmod(0o755)
        os.replace(staging, target)
