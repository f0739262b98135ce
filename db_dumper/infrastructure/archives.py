"""Infrastructure adapter for unpacking downloaded archives."""

import asyncio
import logging
import os
import zipfile
from pathlib import Path
from typing import Iterable, Optional

from ..application.domain import Extractor
from ..application.exceptions import (
    ExtractionError,
    ProcessExitError,
    SpawnError,
)

from .processes import spawn

_TAR_MODES = {
    "tar.gz": "-xzf",
    "tar.xz": "-xJf",
}


class ArchiveExtractor(Extractor):
    """
    Unpacks zip archives natively and compressed tarballs through the
    system `tar`.
    """

    def __init__(self, tar_program: str = "tar"):
        """Initializes the extractor."""
        self.logger = logging.getLogger(self.__class__.__name__)
        self.tar_program = tar_program

    @staticmethod
    def _unzip(archive: Path, into: Path):
        with zipfile.ZipFile(archive) as zf:
            zf.extractall(into)

    async def _untar(self, archive: Path, mode: str, into: Path):
        try:
            process = await spawn(
                self.tar_program, mode, str(archive), "-C", str(into),
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
        except SpawnError as e:
            raise ExtractionError(str(e)) from e

        _, stderr = await process.communicate()
        if process.returncode != 0:
            failure = ProcessExitError(
                self.tar_program,
                process.returncode,
                stderr.decode(errors="replace"),
            )
            raise ExtractionError(
                f"Failed to extract {archive.name}: {failure}"
            ) from failure

    async def extract(self, archive: Path, archive_format: str, into: Path):
        """
        Unpack `archive` into the `into` directory.

        Args:
            archive: The downloaded archive.
            archive_format: One of 'zip', 'tar.gz' or 'tar.xz'.
            into: Target directory, created if missing.

        Raises:
            ExtractionError: If the format is unknown, the archive is
                             corrupt, or `tar` exits non-zero.
        """

        archive, into = Path(archive), Path(into)
        into.mkdir(parents=True, exist_ok=True)
        self.logger.info(f"Extracting {archive.name}...")

        if archive_format == "zip":
            try:
                await asyncio.to_thread(self._unzip, archive, into)
            except zipfile.BadZipFile as e:
                raise ExtractionError(
                    f"Failed to extract {archive.name}: {e}"
                ) from e
        elif archive_format in _TAR_MODES:
            await self._untar(archive, _TAR_MODES[archive_format], into)
        else:
            raise ExtractionError(
                f"Unsupported archive format: {archive_format}"
            )

        self.logger.info(f"Finished extracting {archive.name}")

    def locate(
        self, root: Path, names: Iterable[str], hints: Iterable[str] = ()
    ) -> Optional[Path]:
        """
        Find the executable inside an unpacked archive.

        Known layouts in `hints` are checked first; otherwise the tree is
        searched depth-first, in name order, for a file named one of `names`.
        """
        for hint in hints:
            candidate = Path(root) / hint
            if candidate.is_file():
                return candidate
        return self._search(Path(root), set(names))

    def _search(self, root: Path, wanted) -> Optional[Path]:
        entries = sorted(os.scandir(root), key=lambda entry: entry.name)
        for entry in entries:
            if entry.is_dir(follow_symlinks=False):
                found = self._search(Path(entry.path), wanted)
                if found:
                    return found
            elif entry.name in wanted:
                return Path(entry.path)
        return None
