"""TQDM-backed observers for downloads and dumps."""

import contextlib
from typing import Generator

from tqdm import tqdm

from ..application.domain import DownloadObserver, DownloadProgress, DumpObserver


@contextlib.contextmanager
def download_bar(desc: str) -> Generator[DownloadObserver, None, None]:
    """Yields a download observer that drives a byte progress bar."""
    with tqdm(unit="B", unit_scale=True, desc=desc) as progress_bar:

        def observe(progress: DownloadProgress):
            if progress.total and progress_bar.total != progress.total:
                progress_bar.total = progress.total
            progress_bar.update(progress.received - progress_bar.n)

        yield observe


@contextlib.contextmanager
def dump_bar(desc: str) -> Generator[DumpObserver, None, None]:
    """Yields a dump observer; the total size of a dump is never known."""
    with tqdm(unit="B", unit_scale=True, desc=desc) as progress_bar:

        def observe(written: int):
            progress_bar.update(written - progress_bar.n)

        yield observe
