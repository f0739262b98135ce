"""
Subprocess adapters driving mysqldump: a connection probe and the full
dump executor.

The password is always passed through the MYSQL_PWD environment variable,
never as a command-line argument.
"""

import asyncio
import contextlib
import dataclasses
import logging
import os
import time
import zlib
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from ..application.domain import (
    ConnectionProbe,
    DumpExecutor,
    DumpObserver,
    DumpRequest,
    DumpResult,
    ProbeResult,
)
from ..application.exceptions import DumpError, ProcessExitError, SpawnError

from .processes import spawn

PASSWORD_ENV_VAR = "MYSQL_PWD"

# Connects and checks database access without exporting any table.
_PROBE_FLAGS = (
    "--no-data",
    "--no-create-info",
    "--no-create-db",
    "--skip-triggers",
)


def connection_args(target) -> List[str]:
    """The leading host/user/port arguments shared by every invocation."""
    args = [f"--host={target.host}", f"--user={target.username}"]
    if target.port:
        args.append(f"--port={target.port}")
    return args


def dump_args(request: DumpRequest) -> List[str]:
    """Builds the full argument vector for a dump, in invocation order."""
    db_name = request.target.name
    args = connection_args(request.target)
    args.extend(request.flags)
    args.extend(
        f"--ignore-table={db_name}.{table}" for table in request.exclude_tables
    )
    args.append(db_name)
    return args


def _exporter_env(password: str) -> Dict[str, str]:
    return {**os.environ, PASSWORD_ENV_VAR: password}


class MysqldumpProbe(ConnectionProbe):
    """Validates reachability and credentials with a no-data export."""

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__name__)

    async def probe(
        self, binary_path: Path, target, password: str
    ) -> ProbeResult:
        """
        Run mysqldump in structure-only mode against the target database.

        Exporter failures are reported through the result, never raised.
        """
        args = connection_args(target) + list(_PROBE_FLAGS) + [target.name]
        self.logger.info(
            f"Testing connection to {target.username}@{target.host}/{target.name}"
        )

        try:
            process = await spawn(
                binary_path, *args,
                env=_exporter_env(password),
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
        except SpawnError as e:
            return ProbeResult(ok=False, message=str(e))

        _, stderr = await process.communicate()
        if process.returncode == 0:
            return ProbeResult(ok=True)

        message = stderr.decode(errors="replace").strip()
        return ProbeResult(
            ok=False,
            message=message or f"mysqldump exited with code {process.returncode}",
        )


@dataclasses.dataclass
class _ByteCounter:
    written: int = 0


class MysqldumpExecutor(DumpExecutor):
    """Streams a full export to disk, optionally gzip-compressed."""

    def __init__(
        self,
        chunk_size: int = 65536,
        progress_interval: float = 1.5,
        compression_level: int = 6,
    ):
        """Initializes the executor."""
        self.logger = logging.getLogger(self.__class__.__name__)
        self.chunk_size = chunk_size
        self.progress_interval = progress_interval
        self.compression_level = compression_level

    async def _report_progress(
        self, counter: _ByteCounter, on_progress: Optional[DumpObserver]
    ):
        """Periodically publish the number of bytes written so far."""
        while True:
            await asyncio.sleep(self.progress_interval)
            self.logger.debug(
                f"Dumping... {counter.written // 1024} KB written"
            )
            if on_progress:
                on_progress(counter.written)

    async def _copy_output(
        self,
        stdout: asyncio.StreamReader,
        destination: Path,
        gzip: bool,
        counter: _ByteCounter,
    ):
        """Copy the exporter output to disk, counting bytes on disk."""
        compressor = (
            zlib.compressobj(self.compression_level, zlib.DEFLATED, 31)
            if gzip else None
        )
        with open(destination, "wb") as out:
            while chunk := await stdout.read(self.chunk_size):
                if compressor:
                    chunk = compressor.compress(chunk)
                if chunk:
                    await asyncio.to_thread(out.write, chunk)
                    counter.written += len(chunk)
            if compressor:
                tail = compressor.flush()
                await asyncio.to_thread(out.write, tail)
                counter.written += len(tail)

    async def _drive(
        self,
        process: asyncio.subprocess.Process,
        destination: Path,
        gzip: bool,
        counter: _ByteCounter,
    ) -> Tuple[int, str]:
        """Pump stdout to disk while stderr is drained alongside."""
        stderr_task = asyncio.create_task(process.stderr.read())
        try:
            await self._copy_output(process.stdout, destination, gzip, counter)
        except BaseException:
            if process.returncode is None:
                with contextlib.suppress(ProcessLookupError):
                    process.kill()
            await process.wait()
            stderr_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await stderr_task
            raise

        code = await process.wait()
        stderr = await stderr_task
        return code, stderr.decode(errors="replace")

    def _discard(self, destination: Path):
        """Best-effort removal of a partial dump file."""
        try:
            destination.unlink(missing_ok=True)
        except OSError as e:
            self.logger.debug(f"Could not remove partial dump {destination}: {e}")

    async def run(
        self,
        request: DumpRequest,
        on_progress: Optional[DumpObserver] = None,
    ) -> DumpResult:
        """
        Run mysqldump and stream its output to the request's destination.

        Args:
            request: The fully resolved dump request.
            on_progress: Called periodically with cumulative bytes written.

        Returns:
            A DumpResult describing the finished file.

        Raises:
            DumpError: If the exporter cannot start, exits non-zero, or the
                       output cannot be written. The partial file is removed.
        """

        destination = Path(request.destination)
        destination.parent.mkdir(parents=True, exist_ok=True)
        args = dump_args(request)

        self.logger.info(
            f"Dumping {request.target.name} from {request.target.host} "
            f"to {destination}"
        )
        started_at = time.monotonic()

        try:
            process = await spawn(
                request.binary_path, *args,
                env=_exporter_env(request.password),
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except SpawnError as e:
            raise DumpError(str(e)) from e

        counter = _ByteCounter()
        reporter = asyncio.create_task(
            self._report_progress(counter, on_progress)
        )
        try:
            code, stderr = await self._drive(
                process, destination, request.gzip, counter
            )
        except (OSError, zlib.error) as e:
            self._discard(destination)
            raise DumpError(f"Failed writing dump output: {e}") from e
        except BaseException:
            self._discard(destination)
            raise
        finally:
            reporter.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await reporter

        if code != 0:
            self._discard(destination)
            raise DumpError(
                stderr.strip() or f"mysqldump exited with code {code}",
                stderr=stderr,
            ) from ProcessExitError("mysqldump", code, stderr)

        size = destination.stat().st_size
        elapsed = time.monotonic() - started_at
        self.logger.info(
            f"Dump completed: {destination} ({size} bytes in {elapsed:.1f}s)"
        )
        return DumpResult(
            destination=destination,
            size_bytes=size,
            elapsed_seconds=elapsed,
            gzip=request.gzip,
        )
