"""
The core application service.

DumperService composes the binary resolver, the connection probe, the dump
executor, the secret store and the config store into the operations a front
end drives. Each operation is an independent call; none of them keeps state
between calls.
"""

import logging
from pathlib import Path
from typing import Any, Callable, Iterable, Optional, Union

from .domain import (
    ConfigStore,
    ConnectionProbe,
    DownloadObserver,
    DumpExecutor,
    DumpObserver,
    DumpRequest,
    DumpResult,
    ProbeResult,
    SecretStore,
)
from .exceptions import ConnectionTestError, CredentialMissingError
from .flags import resolve_flags
from .output_paths import plan_dump_path
from .resolver import BinaryResolver

logger = logging.getLogger(__name__)


class DumperService:
    """Orchestrates connection tests and dumps for configured targets."""

    def __init__(
        self,
        resolver: BinaryResolver,
        probe: ConnectionProbe,
        executor: DumpExecutor,
        secrets: SecretStore,
        store: ConfigStore,
        platform_info: Callable[[], Any],
        binary_override: Optional[Union[str, Path]] = None,
        dump_root: Optional[Union[str, Path]] = None,
    ):
        """Initializes the service with its collaborators (ports)."""
        self.resolver = resolver
        self.probe = probe
        self.executor = executor
        self.secrets = secrets
        self.store = store
        self.platform_info = platform_info
        self.binary_override = binary_override
        self.dump_root = dump_root

    async def resolve_binary(
        self,
        override: Optional[Union[str, Path]] = None,
        on_progress: Optional[DownloadObserver] = None,
    ) -> Path:
        """Resolve the exporter for the running platform."""
        info = self.platform_info()
        return await self.resolver.ensure_executable(
            info.platform,
            info.arch,
            override or self.binary_override,
            on_progress,
        )

    def _password_for(self, target, password: Optional[str]) -> str:
        resolved = password or self.secrets.resolve(target.password_ref)
        if not resolved:
            raise CredentialMissingError(
                f"Password required to connect to {target.name}."
            )
        return resolved

    async def build_request(
        self,
        target,
        destination: Optional[Union[str, Path]] = None,
        gzip: Optional[bool] = None,
        exclude_tables: Iterable[str] = (),
        password: Optional[str] = None,
        dump_root: Optional[Union[str, Path]] = None,
        binary_path: Optional[Path] = None,
    ) -> DumpRequest:
        """
        Resolve everything a dump needs into a DumpRequest.

        Missing values fall back to the target's defaults: its stored
        password reference, its gzip preference and a planned destination.

        Raises:
            CredentialMissingError: If no password can be found.
        """

        use_gzip = target.gzip_default if gzip is None else gzip
        if destination is None:
            destination = plan_dump_path(
                target.environment,
                target.name,
                alias=target.alias,
                gzip=use_gzip,
                root=dump_root or self.dump_root,
            )

        return DumpRequest(
            target=target,
            password=self._password_for(target, password),
            destination=Path(destination),
            gzip=use_gzip,
            exclude_tables=tuple(t for t in exclude_tables if t),
            flags=tuple(resolve_flags(target.selected_flags, target.custom_flags)),
            binary_path=binary_path or await self.resolve_binary(),
        )

    async def test_connection(
        self, target, password: Optional[str] = None
    ) -> ProbeResult:
        """Check that the target accepts the stored credentials."""
        binary_path = await self.resolve_binary()
        return await self.probe.probe(
            binary_path, target, self._password_for(target, password)
        )

    async def dump(
        self,
        request: DumpRequest,
        probe_first: bool = True,
        on_progress: Optional[DumpObserver] = None,
    ) -> DumpResult:
        """
        Run a dump, optionally testing the connection first.

        Raises:
            ConnectionTestError: If the pre-dump connection test fails.
            DumpError: If the export itself fails.
        """

        if probe_first:
            result = await self.probe.probe(
                request.binary_path, request.target, request.password
            )
            if not result.ok:
                raise ConnectionTestError(
                    result.message or "Connection test failed"
                )

        logger.info(f"Running dump of {request.target.name}...")
        return await self.executor.run(request, on_progress)

    async def save_target(
        self, target, password: Optional[str] = None, test: bool = False
    ):
        """
        Persist a target definition, storing its password first.

        Saving over an existing id keeps its creation time and, when no new
        password is given, its stored password reference. A new password
        reuses the previous reference where the secret store allows it.

        Args:
            target: The definition to insert or replace.
            password: A new password to store, if any.
            test: Check the connection after saving.

        Returns:
            The stored target.

        Raises:
            ConnectionTestError: If `test` is set and the check fails. The
                                 target remains saved.
        """

        existing = self.store.find(target.id)
        if existing is not None and existing.id != target.id:
            existing = None

        updates = {}
        previous_ref = target.password_ref
        if existing is not None:
            updates["created_at"] = existing.created_at
            previous_ref = previous_ref or existing.password_ref
        if password:
            updates["password_ref"] = self.secrets.save(
                password, previous_ref or None
            )
        elif previous_ref:
            updates["password_ref"] = previous_ref

        saved = self.store.put(target.model_copy(update=updates))
        logger.info(f"Saved database {saved.alias_or_name} ({saved.id})")

        if test:
            result = await self.test_connection(saved, password)
            if not result.ok:
                raise ConnectionTestError(
                    result.message or "Connection test failed"
                )
        return saved

    def remove_target(self, key: str):
        """
        Delete the target with id or alias `key` and forget its password.
        Returns the removed target, or None when nothing matched.
        """
        target = self.store.find(key)
        if target is None:
            return None
        self.store.remove(target.id)
        if target.password_ref:
            self.secrets.delete(target.password_ref)
        logger.info(f"Removed database {target.alias_or_name} ({target.id})")
        return target
