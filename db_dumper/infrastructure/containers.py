"""
Dependency Injection container for the db_dumper component.

This container uses the `dependency-injector` library to wire together all
the components of the application, such as services and infrastructure adapters,
based on the application's settings and the command-line overrides.
"""

from dependency_injector import containers, providers
import httpx

from ..application.domain import *
from ..application.resolver import BinaryResolver
from ..application.service import DumperService
from ..settings import settings

from .archives import ArchiveExtractor
from .config_store import JsonConfigStore
from .downloader import HttpFetcher
from .exporter import MysqldumpExecutor, MysqldumpProbe
from .hashing import Sha256Hasher
from .paths import binary_cache_root, config_path, current_platform, temp_dump_root
from .secrets import (
    EnvironmentSecretStore,
    KeyringSecretStore,
    PlaintextSecretStore,
    SecretRouter,
)


class Container(containers.DeclarativeContainer):
    """DI container for wiring the application components."""

    cli_args = providers.Configuration()

    config = providers.Object(settings)

    http_client = providers.Singleton(httpx.AsyncClient)

    config_store = providers.Factory(
        JsonConfigStore,
        path=providers.Callable(config_path, cli_args.config_path),
    )

    secrets: providers.Singleton[SecretStore] = providers.Singleton(
        SecretRouter,
        providers.Singleton(KeyringSecretStore),
        providers.Singleton(EnvironmentSecretStore),
        fallback=providers.Singleton(PlaintextSecretStore),
    )

    fetcher: providers.Factory[Fetcher] = providers.Factory(
        HttpFetcher,
        client=http_client,
        timeout=config().get("dumper.http_timeout", None),
        chunk_size=config().get("dumper.downloader.chunk_size", 65536),
    )

    hasher: providers.Factory[Hasher] = providers.Factory(
        Sha256Hasher,
        chunk_size=config().get("dumper.hasher.chunk_size", 65536),
    )

    extractor: providers.Factory[Extractor] = providers.Factory(
        ArchiveExtractor,
    )

    resolver = providers.Factory(
        BinaryResolver,
        fetcher=fetcher,
        hasher=hasher,
        extractor=extractor,
        cache_root=providers.Callable(
            binary_cache_root, config().get("dumper.cache_root", "") or None
        ),
    )

    probe: providers.Factory[ConnectionProbe] = providers.Factory(
        MysqldumpProbe,
    )

    executor: providers.Factory[DumpExecutor] = providers.Factory(
        MysqldumpExecutor,
        chunk_size=config().get("dumper.executor.chunk_size", 65536),
        progress_interval=config().get("dumper.executor.progress_interval", 1.5),
        compression_level=config().get("dumper.executor.compression_level", 6),
    )

    dumper_service = providers.Factory(
        DumperService,
        resolver=resolver,
        probe=probe,
        executor=executor,
        secrets=secrets,
        store=config_store,
        platform_info=providers.Object(current_platform),
        binary_override=cli_args.binary_path,
        dump_root=providers.Callable(
            temp_dump_root,
            config().get("dumper.dump_root", "") or None,
        ),
    )
