"""
Entry point for the db_dumper component.
"""

import argparse
import asyncio
import logging
import sys

from tqdm.contrib.logging import logging_redirect_tqdm

from .application.exceptions import DumperError
from .application.flags import default_flag_ids, get_flag_catalog
from .infrastructure.config_models import new_target
from .infrastructure.config_store import find_by_id_or_alias
from .infrastructure.containers import Container
from .infrastructure.progress import download_bar, dump_bar

logger = logging.getLogger(__name__)


def setup_logging(level: str):
    """Applies basic logging configuration."""
    logging.basicConfig(level=level)


def _require_target(config, key: str):
    target = find_by_id_or_alias(config, key)
    if target is None:
        raise DumperError(f"No configured database with id or alias '{key}'")
    return target


async def _resolve_binary(service):
    with download_bar("mysqldump") as observe:
        return await service.resolve_binary(on_progress=observe)


async def _list_targets(container: Container, args: argparse.Namespace):
    config = container.config_store().load()
    if not config.databases:
        logger.info("No databases configured.")
        return
    for target in config.databases:
        print(
            f"{target.id}\t{target.alias or '-'}\t{target.environment}\t"
            f"{target.username}@{target.host}/{target.name}"
        )


async def _add_target(container: Container, args: argparse.Namespace):
    service = container.dumper_service()
    fields = dict(
        environment=args.environment,
        name=args.name,
        alias=args.alias,
        host=args.host,
        port=args.port,
        username=args.username,
        selected_flags=args.flags or default_flag_ids(),
        custom_flags=args.custom_flags,
        gzip_default=args.gzip,
    )
    if args.id:
        fields["id"] = args.id

    if args.test:
        await _resolve_binary(service)
    target = await service.save_target(
        new_target(**fields), password=args.password, test=args.test
    )
    print(target.id)


async def _remove_target(container: Container, args: argparse.Namespace):
    removed = container.dumper_service().remove_target(args.target)
    if removed is None:
        raise DumperError(
            f"No configured database with id or alias '{args.target}'"
        )


async def _show_binary(container: Container, args: argparse.Namespace):
    service = container.dumper_service()
    print(await _resolve_binary(service))


async def _test_connection(container: Container, args: argparse.Namespace):
    service = container.dumper_service()
    target = _require_target(container.config_store().load(), args.target)
    await _resolve_binary(service)
    result = await service.test_connection(target)
    if not result.ok:
        raise DumperError(f"Connection test failed: {result.message}")
    logger.info(f"Connection to {target.alias_or_name} succeeded.")


async def _run_dump(container: Container, args: argparse.Namespace):
    service = container.dumper_service()
    config = container.config_store().load()
    target = _require_target(config, args.target)

    binary_path = await _resolve_binary(service)
    request = await service.build_request(
        target,
        destination=args.output,
        gzip=args.gzip,
        exclude_tables=args.exclude,
        dump_root=config.defaults.dump_root_override if config.defaults else None,
        binary_path=binary_path,
    )
    with dump_bar(target.alias_or_name) as observe:
        result = await service.dump(
            request, probe_first=not args.skip_test, on_progress=observe
        )
    print(result.destination)


_COMMANDS = {
    "list": _list_targets,
    "add": _add_target,
    "remove": _remove_target,
    "binary": _show_binary,
    "test": _test_connection,
    "dump": _run_dump,
}


async def run_application(args: argparse.Namespace):
    """Wires and runs the application using the DI container."""

    container = Container()
    container.cli_args.from_dict(vars(args))
    setup_logging(level=container.config().get("logging.level", "INFO"))

    try:
        with logging_redirect_tqdm():
            await _COMMANDS[args.command](container, args)
    except DumperError as e:
        logger.error(f"An application error occurred: {e}")
        sys.exit(1)
    finally:
        await container.http_client().aclose()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="MySQL dump runner")
    parser.add_argument("--config", dest="config_path", help="Custom config path")
    parser.add_argument(
        "--binary-path", help="Use this mysqldump instead of the pinned one"
    )

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("list", help="List configured databases")
    commands.add_parser("binary", help="Download (if needed) and print mysqldump")

    add = commands.add_parser("add", help="Add or update a database")
    add.add_argument("name", help="Database name")
    add.add_argument("--host", required=True)
    add.add_argument("--user", dest="username", required=True)
    add.add_argument("--environment", required=True, help="e.g. local, prod")
    add.add_argument("--alias")
    add.add_argument("--port", type=int)
    add.add_argument("--password", help="Stored in the system keyring")
    add.add_argument("--id", help="Update the database with this id")
    add.add_argument(
        "--flag",
        dest="flags",
        action="append",
        choices=[option.id for option in get_flag_catalog()],
        help="Catalog option to enable (repeatable; defaults to the preset)",
    )
    add.add_argument(
        "--custom-flag",
        dest="custom_flags",
        action="append",
        help="Extra mysqldump argument, e.g. --custom-flag=--hex-blob",
    )
    add.add_argument(
        "--gzip", action="store_true", help="Compress dumps by default"
    )
    add.add_argument(
        "--test", action="store_true", help="Test the connection after saving"
    )

    remove = commands.add_parser("remove", help="Remove a database")
    remove.add_argument("target", help="Database id or alias")

    test = commands.add_parser("test", help="Test a database connection")
    test.add_argument("target", help="Database id or alias")

    dump = commands.add_parser("dump", help="Dump a configured database")
    dump.add_argument("target", help="Database id or alias")
    dump.add_argument("--output", help="Destination file")
    dump.add_argument(
        "--gzip",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Compress the dump (defaults to the database's setting)",
    )
    dump.add_argument(
        "--exclude",
        nargs="*",
        default=[],
        help="Tables to leave out of the dump",
    )
    dump.add_argument(
        "--skip-test",
        action="store_true",
        help="Do not test the connection before dumping",
    )
    return parser


def main():
    asyncio.run(run_application(build_parser().parse_args()))


if __name__ == "__main__":
    main()
