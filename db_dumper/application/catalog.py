"""
The pinned catalog of mysqldump artifacts, one per platform/architecture.

All entries share a single upstream version. Digests are the official
SHA-256 checksums of the Oracle MySQL archives.
"""

from typing import Optional, Tuple

from .domain import BinaryDescriptor

PINNED_MYSQL_VERSION = "8.0.36"

EXPORTER_NAME = "mysqldump"
EXECUTABLE_NAMES = ("mysqldump", "mysqldump.exe")

_ARCHIVE_BASE_URL = "https://cdn.mysql.com/archives/mysql-8.0"

BINARY_CATALOG: Tuple[BinaryDescriptor, ...] = (
    BinaryDescriptor(
        version=PINNED_MYSQL_VERSION,
        platform="linux",
        arch="x64",
        url=f"{_ARCHIVE_BASE_URL}/mysql-8.0.36-linux-glibc2.28-x86_64.tar.xz",
        sha256="ffd80e375834dd07e25cc3c7f03ae1950668ec606655c9cb2eafdfb7e37d6026",
        archive_format="tar.xz",
        inner_path_hints=(
            "mysql-8.0.36-linux-glibc2.28-x86_64/bin/mysqldump",
            "bin/mysqldump",
        ),
    ),
    BinaryDescriptor(
        version=PINNED_MYSQL_VERSION,
        platform="linux",
        arch="arm64",
        url=f"{_ARCHIVE_BASE_URL}/mysql-8.0.36-linux-glibc2.28-aarch64.tar.xz",
        sha256="c05cc22cd0172e348739e2f269107702be24f500e5d820009d19b98ba596da7b",
        archive_format="tar.xz",
        inner_path_hints=(
            "mysql-8.0.36-linux-glibc2.28-aarch64/bin/mysqldump",
            "bin/mysqldump",
        ),
    ),
    BinaryDescriptor(
        version=PINNED_MYSQL_VERSION,
        platform="darwin",
        arch="arm64",
        url=f"{_ARCHIVE_BASE_URL}/mysql-8.0.36-macos14-arm64.tar.gz",
        sha256="c419d50bcbde8ad5e2cb895a2784cca6f1cc30fb26492dbd230abc7bb7bd2377",
        archive_format="tar.gz",
        inner_path_hints=(
            "mysql-8.0.36-macos14-arm64/bin/mysqldump",
            "bin/mysqldump",
        ),
    ),
    BinaryDescriptor(
        version=PINNED_MYSQL_VERSION,
        platform="darwin",
        arch="x64",
        url=f"{_ARCHIVE_BASE_URL}/mysql-8.0.36-macos14-x86_64.tar.gz",
        sha256="99ffdfc3178a4542e4b8ed12582525fb06020c79b8731f6672e55ae5b4357347",
        archive_format="tar.gz",
        inner_path_hints=(
            "mysql-8.0.36-macos14-x86_64/bin/mysqldump",
            "bin/mysqldump",
        ),
    ),
    BinaryDescriptor(
        version=PINNED_MYSQL_VERSION,
        platform="win32",
        arch="x64",
        url=f"{_ARCHIVE_BASE_URL}/mysql-8.0.36-winx64.zip",
        sha256="a1bc2ad567eef672be20b591ad25b14f221e60bde3ae3eb235128d91e4166557",
        archive_format="zip",
        inner_path_hints=(
            "mysql-8.0.36-winx64/bin/mysqldump.exe",
            "bin/mysqldump.exe",
        ),
    ),
)


def resolve_descriptor(platform: str, arch: str) -> Optional[BinaryDescriptor]:
    """Returns the pinned descriptor for a platform/architecture, if any."""
    for descriptor in BINARY_CATALOG:
        if descriptor.platform == platform and descriptor.arch == arch:
            return descriptor
    return None


def executable_name(platform: str) -> str:
    """Name of the exporter executable on the given platform."""
    return f"{EXPORTER_NAME}.exe" if platform == "win32" else EXPORTER_NAME
