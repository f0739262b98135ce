"""Derivation of deterministic default destinations for dump files."""

import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

APP_NAME = "database-cli-dumper"


def default_dump_root() -> Path:
    return Path(tempfile.gettempdir()) / APP_NAME


def iso_timestamp(now: Optional[datetime] = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a 'Z' suffix."""
    now = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


def timestamp_string(now: Optional[datetime] = None) -> str:
    """A filesystem-safe timestamp: ':' and '.' replaced by '-'."""
    return iso_timestamp(now).replace(":", "-").replace(".", "-")


def plan_dump_path(
    environment: str,
    name: str,
    alias: Optional[str] = None,
    gzip: bool = False,
    root: Optional[Union[str, Path]] = None,
    now: Optional[datetime] = None,
) -> Path:
    """
    Computes `<root>/<environment>/<alias-or-name>/<name>-<ts>.sql[.gz]`.

    This is a pure function; nothing is created on disk.
    """
    safe_env = environment or "default"
    safe_name = name or "database"
    folder = alias or safe_name
    base = Path(root) if root else default_dump_root()
    suffix = ".sql.gz" if gzip else ".sql"
    return base / safe_env / folder / f"{safe_name}-{timestamp_string(now)}{suffix}"
