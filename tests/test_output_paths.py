"""Tests for default dump destinations."""

import re
from datetime import datetime, timezone
from pathlib import Path

from db_dumper.application.output_paths import (
    default_dump_root,
    iso_timestamp,
    plan_dump_path,
    timestamp_string,
)

MOMENT = datetime(2024, 5, 6, 7, 8, 9, 123456, tzinfo=timezone.utc)


def test_timestamps_are_iso_and_filesystem_safe():
    assert iso_timestamp(MOMENT) == "2024-05-06T07:08:09.123Z"
    assert timestamp_string(MOMENT) == "2024-05-06T07-08-09-123Z"


def test_plan_uses_environment_and_name(tmp_path):
    path = plan_dump_path("local", "sample-db", root=tmp_path, now=MOMENT)
    assert path == tmp_path / "local" / "sample-db" / "sample-db-2024-05-06T07-08-09-123Z.sql"


def test_plan_groups_by_alias_and_adds_gzip_suffix(tmp_path):
    path = plan_dump_path(
        "prod", "orders", alias="shop", gzip=True, root=tmp_path, now=MOMENT
    )
    assert path.parent == tmp_path / "prod" / "shop"
    assert path.name == "orders-2024-05-06T07-08-09-123Z.sql.gz"


def test_plan_defaults_to_temp_root_and_has_no_side_effects():
    path = plan_dump_path("", "sample-db")
    assert path.parents[2] == default_dump_root()
    assert path.parent.parent.name == "default"
    assert re.fullmatch(
        r"sample-db-\d{4}-\d{2}-\d{2}T\d{2}-\d{2}-\d{2}-\d{3}Z\.sql", path.name
    )
    assert not path.exists()


def test_plan_accepts_string_root():
    path = plan_dump_path("local", "db", root="/srv/dumps", now=MOMENT)
    assert path.parts[:3] == Path("/srv/dumps").parts
