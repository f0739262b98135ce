"""The fixed catalog of mysqldump options offered for selection."""

import dataclasses
from typing import List, Optional, Sequence


@dataclasses.dataclass(frozen=True)
class FlagOption:
    """A single selectable exporter command-line option."""

    id: str
    flag: str
    label: str
    description: str
    caution: Optional[str] = None
    default_selected: bool = False


_CATALOG = (
    FlagOption(
        id="single-transaction",
        flag="--single-transaction",
        label="Single transaction",
        description="Consistent snapshot without locking tables (InnoDB)",
        default_selected=True,
    ),
    FlagOption(
        id="quick",
        flag="--quick",
        label="Stream rows",
        description="Retrieve rows directly from server to stdout",
        default_selected=True,
    ),
    FlagOption(
        id="routines",
        flag="--routines",
        label="Include routines",
        description="Dump stored procedures and functions",
    ),
    FlagOption(
        id="triggers",
        flag="--triggers",
        label="Include triggers",
        description="Dump triggers",
    ),
    FlagOption(
        id="events",
        flag="--events",
        label="Include events",
        description="Dump events",
    ),
    FlagOption(
        id="set-gtid-off",
        flag="--set-gtid-purged=OFF",
        label="GTID purged OFF",
        description="Avoid GTID statements for portability",
        default_selected=True,
    ),
    FlagOption(
        id="hex-blob",
        flag="--hex-blob",
        label="Hex encode blobs",
        description="Dump binary data as hex",
    ),
    FlagOption(
        id="column-statistics",
        flag="--column-statistics=0",
        label="Disable column statistics",
        description="Avoid histogram queries (compatibility)",
        default_selected=True,
    ),
    FlagOption(
        id="master-data",
        flag="--master-data=2",
        label="Master data (binlog pos)",
        description="Include CHANGE MASTER log position (may lock briefly)",
        caution=(
            "Enables binlog position; ensure server permissions "
            "and implications."
        ),
    ),
    FlagOption(
        id="skip-lock-tables",
        flag="--skip-lock-tables",
        label="Skip lock tables",
        description="Do not lock tables (not consistent for MyISAM)",
    ),
    FlagOption(
        id="add-drop-table",
        flag="--add-drop-table",
        label="Add DROP TABLE",
        description="Include DROP TABLE statements",
        default_selected=True,
    ),
    FlagOption(
        id="no-create-db",
        flag="--no-create-db",
        label="No CREATE DATABASE",
        description="Omit CREATE DATABASE from dump",
    ),
    FlagOption(
        id="charset-utf8mb4",
        flag="--default-character-set=utf8mb4",
        label="UTF8MB4",
        description="Set default character set to utf8mb4",
        default_selected=True,
    ),
)


def get_flag_catalog() -> List[FlagOption]:
    """All selectable options, in catalog order."""
    return list(_CATALOG)


def default_flag_ids() -> List[str]:
    """Ids of the options preselected for a new target."""
    return [option.id for option in _CATALOG if option.default_selected]


def resolve_flags(
    selected_ids: Sequence[str], custom_flags: Optional[Sequence[str]] = None
) -> List[str]:
    """
    Turns selected catalog ids into command-line flags.

    Catalog flags come first, in catalog order regardless of selection
    order, followed by the custom flags verbatim. Unknown ids are ignored.
    """
    wanted = set(selected_ids)
    picked = [option.flag for option in _CATALOG if option.id in wanted]
    return picked + list(custom_flags or [])
