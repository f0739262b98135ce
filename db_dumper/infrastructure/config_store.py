"""
JSON persistence for target definitions.

Every save keeps a timestamped copy of the previous file and replaces the
real file atomically, so a crash never leaves a half-written config behind.
"""

import contextlib
import json
import logging
import os
import shutil
from pathlib import Path
from typing import Generator, Optional, Union

from pydantic import ValidationError

from ..application.domain import ConfigStore
from ..application.exceptions import ConfigParseError
from ..application.output_paths import iso_timestamp, timestamp_string

from .config_models import SCHEMA_VERSION, ConfigurationFile, TargetDefinition


class JsonConfigStore(ConfigStore):
    """Loads and saves a ConfigurationFile at a fixed path."""

    def __init__(
        self,
        path: Union[str, Path],
        backup_dir: Optional[Union[str, Path]] = None,
    ):
        """Initializes the store."""
        self.logger = logging.getLogger(self.__class__.__name__)
        self.path = Path(path)
        self.backup_dir = (
            Path(backup_dir) if backup_dir else self.path.parent / "backups"
        )

    def load(self) -> ConfigurationFile:
        """
        Read the configuration, or an empty one when no file exists yet.

        Raises:
            ConfigParseError: If the file is not valid JSON or does not
                              match the expected structure.
        """

        if not self.path.exists():
            self.logger.debug(f"No config at {self.path}, starting empty.")
            return ConfigurationFile()

        try:
            config = ConfigurationFile.model_validate_json(
                self.path.read_text(encoding="utf-8")
            )
        except (ValidationError, UnicodeDecodeError) as e:
            raise ConfigParseError(
                f"Invalid configuration file {self.path}: {e}"
            ) from e

        config.version = SCHEMA_VERSION
        return config

    @contextlib.contextmanager
    def _atomic_target(self) -> Generator[Path, None, None]:
        """Provides a temporary sibling path and ensures cleanup."""
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        self.path.parent.mkdir(parents=True, exist_ok=True)
        try:
            yield tmp_path
        finally:
            tmp_path.unlink(missing_ok=True)

    def _backup_existing(self):
        if not self.path.exists():
            return
        self.backup_dir.mkdir(parents=True, exist_ok=True)
        backup_path = self.backup_dir / f"config.bak.{timestamp_string()}.json"
        shutil.copyfile(self.path, backup_path)
        self.logger.debug(f"Backed up {self.path.name} to {backup_path}")

    def save(self, config: ConfigurationFile):
        """Back up the current file, then atomically write the new content."""
        config.version = SCHEMA_VERSION
        payload = config.model_dump(mode="json", by_alias=True, exclude_none=True)

        self._backup_existing()
        with self._atomic_target() as tmp_path:
            tmp_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
            os.replace(tmp_path, self.path)

        self.logger.info(
            f"Saved {len(config.databases)} target(s) to {self.path}"
        )

    def find(self, key: str) -> Optional[TargetDefinition]:
        return find_by_id_or_alias(self.load(), key)

    def put(self, entry: TargetDefinition) -> TargetDefinition:
        """Upsert one entry and persist; returns the stored entry."""
        config = upsert(self.load(), entry)
        self.save(config)
        return next(t for t in config.databases if t.id == entry.id)

    def remove(self, target_id: str):
        config = self.load()
        self.save(delete(config, target_id))


def upsert(
    config: ConfigurationFile, entry: TargetDefinition
) -> ConfigurationFile:
    """Replace the entry with the same id in place, or append it."""
    entry = entry.model_copy(update={"updated_at": iso_timestamp()})
    for index, existing in enumerate(config.databases):
        if existing.id == entry.id:
            config.databases[index] = entry
            break
    else:
        config.databases.append(entry)
    return config


def delete(config: ConfigurationFile, target_id: str) -> ConfigurationFile:
    """Remove the entry with the given id; unknown ids are ignored."""
    config.databases = [t for t in config.databases if t.id != target_id]
    return config


def find_by_id_or_alias(
    config: ConfigurationFile, key: str
) -> Optional[TargetDefinition]:
    """The first entry whose id or alias equals `key`."""
    for target in config.databases:
        if target.id == key or target.alias == key:
            return target
    return None
