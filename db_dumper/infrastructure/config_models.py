"""
Pydantic models for the persisted configuration file.

These models are the contract for `config.json`. Keys are stored in
camelCase on disk and exposed in snake_case in Python. Unknown keys are
carried through a load and save unchanged.
"""

import uuid
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..application.output_paths import iso_timestamp

SCHEMA_VERSION = 1


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )


class TargetDefinition(_CamelModel):
    """A configured database connection profile the tool can dump from."""

    id: str
    db_type: Literal["mysql"] = "mysql"
    environment: str
    name: str
    alias: Optional[str] = None
    host: str
    port: Optional[int] = None
    username: str
    password_ref: str = ""
    selected_flags: List[str] = Field(default_factory=list)
    custom_flags: Optional[List[str]] = None
    gzip_default: bool = False
    created_at: str = Field(default_factory=iso_timestamp)
    updated_at: str = Field(default_factory=iso_timestamp)

    @property
    def alias_or_name(self) -> str:
        return self.alias or self.name


class ConfigDefaults(_CamelModel):
    """Defaults remembered across runs."""

    last_selected_id: Optional[str] = None
    dump_root_override: Optional[str] = None


class ConfigurationFile(_CamelModel):
    """Represents the top-level structure of `config.json`."""

    version: int = SCHEMA_VERSION
    databases: List[TargetDefinition] = Field(default_factory=list)
    defaults: Optional[ConfigDefaults] = None


def new_target(**fields) -> TargetDefinition:
    """Creates a target with a fresh id and matching timestamps."""
    now = iso_timestamp()
    fields.setdefault("id", str(uuid.uuid4()))
    fields.setdefault("created_at", now)
    fields.setdefault("updated_at", now)
    return TargetDefinition(**fields)
