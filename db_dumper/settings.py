"""
Initializes the Dynaconf settings object for the db_dumper component.
This module is the single source of truth for application settings.

Stored database targets live in the JSON configuration file handled by
JsonConfigStore; the settings here only tune how the tool itself behaves.
"""

from pathlib import Path
from dynaconf import Dynaconf

PROJECT_ROOT = Path(__file__).parent.parent

settings = Dynaconf(
    root_path=PROJECT_ROOT,
    settings_files=["config/settings.toml"],
    secrets=["config/.secrets.toml"],
    envvar_prefix="DB_DUMPER",
)
