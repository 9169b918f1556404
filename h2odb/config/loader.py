from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from h2odb.models.config_models import (
    DEFAULT_ANALYSES_AGENCY,
    DEFAULT_KEEP_NA_STRINGS,
    DatabaseConfig,
    ImportConfig,
    TableNames,
)

"""Config loader.

Responsibilities:
- Load YAML config (default ``config/import.yml``)
- Validate it against ``config_schema.json`` (shipped next to this module)
- Apply defaults for every optional key
"""

__all__ = [
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "SCHEMA_PATH",
    "load_config",
    "config_from_dict",
]

DEFAULT_CONFIG_PATH = Path("config/import.yml")
SCHEMA_PATH = Path(__file__).with_name("config_schema.json")


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: schema file missing or unreadable, or the data violates it
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def config_from_dict(data: dict[str, Any]) -> ImportConfig:
    """Build an ImportConfig from already parsed (and validated) data."""
    db_raw = data.get("database") or {}
    db = DatabaseConfig(
        host=db_raw.get("host"),
        port=db_raw.get("port"),
        user=db_raw.get("user"),
        password=db_raw.get("password"),
        database=db_raw.get("database"),
        dsn=db_raw.get("dsn"),
    )
    defaults = TableNames()
    tables_raw = data.get("tables") or {}
    tables = TableNames(
        sample_info=tables_raw.get("sample_info", defaults.sample_info),
        major_chemistry=tables_raw.get("major_chemistry", defaults.major_chemistry),
        minor_chemistry=tables_raw.get("minor_chemistry", defaults.minor_chemistry),
    )
    keep_na = data.get("keep_na_strings")
    return ImportConfig(
        database=db,
        tables=tables,
        analyses_agency=data.get("analyses_agency", DEFAULT_ANALYSES_AGENCY),
        sheet=data.get("sheet", 0),
        keep_na_strings=tuple(keep_na) if keep_na is not None else DEFAULT_KEEP_NA_STRINGS,
        pad_short_rows=bool(data.get("pad_short_rows", False)),
        page_size=int(data.get("page_size", 1000)),
    )


def load_config(path: Path) -> ImportConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError("config validation failed: top level must be a mapping")

    _validate_config_schema(data)
    return config_from_dict(data)
