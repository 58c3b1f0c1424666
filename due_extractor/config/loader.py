from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..columns.resolver import DEFAULT_FIELD_CANDIDATES
from ..services.extractor import DEFAULT_WINDOW, DueWindow

"""Config loader.

Responsibilities:
- Load YAML config (default config/extract.yml)
- Validate against config_schema.json (shipped next to this module)
- Apply defaults for every optional key
- Apply environment overrides (DUE_EXTRACTOR_TIMEZONE)
"""

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")
DEFAULT_CONFIG_PATH = Path("config/extract.yml")
CONFIG_ENV_VAR = "DUE_EXTRACTOR_CONFIG"
TIMEZONE_ENV_VAR = "DUE_EXTRACTOR_TIMEZONE"


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class ExtractorSettings:
    """Runtime settings for one extraction run.

    Environment variables take precedence over the YAML values.
    """
    timezone: str = "UTC"
    window: DueWindow = DEFAULT_WINDOW
    include_undated_rows: bool = False
    field_candidates: dict[str, tuple[str, ...]] = field(default_factory=lambda: dict(DEFAULT_FIELD_CANDIDATES))
    error_log_dir: str = "./logs"


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: schema file missing or invalid, or the data violates it
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


def resolve_config_path(explicit: Path | None = None) -> tuple[Path, bool]:
    """Return (path, required). Explicit / env paths must exist, the default may be absent."""
    if explicit is not None:
        return explicit, True
    env_path = os.getenv(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path), True
    return DEFAULT_CONFIG_PATH, False


def settings_from_dict(data: dict[str, Any]) -> ExtractorSettings:
    _validate_config_schema(data)

    window_raw = data.get("window") or {}
    window = DueWindow(
        min_days=window_raw.get("min_days", DEFAULT_WINDOW.min_days),
        max_days=window_raw.get("max_days", DEFAULT_WINDOW.max_days),
    )
    if window.min_days > window.max_days:
        raise ConfigError(f"config validation failed: window.min_days ({window.min_days}) > window.max_days ({window.max_days})")

    candidates = dict(DEFAULT_FIELD_CANDIDATES)
    for name, values in (data.get("field_candidates") or {}).items():
        candidates[name] = tuple(values)

    tz = os.getenv(TIMEZONE_ENV_VAR) or data.get("timezone", "UTC")
    if tz.upper() != "UTC":
        try:
            ZoneInfo(tz)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ConfigError(f"unknown timezone: {tz}") from e
    return ExtractorSettings(
        timezone=tz,
        window=window,
        include_undated_rows=data.get("include_undated_rows", False),
        field_candidates=candidates,
        error_log_dir=data.get("error_log_dir", "./logs"),
    )


def load_config(path: Path | None = None) -> ExtractorSettings:
    config_path, required = resolve_config_path(path)
    if not config_path.exists():
        if required:
            raise ConfigError(f"config file not found: {config_path}")
        return settings_from_dict({})
    try:
        data = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config validation failed: top level must be a mapping, got {type(data).__name__}")
    return settings_from_dict(data)
