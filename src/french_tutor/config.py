"""Application settings, with optional YAML overrides.

Settings come from the class defaults, then from a YAML file (the path
passed in, or ``$FRENCH_TUTOR_CONFIG``), then from ``$FRENCH_TUTOR_DB``
for the database location. Example file::

    db_path: ~/french/tutor.db
    log_level: DEBUG
    auto_advance: false
    scoring:
      attempt_penalty: 1
      bonus_factor: 0.1
"""
import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Optional

import yaml

from french_tutor.db import DEFAULT_DB_PATH
from french_tutor.models import ScoringPolicy

CONFIG_ENV = "FRENCH_TUTOR_CONFIG"
DB_ENV = "FRENCH_TUTOR_DB"
MAX_BONUS_FACTOR = 0.2


class ConfigError(ValueError):
    pass


@dataclass
class Settings:
    db_path: str = DEFAULT_DB_PATH
    log_dir: str = str(Path.home() / ".french_tutor" / "log")
    log_file: str = "french_tutor.log"
    log_level: str = "INFO"
    question_bank: Optional[str] = None
    default_max_attempts: int = 3
    auto_advance: bool = True
    auto_advance_delay_seconds: float = 2.0
    hints_enabled: bool = True
    scoring: ScoringPolicy = field(default_factory=ScoringPolicy)


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

NUMBER_SETTINGS = {
    "default_max_attempts": int,
    "auto_advance_delay_seconds": float,
}
FLAG_SETTINGS = ("auto_advance", "hints_enabled")
SCORING_TYPES = {
    "attempt_penalty": int,
    "bonus_factor": float,
    "pass_threshold": float,
}


def _coerce(name: str, value: Any, kind: type):
    if isinstance(value, bool):
        raise ConfigError(f"{name} must be a number, got {value!r}")
    try:
        return kind(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be a number, got {value!r}")


def _scoring_from(data: Any) -> ScoringPolicy:
    if not isinstance(data, dict):
        raise ConfigError("'scoring' must be a mapping")
    unknown = set(data) - set(SCORING_TYPES)
    if unknown:
        raise ConfigError(f"Unknown scoring settings: {', '.join(sorted(unknown))}")
    values = {key: _coerce(key, value, SCORING_TYPES[key]) for key, value in data.items()}
    return replace(ScoringPolicy(), **values)


def validate_settings(settings: Settings) -> Settings:
    policy = settings.scoring
    if not 0 <= policy.bonus_factor <= MAX_BONUS_FACTOR:
        raise ConfigError(f"bonus_factor must be between 0 and {MAX_BONUS_FACTOR}")
    if not 0 < policy.pass_threshold <= 1:
        raise ConfigError("pass_threshold must be in (0, 1]")
    if policy.attempt_penalty < 0:
        raise ConfigError("attempt_penalty cannot be negative")
    if settings.default_max_attempts < 1:
        raise ConfigError("default_max_attempts must be at least 1")
    if settings.auto_advance_delay_seconds < 0:
        raise ConfigError("auto_advance_delay_seconds cannot be negative")
    if str(settings.log_level).upper() not in LOG_LEVELS:
        raise ConfigError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
    return settings


def settings_from_dict(data: dict) -> Settings:
    known = {f.name for f in fields(Settings)}
    unknown = set(data) - known
    if unknown:
        raise ConfigError(f"Unknown settings: {', '.join(sorted(unknown))}")
    values = dict(data)
    if "scoring" in values:
        values["scoring"] = _scoring_from(values["scoring"])
    for key, kind in NUMBER_SETTINGS.items():
        if key in values:
            values[key] = _coerce(key, values[key], kind)
    if "log_level" in values:
        values["log_level"] = str(values["log_level"]).upper()
    for key in FLAG_SETTINGS:
        if key in values and not isinstance(values[key], bool):
            raise ConfigError(f"{key} must be true or false, got {values[key]!r}")
    for key in ("db_path", "log_dir", "question_bank"):
        if values.get(key):
            values[key] = str(Path(values[key]).expanduser())
    return validate_settings(Settings(**values))


def load_settings(path: Optional[str] = None) -> Settings:
    """Load settings from YAML, falling back to defaults when no file is given."""
    path = path or os.environ.get(CONFIG_ENV)
    data = {}
    if path:
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except FileNotFoundError:
            raise ConfigError(f"Config file not found: {path}")
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}")
        if not isinstance(data, dict):
            raise ConfigError(f"Config file {path} must contain a mapping")
    if os.environ.get(DB_ENV):
        data["db_path"] = os.environ[DB_ENV]
    return settings_from_dict(data)
