"""Configuration management for Net Pay.

User preferences are stored in settings.json:

- Durable preferences only: standby rate, overtime multipliers, tax
  strategy, tax preset or custom rate, payroll period, credit toggle and an
  optional rules file path.
- Per-period inputs (hours, worked days, earnings, reimbursements,
  deductions) are never stored. Older settings files that still carry them
  are cleaned up on load.

Config directory resolution:
1. NET_PAY_CONFIG_PATH environment variable (if set)
2. ~/.config/net-pay/ (XDG_CONFIG_HOME fallback)

A corrupt or unreadable settings file is reported and treated as empty, so
calculations always run with in-memory defaults.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .taxes.schemas import Money, PayrollPeriod, Quantity, Rate

logger = logging.getLogger(__name__)

APP_NAME = "net-pay"
SETTINGS_FILENAME = "settings.json"

# Per-period keys written by older versions; never persisted now
TRANSIENT_KEYS = ("worked_days", "salary", "hours", "reimbursements", "deductions")


class ConfigError(Exception):
    """Raised for configuration faults that have no safe fallback."""
    pass


class Preferences(BaseModel):
    """Durable user preferences. None means "use the rules default"."""

    model_config = ConfigDict(extra="ignore")

    standby_rate: Optional[Money] = Field(default=None, ge=0)
    overtime150_multiplier: Optional[Quantity] = Field(default=None, ge=1, le=5)
    overtime200_multiplier: Optional[Quantity] = Field(default=None, ge=1, le=5)
    tax_strategy: Literal["bracket_credit", "flat_rate"] = "bracket_credit"
    tax_preset_id: Optional[str] = None
    custom_tax_rate: Optional[Rate] = None
    overtime_tax_rate: Optional[Rate] = None
    payroll_period: Optional[PayrollPeriod] = None
    apply_credits: Optional[bool] = None
    rules_path: Optional[str] = None


PREFERENCE_KEYS = tuple(Preferences.model_fields)


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Resolution order:
    1. NET_PAY_CONFIG_PATH environment variable
    2. ~/.config/net-pay/ (XDG_CONFIG_HOME)
    """
    env_path = os.environ.get("NET_PAY_CONFIG_PATH")
    if env_path:
        return Path(env_path)

    xdg_config_home = os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")
    return Path(xdg_config_home) / APP_NAME


def get_settings_path() -> Path:
    """Get the path to settings.json (may not exist yet)."""
    return get_config_dir() / SETTINGS_FILENAME


def load_settings() -> dict:
    """Load settings.json.

    Returns:
        Settings dictionary. Empty if the file is missing, unreadable or
        not a JSON object.
    """
    settings_file = get_settings_path()

    if not settings_file.exists():
        return {}

    try:
        with open(settings_file, "r", encoding="utf-8") as f:
            settings = json.load(f)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.warning(f"Could not read {settings_file}, using defaults: {e}")
        return {}

    if not isinstance(settings, dict):
        logger.warning(f"Ignoring {settings_file}: expected a JSON object")
        return {}

    return settings


def save_settings(settings: dict) -> Path:
    """Save settings.json.

    Returns:
        Path to the saved settings file
    """
    config_dir = get_config_dir()
    config_dir.mkdir(parents=True, exist_ok=True)

    settings_file = config_dir / SETTINGS_FILENAME

    with open(settings_file, "w", encoding="utf-8") as f:
        json.dump(settings, f, indent=2)

    return settings_file


def load_preferences() -> Preferences:
    """Load durable preferences, dropping any stored per-period inputs.

    Invalid stored values are reported and replaced by defaults.
    """
    settings = load_settings()

    stale = [key for key in TRANSIENT_KEYS if key in settings]
    if stale:
        for key in stale:
            del settings[key]
        try:
            save_settings(settings)
            logger.info(f"Removed per-period keys from settings: {', '.join(stale)}")
        except OSError as e:
            logger.warning(f"Could not rewrite settings without {', '.join(stale)}: {e}")

    try:
        return Preferences.model_validate(settings)
    except ValidationError as e:
        logger.warning(f"Invalid preferences in {get_settings_path()}, using defaults: {e}")
        return Preferences()


def save_preferences(preferences: Preferences) -> Path:
    """Write preferences, keeping any unrelated keys in settings.json."""
    settings = {k: v for k, v in load_settings().items() if k not in PREFERENCE_KEYS and k not in TRANSIENT_KEYS}
    settings.update(preferences.model_dump(mode="json", exclude_none=True))
    return save_settings(settings)


def set_preference(key: str, value: Any) -> Preferences:
    """Validate and store a single preference.

    Args:
        key: Preference name (see Preferences)
        value: New value; strings are validated like JSON input. None clears it.

    Returns:
        The updated preferences

    Raises:
        ConfigError: Unknown key or invalid value
    """
    if key not in PREFERENCE_KEYS:
        raise ConfigError(f"Unknown setting '{key}'. Available: {', '.join(PREFERENCE_KEYS)}")

    data = load_preferences().model_dump()
    data[key] = value
    try:
        updated = Preferences.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid value for '{key}': {value!r}\n{e}") from e

    save_preferences(updated)
    return updated


def reset_settings() -> bool:
    """Delete settings.json. Returns True if a file was removed."""
    settings_file = get_settings_path()
    if settings_file.exists():
        settings_file.unlink()
        return True
    return False
