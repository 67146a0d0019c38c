"""Configuration management for Budget Calc.

Settings live in settings.json - machine-specific preferences:
   - filing_status: default filing status for new budgets
   - state: default jurisdiction for new budgets
   - timeframe: default display timeframe
   - budgets_dir: where budget files are kept
   - tax_rates_dir: custom tax schedule directory (optional)

Config directory resolution:
1. BUDGET_CALC_CONFIG_PATH environment variable (if set)
2. ~/.config/budget-calc/ (XDG_CONFIG_HOME fallback)

Data paths follow XDG spec:
- Data: XDG_DATA_HOME/budget-calc/ or ~/.local/share/budget-calc/
"""

import json
import os
from pathlib import Path
from typing import Any


APP_NAME = "budget-calc"
SETTINGS_FILENAME = "settings.json"

SETTING_KEYS = (
    "filing_status",
    "state",
    "timeframe",
    "budgets_dir",
    "tax_rates_dir",
)


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Resolution order:
    1. BUDGET_CALC_CONFIG_PATH environment variable
    2. ~/.config/budget-calc/ (XDG_CONFIG_HOME)

    Returns:
        Path to the configuration directory
    """
    env_path = os.environ.get("BUDGET_CALC_CONFIG_PATH")
    if env_path:
        return Path(env_path)

    xdg_config_home = os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")
    return Path(xdg_config_home) / APP_NAME


def get_settings_path() -> Path:
    """Get the path to settings.json (may not exist yet)."""
    return get_config_dir() / SETTINGS_FILENAME


def load_settings() -> dict:
    """Load settings from settings.json.

    Returns:
        Settings dictionary (empty dict if file doesn't exist)
    """
    settings_file = get_settings_path()

    if not settings_file.exists():
        return {}

    with open(settings_file, "r") as f:
        return json.load(f)


def save_settings(settings: dict) -> Path:
    """Save settings to settings.json.

    Returns:
        Path to the saved settings file
    """
    config_dir = get_config_dir()
    config_dir.mkdir(parents=True, exist_ok=True)

    settings_file = config_dir / SETTINGS_FILENAME

    with open(settings_file, "w") as f:
        json.dump(settings, f, indent=2)

    return settings_file


def get_setting(key: str, default: Any = None) -> Any:
    """Get a setting value from settings.json."""
    settings = load_settings()
    return settings.get(key, default)


def set_setting(key: str, value: Any) -> Path:
    """Set a setting value in settings.json.

    Raises:
        ValueError: If key is not a known setting
    """
    if key not in SETTING_KEYS:
        raise ValueError(f"Unknown setting '{key}'. Known settings: {', '.join(SETTING_KEYS)}")

    settings = load_settings()
    settings[key] = value
    return save_settings(settings)


def clear_setting(key: str) -> bool:
    """Remove a setting. Returns True if it was set."""
    settings = load_settings()
    if key not in settings:
        return False
    del settings[key]
    save_settings(settings)
    return True


def get_data_path() -> Path:
    """Get the XDG data directory for budget-calc."""
    xdg_data_home = os.environ.get("XDG_DATA_HOME", Path.home() / ".local" / "share")
    return Path(xdg_data_home) / APP_NAME


def get_budgets_dir() -> Path:
    """Directory for budget files: 'budgets_dir' setting, else XDG data/budgets."""
    custom = get_setting("budgets_dir")
    if custom:
        return Path(custom).expanduser()
    return get_data_path() / "budgets"
