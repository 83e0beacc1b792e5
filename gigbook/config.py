"""Configuration file management for gigbook."""

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import tomli_w


@dataclass(frozen=True)
class Settings:
    """User settings with their defaults."""

    currency_symbol: str = "₪"
    vat_rate: float = 18.0
    overdue_days: int = 30
    calendar_id: str = "primary"


def get_xdg_config_home() -> Path:
    """Get XDG config directory, with fallback to ~/.config."""
    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        return Path(xdg_config)
    return Path.home() / ".config"


def get_config_path() -> Path:
    """Get the config file path (XDG compliant).

    Returns:
        Path to the config file.
    """
    return get_xdg_config_home() / "gigbook" / "config.toml"


def create_default_config(config_path: Path | None = None) -> None:
    """Create default config file with secure permissions.

    Args:
        config_path: Path to config file. If None, uses default location.
    """
    if config_path is None:
        config_path = get_config_path()

    config_path.parent.mkdir(parents=True, exist_ok=True)

    defaults = Settings()
    default_config: dict[str, Any] = {
        "settings": {
            "currency_symbol": defaults.currency_symbol,
            "vat_rate": defaults.vat_rate,
            "overdue_days": defaults.overdue_days,
        },
        "calendar": {
            "calendar_id": defaults.calendar_id,
        },
    }

    save_config(default_config, config_path)


def load_config(config_path: Path | None = None) -> dict[str, Any]:
    """Load configuration from TOML file.

    Args:
        config_path: Path to config file. If None, uses default location.

    Returns:
        Configuration dictionary.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        tomllib.TOMLDecodeError: If the file is not valid TOML.
    """
    if config_path is None:
        config_path = get_config_path()

    with open(config_path, "rb") as f:
        return tomllib.load(f)


def save_config(config: dict[str, Any], config_path: Path | None = None) -> None:
    """Save configuration to TOML file.

    Args:
        config: Configuration dictionary.
        config_path: Path to config file. If None, uses default location.
    """
    if config_path is None:
        config_path = get_config_path()

    with open(config_path, "wb") as f:
        tomli_w.dump(config, f)

    os.chmod(config_path, 0o600)


def load_settings(config_path: Path | None = None) -> Settings:
    """Load settings, falling back to defaults for a missing file or keys.

    Raises:
        ValueError: If a setting has a value of the wrong type.
        tomllib.TOMLDecodeError: If the file is not valid TOML.
    """
    try:
        config = load_config(config_path)
    except FileNotFoundError:
        return Settings()

    defaults = Settings()
    section = config.get("settings", {})
    calendar = config.get("calendar", {})
    try:
        return Settings(
            currency_symbol=str(section.get("currency_symbol", defaults.currency_symbol)),
            vat_rate=float(section.get("vat_rate", defaults.vat_rate)),
            overdue_days=int(section.get("overdue_days", defaults.overdue_days)),
            calendar_id=str(calendar.get("calendar_id", defaults.calendar_id)),
        )
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid setting in {config_path or get_config_path()}: {e}") from e
