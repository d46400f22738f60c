"""
Manages loading and saving of the optional INI configuration file.
"""

import configparser
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from sekai_fetch.exceptions import ConfigurationError
from sekai_fetch.models.config import FetchConfig

log = logging.getLogger(__name__)

_LIST_KEYS = ("music_ids", "vocal_types")


class ConfigManager:
    """Handles all operations related to the application's INI config file."""

    def __init__(self, config_file_path: Path):
        self.config_file_path = config_file_path
        self._parser = configparser.ConfigParser(interpolation=None)

    def load_config(self, cli_options: dict[str, Any] | None = None) -> FetchConfig:
        """
        Loads configuration from the INI file if present, applies CLI overrides,
        and validates it.

        Args:
            cli_options: A dictionary of options provided via the command line.

        Returns:
            A validated FetchConfig object.

        Raises:
            ConfigurationError: If the config file is invalid or validation fails.
        """
        config_from_file: dict[str, Any] = {}
        if self.config_file_path.is_file():
            try:
                self._parser.read(self.config_file_path, encoding="utf-8")
            except configparser.Error as e:
                raise ConfigurationError(
                    f"Error parsing configuration file: {e}"
                ) from e
            config_from_file = self._get_config_as_dict()
            log.debug(f"Loaded configuration from {self.config_file_path}")

        # Override with CLI options
        if cli_options:
            config_from_file.update(cli_options)

        try:
            config_dir = self.config_file_path.parent
            return FetchConfig(**config_from_file, config_path=str(config_dir))
        except ValidationError as e:
            raise ConfigurationError(f"Configuration validation failed:\n{e}") from e

    def save_default_config(self) -> None:
        """Creates and saves a configuration file holding every default value."""
        config = configparser.ConfigParser(interpolation=None)
        config["DEFAULT"] = {}
        defaults = FetchConfig()

        for key in sorted(FetchConfig.get_ini_keys()):
            value = getattr(defaults, key)
            if isinstance(value, bool):
                config["DEFAULT"][key] = "true" if value else "false"
            elif isinstance(value, list):
                config["DEFAULT"][key] = ",".join(map(str, value))
            else:
                config["DEFAULT"][key] = str(value)

        try:
            self.config_file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_file_path, "w", encoding="utf-8") as configfile:
                config.write(configfile)
        except OSError as e:
            raise ConfigurationError(f"Failed to save configuration file: {e}") from e

    def _get_config_as_dict(self) -> dict[str, Any]:
        """Reads the keys present in the 'DEFAULT' section into a dictionary."""
        section = self._parser["DEFAULT"]
        known_keys = FetchConfig.get_ini_keys()
        values: dict[str, Any] = {}
        for key in section:
            if key not in known_keys:
                log.warning(f"[yellow]Ignoring unknown config key '{key}'.[/yellow]")
                continue
            if key in _LIST_KEYS:
                values[key] = [
                    s.strip() for s in section.get(key, "").split(",") if s.strip()
                ]
            elif key == "download_covers":
                try:
                    values[key] = section.getboolean(key)
                except ValueError as e:
                    raise ConfigurationError(f"Invalid value for '{key}': {e}") from e
            else:
                values[key] = section.get(key)
        return values
