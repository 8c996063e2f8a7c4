"""Configuration from environment variables and the user config file."""

import json
import os
from pathlib import Path
from typing import Optional

from aws_lambda_powertools import Logger

logger = Logger(service="homebudget-config")

DB_FILENAME = 'homebudget.db'


def get_config_path() -> str:
    """Get the config file path from environment."""
    default = Path.home() / '.config' / 'homebudget' / 'config.json'
    return os.environ.get('HOMEBUDGET_CONFIG_PATH', str(default))


def get_data_dir() -> str:
    """Get the directory for the default database from environment."""
    default = Path.home() / '.local' / 'share' / 'homebudget'
    return os.environ.get('HOMEBUDGET_DATA_DIR', str(default))


class Config:
    """User settings persisted as JSON.

    A missing or corrupt file yields the defaults.
    """

    def __init__(self, path: Optional[str] = None):
        self.path = path or get_config_path()
        self._source: dict = {}

        try:
            with open(self.path, 'r') as f:
                loaded = json.load(f)
            if isinstance(loaded, dict):
                self._source = loaded
        except FileNotFoundError:
            pass
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable config", extra={"path": self.path, "error": str(e)})

    @property
    def last_file(self) -> Optional[str]:
        """Last opened database, or None if it no longer exists."""
        value = self._source.get('last_file')
        if not isinstance(value, str) or not os.path.isfile(value):
            return None
        return value

    @last_file.setter
    def last_file(self, value: Optional[str]) -> None:
        self._source['last_file'] = value
        self.write()

    def write(self) -> None:
        """Write settings to disk, creating parent directories."""
        Path(self.path).parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, 'w') as f:
            json.dump(self._source, f, indent=2)


def get_db_path(config: Optional[Config] = None) -> str:
    """Database to open: env override, else last file, else the default.

    Args:
        config: Loaded config; read from disk when omitted

    Returns:
        Database file path
    """
    override = os.environ.get('HOMEBUDGET_DB_PATH')
    if override:
        return override

    config = config or Config()
    if config.last_file:
        return config.last_file

    return os.path.join(get_data_dir(), DB_FILENAME)
