"""
Configuration Management

Loads the daemon settings from environment variables (and a .env file
when present).
"""

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from scraper.errors import ConfigError
from scraper.records import DEFAULT_TERMINALS

AIRPORT_PAGE = "https://www.dublinairport.com/flight-information/live-departures"
DEFAULT_POLL_INTERVAL = 600  # 10 minutes
DEFAULT_REQUEST_TIMEOUT = 30
DEFAULT_TIMEZONE = "Europe/Dublin"


def _env_flag(environ, name):
    return str(environ.get(name, "")).strip().lower() == "true"


def _env_number(environ, name, default, cast):
    raw = environ.get(name)
    if raw is None or not str(raw).strip():
        return default
    try:
        value = cast(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from e
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {raw!r}")
    return value


def _env_terminals(environ):
    raw = environ.get("TERMINALS")
    if raw is None or not raw.strip():
        return DEFAULT_TERMINALS
    terminals = tuple(t.strip() for t in raw.split(",") if t.strip())
    if not terminals:
        raise ConfigError(f"TERMINALS has no terminal identifiers: {raw!r}")
    return terminals


@dataclass
class Settings:
    db_url: str = None
    show_rows: bool = False
    add_rows: bool = False
    write_json: bool = False
    data_dir: str = "./data"
    page_url: str = AIRPORT_PAGE
    terminals: tuple = field(default_factory=lambda: DEFAULT_TERMINALS)
    poll_interval: int = DEFAULT_POLL_INTERVAL
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    timezone: str = DEFAULT_TIMEZONE

    @property
    def uses_database(self):
        return bool(self.db_url)

    def validate(self):
        """
        Check flag combinations that cannot work.

        Raises:
            ConfigError: If a database feature is enabled without DB_URL
        """
        if (self.add_rows or self.show_rows) and not self.db_url:
            raise ConfigError("ADD_ROWS/SHOW_ROWS require DB_URL to be set")

    @classmethod
    def from_env(cls, environ=None, dotenv_path=None):
        """
        Build settings from the environment.

        Args:
            environ (Mapping): Variables to read, defaults to os.environ
            dotenv_path (str): Optional .env file, only used with os.environ
        """
        if environ is None:
            load_dotenv(dotenv_path=dotenv_path)
            environ = os.environ

        settings = cls(
            db_url=environ.get("DB_URL") or None,
            show_rows=_env_flag(environ, "SHOW_ROWS"),
            add_rows=_env_flag(environ, "ADD_ROWS"),
            write_json=_env_flag(environ, "WRITE_JSON"),
            data_dir=environ.get("DATA_DIR") or "./data",
            page_url=environ.get("AIRPORT_PAGE_URL") or AIRPORT_PAGE,
            terminals=_env_terminals(environ),
            poll_interval=_env_number(environ, "POLL_INTERVAL_SECONDS", DEFAULT_POLL_INTERVAL, int),
            request_timeout=_env_number(environ, "REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT, float),
            timezone=environ.get("TIMEZONE") or DEFAULT_TIMEZONE,
        )
        settings.validate()
        return settings
