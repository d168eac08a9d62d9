"""
YAML config file + environment settings loader.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

import yaml

from ghstat.config.models import GhstatConfig, GreenhouseSettings, Lead
from ghstat.errors import ConfigError

APP_NAME = "ghstat"
DEFAULT_CONFIG_NAME = "ghstat.yaml"


def _read_env_file(path: Path) -> dict[str, str]:
    values: dict[str, str] = {}
    for line in path.read_text(encoding="utf-8").splitlines():
        key, sep, value = line.strip().partition("=")
        if not sep or key.startswith("#") or not key.strip():
            continue
        values[key.strip()] = value.strip().strip("\"'")
    return values


def load_env_files(directory: Path | None = None) -> None:
    """
    Fill unset environment variables from `.env` then `.env.local`.
    """

    for filename in (".env", ".env.local"):
        env_path = (directory or Path.cwd()) / filename
        if env_path.is_file():
            for key, value in _read_env_file(env_path).items():
                os.environ.setdefault(key, value)


def _get_int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None:
        return default
    stripped = raw.strip()
    return stripped if stripped else default


def _get_optional_env(name: str) -> str | None:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    return raw.strip()


def default_config_dir() -> Path:
    """
    Per-user ghstat directory, honouring ``XDG_CONFIG_HOME``.
    """

    xdg = os.getenv("XDG_CONFIG_HOME")
    base = Path(xdg) if xdg else Path.home() / ".config"
    return base / APP_NAME


@lru_cache(maxsize=1)
def get_greenhouse_settings() -> GreenhouseSettings:
    """
    Return cached Greenhouse settings from environment variables.
    """

    load_env_files()
    return GreenhouseSettings(
        base_url=_get_str_env("GHSTAT_GREENHOUSE_URL", "https://canonical.greenhouse.io").rstrip("/"),
        login_url=_get_str_env("GHSTAT_LOGIN_URL", "https://login.ubuntu.com").rstrip("/"),
        user_agent=_get_str_env("GHSTAT_USER_AGENT", "ghstat"),
        timeout_seconds=max(1.0, _get_float_env("GHSTAT_TIMEOUT_SECONDS", 15.0)),
        max_retries=max(0, _get_int_env("GHSTAT_MAX_RETRIES", 2)),
        backoff_initial_seconds=max(
            0.0,
            _get_float_env("GHSTAT_BACKOFF_INITIAL_SECONDS", 0.5),
        ),
        backoff_multiplier=max(1.0, _get_float_env("GHSTAT_BACKOFF_MULTIPLIER", 2.0)),
        login=_get_optional_env("U1_LOGIN"),
        password=_get_optional_env("U1_PASSWORD"),
    )


def _candidate_paths() -> list[Path]:
    return [Path.cwd() / DEFAULT_CONFIG_NAME, default_config_dir() / DEFAULT_CONFIG_NAME]


def load_config(config_path: str | Path | None = None) -> GhstatConfig:
    """
    Locate and parse the ghstat configuration file.

    An explicit ``config_path`` must be readable. Otherwise the working
    directory is searched first, then the per-user config directory.
    """

    if config_path:
        path = Path(config_path).expanduser()
        try:
            raw = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"unable to read specified config file: {path}") from exc
    else:
        path = next((candidate for candidate in _candidate_paths() if candidate.is_file()), None)
        if path is None:
            raise ConfigError("no config file found, see 'ghstat --help' for details")
        try:
            raw = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"unable to read config file: {path}") from exc

    return parse_config(raw, source=str(path))


def parse_config(raw: str, *, source: str = "<string>") -> GhstatConfig:
    """
    Parse YAML config text into a :class:`GhstatConfig`.
    """

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise ConfigError(f"error parsing ghstat config file {source}: {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"invalid ghstat config {source}: expected a mapping at top level")

    leads = data.get("leads", [])
    if leads is None:
        leads = []
    if not isinstance(leads, list):
        raise ConfigError(f"invalid ghstat config {source}: 'leads' must be a list")

    return GhstatConfig(leads=tuple(_parse_lead(entry, source=source) for entry in leads))


def _parse_lead(entry: object, *, source: str) -> Lead:
    if not isinstance(entry, dict):
        raise ConfigError(f"invalid ghstat config {source}: each lead must be a mapping")

    name = str(entry.get("name") or "").strip()
    if not name:
        raise ConfigError(f"invalid ghstat config {source}: lead is missing a name")

    roles = entry.get("roles") or []
    if not isinstance(roles, list):
        raise ConfigError(f"invalid ghstat config {source}: roles for '{name}' must be a list")

    return Lead(name=name, roles=tuple(_parse_role_id(role, lead=name) for role in roles))


def _parse_role_id(value: object, *, lead: str) -> int:
    # bool is an int subclass and never a role id
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().isdecimal():
        return int(value.strip())
    raise ConfigError(f"invalid role id {value!r} for lead '{lead}'")
