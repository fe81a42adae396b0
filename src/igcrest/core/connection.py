"""Connection configuration for the catalog REST API.

This module centralizes creation of a CatalogClient from a named profile and
applies small but important normalization rules (such as sanitizing the base
URL) so every frontend connects the same way.

Profiles live in an INI file (`~/.igcrestcfg` unless IGCREST_CONFIG_FILE
points elsewhere), one section per profile:

    [DEFAULT]
    url = https://igc.example.com:9445
    username = isadmin
    password = ...
    verify_ssl = false
    timeout = 60

Environment variables (IGCREST_URL, IGCREST_USERNAME, IGCREST_PASSWORD,
IGCREST_VERIFY_SSL, IGCREST_TIMEOUT) override the file values.
"""

from __future__ import annotations

import configparser
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from igcrest.core.adapters.catalog import CatalogClient
from igcrest.core.adapters.httpx_transport import HttpxTransport
from igcrest.core.errors import ConfigError

CONFIG_FILE_ENV = "IGCREST_CONFIG_FILE"
DEFAULT_CONFIG_FILE = Path.home() / ".igcrestcfg"
DEFAULT_PROFILE = "DEFAULT"
DEFAULT_TIMEOUT_SECONDS = 60.0

_ENV_OVERRIDES = {
    "url": "IGCREST_URL",
    "username": "IGCREST_USERNAME",
    "password": "IGCREST_PASSWORD",
    "verify_ssl": "IGCREST_VERIFY_SSL",
    "timeout": "IGCREST_TIMEOUT",
}

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class CatalogConfig:
    """Resolved connection settings for one catalog environment."""

    url: str
    username: str | None = None
    password: str | None = None
    verify_ssl: bool = True
    timeout: float = DEFAULT_TIMEOUT_SECONDS
    profile: str = DEFAULT_PROFILE


def _sanitize_base_url(url: str | None) -> str | None:
    """
    Normalize a catalog base URL.

    - Removes query strings (e.g. '?lang=en')
    - Removes trailing slashes

    This keeps request paths such as `/ibm/iis/igc-rest/v1/...` from
    producing malformed URLs.
    """
    if not url:
        return url
    url = url.split("?", 1)[0]
    return url.rstrip("/")


def _parse_bool(raw: str, key: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ConfigError(f"Invalid boolean for '{key}': {raw!r}")


def _config_path() -> Path:
    override = os.getenv(CONFIG_FILE_ENV)
    return Path(override).expanduser() if override else DEFAULT_CONFIG_FILE


def _read_profile(path: Path, profile: str) -> dict[str, str]:
    """Return the raw key/values of a profile section (empty if the file is absent)."""
    if not path.exists():
        if profile != DEFAULT_PROFILE:
            raise ConfigError(f"Profile '{profile}' requested but {path} does not exist.")
        return {}
    parser = configparser.ConfigParser(interpolation=None)
    try:
        parser.read(path)
    except configparser.Error as exc:
        raise ConfigError(f"Unable to parse {path}: {exc}") from exc
    if profile == DEFAULT_PROFILE:
        return dict(parser.defaults())
    if not parser.has_section(profile):
        raise ConfigError(f"Profile '{profile}' not found in {path}.")
    return dict(parser.items(profile))


def load_config(
    profile: str | None = None,
    *,
    env: Mapping[str, str] | None = None,
) -> CatalogConfig:
    """
    Resolve connection settings for a profile.

    Args:
        profile: Profile (section) name; the DEFAULT section when omitted.
        env: Environment to read overrides from (defaults to os.environ).

    Returns:
        The resolved CatalogConfig.

    Raises:
        ConfigError: If the profile is unknown or required values are missing
                     or malformed.
    """
    env = os.environ if env is None else env
    profile = profile or DEFAULT_PROFILE
    values = _read_profile(_config_path(), profile)
    for key, var in _ENV_OVERRIDES.items():
        if env.get(var):
            values[key] = env[var]

    url = _sanitize_base_url(values.get("url"))
    if not url:
        raise ConfigError(
            f"No catalog URL configured for profile '{profile}' "
            f"(set 'url' in {_config_path()} or {_ENV_OVERRIDES['url']})."
        )

    try:
        timeout = float(values.get("timeout") or DEFAULT_TIMEOUT_SECONDS)
    except ValueError as exc:
        raise ConfigError(f"Invalid timeout: {values.get('timeout')!r}") from exc

    verify_raw = values.get("verify_ssl")
    return CatalogConfig(
        url=url,
        username=values.get("username") or None,
        password=values.get("password") or None,
        verify_ssl=_parse_bool(verify_raw, "verify_ssl") if verify_raw else True,
        timeout=timeout,
        profile=profile,
    )


def get_transport(config: CatalogConfig) -> HttpxTransport:
    """Create an httpx-based transport for a resolved configuration."""
    return HttpxTransport(
        config.url,
        username=config.username,
        password=config.password,
        verify=config.verify_ssl,
        timeout=config.timeout,
    )


def get_client(profile: str | None = None) -> CatalogClient:
    """
    Create and return a CatalogClient for a profile.

    The base URL is sanitized to remove query strings and trailing slashes
    before the transport is constructed.
    """
    return CatalogClient(get_transport(load_config(profile)))
