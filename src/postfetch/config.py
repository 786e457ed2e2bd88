"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for postfetch:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.postfetch/`` on macOS and Windows. See :func:`get_config_dir`,
  :func:`get_cache_dir`, :func:`get_data_dir`.
* **Global config** -- a single :class:`~postfetch.models.GlobalConfig`
  JSON file storing the upstream, cache, output, and export defaults.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables, project-local config, and global config into the
  final effective configuration.

File writes go through :func:`_atomic_write` (temp file then rename).
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from postfetch.exceptions import ConfigError
from postfetch.models import GlobalConfig

_APP_NAME = "postfetch"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "postfetch.json"

ENV_BASE_URL = "POSTFETCH_BASE_URL"
ENV_CACHE_BACKEND = "POSTFETCH_CACHE_BACKEND"
ENV_CACHE_TTL = "POSTFETCH_CACHE_TTL"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
    return Path.home() / f".{_APP_NAME}"


def _xdg_dir(env_var: str, default_segments: tuple[str, ...], fallback: str) -> Path:
    """Resolve an application directory and make sure it exists.

    On XDG platforms the base comes from *env_var* (or ``$HOME`` joined with
    *default_segments*); elsewhere it is ``~/.postfetch/<fallback>``.
    """
    if _is_xdg_platform():
        env_value = os.environ.get(env_var, "")
        if env_value:
            base = Path(env_value)
        else:
            base = Path.home().joinpath(*default_segments)
        path = base / _APP_NAME
    else:
        path = _fallback_base_dir() / fallback if fallback else _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/postfetch/`` (default ``~/.config/postfetch/``).
    On macOS/Windows: ``~/.postfetch/``.
    """
    return _xdg_dir("XDG_CONFIG_HOME", (".config",), "")


def get_cache_dir() -> Path:
    """Return the cache directory, creating it if necessary.

    Holds the on-disk read-through cache store. Its contents can be deleted
    at any time.

    On Linux/BSD: ``$XDG_CACHE_HOME/postfetch/`` (default ``~/.cache/postfetch/``).
    On macOS/Windows: ``~/.postfetch/cache/``.
    """
    return _xdg_dir("XDG_CACHE_HOME", (".cache",), "cache")


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/postfetch/`` (default ``~/.local/share/postfetch/``).
    On macOS/Windows: ``~/.postfetch/logs/``.
    """
    return _xdg_dir("XDG_DATA_HOME", (".local", "share"), "logs")


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file lives in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems. On any failure the
    temp file is removed and the exception re-raised.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    tmp = tempfile.NamedTemporaryFile(
        mode="w",
        dir=path.parent,
        prefix=f".{path.name}.",
        suffix=".tmp",
        delete=False,
        encoding="utf-8",
    )
    try:
        with tmp:
            tmp.write(data)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(tmp.name, path)
    except BaseException:
        try:
            os.unlink(tmp.name)
        except OSError:
            pass
        raise


# --- Global config ---


def _global_config_path() -> Path:
    """Path to the global config file."""
    return get_config_dir() / _CONFIG_FILENAME


def _read_json(path: Path, label: str) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid {label} at {path}: {exc}") from exc


def load_global_config() -> GlobalConfig:
    """Load the global configuration from the XDG config directory.

    Returns:
        The deserialised :class:`~postfetch.models.GlobalConfig`. If the
        file does not exist, a default instance is returned.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            Pydantic validation.
    """
    path = _global_config_path()
    if not path.is_file():
        return GlobalConfig()
    data = _read_json(path, "global config")
    try:
        return GlobalConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    """Persist the global configuration atomically to disk."""
    data = config.model_dump(mode="json")
    _atomic_write(_global_config_path(), json.dumps(data, indent=2) + "\n")


# --- Project-local config ---


def load_project_config() -> Optional[dict[str, Any]]:
    """Load project-local overrides from ``./postfetch.json``.

    The file uses the same nested layout as the global config (for example
    ``{"cache": {"backend": "memory"}}``) and only needs to list the keys it
    overrides.

    Returns:
        The parsed JSON object, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file exists but is not a JSON object.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    data = _read_json(path, "project config")
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid project config at {path}: expected a JSON object")
    return data


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


# --- Precedence resolution ---


def resolve_config(
    cli_base_url: Optional[str] = None,
    cli_no_cache: bool = False,
    cli_format: Optional[str] = None,
) -> GlobalConfig:
    """Resolve config with full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_base_url``, ``cli_no_cache``, ``cli_format``)
        2. Environment variables (``POSTFETCH_BASE_URL``,
           ``POSTFETCH_CACHE_BACKEND``, ``POSTFETCH_CACHE_TTL``)
        3. Project config (``./postfetch.json``)
        4. User config (``~/.config/postfetch/config.json``)
        5. Defaults

    Returns:
        The effective :class:`~postfetch.models.GlobalConfig`.

    Raises:
        ConfigError: If any layer holds an invalid value.
    """
    # 5 + 4. Defaults filled in by the model
    data = load_global_config().model_dump(mode="json")

    # 3. Project-local overrides
    project = load_project_config()
    if project is not None:
        data = _deep_merge(data, project)
        try:
            data = GlobalConfig.model_validate(data).model_dump(mode="json")
        except ValidationError as exc:
            raise ConfigError(f"Invalid project config: {exc}") from exc

    # 2. Environment
    env_base_url = os.environ.get(ENV_BASE_URL)
    if env_base_url:
        data["upstream"]["base_url"] = env_base_url
    env_backend = os.environ.get(ENV_CACHE_BACKEND)
    if env_backend:
        data["cache"]["backend"] = env_backend
    env_ttl = os.environ.get(ENV_CACHE_TTL)
    if env_ttl:
        try:
            data["cache"]["ttl_seconds"] = int(env_ttl)
        except ValueError:
            raise ConfigError(f"{ENV_CACHE_TTL} must be an integer, got: {env_ttl}") from None

    # 1. CLI flags
    if cli_base_url is not None:
        data["upstream"]["base_url"] = cli_base_url
    if cli_no_cache:
        data["cache"]["enabled"] = False
    if cli_format is not None:
        data["output"]["format"] = cli_format

    try:
        return GlobalConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
