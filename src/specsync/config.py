"""Settings resolution with XDG paths, atomic writes, and precedence layering.

This module handles everything persistent for specsync:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.specsync/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **Config files** -- a user-level ``config.json`` in the config directory
  and an optional project-level ``./specsync.json``. Both hold a JSON object
  whose keys are :class:`~specsync.models.ImportSettings` fields.
* **Precedence resolution** -- :func:`resolve_settings` layers CLI flags,
  environment variables, project config and user config over the defaults.
* **Atomic writes** -- :func:`atomic_write` writes output files via a temp
  file and a rename so a crash never leaves a half-written collection.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from specsync.exceptions import ConfigError
from specsync.models import ImportSettings

_APP_NAME = "specsync"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "specsync.json"

ENV_VARS: dict[str, str] = {
    "backend": "SPECSYNC_BACKEND",
    "worker_timeout": "SPECSYNC_WORKER_TIMEOUT",
    "pattern_timeout": "SPECSYNC_PATTERN_TIMEOUT",
    "seed": "SPECSYNC_SEED",
    "fallback_base_url": "SPECSYNC_BASE_URL",
    "output": "SPECSYNC_OUTPUT",
}
"""Settings field -> environment variable."""


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    return Path.home().joinpath(*default_segments)


def get_config_dir() -> Path:
    """Return the configuration directory.

    On Linux/BSD: ``$XDG_CONFIG_HOME/specsync/`` (default ``~/.config/specsync/``).
    On macOS/Windows: ``~/.specsync/``.

    The directory is not created; nothing is ever written there by specsync
    itself.
    """
    if _is_xdg_platform():
        return _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    return _fallback_base_dir()


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/specsync/`` (default ``~/.local/share/specsync/``).
    On macOS/Windows: ``~/.specsync/logs/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def atomic_write(path: Path, data: str) -> None:
    """Write *data* to *path* atomically using temp file + rename.

    The temporary file lives next to *path* so that ``os.replace`` is an
    atomic rename on POSIX. On any failure the temp file is removed and the
    error re-raised.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None and os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise


# --- Config files ---


def _read_json_object(path: Path, label: str) -> Optional[dict[str, Any]]:
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid {label} config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid {label} config at {path}: expected a JSON object")
    return data


def load_user_config() -> Optional[dict[str, Any]]:
    """Load ``config.json`` from the user config directory, if present.

    Raises:
        ConfigError: If the file exists but is not a JSON object.
    """
    return _read_json_object(get_config_dir() / _CONFIG_FILENAME, "user")


def load_project_config() -> Optional[dict[str, Any]]:
    """Load ``./specsync.json`` from the working directory, if present.

    Raises:
        ConfigError: If the file exists but is not a JSON object.
    """
    return _read_json_object(Path.cwd() / _PROJECT_CONFIG_FILENAME, "project")


def _env_overrides() -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for field_name, env_var in ENV_VARS.items():
        value = os.environ.get(env_var)
        if value:
            overrides[field_name] = value
    return overrides


# --- Precedence resolution ---


def resolve_settings(**cli_values: Any) -> ImportSettings:
    """Resolve the effective :class:`ImportSettings`.

    Precedence (high to low):
        1. CLI flags (keyword arguments; ``None`` means "not given")
        2. Environment variables (see :data:`ENV_VARS`)
        3. Project config (``./specsync.json``)
        4. User config (``~/.config/specsync/config.json``)
        5. Defaults

    Raises:
        ConfigError: If a config file is malformed, a key is unknown, or a
            value fails validation.
    """
    merged: dict[str, Any] = {}
    for layer in (load_user_config(), load_project_config(), _env_overrides()):
        if layer:
            merged.update(layer)
    merged.update({k: v for k, v in cli_values.items() if v is not None})

    unknown = sorted(set(merged) - set(ImportSettings.model_fields))
    if unknown:
        raise ConfigError(f"Unknown setting(s): {', '.join(unknown)}")

    try:
        return ImportSettings.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid settings: {exc}") from exc
