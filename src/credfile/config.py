"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for credfile:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.credfile/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **Global config** -- A single :class:`~credfile.models.GlobalConfig`
  JSON file storing defaults (netrc output format, secret name prefixes,
  output format).
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables, project-local config, and global config into the
  final effective configuration.

All file writes use an atomic temp-file-then-rename strategy
(:func:`_atomic_write`). Credential artifacts are written through the same
helper with a restrictive permission mode applied before any content lands
on disk.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from credfile.exceptions import ConfigError
from credfile.models import GlobalConfig, NetrcFormat

_APP_NAME = "credfile"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "credfile.json"

ENV_NETRC_FORMAT = "CREDFILE_NETRC_FORMAT"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/credfile/`` (default ``~/.config/credfile/``).
    On macOS/Windows: ``~/.credfile/``.

    Returns:
        Absolute path to the configuration directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        base = _xdg_base("XDG_CONFIG_HOME", (".config",))
        path = base / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (named secrets, crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/credfile/`` (default ``~/.local/share/credfile/``).
    On macOS/Windows: ``~/.credfile/data/``.

    Returns:
        Absolute path to the data directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        base = _xdg_base("XDG_DATA_HOME", (".local", "share"))
        path = base / _APP_NAME
    else:
        path = _fallback_base_dir() / "data"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str, mode: Optional[int] = None) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is guaranteed to be an atomic rename on POSIX systems.
    When *mode* is given it is applied to the temp file before any content
    is written. On success the temp file is renamed over *path*; on any
    failure the temp file is cleaned up.
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
            newline="",
        )
        tmp_path = fd.name
        if mode is not None:
            os.chmod(tmp_path, mode)
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close in finally
        os.replace(tmp_path, path)
    except BaseException:
        # Clean up the temp file on any error (including KeyboardInterrupt).
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Global config ---


def _global_config_path() -> Path:
    """Path to the global config file."""
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Load the global configuration from the XDG config directory.

    Returns:
        The deserialised :class:`~credfile.models.GlobalConfig`. If the
        file does not exist, a default instance is returned.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            Pydantic validation.
    """
    path = _global_config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        text = path.read_text(encoding="utf-8")
        data = json.loads(text)
        return GlobalConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    """Persist the global configuration atomically to disk.

    Args:
        config: The configuration to save.
    """
    data = config.model_dump(mode="json")
    _atomic_write(_global_config_path(), json.dumps(data, indent=2) + "\n")


# --- Project-local config ---


def load_project_config() -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``./credfile.json``.

    Project-local config sits between global config and environment
    variables in the precedence chain. It typically pins the netrc output
    format for a repository, e.g. ``{"netrc": {"format": "full"}}``.

    Returns:
        The parsed JSON as a dict, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file exists but contains invalid JSON.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    try:
        text = path.read_text(encoding="utf-8")
        return json.loads(text)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc


# --- Precedence resolution ---


def _coerce_format(value: str, origin: str) -> NetrcFormat:
    try:
        return NetrcFormat(value.lower())
    except ValueError:
        allowed = ", ".join(f.value for f in NetrcFormat)
        raise ConfigError(
            f"Invalid netrc format '{value}' from {origin} (expected one of: {allowed})"
        ) from None


def resolve_config(cli_format: Optional[str] = None) -> GlobalConfig:
    """Resolve config with full precedence chain.

    Precedence (high to low):
        1. CLI flag (``cli_format``)
        2. Environment variable (``CREDFILE_NETRC_FORMAT``)
        3. Project config (``./credfile.json``)
        4. User config (``~/.config/credfile/config.json``)
        5. Defaults

    Returns:
        The effective :class:`~credfile.models.GlobalConfig`.

    Raises:
        ConfigError: If any layer supplies an unknown netrc format.
    """
    # 5 + 4. Load base global config (fills in defaults automatically)
    global_cfg = load_global_config()

    # 3. Layer in project-local config
    project = load_project_config()
    if project is not None:
        netrc_section = project.get("netrc") or {}
        if "format" in netrc_section:
            global_cfg.netrc.format = _coerce_format(
                str(netrc_section["format"]), _PROJECT_CONFIG_FILENAME
            )
        if "secret_prefix" in netrc_section:
            global_cfg.netrc.secret_prefix = str(netrc_section["secret_prefix"])
        registry_section = project.get("registry") or {}
        if "secret_prefix" in registry_section:
            global_cfg.registry.secret_prefix = str(registry_section["secret_prefix"])

    # 2. Environment variable
    env_format = os.environ.get(ENV_NETRC_FORMAT)
    if env_format:
        global_cfg.netrc.format = _coerce_format(env_format, ENV_NETRC_FORMAT)

    # 1. CLI flag (highest precedence)
    if cli_format is not None:
        global_cfg.netrc.format = _coerce_format(cli_format, "--format")

    return global_cfg
