"""Configuration management with atomic writes and precedence resolution.

This module handles all persistent configuration for webex_auth:

* **Directory layout** -- everything lives in one directory,
  ``$WEBEX_AUTH_HOME`` or ``~/.webex-cli/`` by default. The token files
  written by :class:`~webex_auth.auth.token_store.TokenStore`, the
  ``settings.json`` file, and crash logs all sit beneath it so that the
  documented ``source ~/.webex-cli/webex-env.sh`` hint stays stable.
* **Settings** -- a single :class:`~webex_auth.models.Settings` JSON file
  storing portal URLs, timeouts and selector overrides.
* **Precedence resolution** -- :func:`resolve_settings` merges CLI flags,
  environment variables, and the settings file into the effective settings.

All file writes use an atomic temp-file-then-rename strategy
(:func:`atomic_write`) to prevent data loss on crash or power failure.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Optional

from webex_auth.exceptions import ConfigError
from webex_auth.models import Settings

_HOME_ENV_VAR = "WEBEX_AUTH_HOME"
_DEFAULT_DIRNAME = ".webex-cli"
_SETTINGS_FILENAME = "settings.json"

_TRUTHY = ("1", "true", "yes", "on")


# --- Directory resolution ---


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    ``$WEBEX_AUTH_HOME`` when set, ``~/.webex-cli/`` otherwise.

    Returns:
        Absolute path to the configuration directory (guaranteed to exist).
    """
    env_value = os.environ.get(_HOME_ENV_VAR, "")
    path = Path(env_value).expanduser() if env_value else Path.home() / _DEFAULT_DIRNAME
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_logs_dir() -> Path:
    """Return the crash-log directory (``<config_dir>/logs/``), creating it if necessary."""
    path = get_config_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def atomic_write(path: Path, data: str, mode: Optional[int] = None) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is guaranteed to be an atomic rename on POSIX systems.
    On success the temp file is renamed over *path*; on any failure the temp
    file is cleaned up.

    Args:
        path: Destination file.
        data: Full text content.
        mode: Optional permission bits applied to the temp file before any
            content is written (e.g. ``0o600`` for secrets).
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
        if mode is not None:
            os.chmod(tmp_path, mode)
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close in the except branch
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


# --- Settings ---


def settings_path() -> Path:
    """Path to the settings file."""
    return get_config_dir() / _SETTINGS_FILENAME


def load_settings() -> Settings:
    """Load settings from the config directory.

    Returns:
        The deserialised :class:`~webex_auth.models.Settings`. If the
        file does not exist, a default instance is returned.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            Pydantic validation.
    """
    path = settings_path()
    if not path.is_file():
        return Settings()
    try:
        text = path.read_text(encoding="utf-8")
        data = json.loads(text)
        return Settings.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid settings at {path}: {exc}") from exc


def save_settings(settings: Settings) -> None:
    """Persist settings atomically to disk."""
    data = settings.model_dump(mode="json")
    atomic_write(settings_path(), json.dumps(data, indent=2) + "\n")


# --- Precedence resolution ---


def resolve_settings(
    cli_email: Optional[str] = None,
    cli_headless: Optional[bool] = None,
    cli_confirm_timeout: Optional[int] = None,
) -> Settings:
    """Resolve settings with the full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_email``, ``cli_headless``, ``cli_confirm_timeout``)
        2. Environment variables (``WEBEX_AUTH_EMAIL``, ``WEBEX_AUTH_HEADLESS``)
        3. Settings file (``<config_dir>/settings.json``)
        4. Defaults

    Args:
        cli_email: Sign-in email from ``--email``.
        cli_headless: ``True`` when ``--headless`` was passed.
        cli_confirm_timeout: Confirmation wait in seconds from
            ``--confirm-timeout``.

    Returns:
        The effective :class:`~webex_auth.models.Settings`.
    """
    settings = load_settings()
    updates: dict[str, object] = {}

    env_email = os.environ.get("WEBEX_AUTH_EMAIL")
    if env_email:
        updates["email"] = env_email
    env_headless = os.environ.get("WEBEX_AUTH_HEADLESS")
    if env_headless:
        updates["headless"] = env_headless.strip().lower() in _TRUTHY

    if cli_email is not None:
        updates["email"] = cli_email
    if cli_headless is not None:
        updates["headless"] = cli_headless
    if cli_confirm_timeout is not None:
        if cli_confirm_timeout <= 0:
            raise ConfigError("Confirmation timeout must be a positive number of seconds")
        updates["confirmation_timeout_ms"] = cli_confirm_timeout * 1000

    if not updates:
        return settings
    return settings.model_copy(update=updates)


def resolve_sign_in_email(settings: Settings) -> str:
    """Return the email typed into the sign-in form.

    Uses ``settings.email`` when set, otherwise the login name of the
    current user at ``settings.email_domain``.
    """
    if settings.email:
        return settings.email
    username = os.environ.get("USER") or os.environ.get("USERNAME") or "user"
    return f"{username}@{settings.email_domain}"
