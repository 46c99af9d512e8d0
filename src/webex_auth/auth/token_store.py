"""Persistent token storage for shell-level reuse.

A validated :class:`~webex_auth.models.Credential` is written to two files
in the config directory (``~/.webex-cli/`` by default):

- ``.env`` -- ``KEY=value`` lines. Only the three token keys are replaced;
  every other line the user keeps there survives, in order.
- ``webex-env.sh`` -- a script exporting the same three values, meant to
  be ``source``-d from a shell or a shell profile. Always fully rewritten.

Both files are written atomically via :func:`~webex_auth.config.atomic_write`
with ``0o600`` permissions so the token is never world-readable, even
momentarily.

See Also:
    :class:`~webex_auth.extraction.orchestrator.ExtractionOrchestrator` --
    the only producer of credentials.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from webex_auth.config import atomic_write, get_config_dir
from webex_auth.exceptions import PersistenceError
from webex_auth.models import Credential, StoredToken

ACCESS_TOKEN_KEY = "WEBEX_ACCESS_TOKEN"
REFRESH_TOKEN_KEY = "WEBEX_REFRESH_TOKEN"
EXPIRES_AT_KEY = "WEBEX_TOKEN_EXPIRES_AT"
TOKEN_KEYS = (ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY, EXPIRES_AT_KEY)

ENV_FILENAME = ".env"
SCRIPT_FILENAME = "webex-env.sh"

_SECRET_MODE = 0o600


def _is_token_line(line: str) -> bool:
    return any(line.startswith(f"{key}=") for key in TOKEN_KEYS)


class TokenStore:
    """Read and write the token files in one config directory.

    Args:
        config_dir: Directory holding the files. Defaults to
            :func:`~webex_auth.config.get_config_dir`.

    Example::

        store = TokenStore()
        store.save(Credential(access_token="..."))
        stored = store.load()
        assert stored is not None and stored.expires_at is None
    """

    def __init__(self, config_dir: Optional[Path] = None) -> None:
        self._dir = config_dir if config_dir is not None else get_config_dir()

    @property
    def config_dir(self) -> Path:
        return self._dir

    @property
    def env_path(self) -> Path:
        """The key=value file."""
        return self._dir / ENV_FILENAME

    @property
    def script_path(self) -> Path:
        """The shell script exporting the token variables."""
        return self._dir / SCRIPT_FILENAME

    def save(self, credential: Credential) -> None:
        """Write *credential* to both files.

        Raises:
            PersistenceError: If either file cannot be read or written.
        """
        values = {
            ACCESS_TOKEN_KEY: credential.access_token,
            REFRESH_TOKEN_KEY: credential.refresh_token,
            EXPIRES_AT_KEY: str(credential.expires_at_ms),
        }

        try:
            kept = [
                line
                for line in self._read_env_lines()
                if line.strip() and not _is_token_line(line)
            ]
            env_lines = kept + [f"{key}={value}" for key, value in values.items()]
            atomic_write(self.env_path, "\n".join(env_lines) + "\n", mode=_SECRET_MODE)

            script_lines = ["#!/bin/bash", "# Webex CLI Token Environment Variables"]
            script_lines += [f'export {key}="{value}"' for key, value in values.items()]
            atomic_write(self.script_path, "\n".join(script_lines) + "\n", mode=_SECRET_MODE)
        except OSError as exc:
            raise PersistenceError(f"Could not write token files in {self._dir}: {exc}") from exc

    def load(self) -> Optional[StoredToken]:
        """Read the token keys back from the key=value file.

        Returns:
            The stored values, or ``None`` when the file is missing or has
            no access token.

        Raises:
            PersistenceError: If the file cannot be read or the expiry is
                not an integer.
        """
        try:
            lines = self._read_env_lines()
        except OSError as exc:
            raise PersistenceError(f"Could not read {self.env_path}: {exc}") from exc

        found: dict[str, str] = {}
        for line in lines:
            key, sep, value = line.partition("=")
            if sep and key in TOKEN_KEYS:
                found[key] = value.strip()

        access_token = found.get(ACCESS_TOKEN_KEY)
        if not access_token:
            return None

        raw_expiry = found.get(EXPIRES_AT_KEY) or "0"
        try:
            expires_at_ms = int(raw_expiry)
        except ValueError:
            raise PersistenceError(
                f"Invalid {EXPIRES_AT_KEY} value in {self.env_path}: {raw_expiry!r}"
            ) from None

        return StoredToken(
            access_token=access_token,
            refresh_token=found.get(REFRESH_TOKEN_KEY, ""),
            expires_at_ms=expires_at_ms,
        )

    def _read_env_lines(self) -> list[str]:
        if not self.env_path.is_file():
            return []
        return self.env_path.read_text(encoding="utf-8").splitlines()
