"""Tests for webex_auth.config -- directories, atomic writes, settings precedence."""

from __future__ import annotations

import json
import os
import stat
from pathlib import Path
from unittest.mock import patch

import pytest

from webex_auth.config import (
    atomic_write,
    get_config_dir,
    get_logs_dir,
    load_settings,
    resolve_settings,
    resolve_sign_in_email,
    save_settings,
    settings_path,
)
from webex_auth.exceptions import ConfigError
from webex_auth.models import Settings


class TestDirectories:
    def test_default_is_home_webex_cli(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("WEBEX_AUTH_HOME", raising=False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))
        result = get_config_dir()
        assert result == tmp_path / ".webex-cli"
        assert result.is_dir()

    def test_env_override(self, isolated_config: Path) -> None:
        assert get_config_dir() == isolated_config
        assert isolated_config.is_dir()

    def test_logs_dir(self, isolated_config: Path) -> None:
        assert get_logs_dir() == isolated_config / "logs"
        assert get_logs_dir().is_dir()


class TestAtomicWrite:
    def test_writes_content(self, tmp_path: Path) -> None:
        target = tmp_path / "sub" / "file.txt"
        atomic_write(target, "hello\n")
        assert target.read_text() == "hello\n"

    @pytest.mark.skipif(os.name != "posix", reason="POSIX permissions")
    def test_applies_mode(self, tmp_path: Path) -> None:
        target = tmp_path / "secret"
        atomic_write(target, "x", mode=0o600)
        assert stat.S_IMODE(target.stat().st_mode) == 0o600

    def test_failure_leaves_original_and_no_temp_files(self, tmp_path: Path) -> None:
        target = tmp_path / "file.txt"
        target.write_text("original")
        with patch("webex_auth.config.os.replace", side_effect=OSError("boom")):
            with pytest.raises(OSError):
                atomic_write(target, "new")
        assert target.read_text() == "original"
        assert [p.name for p in tmp_path.iterdir()] == ["file.txt"]


class TestSettingsFile:
    def test_defaults_when_missing(self, isolated_config: Path) -> None:
        assert load_settings() == Settings()

    def test_round_trip(self, isolated_config: Path) -> None:
        save_settings(Settings(email="jdoe@example.com", step_timeout_ms=2_000))
        loaded = load_settings()
        assert loaded.email == "jdoe@example.com"
        assert loaded.step_timeout_ms == 2_000
        assert settings_path().parent == isolated_config

    def test_partial_file_fills_defaults(self, isolated_config: Path) -> None:
        settings_path().write_text(json.dumps({"locators": {"avatar": [".md-avatar"]}}))
        loaded = load_settings()
        assert loaded.locators.avatar == [".md-avatar"]
        assert loaded.locators.login_link == ["#header-login-link"]

    def test_invalid_json(self, isolated_config: Path) -> None:
        settings_path().write_text("{not json")
        with pytest.raises(ConfigError, match="Invalid settings"):
            load_settings()

    def test_invalid_values(self, isolated_config: Path) -> None:
        settings_path().write_text(json.dumps({"step_timeout_ms": 0}))
        with pytest.raises(ConfigError):
            load_settings()

    def test_empty_selector_list_rejected(self, isolated_config: Path) -> None:
        settings_path().write_text(json.dumps({"locators": {"avatar": []}}))
        with pytest.raises(ConfigError):
            load_settings()


class TestResolveSettings:
    def test_file_values(self, isolated_config: Path) -> None:
        save_settings(Settings(email="file@example.com", headless=True))
        resolved = resolve_settings()
        assert resolved.email == "file@example.com"
        assert resolved.headless is True

    def test_env_overrides_file(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        save_settings(Settings(email="file@example.com"))
        monkeypatch.setenv("WEBEX_AUTH_EMAIL", "env@example.com")
        monkeypatch.setenv("WEBEX_AUTH_HEADLESS", "yes")
        resolved = resolve_settings()
        assert resolved.email == "env@example.com"
        assert resolved.headless is True

    def test_cli_overrides_env(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("WEBEX_AUTH_EMAIL", "env@example.com")
        monkeypatch.setenv("WEBEX_AUTH_HEADLESS", "0")
        resolved = resolve_settings(cli_email="cli@example.com", cli_headless=True)
        assert resolved.email == "cli@example.com"
        assert resolved.headless is True

    def test_confirm_timeout_seconds_to_ms(self, isolated_config: Path) -> None:
        assert resolve_settings(cli_confirm_timeout=90).confirmation_timeout_ms == 90_000

    @pytest.mark.parametrize("seconds", [0, -5])
    def test_confirm_timeout_must_be_positive(self, isolated_config: Path, seconds: int) -> None:
        with pytest.raises(ConfigError):
            resolve_settings(cli_confirm_timeout=seconds)


class TestSignInEmail:
    def test_explicit_email(self) -> None:
        assert resolve_sign_in_email(Settings(email="jdoe@example.com")) == "jdoe@example.com"

    def test_derived_from_user(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("USER", "jdoe")
        assert resolve_sign_in_email(Settings(email_domain="example.com")) == "jdoe@example.com"

    def test_fallback_user(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("USER", raising=False)
        monkeypatch.delenv("USERNAME", raising=False)
        assert resolve_sign_in_email(Settings()) == "user@cisco.com"
