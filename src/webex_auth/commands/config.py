"""Config commands -- view and modify ``settings.json``.

Provides the ``webex-auth config`` sub-command group. Settings control the
portal and identity URLs, the default sign-in email, browser mode, the
timeouts of every wait, and the selector alternatives for each element the
acquisition flow touches.
"""

from __future__ import annotations

import json
from typing import Any

import typer

from webex_auth.output import error, format_response, info, success


config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show() -> None:
    """Show current settings.

    Example::

        webex-auth config show
        webex-auth --json config show
    """
    from webex_auth.config import get_config_dir, load_settings
    from webex_auth.exceptions import WebexAuthError

    try:
        settings = load_settings()
    except WebexAuthError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    info(f"Config directory: {get_config_dir()}")
    format_response(settings.model_dump(mode="json"))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(
        help="Settings key (dot notation, e.g. 'locators.avatar')."
    ),
    value: str = typer.Argument(help="Value to set."),
) -> None:
    """Set a settings value.

    Uses dot notation for nested keys. The value is coerced to the type of
    the current value: booleans accept ``true/1/yes``, integers must parse,
    and selector lists accept a JSON array or a comma-separated string.
    Optional fields accept ``null`` or ``none`` to clear them.

    Raises:
        typer.Exit: With code 2 if the key path is invalid, the value
            cannot be coerced, or validation fails.

    Example::

        webex-auth config set email jdoe@example.com
        webex-auth config set confirmation_timeout_ms 120000
        webex-auth config set locators.avatar '[".md-avatar", "img.user-image"]'
    """
    from pydantic import ValidationError

    from webex_auth.config import load_settings, save_settings
    from webex_auth.exceptions import WebexAuthError
    from webex_auth.models import Settings

    try:
        settings = load_settings()
    except WebexAuthError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    data = settings.model_dump(mode="json")

    keys = key.split(".")
    target = data
    for k in keys[:-1]:
        if k not in target or not isinstance(target[k], dict):
            error(f"Invalid settings key: {key}")
            raise typer.Exit(code=2)
        target = target[k]

    final_key = keys[-1]
    if final_key not in target or isinstance(target[final_key], dict):
        error(f"Unknown settings key: {key}")
        raise typer.Exit(code=2)

    try:
        coerced = _coerce(target[final_key], value)
    except ValueError as exc:
        error(f"Invalid value for {key}: {exc}")
        raise typer.Exit(code=2) from None

    target[final_key] = coerced

    try:
        new_settings = Settings.model_validate(data)
    except ValidationError as exc:
        error(f"Validation error: {exc}")
        raise typer.Exit(code=2) from None

    save_settings(new_settings)
    success(f"Set {key} = {coerced}")


@config_app.command("reset")
def config_reset(
    ctx: typer.Context,
) -> None:
    """Reset settings to defaults.

    Asks for confirmation unless ``--force`` is active. Stored tokens are
    not touched.

    Example::

        webex-auth config reset
        webex-auth --force config reset
    """
    from webex_auth.config import save_settings
    from webex_auth.models import Settings

    force = ctx.obj.get("force", False) if ctx.obj else False
    if not force:
        confirmed = typer.confirm("Reset all settings to defaults?")
        if not confirmed:
            info("Cancelled.")
            raise typer.Exit()

    save_settings(Settings())
    success("Settings reset to defaults.")


def _coerce(current: Any, value: str) -> Any:
    """Convert the string *value* to the type of *current*."""
    if isinstance(current, bool):
        return value.lower() in ("true", "1", "yes")
    if isinstance(current, int):
        try:
            return int(value)
        except ValueError:
            raise ValueError(f"expected an integer, got {value!r}") from None
    if isinstance(current, list):
        stripped = value.strip()
        if stripped.startswith("["):
            try:
                parsed = json.loads(stripped)
            except json.JSONDecodeError as exc:
                raise ValueError(f"not a JSON array: {exc}") from None
            if not isinstance(parsed, list) or not all(isinstance(v, str) for v in parsed):
                raise ValueError("expected a JSON array of strings")
            return parsed
        return [part.strip() for part in value.split(",") if part.strip()]
    if value.lower() in ("null", "none"):
        return None
    return value
