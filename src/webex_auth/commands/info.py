"""Info command -- show the stored token without revealing it."""

from __future__ import annotations

import typer

from webex_auth.output import error, info, print_table, suggest


def info_command() -> None:
    """Show the stored token's preview, expiry and location.

    Only the first 20 characters of the token are printed.

    Example::

        webex-auth info
        webex-auth --json info
    """
    from webex_auth.auth import TokenStore
    from webex_auth.exceptions import WebexAuthError

    store = TokenStore()
    try:
        stored = store.load()
    except WebexAuthError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    if stored is None:
        info("No token found.")
        suggest("Get one: webex-auth login")
        return

    expires = stored.expires_at
    if expires is None:
        expires_text = "never"
    else:
        expires_text = expires.isoformat()
        if stored.is_expired:
            expires_text += " (EXPIRED)"

    rows = [
        ["Config Directory", str(store.config_dir)],
        ["Access Token", f"{stored.access_token[:20]}..."],
        ["Refresh Token", f"{stored.refresh_token[:20]}..." if stored.refresh_token else "-"],
        ["Expires", expires_text],
        ["Expired", "yes" if stored.is_expired else "no"],
    ]
    print_table(["Field", "Value"], rows, title="Stored Token")
    suggest(f"Load it into your shell: source {store.script_path}")
