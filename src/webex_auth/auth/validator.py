"""Candidate token validation against the Webex identity endpoint.

:class:`IdentityValidator` issues one ``GET /v1/people/me`` with the
candidate as a bearer token. HTTP 200 means the token is genuine; every
other status, and every transport error, means it is not. The validator
never raises: the reason for a rejection is printed through
:mod:`webex_auth.output` and kept on :attr:`IdentityValidator.last_diagnostic`.
"""

from __future__ import annotations

import json
from typing import Any, Optional

import httpx

from webex_auth.output import debug, info, success, warning

DEFAULT_IDENTITY_URL = "https://webexapis.com/v1/people/me"


class IdentityValidator:
    """Check a candidate token by asking the API who it belongs to.

    Args:
        identity_url: Read-only endpoint returning the caller's identity.
        timeout: Request timeout in seconds.
        transport: Optional httpx transport (tests pass an
            :class:`httpx.MockTransport`).

    Example::

        validator = IdentityValidator()
        if validator.validate(token):
            print(validator.display_name)
        else:
            print(validator.last_diagnostic)
    """

    last_diagnostic: Optional[str] = None
    display_name: Optional[str] = None

    def __init__(
        self,
        identity_url: str = DEFAULT_IDENTITY_URL,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._identity_url = identity_url
        self._timeout = timeout
        self._transport = transport

    def validate(self, candidate: str) -> bool:
        """Return True when the identity endpoint answers HTTP 200 for *candidate*."""
        self.last_diagnostic = None
        self.display_name = None

        info(f"Calling {self._identity_url}")
        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                response = client.get(
                    self._identity_url,
                    headers={
                        "Authorization": f"Bearer {candidate}",
                        "Accept": "application/json",
                    },
                )
        except httpx.HTTPError as exc:
            self.last_diagnostic = f"Request failed: {exc}"
            warning(self.last_diagnostic)
            return False

        if response.status_code != 200:
            self.last_diagnostic = f"{response.status_code} {response.reason_phrase}".strip()
            warning(f"Identity check returned {self.last_diagnostic}")
            detail = _error_detail(response)
            if detail:
                debug(f"Error details: {detail}")
            return False

        success(f"Identity check returned {response.status_code} {response.reason_phrase}")
        body = _json_body(response)
        if isinstance(body, dict) and body.get("displayName"):
            self.display_name = str(body["displayName"])
            info(f"Authenticated as: {self.display_name}")
        return True


def _json_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


def _error_detail(response: httpx.Response) -> str:
    """Render an error body for the debug log, pretty-printing JSON."""
    body = _json_body(response)
    if body is not None:
        return json.dumps(body, indent=2)
    return response.text.strip()
