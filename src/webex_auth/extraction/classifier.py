"""Heuristic screening of clipboard text before it is sent anywhere.

When the portal's "copy token" action works, the clipboard holds a Personal
Access Token: a long run of base64-ish characters, typically shaped like::

    YzAwMTQ5NWQtOWM1ZC00ZDg1LTk4MWYtYTEwZTg3MDE2YTE5MjBlNjQ3NTAtYjgz_PF84_1eb65fdf-9643-417f-9974-ad72cae0e10f

When it does not, the clipboard may hold nothing, an error payload with a
``trackingId``, sample text from the docs page, or whatever the user copied
last. :func:`inspect_candidate` rejects the obvious non-tokens so that only
plausible candidates reach the identity endpoint.

This is a safety net, not a format guarantee. Unusual but genuine tokens can
be rejected and well-formed junk can be accepted; the identity call made by
:class:`~webex_auth.auth.validator.IdentityValidator` is the authority.

Rules, applied in order (first failure rejects):

1. Strip a leading ``Bearer`` prefix (case-insensitive) and whitespace.
2. At least :data:`MIN_TOKEN_LENGTH` characters.
3. Only ``A-Z a-z 0-9 + / _ -``.
4. No JSON shape (braces, brackets, quotes, ``key: "value"``, ``, "``,
   ``trackingId``).
5. No placeholder or sample text.
6. At least one digit, one uppercase and one lowercase letter.
"""

from __future__ import annotations

import re
from typing import Optional

from webex_auth.models import ClassificationVerdict

MIN_TOKEN_LENGTH = 80
"""Shortest string accepted as a Personal Access Token."""

_BEARER_PREFIX = re.compile(r"^bearer\s+", re.IGNORECASE)
_TOKEN_CHARSET = re.compile(r"^[A-Za-z0-9+/_-]+$")

_JSON_PATTERNS = (
    re.compile(r"trackingId", re.IGNORECASE),
    re.compile(r"^\{.*\}$", re.DOTALL),
    re.compile(r"^\[.*\]$", re.DOTALL),
    re.compile(r'^".*"$', re.DOTALL),
    re.compile(r':\s*"'),
    re.compile(r',\s*"'),
)

_PLACEHOLDER_PATTERNS = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"^example",
        r"^sample",
        r"^demo",
        r"^test",
        r"^your.token.here",
        r"^replace.with",
        r"^placeholder",
        r"^xxxxxxxx",
        r"^aaaaaa",
        r"^111111",
        r"^000000",
        r"^insert.your",
        r"^put.your",
        r"^add.your",
        r"^enter.your",
        r"^copy.your",
        r"^x{10,}",
        r"^[a-z]{3,}[.][a-z]{3,}",
    )
)

REASON_EMPTY = "clipboard was empty"
REASON_TOO_SHORT = f"shorter than {MIN_TOKEN_LENGTH} characters"
REASON_CHARSET = "contains characters that never appear in a token"
REASON_JSON = "looks like a JSON or diagnostic payload"
REASON_PLACEHOLDER = "looks like placeholder or sample text"
REASON_CHARACTER_MIX = "lacks a mix of digits, uppercase and lowercase letters"


def clean_candidate(text: str) -> str:
    """Remove surrounding whitespace and any leading ``Bearer`` prefixes."""
    cleaned = text.strip()
    while True:
        stripped = _BEARER_PREFIX.sub("", cleaned, count=1).strip()
        if stripped == cleaned:
            return cleaned
        cleaned = stripped


def inspect_candidate(text: Optional[str]) -> ClassificationVerdict:
    """Classify *text* and report which rule, if any, rejected it.

    Args:
        text: Raw clipboard text, or ``None`` when nothing was read.

    Returns:
        A :class:`~webex_auth.models.ClassificationVerdict` whose ``token``
        is the cleaned candidate.
    """
    token = clean_candidate(text or "")

    def reject(reason: str) -> ClassificationVerdict:
        return ClassificationVerdict(accepted=False, token=token, reason=reason)

    if not token:
        return reject(REASON_EMPTY)
    if len(token) < MIN_TOKEN_LENGTH:
        return reject(REASON_TOO_SHORT)
    if not _TOKEN_CHARSET.match(token):
        return reject(REASON_CHARSET)
    if any(pattern.search(token) for pattern in _JSON_PATTERNS):
        return reject(REASON_JSON)
    if any(pattern.search(token) for pattern in _PLACEHOLDER_PATTERNS):
        return reject(REASON_PLACEHOLDER)

    has_digit = any(ch.isdigit() for ch in token)
    has_upper = any(ch.isupper() for ch in token)
    has_lower = any(ch.islower() for ch in token)
    if not (has_digit and has_upper and has_lower):
        return reject(REASON_CHARACTER_MIX)

    # '_' and '-' are typical of Personal Access Tokens but not required.
    return ClassificationVerdict(accepted=True, token=token)


def classify(text: Optional[str]) -> bool:
    """Return True when *text* is plausibly a Personal Access Token."""
    return inspect_candidate(text).accepted
