"""Token validation and persistence.

- :class:`IdentityValidator` -- confirms a candidate token with one call to
  the Webex identity endpoint.
- :class:`TokenStore` -- writes validated credentials to the key=value file
  and the sourceable shell script, and reads them back.

Typical usage::

    from webex_auth.auth import IdentityValidator, TokenStore

    if IdentityValidator().validate(token):
        TokenStore().save(Credential(access_token=token))
"""

from webex_auth.auth.token_store import TokenStore
from webex_auth.auth.validator import IdentityValidator

__all__ = [
    "IdentityValidator",
    "TokenStore",
]
