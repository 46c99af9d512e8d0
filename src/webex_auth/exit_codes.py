"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant is referenced by the corresponding
:class:`~webex_auth.exceptions.WebexAuthError` subclass. Shell wrappers only
need to distinguish success from failure for ``webex-auth login``; the
remaining codes separate usage mistakes and interrupts from acquisition
failures.

Example::

    $ webex-auth login
    $ echo $?
    1   # EXIT_GENERIC_FAILURE -- no valid token was obtained
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""The acquisition attempt failed or an unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or an invalid config key."""

EXIT_CANCELLED = 130
"""The user interrupted the command with Ctrl-C."""
