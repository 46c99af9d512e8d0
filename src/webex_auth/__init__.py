"""webex_auth -- obtain a Webex Personal Access Token by driving the developer portal.

The package launches a real browser, walks the portal's sign-in form as far as
it can, waits for the user to finish password entry and any second factor,
then asks the portal to copy the user's Personal Access Token to the
clipboard. The clipboard text is screened by a heuristic classifier,
confirmed against the Webex identity endpoint, and finally written to a
key=value file plus a shell script that can be ``source``-d.

Typical workflow::

    webex-auth login                     # acquire and store a token
    source ~/.webex-cli/webex-env.sh     # export it into the shell
    webex-auth info                      # inspect what is stored

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic models shared across the package.
    config: Config directory resolution and settings persistence.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric process exit codes.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.1.0"
