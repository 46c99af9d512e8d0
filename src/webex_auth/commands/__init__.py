"""Built-in CLI sub-commands for webex-auth.

* :mod:`~webex_auth.commands.login` -- acquire and store a token.
* :mod:`~webex_auth.commands.info` -- show what is stored.
* :mod:`~webex_auth.commands.config` -- view and modify ``settings.json``.

``login`` and ``info`` export plain callbacks registered directly on the
root app; ``config`` exports a :class:`typer.Typer` sub-application.
"""
