"""Built-in CLI sub-commands for postfetch.

* :mod:`~postfetch.commands.posts` -- typed post lookups.
* :mod:`~postfetch.commands.fetch` -- generic proxy to any upstream path.
* :mod:`~postfetch.commands.export` -- PDF, DOCX, and RTF documents.
* :mod:`~postfetch.commands.cache` -- inspect and clear the response cache.
* :mod:`~postfetch.commands.config` -- view and modify global settings.

Multi-command groups export a :class:`typer.Typer` sub-application; single
commands export a plain callback registered on the root app.
"""
