"""postfetch -- cached access to the JSONPlaceholder API with document export.

This package reads posts from the JSONPlaceholder REST API, memoizes the
reads in a read-through cache, and exports fetched posts as RTF, PDF, or
DOCX documents. Everything is exposed through the ``postfetch`` console
script.

Typical workflow::

    postfetch posts by-owner 1          # envelope with the owner's posts
    postfetch export --format rtf -o posts.rtf

Modules:
    app: Typer application factory and CLI entry point.
    models: Pydantic models shared across the entire package.
    config: XDG-aware configuration and precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
    service: Binds upstream reads to their cache keys.
"""

__version__ = "0.1.0"
