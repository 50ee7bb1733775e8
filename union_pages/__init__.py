"""Content rendering and sidebar management for the union's public website.

This package exposes the CLI entry points used by ``union-pages`` to render
articles with embedded galleries, files, ebooks and social posts, and to
inspect or reorder the sidebar menu.

Exports
-------
- ``app``: Cyclopts application entry for subcommands.
- ``main``: Convenience function that invokes the Cyclopts app.

Examples
--------
>>> from union_pages import app
>>> app.name[0]
'union-pages'
"""

from __future__ import annotations

from .cli import app, main

__all__ = ["app", "main"]
