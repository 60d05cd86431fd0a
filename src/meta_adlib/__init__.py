"""Meta Ad Library command-line client package.

This package provides a read-only client for the public Meta Ad Library
API. It includes credential resolution and lifecycle management, query
building, cursor pagination, and table/JSON rendering of ad records.

:var __version__: Current package version
:type __version__: str
"""

__version__ = "0.1.0"
