"""Package version, shared by packaging metadata and the User-Agent header."""

__version__ = "0.1.0"
