"""actioncheck - security policy checker for HTTP controller actions."""

__version__ = "0.1.0"


class ActionCheckError(Exception):
    """Base class for every error raised by actioncheck."""
