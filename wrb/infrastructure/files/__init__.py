"""File system adapters."""

from .local_file_probe import LocalFileProbe, InMemoryFileProbe

__all__ = ["LocalFileProbe", "InMemoryFileProbe"]
