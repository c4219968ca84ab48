"""
File probes.

LocalFileProbe checks the real filesystem; InMemoryFileProbe answers from a
fixed set of paths and is used in tests and dry runs.
"""

from pathlib import Path
from typing import Iterable, Optional, Set

from wrb.domain.interfaces.file_probe import IFileProbe


class LocalFileProbe(IFileProbe):
    """Filesystem-backed probe, relative paths resolve against `base_dir`."""

    def __init__(self, base_dir: Optional[str] = None):
        self._base_dir = Path(base_dir) if base_dir else None

    def is_file(self, path: str) -> bool:
        candidate = Path(path).expanduser()
        if self._base_dir is not None and not candidate.is_absolute():
            candidate = self._base_dir / candidate
        return candidate.is_file()


class InMemoryFileProbe(IFileProbe):
    """Probe answering from a known set of paths."""

    def __init__(self, paths: Iterable[str] = ()):
        self._paths: Set[str] = set(paths)

    def add(self, path: str) -> None:
        self._paths.add(path)

    def is_file(self, path: str) -> bool:
        return path in self._paths
