"""
File Probe Interface.

The only filesystem contact of the run builder: checking whether a value
supplied for a FILE parameter names a local file that has to be uploaded.
"""

from abc import ABC, abstractmethod


class IFileProbe(ABC):
    """Answers whether a local path points at an existing regular file."""

    @abstractmethod
    def is_file(self, path: str) -> bool:
        """
        Check a local path.

        Args:
            path: Path as written in the run configuration

        Returns:
            True if the path exists and is a regular file
        """
        pass
