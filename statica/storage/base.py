"""
Storage is an accessor for the files that static handlers are serving. Cache
entries never touch `os` directly, so the way files are checked and read may
be replaced (e.g. in tests, to count disk reads)
"""

import abc

from ..typehints import Path, Timestamp


class FileSystem(abc.ABC):
    @abc.abstractmethod
    def exists(self, path: Path) -> bool:
        """
        Whether anything (file or directory) exists by the path
        """

    @abc.abstractmethod
    def is_dir(self, path: Path) -> bool:
        """
        Whether path is an existing directory
        """

    @abc.abstractmethod
    def last_modified(self, path: Path) -> Timestamp:
        """
        Modification time of the file. Returns 0 if file does not exist
        or is not accessible
        """

    @abc.abstractmethod
    def read_all(self, path: Path) -> bytes:
        """
        Reads the whole file. May raise OSError
        """
