import os

from .base import FileSystem
from ..typehints import Path, Timestamp


class LocalFileSystem(FileSystem):
    """
    A plain os-backed accessor. Nothing is cached here, every call goes
    to the filesystem
    """

    def exists(self, path: Path) -> bool:
        return os.path.exists(path)

    def is_dir(self, path: Path) -> bool:
        return os.path.isdir(path)

    def last_modified(self, path: Path) -> Timestamp:
        try:
            return os.stat(path).st_mtime_ns
        except OSError:
            return 0

    def read_all(self, path: Path) -> bytes:
        with open(path, 'rb') as fd:
            return fd.read()
