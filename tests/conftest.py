import os
import time
import threading

import pytest

from statica.storage.local import LocalFileSystem
from statica.utils.compress import gzip_compress

NS = 1_000_000_000
T1 = 1_600_000_000 * NS
T2 = T1 + 5 * NS


class CountingFileSystem(LocalFileSystem):
    """
    Counts stat calls and reads. May sleep while reading, so concurrent
    readers have a chance to overlap
    """

    def __init__(self, read_delay: float = 0):
        self.read_delay = read_delay
        self.stats = 0
        self.reads = 0
        self._lock = threading.Lock()

    def last_modified(self, path):
        with self._lock:
            self.stats += 1

        return super().last_modified(path)

    def read_all(self, path):
        with self._lock:
            self.reads += 1

        if self.read_delay:
            time.sleep(self.read_delay)

        return super().read_all(path)


class CountingCompressor:
    def __init__(self):
        self.calls = 0

    def __call__(self, data: bytes) -> bytes:
        self.calls += 1

        return gzip_compress(data)


def write_file(path, content: bytes, mtime: int = T1):
    with open(path, 'wb') as fd:
        fd.write(content)

    os.utime(path, ns=(mtime, mtime))

    return str(path)


@pytest.fixture
def fs():
    return CountingFileSystem()


@pytest.fixture
def compressor():
    return CountingCompressor()


@pytest.fixture
def site(tmp_path):
    site_dir = tmp_path / 'site'
    site_dir.mkdir()

    return site_dir
