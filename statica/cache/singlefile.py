import os
from typing import Mapping, Optional

from .entry import CacheEntry
from .base import StaticHandler, Snapshot
from ..entities import Request
from ..typehints import Path
from ..utils.mimeutils import mime_type_for, SINGLE_FILE_DEFAULT_MIME


class StaticFile(StaticHandler):
    """
    Serves a single file for whatever request path. Same as StaticServer,
    but entry is created once in constructor, so there is no table

    File doesn't have to exist at the moment of construction, requests
    will be answered with 404 until it appears
    """

    def __init__(self,
                 path: Path,
                 options=None,
                 fs=None,
                 compressor=None,
                 logger=None,
                 types_map: Optional[Mapping[str, str]] = None):
        super(StaticFile, self).__init__(
            options=options,
            fs=fs,
            compressor=compressor,
            logger=logger
        )

        path = os.path.abspath(path)
        self.entry = CacheEntry(path, mime_type_for(path, SINGLE_FILE_DEFAULT_MIME, types_map))

    @property
    def path(self) -> Path:
        return self.entry.path

    def acquire(self, request: Optional[Request] = None) -> Snapshot:
        with self.lock:
            return self._refreshed(self.entry)
