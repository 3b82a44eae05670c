import os
from typing import Dict, List, Mapping, Optional

from .. import exceptions
from .entry import CacheEntry
from .base import StaticHandler, Snapshot
from ..entities import Request
from ..typehints import Path
from ..utils.mimeutils import mime_type_for, DIRECTORY_DEFAULT_MIME


class StaticServer(StaticHandler):
    """
    Serves static files from a directory

    Every distinct file gets its own cache entry on the first request to it.
    Entries are never removed, so the table grows with the amount of files
    that were ever requested. Keys are resolved filesystem paths, not
    request paths

    The options may contain:

    - gzip = False to disable gzip compression/encoding
    """

    def __init__(self,
                 root: Path,
                 options=None,
                 fs=None,
                 compressor=None,
                 logger=None,
                 types_map: Optional[Mapping[str, str]] = None):
        super(StaticServer, self).__init__(
            options=options,
            fs=fs,
            compressor=compressor,
            logger=logger
        )

        self.root = os.path.abspath(root)
        self.types_map = types_map
        self.table: Dict[Path, CacheEntry] = {}

    def acquire(self, request: Request) -> Snapshot:
        if request.args is not None:
            request_path = '/'.join(request.args)
        else:
            request_path = (request.path or b'').decode('utf-8', 'replace')

        return self.resolve(request_path)

    def resolve(self, request_path: str) -> Snapshot:
        """
        Finds or creates entry for the request path and refreshes it. Creating
        and refreshing are made in the same critical section, so concurrent
        first requests to the file read it only once
        """

        path = self.compose_path(request_path)

        with self.lock:
            entry = self.table.get(path)

            if entry is None:
                if not self.fs.exists(path):
                    raise exceptions.HTTPNotFound(path, msg='no such file')

                if self.fs.is_dir(path):
                    raise exceptions.HTTPForbidden(path, msg='path is a directory')

                entry = CacheEntry(path, mime_type_for(path, DIRECTORY_DEFAULT_MIME, self.types_map))
                self.table[path] = entry
                self.logger.debug(f'StaticServer: new entry {entry}')

            return self._refreshed(entry)

    def compose_path(self, request_path: str) -> Path:
        segments = [segment for segment in request_path.split('/')
                    if segment and segment != '.']

        if '..' in segments:
            raise exceptions.HTTPForbidden(request_path, msg='path leaves the served directory')

        if any('\x00' in segment for segment in segments):
            raise exceptions.HTTPNotFound(request_path, msg='path contains null byte')

        return os.path.join(self.root, *segments)

    def paths(self) -> List[Path]:
        with self.lock:
            return list(self.table)

    def __len__(self):
        return len(self.table)
