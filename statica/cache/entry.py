import logging
from typing import Optional

from .. import exceptions
from ..storage.base import FileSystem
from ..typehints import Path, Timestamp, Compressor

logger = logging.getLogger(__name__)


class CacheEntry:
    """
    Cached state of a single file: its content, lazily compressed content,
    modification time and MIME type

    Entry does no locking by itself. Every call of refresh() and
    ensure_compressed() must be made under the lock of the handler
    that owns the entry
    """

    __slots__ = ('path', 'mime_type', 'last_modified', 'raw_bytes', 'compressed_bytes')

    def __init__(self, path: Path, mime_type: str):
        self.path = path
        # resolved once, even if file will be replaced by something else later
        self.mime_type = mime_type
        self.last_modified: Timestamp = 0
        self.raw_bytes: Optional[bytes] = None
        self.compressed_bytes: Optional[bytes] = None

    def refresh(self, fs: FileSystem) -> bool:
        """
        Re-reads file if it was modified since the last read, or was never
        read at all. Returns True if file was re-read

        Costs a single stat call if file wasn't modified. Timestamps that are
        not strictly greater than the stored one are never treated as a
        modification, so a clock going backwards keeps the old content

        May raise HTTPNotFound if file does not exist anymore, HTTPForbidden
        if it became a directory, and HTTPInternalServerError if file exists,
        but can't be read
        """

        last_modified = fs.last_modified(self.path)

        if not last_modified:
            raise exceptions.HTTPNotFound(self.path, msg='file is not available')

        if self.raw_bytes is not None and last_modified <= self.last_modified:
            return False

        # file may be removed between stat and this check
        if not fs.exists(self.path):
            raise exceptions.HTTPNotFound(self.path, msg='file was removed')

        try:
            raw_bytes = fs.read_all(self.path)
        except FileNotFoundError:
            raise exceptions.HTTPNotFound(self.path, msg='file was removed while reading')
        except IsADirectoryError:
            raise exceptions.HTTPForbidden(self.path, msg='file was replaced by a directory')
        except OSError as exc:
            raise exceptions.HTTPInternalServerError(
                self.path, msg=f'failed to read file: {exc}'
            ) from exc

        self.raw_bytes = raw_bytes
        self.last_modified = last_modified
        self.compressed_bytes = None
        logger.debug(f'CacheEntry: read {len(raw_bytes)} bytes from "{self.path}"')

        return True

    def ensure_compressed(self, compressor: Compressor) -> bytes:
        """
        Returns compressed content, compressing it only if current content
        was never compressed before. Entry must be refreshed at least once
        """

        if self.compressed_bytes is not None:
            return self.compressed_bytes

        if self.raw_bytes is None:
            raise exceptions.HTTPInternalServerError(
                self.path, msg='compression requested before the file was read'
            )

        try:
            compressed = compressor(self.raw_bytes)
        except Exception as exc:
            raise exceptions.HTTPInternalServerError(
                self.path, msg=f'failed to compress file: {exc}'
            ) from exc

        self.compressed_bytes = compressed
        logger.debug(f'CacheEntry: compressed "{self.path}" '
                     f'({len(self.raw_bytes)} -> {len(compressed)} bytes)')

        return compressed

    def __repr__(self):
        return f'<CacheEntry path={self.path!r} mime_type={self.mime_type!r} ' \
               f'last_modified={self.last_modified}>'
