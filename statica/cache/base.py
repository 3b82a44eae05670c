import abc
import logging
import threading
from typing import Union, Optional, Tuple

from .. import exceptions
from .entry import CacheEntry
from ..storage.base import FileSystem
from ..entities import Request, Response
from ..options import StaticOptions
from ..storage.local import LocalFileSystem
from ..utils.compress import make_gzip_compressor
from ..utils.httputils import render_error_page
from ..typehints import Compressor, Logger, Timestamp

# entry, its content and modification time, taken at the same moment
Snapshot = Tuple[CacheEntry, bytes, Timestamp]


class StaticHandler(abc.ABC):
    """
    The base class for handlers serving files from cache entries

    A single lock is shared by all the entries of the handler. It guards
    entries lookup, refreshing and compression, each of them being a
    separate critical section
    """

    def __init__(self,
                 options: Union[StaticOptions, dict, None] = None,
                 fs: Optional[FileSystem] = None,
                 compressor: Optional[Compressor] = None,
                 logger: Optional[Logger] = None):
        self.options = StaticOptions.make(options)
        self.fs = fs or LocalFileSystem()
        self.compressor = compressor or make_gzip_compressor(self.options.gzip_level)
        self.logger = logger or logging.getLogger(self.__class__.__module__)
        self.lock = threading.Lock()

    @abc.abstractmethod
    def acquire(self, request: Request) -> Snapshot:
        """
        Finds an entry for the request and refreshes it. Must raise
        HTTPError subclass if request can't be served
        """

    def serve(self, request: Request, response: Response) -> Response:
        entry, body, last_modified = self.acquire(request)

        if self.options.gzip:
            response.headers['vary'] = 'Accept-Encoding'

            if request.accepts_gzip:
                with self.lock:
                    body = entry.ensure_compressed(self.compressor)
                    last_modified = entry.last_modified

                response.headers['content-encoding'] = 'gzip'

        return response.send_bytes(body, entry.mime_type, last_modified,
                                   request.if_modified_since)

    def handle(self, request: Request, response: Response) -> int:
        """
        Serves the request into response. Returns 200 if file content was
        given to the response (even if response decided to reply with 304),
        otherwise code of the error
        """

        try:
            self.serve(request, response)
        except exceptions.HTTPInternalServerError as exc:
            self.logger.error(f'{self.__class__.__name__}: {exc.path}: {exc}')
            self._fill_error(response, exc)

            return exc.code
        except exceptions.HTTPError as exc:
            self.logger.debug(f'{self.__class__.__name__}: {exc.code} {exc.path}: {exc}')
            self._fill_error(response, exc)

            return exc.code
        except Exception:  # noqa: client must get a response anyway
            self.logger.exception(f'{self.__class__.__name__}: unexpected error while serving '
                                  f'{request.path!r}:')
            self._fill_error(response, exceptions.HTTPInternalServerError())

            return exceptions.HTTPInternalServerError.code

        return 200

    def _refreshed(self, entry: CacheEntry) -> Snapshot:
        """
        Must be called under self.lock
        """

        try:
            entry.refresh(self.fs)
        except exceptions.HTTPNotFound:
            if entry.raw_bytes is not None:
                self.logger.warning(f'{self.__class__.__name__}: cached file "{entry.path}" '
                                    'is not available anymore')

            raise

        return entry, entry.raw_bytes, entry.last_modified

    @staticmethod
    def _fill_error(response: Response, exc: exceptions.HTTPError) -> None:
        response.headers.pop('content-encoding', None)
        response(
            code=exc.code,
            status=exc.description,
            headers={'content-type': 'text/html'},
            body=render_error_page(exc.code, exc.description)
        )
