import socket
import logging
import asyncio
from traceback import format_exc
from dataclasses import dataclass, field
from typing import Type, Union, Optional

from .utils import sockutils
from .server.base import HTTPServer
from .entities import CaseInsensitiveDict
from .dispatcher.base import BaseDispatcher
from .server.aiohttpserver import AioHTTPServer

logging.basicConfig(
    format='[%(asctime)s] [%(levelname)s] %(name)s: %(message)s'
)


@dataclass
class Settings:
    host: str = field(default='127.0.0.1')
    port: int = field(default=9090)
    max_bind_retries: Optional[int] = field(default=None)
    bind_retries_timeout: Union[int, float] = field(default=3)
    max_connections: Optional[int] = field(default=1024)

    default_headers: CaseInsensitiveDict = field(
        default_factory=lambda: CaseInsensitiveDict(
            server='statica',
            connection='keep-alive'
        )
    )

    logger: logging.Logger = field(default_factory=lambda: logging.getLogger('statica'))

    httpserver: Type[HTTPServer] = field(default=AioHTTPServer)

    asyncio_logging: bool = field(default=True)
    asyncio_logging_level: int = field(default=logging.DEBUG)


class WebServer:
    def __init__(self, settings: Optional[Settings] = None):
        settings = settings or Settings()
        self.logger = settings.logger
        asyncio_logger = logging.getLogger('asyncio')
        asyncio_logger.disabled = not settings.asyncio_logging
        asyncio_logger.setLevel(settings.asyncio_logging_level)

        self.settings = settings
        self.http_server: Optional[HTTPServer] = None

    def run(self, dp: BaseDispatcher):
        """
        Binds the socket and serves requests with the dispatcher until
        interrupted. Every static handler attached to the dispatcher keeps
        its cache for as long as this process lives
        """

        if not isinstance(dp, BaseDispatcher):
            raise TypeError(f'{dp} object must be inherited from '
                            'statica.dispatcher.base.BaseDispatcher object!')

        sock = socket.socket()
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, True)

        if hasattr(socket, 'SO_REUSEPORT'):
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEPORT, True)

        self.logger.debug(f'trying to bind on {self.settings.host}:{self.settings.port}...')

        succeeded, retries_went = sockutils.bind_sock(
            sock=sock,
            addr=(self.settings.host, self.settings.port),
            max_retries=self.settings.max_bind_retries,
            retries_timeout=self.settings.bind_retries_timeout
        )

        if not succeeded:
            self.logger.error(f'failed to bind server on {self.settings.host}:{self.settings.port}: '
                              f'max retries exceeded (retries={retries_went}, '
                              f'retries_timeout={self.settings.bind_retries_timeout})')
            sock.close()
            raise SystemExit(1)

        self.logger.info(f'successfully bound socket on {self.settings.host}:{self.settings.port}')
        self.logger.info('press CTRL-C to stop the server')

        self.http_server = self.settings.httpserver(
            sock,
            self.settings.max_connections,
            dp.on_begin_serving,
            dp.process_request,
            self.settings.default_headers
        )

        try:
            self._serve()
        finally:
            dp.close()
            sock.close()

    def _serve(self):
        while True:
            loop = asyncio.new_event_loop()

            try:
                loop.run_until_complete(self.http_server.poll())
            except (KeyboardInterrupt, SystemExit, EOFError):
                self.logger.info('shutting down (aborted by user)...')
                self.stop()

                break
            except Exception as exc:
                self.logger.exception(f'an error occurred while running http server: {exc}\n'
                                      f'Detailed trace:\n{format_exc()}')
                self.logger.info('continuing the job')
            finally:
                loop.close()

    def stop(self):
        if self.http_server is not None:
            self.http_server.stop()
