import socket
import asyncio
import logging
import warnings
from typing import Optional, Callable

from httptools import HttpRequestParser, HttpParserError, HttpParserUpgrade

try:
    from uvloop import install as install_uvloop
except ImportError as exc:
    warnings.warn(f'failed to apply uvloop: {exc}')

    def install_uvloop():
        pass

from . import base
from ..typehints import AsyncFunction
from ..entities import Request, Response, CaseInsensitiveDict
from ..utils.httputils import render_http_response
from ..parser.httptools_protocol import Protocol as LLHttpProtocol

install_uvloop()
logger = logging.getLogger(__name__)
PRE_RENDERED_BAD_REQUEST = render_http_response(
    protocol=b'1.1',
    code=400,
    status_code=b'Bad Request',
    headers=b'content-type: text/html\r\ncontent-length: 24\r\nconnection: close',
    body=b'<h1>400 Bad Request</h1>'
)


class AsyncioServerProtocol(asyncio.Protocol):
    def __init__(self,
                 on_message_complete: AsyncFunction,
                 default_headers: CaseInsensitiveDict):
        self.on_message_complete = on_message_complete
        self.default_headers = default_headers
        self.transport: Optional[asyncio.Transport] = None
        self.runner: Optional[asyncio.Future] = None

        self.requests_queue: asyncio.Queue = asyncio.Queue()
        self.protocol = LLHttpProtocol(self.requests_queue.put_nowait)
        self.parser = HttpRequestParser(self.protocol)
        self.protocol.parser = self.parser

    def connection_made(self, transport: asyncio.Transport) -> None:
        self.transport = transport
        self.runner = asyncio.ensure_future(client_runner(
            requests_queue=self.requests_queue,
            callback=self.on_message_complete,
            transport=transport,
            default_headers=self.default_headers
        ))
        self.runner.add_done_callback(_report_runner_failure)

    def data_received(self, data: bytes) -> None:
        try:
            self.parser.feed_data(data)
        except HttpParserUpgrade:
            # upgrades (websockets, h2c) are not supported, request itself
            # is still answered as usual
            pass
        except HttpParserError as exc:
            logger.debug(f'bad request from {self.transport.get_extra_info("peername")}: {exc}')
            self.transport.write(PRE_RENDERED_BAD_REQUEST)
            self.transport.close()

    def connection_lost(self, _) -> None:
        # nobody is left to receive responses, so pending requests are dropped
        if self.runner is not None and not self.runner.done():
            self.runner.cancel()


class AioHTTPServer(base.HTTPServer):
    def __init__(self,
                 sock: socket.socket,
                 max_conns: int,
                 on_begin_serving: Callable,
                 on_message_complete: AsyncFunction,
                 default_headers: CaseInsensitiveDict):
        super(AioHTTPServer, self).__init__(
            sock=sock,
            max_conns=max_conns,
            on_begin_serving=on_begin_serving,
            on_message_complete=on_message_complete,
            default_headers=default_headers
        )

        self.server: Optional[asyncio.AbstractServer] = None

    async def poll(self):
        loop = asyncio.get_running_loop()
        server = await loop.create_server(
            lambda: AsyncioServerProtocol(
                self.on_message_complete,
                self.default_headers
            ),
            sock=self.sock,
            start_serving=False
        )
        self.server = server
        host, port = self.address
        logger.debug(f'accepting connections on {host}:{port}')
        self.on_begin_serving()

        await server.serve_forever()

    def stop(self):
        if self.server is not None:
            self.server.close()


async def client_runner(requests_queue: asyncio.Queue,
                        callback: AsyncFunction,
                        transport: asyncio.Transport,
                        default_headers: CaseInsensitiveDict) -> None:
    """
    Processes requests of a single connection one by one, so responses
    for pipelined requests are written in the same order
    """

    def http_send(data: bytes) -> None:
        if not transport.is_closing():
            transport.write(data)

    while True:
        request: Request = await requests_queue.get()
        response = Response(default_headers)

        if not request.keep_alive:
            response.headers['connection'] = 'close'

        await callback(request, response, http_send)

        if not request.keep_alive:
            transport.close()
            return


def _report_runner_failure(runner: asyncio.Future) -> None:
    if runner.cancelled():
        return

    exc = runner.exception()

    if exc is not None:
        logger.error(f'connection runner failed: {exc!r}', exc_info=exc)
