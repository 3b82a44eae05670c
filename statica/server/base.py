import abc
import socket
from typing import Callable, Tuple

from ..typehints import AsyncFunction
from ..entities import CaseInsensitiveDict


class HTTPServer(abc.ABC):
    """
    Base class for HTTP server implementations

    The socket must be already bound. Server starts listening on it as
    soon as it's constructed, so connections made before poll() wait in
    the backlog instead of being refused
    """

    def __init__(self,
                 sock: socket.socket,
                 max_conns: int,
                 on_begin_serving: Callable[[], None],
                 on_message_complete: AsyncFunction,
                 default_headers: CaseInsensitiveDict):
        self.sock = sock
        self.on_begin_serving = on_begin_serving
        self.on_message_complete = on_message_complete
        self.default_headers = default_headers

        sock.listen(max_conns)

    @property
    def address(self) -> Tuple[str, int]:
        host, port = self.sock.getsockname()[:2]

        return host, port

    @abc.abstractmethod
    async def poll(self) -> None:
        """
        Serves connections until stop() is called. Must call on_begin_serving
        once, when the server is ready to accept connections
        """

    @abc.abstractmethod
    def stop(self) -> None:
        """
        Stops accepting new connections. Safe to call before poll()
        """
