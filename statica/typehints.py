from typing import Callable, Awaitable, Union, Protocol

AsyncFunction = Callable[..., Awaitable]
Path = str
RoutePath = Union[str, bytes]
# nanoseconds since epoch, as os.stat().st_mtime_ns gives it. 0 means "unknown"
Timestamp = int
HTTPMethod = bytes
Compressor = Callable[[bytes], bytes]


class Logger(Protocol):
    def debug(self, text: str) -> None:
        ...

    def info(self, text: str) -> None:
        ...

    def warning(self, text: str) -> None:
        ...

    def error(self, text: str) -> None:
        ...

    def critical(self, text: str) -> None:
        ...

    def exception(self, text: str) -> None:
        ...
