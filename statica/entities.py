from typing import Union, Any, List, Optional

from .typehints import Timestamp
from .utils.httputils import (accepts_encoding, format_http_date,
                              parse_http_date, render_http_response,
                              NANOSECONDS)


class CaseInsensitiveDict(dict):
    """
    A class that works absolutely like usual dict, but keys are case-insensitive
    Do not try to make him work with anything that is not bytes or a string!
    """

    def __init__(self, *args, **kwargs):
        super().__init__()
        self.update(dict(*args, **kwargs))

    def __getitem__(self, item: Union[str, bytes]) -> Any:
        return super().__getitem__(item.lower())

    def __setitem__(self, key: Union[str, bytes], value: Any) -> None:
        super().__setitem__(key.lower(), value)

    def __delitem__(self, key: Union[str, bytes]) -> None:
        super().__delitem__(key.lower())

    def __contains__(self, item: Union[str, bytes]) -> bool:
        return super().__contains__(item.lower())

    def get(self, item: Union[str, bytes], instead: Any = None) -> Any:
        return super().get(item.lower(), instead)

    def pop(self, key: Union[str, bytes], *default) -> Any:
        return super().pop(key.lower(), *default)

    def setdefault(self, key: Union[str, bytes], default: Any = None) -> Any:
        return super().setdefault(key.lower(), default)

    def update(self, other=(), **kwargs):
        if hasattr(other, 'items'):
            other = other.items()

        for key, value in other:
            self[key] = value

        for key, value in kwargs.items():
            self[key] = value

    def copy(self) -> 'CaseInsensitiveDict':
        return CaseInsensitiveDict(self.items())


class Request:
    def __init__(self,
                 method: Optional[bytes] = None,
                 path: Optional[bytes] = None,
                 headers: Optional[dict] = None):
        self.method: Optional[bytes] = method
        self.path: Optional[bytes] = path
        self.fragment: Optional[bytes] = None
        self.raw_parameters: Optional[bytes] = None
        self.protocol: Optional[str] = None
        self.headers: CaseInsensitiveDict = CaseInsensitiveDict(headers or {})
        self.body: bytes = b''
        self.keep_alive: bool = True

        # path segments that are left after the mount prefix was matched,
        # static handlers resolve files by them. None if request was not
        # routed through a mount
        self.args: Optional[List[str]] = None

    @property
    def accepts_gzip(self) -> bool:
        return accepts_encoding(self.headers.get('accept-encoding'), 'gzip')

    @property
    def if_modified_since(self) -> Optional[str]:
        return self.headers.get('if-modified-since')


class Response:
    """
    Response class is just a storage
    The actual response will happen after it will be returned
    """

    def __init__(self, default_headers: Optional[CaseInsensitiveDict] = None):
        self.default_headers = default_headers or CaseInsensitiveDict()

        self.code: int = 200
        self.status: Optional[bytes] = None
        self.headers: CaseInsensitiveDict = self.default_headers.copy()
        self.body: Optional[bytes] = None

    def wipe(self):
        self.code = 200
        self.status = None
        self.headers = self.default_headers.copy()
        self.body = None

    def __call__(self,
                 code: int = 200,
                 status: Optional[bytes] = None,
                 headers: Optional[dict] = None,
                 body: Union[bytes, str] = b''
                 ):
        self.code = code
        self.status = status
        self.body = body if isinstance(body, bytes) else body.encode()

        if headers:
            self.headers.update(headers)

        return self

    def send_bytes(self,
                   body: bytes,
                   mime_type: str,
                   last_modified: Timestamp,
                   if_modified_since: Optional[str] = None) -> 'Response':
        """
        Fills the response with file content. If client already has the
        content of the same or later modification time, body is dropped
        and code is set to 304

        HTTP dates have 1-second resolution, so modification time is
        truncated to seconds before comparing
        """

        self.headers['content-type'] = mime_type

        if last_modified:
            self.headers['last-modified'] = format_http_date(last_modified)
            client_has_since = parse_http_date(if_modified_since)

            if client_has_since is not None and \
                    last_modified // NANOSECONDS <= client_has_since:
                self.code = 304
                self.status = None
                self.body = b''
                # body of 304 is always empty, so headers describing it are useless
                self.headers.pop('content-encoding', None)

                return self

        self.code = 200
        self.status = None
        self.body = body

        return self

    def render(self, protocol: bytes = b'1.1', head: bool = False) -> bytes:
        body = self.body or b''

        if head:
            self.headers['content-length'] = len(body)

            return render_http_response(
                protocol=protocol,
                code=self.code,
                status_code=self.status,
                headers=self.headers,
                body=b''
            )

        return render_http_response(
            protocol=protocol,
            code=self.code,
            status_code=self.status,
            headers=self.headers,
            body=body,
            count_content_length=self.code != 304
        )
