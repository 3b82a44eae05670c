from typing import Callable, Optional

from httptools import HttpRequestParser

from ..entities import Request
from ..utils.httputils import decode_url


class Protocol:
    """
    Callbacks for httptools parser. A new request object is made for every
    message, and is given to on_request once the message is fully parsed.
    Parser may be fed with pipelined requests, so this may happen more
    than once per feed_data() call
    """

    def __init__(self, on_request: Callable[[Request], None]):
        self.on_request = on_request
        self.request: Optional[Request] = None
        self.parser: Optional[HttpRequestParser] = None

        # url may come in pieces, if request line is split between reads
        self._url: bytes = b''

    def on_message_begin(self):
        self.request = Request()
        self._url = b''

    def on_url(self, url: bytes):
        self._url += url

    def on_header(self, header: bytes, value: bytes):
        self.request.headers[header.decode('latin-1')] = value.decode('latin-1')

    def on_headers_complete(self):
        url, parameters, fragment = self._url, None, None
        self._url = b''

        if b'?' in url:
            url, parameters = url.split(b'?', 1)

            if b'#' in parameters:
                parameters, fragment = parameters.split(b'#', 1)
        elif b'#' in url:
            url, fragment = url.split(b'#', 1)

        # decoding only the path, so encoded `?` or `#` can't split it
        if b'%' in url:
            url = decode_url(url)

        self.request.path = url
        self.request.raw_parameters = parameters
        self.request.fragment = fragment
        self.request.method = self.parser.get_method()
        self.request.protocol = self.parser.get_http_version()
        self.request.keep_alive = self.parser.should_keep_alive()

    def on_body(self, body: bytes):
        self.request.body += body

    def on_message_complete(self):
        request, self.request = self.request, None
        self.on_request(request)
