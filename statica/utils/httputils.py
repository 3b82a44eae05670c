from string import hexdigits
from calendar import timegm
from email.utils import formatdate, parsedate
from typing import Union, Optional

from ..typehints import Timestamp

HTTP_METHODS = {b'GET', b'HEAD', b'POST', b'PUT',
                b'DELETE', b'CONNECT', b'OPTIONS',
                b'TRACE', b'PATCH'}
HEX_TO_BYTE = {(a + b).encode(): bytes.fromhex(a + b)
               for a in hexdigits for b in hexdigits}
STATUS_CODES = {
    200: b'OK',
    304: b'Not Modified',
    400: b'Bad Request',
    403: b'Forbidden',
    404: b'Not Found',
    405: b'Method Not Allowed',
    500: b'Internal Server Error',
}
NANOSECONDS = 1_000_000_000


def render_http_response(protocol: bytes,
                         code: int,
                         status_code: Optional[bytes],
                         headers: Union[dict, bytes],
                         body: bytes,
                         count_content_length: bool = False) -> bytes:
    """
    A function for rendering http responses. Uses C-formatting as the only way for
    formatting byte-strings

    Arguments:
             protocol - protocol version, string in format `major.minor`,
             code - response status code,
             status_code - may be None, than it'll be taken from the list of known.
                           If no known status codes relate to the status code, UNKNOWN
                           will be used
             headers - a dict (or CaseInsensitiveDict) with headers. May be bytes, than
                       they won't be rendered
             body - only bytes are accepted
             count_content_length - disabled by default, but if enabled and headers aren't
                                    already rendered, content-length header will be replaced
                                    by len(body)
    """

    if not isinstance(headers, bytes):
        if count_content_length:
            headers['content-length'] = len(body)

        headers = '\r\n'.join(
            f'{key}: {value}' for key, value in headers.items()
        ).encode()

    status_description = status_code or STATUS_CODES.get(code, b'UNKNOWN')

    return b'HTTP/%s %d %s\r\n%s\r\n\r\n%s' % (protocol, code, status_description, headers, body)


def render_error_page(code: int, description: bytes) -> bytes:
    return b'<h1>%d %s</h1>' % (code, description)


def decode_url(bytestring: bytes) -> bytes:
    bits = bytestring.split(b'%')
    decoded: bytes = bits[0]

    for item in bits[1:]:
        try:
            decoded += HEX_TO_BYTE[item[:2]] + item[2:]
        except KeyError:
            decoded += b'%' + item

    return decoded


def format_http_date(timestamp: Timestamp) -> str:
    """
    Renders a modification timestamp as IMF-fixdate, e.g.
    `Sun, 06 Nov 1994 08:49:37 GMT`
    """

    return formatdate(timestamp // NANOSECONDS, usegmt=True)


def parse_http_date(value: Optional[str]) -> Optional[int]:
    """
    Returns seconds since epoch, or None if value is empty or malformed
    """

    if not value:
        return None

    parsed = parsedate(value)

    if parsed is None:
        return None

    try:
        return timegm(parsed)
    except (ValueError, OverflowError):
        return None


def accepts_encoding(accept_encoding: Optional[str], encoding: str) -> bool:
    """
    Checks Accept-Encoding header value for the encoding. Codings with q=0
    are explicitly refused, `*` matches any coding
    """

    if not accept_encoding:
        return False

    wildcard = False

    for coding in accept_encoding.split(','):
        name, _, params = coding.strip().partition(';')
        name = name.strip().lower()
        quality = 1.0

        for param in params.split(';'):
            key, _, value = param.strip().partition('=')

            if key.lower() == 'q':
                try:
                    quality = float(value)
                except ValueError:
                    quality = 0.0

        if name == encoding:
            return quality > 0

        if name == '*':
            wildcard = quality > 0

    return wildcard
