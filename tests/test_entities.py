from statica.entities import CaseInsensitiveDict, Request, Response
from statica.utils.httputils import format_http_date

from conftest import T1, T2, NS


def test_case_insensitive_dict():
    headers = CaseInsensitiveDict({'Content-Type': 'text/css'}, Server='statica')

    assert headers['content-type'] == 'text/css'
    assert 'SERVER' in headers
    assert headers.get('missing', 'x') == 'x'
    assert headers.pop('Server') == 'statica'
    assert headers.pop('Server', None) is None

    copied = headers.copy()
    copied['Content-Type'] = 'text/html'
    assert headers['content-type'] == 'text/css'


def test_request_preferences():
    request = Request(b'GET', b'/a.css', {'Accept-Encoding': 'gzip', 'If-Modified-Since': 'x'})

    assert request.accepts_gzip
    assert request.if_modified_since == 'x'
    assert not Request(b'GET', b'/').accepts_gzip
    assert Request(b'GET', b'/').if_modified_since is None


def test_send_bytes():
    response = Response(CaseInsensitiveDict(server='statica'))
    response.send_bytes(b'body{}', 'text/css', T1)

    assert response.code == 200
    assert response.body == b'body{}'
    assert response.headers['content-type'] == 'text/css'
    assert response.headers['last-modified'] == format_http_date(T1)
    assert response.headers['server'] == 'statica'


def test_send_bytes_not_modified():
    response = Response()
    response.headers['content-encoding'] = 'gzip'
    response.send_bytes(b'body{}', 'text/css', T1 + NS // 2, format_http_date(T1))

    assert response.code == 304
    assert response.body == b''
    assert 'content-encoding' not in response.headers


def test_send_bytes_modified_later():
    response = Response()
    response.send_bytes(b'body{}', 'text/css', T2, format_http_date(T1))

    assert response.code == 200
    assert response.body == b'body{}'


def test_send_bytes_malformed_header():
    response = Response()
    response.send_bytes(b'body{}', 'text/css', T1, 'not a date')

    assert response.code == 200


def test_render_not_modified_has_no_length():
    response = Response()
    response.send_bytes(b'body{}', 'text/css', T1, format_http_date(T2))

    rendered = response.render()

    assert rendered.startswith(b'HTTP/1.1 304 Not Modified\r\n')
    assert b'content-length' not in rendered
    assert rendered.endswith(b'\r\n\r\n')


def test_render_head():
    response = Response()
    response.send_bytes(b'body{}', 'text/css', T1)

    rendered = response.render(head=True)

    assert b'content-length: 6' in rendered
    assert rendered.endswith(b'\r\n\r\n')


def test_wipe_restores_default_headers():
    response = Response(CaseInsensitiveDict(server='statica'))
    response(code=404, headers={'x-a': 'b'}, body='nope')
    response.wipe()

    assert response.code == 200
    assert response.body is None
    assert dict(response.headers) == {'server': 'statica'}
