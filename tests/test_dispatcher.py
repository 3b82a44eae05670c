import gzip
import asyncio

import pytest

from statica import exceptions
from statica.cache import StaticServer, StaticFile
from statica.entities import Request, Response, CaseInsensitiveDict
from statica.dispatcher.default import AsyncDispatcher, Route

from conftest import write_file


@pytest.fixture
def dp():
    dispatcher = AsyncDispatcher(workers=4)
    yield dispatcher
    dispatcher.close()


def send(dp, method: bytes, path: bytes, headers=None):
    sent = []
    request = Request(method, path, headers)
    request.protocol = '1.1'
    response = Response(CaseInsensitiveDict(server='statica'))

    asyncio.run(dp.process_request(request, response, sent.append))

    assert len(sent) == 1
    head, body = sent[0].split(b'\r\n\r\n', 1)
    status_line, *header_lines = head.decode().split('\r\n')
    parsed_headers = CaseInsensitiveDict(line.split(': ', 1) for line in header_lines)

    return int(status_line.split()[1]), parsed_headers, body


def test_static_mount(dp, site):
    (site / 'css').mkdir()
    write_file(site / 'css' / 'a.css', b'body{}')
    dp.static('/static', StaticServer(str(site)))

    code, headers, body = send(dp, b'GET', b'/static/css/a.css')

    assert code == 200
    assert body == b'body{}'
    assert headers['content-type'] == 'text/css'
    assert headers['content-length'] == '6'
    assert headers['server'] == 'statica'


def test_static_mount_gzip(dp, site):
    write_file(site / 'a.css', b'body{}' * 50)
    dp.static('/static/', StaticServer(str(site)))

    code, headers, body = send(dp, b'GET', b'/static/a.css', {'Accept-Encoding': 'gzip'})

    assert code == 200
    assert headers['content-encoding'] == 'gzip'
    assert gzip.decompress(body) == b'body{}' * 50


def test_mount_root_is_forbidden(dp, site):
    dp.static('/static', StaticServer(str(site)))

    code, _, body = send(dp, b'GET', b'/static/')

    assert code == 403
    assert body == b'<h1>403 Forbidden</h1>'


def test_longest_prefix_wins(dp, tmp_path):
    first, second = tmp_path / 'first', tmp_path / 'second'
    first.mkdir()
    second.mkdir()
    write_file(first / 'a.txt', b'first')
    write_file(second / 'a.txt', b'second')

    dp.static('/', StaticServer(str(first)))
    dp.static('/deep', StaticServer(str(second)))

    assert send(dp, b'GET', b'/a.txt')[2] == b'first'
    assert send(dp, b'GET', b'/deep/a.txt')[2] == b'second'
    # not a segment boundary, so it goes to the root mount
    assert send(dp, b'GET', b'/deeper/a.txt')[0] == 404


def test_unknown_path(dp):
    code, _, body = send(dp, b'GET', b'/nothing')

    assert code == 404
    assert body == b'<h1>404 Not Found</h1>'


def test_method_not_allowed(dp, site):
    write_file(site / 'a.css', b'body{}')
    dp.static('/static', StaticServer(str(site)))

    assert send(dp, b'POST', b'/static/a.css')[0] == 405


def test_head(dp, site):
    write_file(site / 'a.css', b'body{}')
    dp.static('/static', StaticServer(str(site)))

    code, headers, body = send(dp, b'HEAD', b'/static/a.css')

    assert code == 200
    assert headers['content-length'] == '6'
    assert body == b''


def test_not_modified(dp, site):
    write_file(site / 'a.css', b'body{}')
    dp.static('/static', StaticServer(str(site)))

    _, headers, _ = send(dp, b'GET', b'/static/a.css')
    code, _, body = send(dp, b'GET', b'/static/a.css',
                         {'If-Modified-Since': headers['last-modified']})

    assert code == 304
    assert body == b''


def test_static_file_route(dp, site):
    dp.add_route(Route(StaticFile(write_file(site / 'index.html', b'<h1>hi</h1>')), '/'))

    code, headers, body = send(dp, b'GET', b'/')

    assert code == 200
    assert body == b'<h1>hi</h1>'
    assert headers['content-type'] == 'text/html'
    assert send(dp, b'GET', b'/index.html')[0] == 404


def test_coroutine_route(dp):
    @dp.get('/ping')
    async def ping(request: Request, response: Response) -> Response:
        return response(body=b'pong')

    code, _, body = send(dp, b'GET', b'/ping')

    assert code == 200
    assert body == b'pong'


def test_route_must_be_coroutine(dp):
    with pytest.raises(exceptions.HandlerMustBeCoroutineError):
        @dp.get('/sync')
        def sync(request, response):
            return response


def test_static_requires_static_handler(dp):
    with pytest.raises(TypeError):
        dp.static('/static', object())


def test_error_handler(dp):
    @dp.handle_error(exceptions.HTTPNotFound)
    async def not_found(request: Request, response: Response, exc: Exception) -> Response:
        return response(code=404, body=b'custom not found')

    code, _, body = send(dp, b'GET', b'/missing')

    assert code == 404
    assert body == b'custom not found'


def test_unhandled_exception(dp):
    @dp.get('/boom')
    async def boom(request: Request, response: Response) -> Response:
        raise RuntimeError('boom')

    assert send(dp, b'GET', b'/boom')[0] == 500


def test_head_to_unknown_path_has_no_body(dp):
    code, headers, body = send(dp, b'HEAD', b'/nope')

    assert code == 404
    assert headers['content-length'] == '22'
    assert body == b''


def test_head_not_allowed_has_no_body(dp):
    @dp.get('/ping')
    async def ping(request: Request, response: Response) -> Response:
        return response(body=b'pong')

    code, headers, body = send(dp, b'HEAD', b'/ping')

    assert code == 405
    assert headers['content-length'] == str(len(b'<h1>405 Method Not Allowed</h1>'))
    assert body == b''


def test_head_to_failing_route_has_no_body(dp):
    @dp.head('/boom')
    async def boom(request: Request, response: Response) -> Response:
        raise RuntimeError('boom')

    code, headers, body = send(dp, b'HEAD', b'/boom')

    assert code == 500
    assert headers['content-length'] == str(len(b'<h1>500 Internal Server Error</h1>'))
    assert body == b''


def test_head_with_error_handler_has_no_body(dp):
    @dp.handle_error(exceptions.HTTPNotFound)
    async def not_found(request: Request, response: Response, exc: Exception) -> Response:
        return response(code=404, body=b'custom not found')

    code, headers, body = send(dp, b'HEAD', b'/missing')

    assert code == 404
    assert headers['content-length'] == '16'
    assert body == b''
