from statica import cli
from statica.cache import StaticServer, StaticFile
from statica.options import StaticOptions

from conftest import write_file


def test_arguments():
    parsed = cli.make_arguments_parser().parse_args(
        ['./public', '--port', '8080', '--no-gzip', '--prefix', '/static']
    )

    assert parsed.path == './public'
    assert parsed.port == 8080
    assert parsed.gzip is False
    assert parsed.prefix == '/static'
    assert parsed.host == '127.0.0.1'


def test_gzip_enabled_by_default():
    assert cli.make_arguments_parser().parse_args(['.']).gzip is True


def test_make_handler(site):
    options = StaticOptions(gzip=False)

    server = cli.make_handler(str(site), options)
    assert isinstance(server, StaticServer)
    assert server.options is options

    single = cli.make_handler(write_file(site / 'a.css', b'body{}'), options)
    assert isinstance(single, StaticFile)

    assert isinstance(cli.make_handler(str(site / 'later.txt'), options), StaticFile)
