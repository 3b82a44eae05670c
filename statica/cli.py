import os
import logging
import argparse
from sys import argv
from typing import List, Optional

from .options import StaticOptions
from .cache.base import StaticHandler
from .webserver import WebServer, Settings
from .dispatcher.default import AsyncDispatcher
from .cache import StaticServer, StaticFile

logger = logging.getLogger('statica')


def make_arguments_parser() -> argparse.ArgumentParser:
    arguments_parser = argparse.ArgumentParser(
        prog='statica',
        description='Serve a directory or a single file over HTTP'
    )
    arguments_parser.add_argument('path', metavar='PATH',
                                  help='directory to serve files from, or a single file')
    arguments_parser.add_argument('--host', default='127.0.0.1')
    arguments_parser.add_argument('--port', default=9090, type=int)
    arguments_parser.add_argument('--prefix', default='/',
                                  help='url prefix to serve files on')
    arguments_parser.add_argument('--workers', default=None, type=int,
                                  help='threads serving files (default: picked by executor)')
    arguments_parser.add_argument('--no-gzip', dest='gzip', action='store_false',
                                  help='never compress responses')
    arguments_parser.add_argument('--debug', action='store_true')

    return arguments_parser


def make_handler(path: str, options: StaticOptions) -> StaticHandler:
    if os.path.isdir(path):
        return StaticServer(path, options)

    if not os.path.exists(path):
        logger.warning(f'{path} does not exist yet; serving it as a single file')

    return StaticFile(path, options)


def run_cmd(cmd: Optional[List[str]] = None):
    parsed = make_arguments_parser().parse_args(cmd)
    logger.setLevel(logging.DEBUG if parsed.debug else logging.INFO)

    dp = AsyncDispatcher(logger=logger, workers=parsed.workers)
    dp.static(parsed.prefix, make_handler(parsed.path, StaticOptions(gzip=parsed.gzip)))

    app = WebServer(Settings(
        host=parsed.host,
        port=parsed.port,
        logger=logger
    ))
    app.run(dp)


def main():
    run_cmd(argv[1:])
