import asyncio
import logging
from asyncio import iscoroutinefunction
from concurrent.futures import ThreadPoolExecutor
from typing import (Dict, Callable, Awaitable, Union, Type, Iterable, List, Optional, Tuple)

from .. import exceptions
from .base import BaseDispatcher
from ..cache.base import StaticHandler
from ..entities import Request, Response
from ..utils.stringutils import make_sure_bytes_or_none
from ..utils.httputils import HTTP_METHODS, render_error_page
from ..typehints import RoutePath, AsyncFunction, HTTPMethod, Logger

ErrorHandler = Callable[[Request, Response, Exception], Awaitable[Response]]
STATIC_METHODS = {b'GET', b'HEAD'}


class Handler:
    """
    A class that describes handler. Keeps it routing path,
    methods, etc.

    Handler is either a coroutine, or a static handler that is
    called synchronously in the dispatcher's thread pool
    """

    def __init__(self,
                 handler: Union[Callable[[Request, Response], Awaitable], StaticHandler],
                 path: RoutePath,
                 methods: Iterable[bytes]):
        self.handler = handler
        self.path = path
        self.methods = set(methods)

    @property
    def is_static(self) -> bool:
        return isinstance(self.handler, StaticHandler)


class Route:
    """
    Mainly class for cases when you need to add routes without using
    decorators, but using dp.add_routes([...])
    """

    def __init__(self,
                 handler: Union[AsyncFunction, StaticHandler],
                 path: RoutePath,
                 method_or_methods: Union[str, bytes, Iterable, None] = None):
        self.handler = handler
        self.path = path if isinstance(path, bytes) else path.encode()

        if method_or_methods is None:
            method_or_methods = STATIC_METHODS if isinstance(handler, StaticHandler) \
                else HTTP_METHODS
        elif isinstance(method_or_methods, (str, bytes)):
            method_or_methods = {make_sure_bytes_or_none(method_or_methods.upper())}

        self.methods = method_or_methods


class AsyncDispatcher(BaseDispatcher):
    def __init__(self,
                 logger: Logger = None,
                 workers: Optional[int] = None,
                 executor: Optional[ThreadPoolExecutor] = None):
        if logger is None:
            self.logger = logging.getLogger()
        else:
            self.logger = logger

        self.usual_handlers: Dict[bytes, Handler] = {}
        # (prefix, handler), sorted by prefix length, longest first
        self.mounts: List[Tuple[bytes, StaticHandler]] = []

        # a dict with exceptions and handlers of the exceptions
        self.error_handlers: Dict[Type[Exception], ErrorHandler] = {}

        self.executor = executor or ThreadPoolExecutor(
            max_workers=workers,
            thread_name_prefix='statica-static'
        )

    def on_begin_serving(self):
        for prefix, handler in self.mounts:
            self.logger.info(f'serving {handler.__class__.__name__} on "{prefix.decode()}/"')

    def close(self):
        self.executor.shutdown(wait=False)

    async def process_request(self,
                              request: Request,
                              response: Response,
                              http_send: Callable[[bytes], None]) -> None:
        protocol = (request.protocol or '1.1').encode()
        head = request.method == b'HEAD'

        try:
            handler, args = self._find_handler(request.path)

            if request.method not in handler.methods:
                raise exceptions.HTTPMethodNotAllowed(
                    request.path.decode(errors='replace'),
                    msg=f'{request.method.decode()} is not allowed'
                )

            if handler.is_static:
                request.args = args
                result = await self._run_static(handler.handler, request, response)
            else:
                result = await handler.handler(request, response)
        except Exception as exc:
            http_send(await self._handle_exception(request, response, exc, protocol, head))
            return

        http_send(result.render(protocol, head=head))

    def route(self,
              path: RoutePath,
              method: Union[str, bytes, None] = None,
              methods: Iterable[HTTPMethod] = HTTP_METHODS):
        if method is not None:
            methods = {make_sure_bytes_or_none(method.upper())}

        def deco(coro: Callable[[Request, Response], Awaitable]):
            if not methods:
                raise exceptions.NoMethodsProvided(str(coro))

            if not iscoroutinefunction(coro):
                raise exceptions.HandlerMustBeCoroutineError(str(coro))

            self._put_handler(Handler(
                handler=coro,
                path=make_sure_bytes_or_none(path),
                methods=methods
            ))

            return coro

        return deco

    def get(self, path: RoutePath):
        return self.route(path, 'GET')

    def head(self, path: RoutePath):
        return self.route(path, 'HEAD')

    def post(self, path: RoutePath):
        return self.route(path, 'POST')

    def static(self, prefix: RoutePath, handler: StaticHandler) -> StaticHandler:
        """
        Mounts static handler, so every GET or HEAD request to `prefix/...`
        will be served by it. Path segments after the prefix are given to
        the handler as request.args
        """

        if not isinstance(handler, StaticHandler):
            raise TypeError(f'{handler} must be inherited from '
                            'statica.cache.base.StaticHandler')

        prefix = make_sure_bytes_or_none(prefix).rstrip(b'/')
        self.mounts.append((prefix, handler))
        self.mounts.sort(key=lambda mount: len(mount[0]), reverse=True)

        return handler

    def add_routes(self, routes: Iterable[Route]):
        for route in routes:
            self.add_route(route)

    def add_route(self, route: Route):
        if not route.methods:
            raise exceptions.NoMethodsProvided(str(route.handler))

        self._put_handler(Handler(
            handler=route.handler,
            path=route.path,
            methods=route.methods
        ))

    def handle_error(self, error: Type[Exception]):
        def deco(coro: AsyncFunction):
            self.error_handlers[error] = coro

            return coro

        return deco

    def _find_handler(self, path: bytes) -> Tuple[Handler, Optional[List[str]]]:
        if path in self.usual_handlers:
            return self.usual_handlers[path], None

        for prefix, static_handler in self.mounts:
            if path == prefix or path.startswith(prefix + b'/'):
                rest = path[len(prefix):].decode('utf-8', 'replace')
                args = [segment for segment in rest.split('/') if segment]

                return Handler(static_handler, prefix, STATIC_METHODS), args

        raise exceptions.HTTPNotFound(
            path.decode(errors='replace'),
            msg='no handlers attached for the request'
        )

    async def _run_static(self,
                          handler: StaticHandler,
                          request: Request,
                          response: Response) -> Response:
        loop = asyncio.get_running_loop()
        code = await loop.run_in_executor(self.executor, handler.handle, request, response)
        self.logger.debug(f'{request.method.decode()} {request.path.decode(errors="replace")}: '
                          f'{code} (sent {response.code})')

        return response

    async def _handle_exception(self,
                                request: Request,
                                response: Response,
                                exc: Exception,
                                protocol: bytes,
                                head: bool) -> bytes:
        err_handler = self._get_error_handler(exc.__class__)

        if err_handler is not None:
            return await self._run_exception_handler(
                exc_handler=err_handler,
                request=request,
                response=response,
                exception=exc,
                protocol=protocol,
                head=head
            )

        if not isinstance(exc, exceptions.HTTPError):
            self.logger.exception('no error handlers registered for exception:')
            exc = exceptions.HTTPInternalServerError()

        # if no handlers attached, but as we have HTTPError,
        # we can show the default error page to user
        return self._render_error_page(response, exc, protocol, head)

    def _get_error_handler(self, exc_class: Type[Exception]) -> Optional[ErrorHandler]:
        for exception_class in exc_class.mro():
            if exception_class in self.error_handlers:
                return self.error_handlers[exception_class]  # noqa

    async def _run_exception_handler(self,
                                     exc_handler: ErrorHandler,
                                     request: Request,
                                     response: Response,
                                     exception: Exception,
                                     protocol: bytes,
                                     head: bool) -> bytes:
        response.wipe()

        try:
            result = await exc_handler(request, response, exception)
        except Exception:   # noqa: again I need to catch all the exceptions here
            self.logger.exception('uncaught exception in error handler:')

            return self._render_error_page(
                response, exceptions.HTTPInternalServerError(), protocol, head
            )

        return result.render(protocol, head=head)

    @staticmethod
    def _render_error_page(response: Response,
                           exc: exceptions.HTTPError,
                           protocol: bytes,
                           head: bool) -> bytes:
        """
        Error pages of HEAD requests keep their content-length, but
        go without body, so the connection may be reused
        """

        response.wipe()
        response(
            code=exc.code,
            status=exc.description,
            headers={'content-type': 'text/html'},
            body=render_error_page(exc.code, exc.description)
        )

        return response.render(protocol, head=head)

    def _put_handler(self, handler: Handler) -> None:
        self.usual_handlers[handler.path] = handler
