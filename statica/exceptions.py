from typing import Optional


class StaticaError(Exception):
    pass


class HandlerMustBeCoroutineError(StaticaError):
    pass


class NoMethodsProvided(StaticaError):
    pass


class HTTPError(Exception):
    code: int = 500
    description: bytes = b'Internal Server Error'

    def __init__(self,
                 path: Optional[str] = None,
                 **kwargs):
        self.path = path

        # an additional stash for dynamic values
        for key, value in kwargs.items():
            setattr(self, key, value)

        super(HTTPError, self).__init__(kwargs.get('msg', ''))


class HTTPForbidden(HTTPError):
    code = 403
    description = b'Forbidden'


class HTTPNotFound(HTTPError):
    code = 404
    description = b'Not Found'


class HTTPMethodNotAllowed(HTTPError):
    code = 405
    description = b'Method Not Allowed'


class HTTPInternalServerError(HTTPError):
    code = 500
    description = b'Internal Server Error'
    traceback = None
