from statica import webserver
from statica.entities import Request, Response
from statica.cache import StaticServer, StaticFile
from statica.dispatcher.default import AsyncDispatcher, Route

dp = AsyncDispatcher()
app = webserver.WebServer()

dp.static('/static', StaticServer('./public'))
dp.static('/downloads', StaticServer('./downloads', {'gzip': False}))
dp.add_route(Route(StaticFile('./public/index.html'), '/'))


@dp.get('/health')
async def health(request: Request, response: Response) -> Response:
    return response(body=b'ok')


app.run(dp)
