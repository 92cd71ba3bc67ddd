import anyio
from fastapi import Request, Response
from fastapi.responses import FileResponse, PlainTextResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException

from .transformers import MONITORING_PATH

class StaticSite:
    """Files under ``root``, answered as in-memory responses.

    Missing files come back as a plain 404 response rather than an
    exception, so the chain can inspect them.
    """

    def __init__(self, root: str):
        self.root = root
        self.files = StaticFiles(directory=root)

    async def __call__(self, request: Request) -> Response:
        try:
            path = self.files.get_path(request.scope)
            response = await self.files.get_response(path, request.scope)
        except HTTPException as e:
            return PlainTextResponse(e.detail, status_code=e.status_code)
        if isinstance(response, FileResponse):
            return await self._materialize(response)
        return response

    async def _materialize(self, response: FileResponse) -> Response:
        body = await anyio.Path(response.path).read_bytes()
        headers = dict(response.headers)
        headers.pop("content-length", None)
        headers.pop("accept-ranges", None)
        return Response(content=body, status_code=response.status_code, headers=headers)

class Router:
    """Innermost handler: the monitoring route, else the static site.

    WebSocket upgrades on the monitoring path are dispatched by the ASGI
    app before reaching here; a plain HTTP request there is refused.
    """

    def __init__(self, static: StaticSite, monitoring_path: str = MONITORING_PATH):
        self.static = static
        self.monitoring_path = monitoring_path

    async def __call__(self, request: Request) -> Response:
        if request.scope["path"] == self.monitoring_path:
            return PlainTextResponse(
                "Upgrade Required", status_code=426, headers={"Upgrade": "websocket"}
            )
        return await self.static(request)
