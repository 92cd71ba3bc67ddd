from typing import Awaitable, Callable, List, Optional, Sequence, Tuple
from fastapi import Request, Response

Handler = Callable[[Request], Awaitable[Response]]

class Transformer:
    """One stage of the request/response chain.

    Subclasses implement ``handle``, which receives the request and the
    next handler inward, and may rewrite either side of the exchange.
    """

    name: str = "transformer"

    def wrap(self, next_handler: Handler) -> Handler:
        async def handler(request: Request) -> Response:
            return await self.handle(request, next_handler)
        return handler

    async def handle(self, request: Request, next_handler: Handler) -> Response:
        return await next_handler(request)

    def __repr__(self) -> str:
        return f"<{type(self).__name__}>"

class Pipeline:
    """Ordered transformers folded around an innermost handler.

    ``transformers[0]`` is outermost: it sees the request first and the
    response last.
    """

    def __init__(self, transformers: Sequence[Transformer], endpoint: Handler):
        self.transformers: Tuple[Transformer, ...] = tuple(transformers)
        self.endpoint = endpoint
        self.handler = self.build()

    def build(self) -> Handler:
        handler = self.endpoint
        for transformer in reversed(self.transformers):
            handler = transformer.wrap(handler)
        return handler

    @property
    def names(self) -> List[str]:
        return [transformer.name for transformer in self.transformers]

    async def __call__(self, request: Request) -> Response:
        return await self.handler(request)

def path_segments(request: Request) -> List[str]:
    """The request path as segments; a trailing slash yields a final ``""``"""
    return request.scope["path"].split("/")[1:]

def with_path(request: Request, path: str) -> Request:
    """Copy of ``request`` addressing ``path`` instead"""
    scope = dict(request.scope)
    scope["path"] = path
    scope["raw_path"] = path.encode("utf-8")
    return Request(scope, request.receive)

def with_method(request: Request, method: str) -> Request:
    """Copy of ``request`` with another HTTP method"""
    scope = dict(request.scope)
    scope["method"] = method
    return Request(scope, request.receive)

def without_body(response: Response) -> Response:
    """Same status and headers, Content-Length included, but no body"""
    return Response(status_code=response.status_code, headers=dict(response.headers))

def with_body(response: Response, body: bytes, media_type: Optional[str] = None) -> Response:
    """New response with ``body``, the same status and the other headers kept"""
    headers = {
        key: value for key, value in response.headers.items()
        if key != "content-length"
    }
    if media_type is not None:
        headers["content-type"] = media_type
    return Response(content=body, status_code=response.status_code, headers=headers)
