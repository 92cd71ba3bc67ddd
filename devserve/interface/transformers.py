import logging
import time
from typing import List, Optional
from bs4 import BeautifulSoup
from fastapi import Request, Response
from fastapi.responses import RedirectResponse

from .pipeline import Handler, Transformer, path_segments, with_body, with_path
from ..preview.renderer import MarkdownRenderer

logger = logging.getLogger(__name__)

HTML_TYPES = ("text/html", "text/html; charset=utf-8")
RELOADABLE_HTML = "text/html; charset=utf-8"

MONITORING_PATH = "/_monitoring_websocket"

RELOAD_SCRIPT = """
var _monitoring_socket =
  new WebSocket("ws://" + location.host + "/_monitoring_websocket");

_monitoring_socket.onmessage = function (e) {
  location.reload(true);
}
"""

class RequestLogger(Transformer):
    name = "logging"

    async def handle(self, request: Request, next_handler: Handler) -> Response:
        start_time = time.time()
        response = await next_handler(request)
        process_time = (time.time() - start_time) * 1000
        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code} ({process_time:.1f} ms)"
        )
        return response

class CacheSuppression(Transformer):
    """Stops browsers caching the HTML pages that get reloaded"""

    name = "no_cache"

    async def handle(self, request: Request, next_handler: Handler) -> Response:
        response = await next_handler(request)
        if response.headers.get("content-type") == RELOADABLE_HTML:
            response.headers["Cache-Control"] = "no-store"
        return response

def index_target(segments: List[str]) -> str:
    """Path of the index page for a directory path given as segments.

    Empty segments from repeated slashes are dropped, so the result never
    starts with a slash.
    """
    return "/".join([segment for segment in segments[:-1] if segment] + ["index.html"])

class IndexRedirect(Transformer):
    name = "index_html"

    async def handle(self, request: Request, next_handler: Handler) -> Response:
        segments = path_segments(request)
        if segments[-1] != "":
            return await next_handler(request)
        return RedirectResponse("/" + index_target(segments), status_code=303)

def inject_script(document: bytes, script: str = RELOAD_SCRIPT) -> Optional[bytes]:
    """Append a <script> to the document's <head>, or None if there is no head"""
    soup = BeautifulSoup(document, "html.parser")
    head = soup.find("head")
    if head is None:
        return None
    tag = soup.new_tag("script")
    tag.string = script
    head.append(tag)
    return str(soup).encode("utf-8")

class ScriptInjection(Transformer):
    """Adds the reload client to every HTML page"""

    name = "inject_script"

    def __init__(self, script: str = RELOAD_SCRIPT):
        self.script = script

    async def handle(self, request: Request, next_handler: Handler) -> Response:
        response = await next_handler(request)
        if response.headers.get("content-type") not in HTML_TYPES:
            return response
        body = inject_script(response.body, self.script)
        if body is None:
            return response
        return with_body(response, body)

def choose_fallback(original: Response, retry: Response,
                    renderer: MarkdownRenderer, path: str = "") -> Response:
    """Pick between the original 404 and the result of the .md retry.

    A retry that did not succeed is dropped, and the original comes back
    untouched.
    """
    if retry.status_code != 200:
        return original
    return with_body(retry, renderer.render_bytes(retry.body, path), media_type=RELOADABLE_HTML)

class MarkdownFallback(Transformer):
    """Serves ``page.md`` rendered as HTML when ``page.html`` does not exist"""

    name = "markdown"

    def __init__(self, renderer: Optional[MarkdownRenderer] = None):
        self.renderer = renderer or MarkdownRenderer()

    async def handle(self, request: Request, next_handler: Handler) -> Response:
        response = await next_handler(request)
        if response.status_code != 404:
            return response
        segments = path_segments(request)
        if not segments[-1].endswith(".html"):
            return response
        segments[-1] = segments[-1][:-len(".html")] + ".md"
        markdown_path = "/" + "/".join(segments)
        retry = await next_handler(with_path(request, markdown_path))
        if retry.status_code == 200:
            logger.debug(f"Rendering {markdown_path} for {request.url.path}")
        return choose_fallback(response, retry, self.renderer, markdown_path)
