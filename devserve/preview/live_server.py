import logging
from contextlib import asynccontextmanager
from typing import List, Optional
from fastapi import FastAPI, Request, Response

from ..core.config_manager import ServeConfig
from ..interface.pipeline import Pipeline, Transformer, with_method, without_body
from ..interface.routes import Router, StaticSite
from ..interface.transformers import (
    MONITORING_PATH,
    CacheSuppression,
    IndexRedirect,
    MarkdownFallback,
    RequestLogger,
    ScriptInjection,
)
from .client_registry import ClientRegistry
from .debounce import Debouncer
from .file_watcher import FileWatcher
from .websocket_server import MonitoringEndpoint

logger = logging.getLogger(__name__)

RELOAD_MESSAGE = "refresh"

class LiveServer:
    """Serves a directory and reloads connected browsers when it changes.

    Filesystem changes go through the watcher, then the debouncer, then a
    broadcast of ``"refresh"`` to every registered browser.
    """

    def __init__(self, config: Optional[ServeConfig] = None,
                 registry: Optional[ClientRegistry] = None):
        self.config = config or ServeConfig()
        self.registry = registry if registry is not None else ClientRegistry()
        self.notifier = Debouncer(self.config.debounce_delay, self.refresh)
        self.watcher = FileWatcher(
            self.config.root, self.notifier, force_polling=self.config.force_polling
        )
        self.pipeline = Pipeline(
            self.transformers(), Router(StaticSite(self.config.root))
        )
        self.endpoint = MonitoringEndpoint(self.registry)
        self.app = self.create_app()

    def transformers(self) -> List[Transformer]:
        """The chain, outermost first"""
        chain: List[Transformer] = [
            RequestLogger(),
            CacheSuppression(),
            IndexRedirect(),
            ScriptInjection(),
        ]
        if self.config.markdown:
            chain.append(MarkdownFallback())
        return chain

    async def serve_http(self, request: Request) -> Response:
        if request.method == "HEAD":
            # Same headers as GET, including the length after rewriting
            return without_body(await self.pipeline(with_method(request, "GET")))
        return await self.pipeline(request)

    async def refresh(self):
        await self.registry.broadcast(RELOAD_MESSAGE)

    @asynccontextmanager
    async def lifespan(self, app: FastAPI):
        self.watcher.start()
        logger.info(f"Serving {self.config.root} at http://{self.config.host}:{self.config.port}")
        try:
            yield
        finally:
            await self.watcher.stop()
            await self.notifier.drain()
            logger.info("Live server stopped")

    def create_app(self) -> FastAPI:
        app = FastAPI(
            title="devserve",
            docs_url=None,
            redoc_url=None,
            openapi_url=None,
            lifespan=self.lifespan,
        )
        app.add_api_websocket_route(MONITORING_PATH, self.endpoint.handle)
        app.add_route("/{path:path}", self.serve_http, methods=["GET", "HEAD"])
        return app
