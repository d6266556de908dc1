"""
ASGI host for Switchyard.
Builds a fresh Router per request, dispatches it and sends the response.
"""

import asyncio
import logging
from collections.abc import Callable, Mapping
from typing import Any

from switchyard.exceptions import Halt
from switchyard.middleware import CONTEXT_KEY, HANDLED_KEY, ErrorHandlerMiddleware, Middleware
from switchyard.request import RequestContext
from switchyard.response import Response
from switchyard.router import Router, create_router
from switchyard.types import ASGIApp, Receive, Scope, Send

logger = logging.getLogger("switchyard.app")

Setup = Callable[[Router], Any]
MiddlewareFactory = type[Middleware] | Callable[..., ASGIApp]


class Switchyard:
    """
    ASGI application serving a Router.

    Routes are registered by ``setup``, which is called with the new Router
    of every request. Handler instances therefore live for one request.

    Usage:
        def routes(router):
            router.get("/", lambda: router.response.write("hello"))

        app = Switchyard(routes)

        # Run with: uvicorn main:app
    """

    def __init__(
        self,
        setup: Setup,
        *,
        script_name: str | None = None,
        classes: Mapping[str, type] | None = None,
        debug: bool = False,
    ) -> None:
        self.setup = setup
        self.script_name = script_name
        self.classes = dict(classes or {})
        self.debug = debug

        self._middleware: list[tuple[MiddlewareFactory, dict[str, Any]]] = []
        self._app: ASGIApp | None = None

    # -------------------------------------------------------------------------
    # ASGI Interface
    # -------------------------------------------------------------------------

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI application entry point."""
        if scope["type"] != "http":
            raise RuntimeError(f"Switchyard does not handle {scope['type']!r} scopes")

        scope["app"] = self
        await self._get_app()(scope, receive, send)

    def _get_app(self) -> ASGIApp:
        """
        Wrap the dispatch in the added middleware, first added outermost,
        and the error handler around all of them.
        """
        if self._app is None:
            app: ASGIApp = self._handle_request
            for factory, options in reversed(self._middleware):
                app = factory(app, **options)
            self._app = ErrorHandlerMiddleware(app, debug=self.debug)
        return self._app

    async def _handle_request(
        self,
        scope: Scope,
        receive: Receive,
        send: Send,
    ) -> None:
        context = RequestContext.from_scope(scope, self.script_name)
        scope[CONTEXT_KEY] = context
        response = Response()

        scope[HANDLED_KEY] = await asyncio.to_thread(self.dispatch, context, response)
        await response(send)

    def dispatch(self, context: RequestContext, response: Response) -> int:
        """Build a router for ``context``, register routes and run it."""
        router = create_router(context, response=response, classes=self.classes)
        self.setup(router)
        try:
            return router.run()
        except Halt:
            logger.debug("%s %s halted", context.method, context.path_info)
            return 0

    # -------------------------------------------------------------------------
    # Middleware
    # -------------------------------------------------------------------------

    @property
    def middleware(self) -> list[MiddlewareFactory]:
        """The added middleware, outermost first. The error handler is implicit."""
        return [factory for factory, _ in self._middleware]

    def add_middleware(self, middleware_class: MiddlewareFactory, **options: Any) -> None:
        """Add middleware inside the error handler, first added outermost."""
        self._middleware.append((middleware_class, options))
        self._app = None  # Reset built app

    def run(
        self,
        host: str = "localhost",
        port: int = 8000,
        reload: bool = False,
        workers: int = 1,
        log_level: str = "info",
    ) -> None:
        """
        Run the application using uvicorn.

        Args:
            host: Host to bind to.
            port: Port to bind to.
            reload: Enable auto-reload.
            workers: Number of worker processes.
            log_level: Logging level.
        """
        import uvicorn

        uvicorn.run(
            self,
            host=host,
            port=port,
            reload=reload,
            workers=workers,
            log_level=log_level,
            lifespan="off",
        )
