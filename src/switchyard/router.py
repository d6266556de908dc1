"""
The Switchyard Router.

A Router belongs to exactly one request: it is created with that request's
context, routes are registered on it, and ``run()`` dispatches once.

Usage:
    router = create_router(environ=os.environ)

    router.before("GET|POST", "/admin/.*", check_login)
    router.get("/user/(:number)", show_user)
    router.get("/", "Pages->home")
    router.set_not_found(page_missing)

    router.run()
"""

from collections.abc import Callable, Mapping
from typing import Any

from switchyard.dispatch import Dispatcher
from switchyard.exceptions import Halt
from switchyard.handlers import HandlerResolver
from switchyard.request import RequestContext
from switchyard.response import Response
from switchyard.routing import RouteTable
from switchyard.types import (
    Environ,
    HandlerLike,
    MethodSpec,
    Phase,
    ResponseBoundary,
    Terminate,
)

_UNSET: Any = object()


def halt() -> None:
    """Default termination primitive."""
    raise Halt()


class Router:
    """
    Pattern router with before/after middleware phases.

    Registration methods return the router so calls can be chained. The
    shorthand methods (``get``, ``post``, ...) can also be used as
    decorators by leaving out the handler.
    """

    def __init__(
        self,
        context: RequestContext,
        response: ResponseBoundary | None = None,
        terminate: Terminate | None = None,
        resolver: HandlerResolver | None = None,
    ) -> None:
        self._context = context
        self._response = response if response is not None else Response()
        self._terminate = terminate or halt
        self._resolver = resolver or HandlerResolver()
        self._tables: dict[Phase, RouteTable] = {
            phase: RouteTable(phase) for phase in Phase
        }
        self._not_found: HandlerLike = None
        self.last_dispatcher: Dispatcher | None = None

    # -------------------------------------------------------------------------
    # Request / environment
    # -------------------------------------------------------------------------

    @property
    def request(self) -> RequestContext:
        return self._context

    @property
    def response(self) -> ResponseBoundary:
        return self._response

    @property
    def resolver(self) -> HandlerResolver:
        return self._resolver

    @property
    def method(self) -> str:
        return self._context.method

    @property
    def script_name(self) -> str:
        """Script URL path (the script directory when URLs are rewritten)."""
        return self._context.script_name

    @property
    def script_dir(self) -> str:
        """Script directory URL path, without trailing slash."""
        return self._context.script_dir

    @property
    def path_info(self) -> str:
        """Path being dispatched, relative to the script."""
        return self._context.path_info

    def routes(self, phase: Phase = Phase.ROUTE) -> RouteTable:
        """The route table for ``phase``."""
        return self._tables[phase]

    # -------------------------------------------------------------------------
    # Registration
    # -------------------------------------------------------------------------

    def _add(
        self,
        phase: Phase,
        methods: MethodSpec,
        pattern: str,
        handler: HandlerLike,
    ) -> Any:
        if handler is _UNSET:
            def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
                self._tables[phase].add(methods, pattern, func)
                return func
            return decorator

        self._tables[phase].add(methods, pattern, handler)
        return self

    def before(self, methods: MethodSpec, pattern: str, handler: HandlerLike = _UNSET) -> Any:
        """Run ``handler`` before the main route for every matching request."""
        return self._add(Phase.BEFORE, methods, pattern, handler)

    def after(self, methods: MethodSpec, pattern: str, handler: HandlerLike = _UNSET) -> Any:
        """Run ``handler`` after the main route for every matching request."""
        return self._add(Phase.AFTER, methods, pattern, handler)

    def map(self, methods: MethodSpec, pattern: str, handler: HandlerLike = _UNSET) -> Any:
        """Register a main route for the given methods (``"GET|POST"``)."""
        return self._add(Phase.ROUTE, methods, pattern, handler)

    def match(self, pattern: str, handler: HandlerLike = _UNSET) -> Any:
        """Register a main route for GET and POST."""
        return self._add(Phase.ROUTE, "GET|POST", pattern, handler)

    def get(self, pattern: str, handler: HandlerLike = _UNSET) -> Any:
        return self._add(Phase.ROUTE, "GET", pattern, handler)

    def post(self, pattern: str, handler: HandlerLike = _UNSET) -> Any:
        return self._add(Phase.ROUTE, "POST", pattern, handler)

    def put(self, pattern: str, handler: HandlerLike = _UNSET) -> Any:
        return self._add(Phase.ROUTE, "PUT", pattern, handler)

    def patch(self, pattern: str, handler: HandlerLike = _UNSET) -> Any:
        return self._add(Phase.ROUTE, "PATCH", pattern, handler)

    def delete(self, pattern: str, handler: HandlerLike = _UNSET) -> Any:
        return self._add(Phase.ROUTE, "DELETE", pattern, handler)

    def options(self, pattern: str, handler: HandlerLike = _UNSET) -> Any:
        return self._add(Phase.ROUTE, "OPTIONS", pattern, handler)

    def set_not_found(self, handler: HandlerLike) -> "Router":
        """Set the handler called when no main route matched."""
        self._not_found = handler
        return self

    def not_found(self, handler: Callable[..., Any]) -> Callable[..., Any]:
        """Decorator form of ``set_not_found``."""
        self.set_not_found(handler)
        return handler

    # -------------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------------

    def run(self) -> int:
        """
        Dispatch the request.

        Returns:
            The number of main routes handled (0 or 1).
        """
        dispatcher = Dispatcher(
            self._tables,
            self._resolver,
            self._context,
            self._response,
            not_found=self._not_found,
        )
        self.last_dispatcher = dispatcher
        return dispatcher.run()

    # -------------------------------------------------------------------------
    # Helper Methods
    # -------------------------------------------------------------------------

    def path(self, uri: str) -> str:
        """
        URI relative to the script path.

        ``/login`` becomes ``/app/index.py/login`` without URL rewriting
        and ``/app/login`` with it.
        """
        return f"{self.script_name}/{uri.lstrip('/')}"

    def asset(self, uri: str) -> str:
        """URI relative to the script directory: ``/img/logo.png`` -> ``/app/img/logo.png``."""
        return f"{self.script_dir}/{uri.lstrip('/')}"

    def redirect(self, uri: str, relative: bool = False, exit: bool = True) -> None:
        """
        Send a ``Location`` header, then stop the dispatch unless ``exit``
        is false.

        Args:
            uri: Target URI.
            relative: Resolve ``uri`` against the script path first.
            exit: Call the termination primitive afterwards.
        """
        if relative:
            uri = self.path(uri)

        self._response.set_header("Location", uri)

        if exit:
            self._terminate()


def create_router(
    context: RequestContext | None = None,
    *,
    environ: Environ | None = None,
    response: ResponseBoundary | None = None,
    terminate: Terminate | None = None,
    classes: Mapping[str, type] | None = None,
) -> Router:
    """
    Create the router for one request.

    Either pass a ready ``context`` or an ``environ`` mapping (CGI/WSGI
    variables) to derive it from.
    """
    if context is None:
        if environ is None:
            raise ValueError("create_router() needs a context or an environ")
        context = RequestContext.from_environ(environ)

    return Router(
        context,
        response=response,
        terminate=terminate,
        resolver=HandlerResolver(classes),
    )
