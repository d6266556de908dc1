"""
Base class for Switchyard host middleware.
"""

from abc import ABC, abstractmethod

from switchyard.request import RequestContext
from switchyard.types import ASGIApp, Receive, Scope, Send

# Scope keys the Switchyard app fills in while dispatching
CONTEXT_KEY: str = "switchyard.context"
HANDLED_KEY: str = "switchyard.handled"


class Middleware(ABC):
    """
    ASGI middleware wrapped around a Switchyard app.

    Non-HTTP scopes are passed straight through; subclasses only implement
    ``process`` for HTTP requests.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        await self.process(scope, receive, send)

    @abstractmethod
    async def process(self, scope: Scope, receive: Receive, send: Send) -> None:
        ...

    @staticmethod
    def request_context(scope: Scope) -> RequestContext:
        """
        The context the request was (or will be) dispatched with.

        Once the app has dispatched, the context it stored in the scope is
        returned. Before that it is derived the same way, honouring the
        app's ``script_name``.
        """
        context = scope.get(CONTEXT_KEY)
        if context is not None:
            return context
        script_name = getattr(scope.get("app"), "script_name", None)
        return RequestContext.from_scope(scope, script_name)
