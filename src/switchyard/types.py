"""
Type definitions for the Switchyard router.
Following Python 3.11+ typing conventions.
"""

from collections.abc import Awaitable, Callable, Iterable, Mapping, MutableMapping
from enum import Enum
from http import HTTPMethod
from typing import Any, Protocol, TypeAlias

# ASGI Types
Scope: TypeAlias = MutableMapping[str, Any]
Message: TypeAlias = MutableMapping[str, Any]
Receive: TypeAlias = Callable[[], Awaitable[Message]]
Send: TypeAlias = Callable[[Message], Awaitable[None]]
ASGIApp: TypeAlias = Callable[[Scope, Receive, Send], Awaitable[None]]

# Handler Types
RouteHandler: TypeAlias = Callable[..., Any]
HandlerLike: TypeAlias = RouteHandler | str | object
MethodSpec: TypeAlias = str | HTTPMethod | Iterable[str | HTTPMethod]
Terminate: TypeAlias = Callable[[], Any]

# Request Types
Environ: TypeAlias = Mapping[str, Any]
QueryParams: TypeAlias = Mapping[str, str | list[str]]


class Phase(str, Enum):
    """The three route tables a router dispatches through, in order."""

    BEFORE = "before"
    ROUTE = "route"
    AFTER = "after"


class ResponseBoundary(Protocol):
    """Protocol for whatever carries status and headers back to the client."""

    def set_status(self, status_code: int) -> Any: ...

    def set_header(self, name: str, value: str) -> Any: ...
