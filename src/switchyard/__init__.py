"""
Switchyard - an ordered-pattern HTTP router

Routes are tried in registration order against the request path; the first
match handles the request. Before and after phases run every matching
handler around it, and a not-found handler covers the rest.
"""

from switchyard.app import Switchyard
from switchyard.cgi import run_cgi
from switchyard.dispatch import Dispatcher, DispatchState
from switchyard.exceptions import (
    HTTPException,
    InvocationError,
    NotFound,
    PatternError,
    ResolutionError,
    RoutingError,
    SwitchyardException,
    UnknownClassError,
)
from switchyard.handlers import Bound, Direct, HandlerResolver
from switchyard.patterns import PATTERN_TOKENS, compile_pattern, normalize_pattern
from switchyard.request import RequestContext
from switchyard.response import JSONResponse, Response
from switchyard.router import Router, create_router
from switchyard.routing import RouteEntry, RouteTable
from switchyard.types import Phase

__version__ = "0.1.0"
__all__ = [
    "Switchyard",
    "run_cgi",
    "Router",
    "create_router",
    "Dispatcher",
    "DispatchState",
    "RouteTable",
    "RouteEntry",
    "Phase",
    "HandlerResolver",
    "Direct",
    "Bound",
    "RequestContext",
    "Response",
    "JSONResponse",
    "PATTERN_TOKENS",
    "compile_pattern",
    "normalize_pattern",
    "SwitchyardException",
    "HTTPException",
    "NotFound",
    "RoutingError",
    "PatternError",
    "ResolutionError",
    "UnknownClassError",
    "InvocationError",
]
