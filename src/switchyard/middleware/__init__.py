"""
Host middleware for the Switchyard ASGI application.

These wrap the whole dispatch and are unrelated to the before/after route
phases of a Router.
"""

from switchyard.middleware.base import CONTEXT_KEY, HANDLED_KEY, Middleware
from switchyard.middleware.error_handler import ErrorHandlerMiddleware
from switchyard.middleware.logging import RequestLoggingMiddleware

__all__ = [
    "CONTEXT_KEY",
    "HANDLED_KEY",
    "Middleware",
    "ErrorHandlerMiddleware",
    "RequestLoggingMiddleware",
]
