"""
Access logging for the Switchyard host.
"""

import logging
import time
from typing import Any

from switchyard.middleware.base import HANDLED_KEY, Middleware
from switchyard.types import ASGIApp, Receive, Scope, Send


class RequestLoggingMiddleware(Middleware):
    """
    Logs one line per request: the dispatched method and path, the final
    status, how many main routes handled it and how long it took.
    """

    def __init__(
        self,
        app: ASGIApp,
        logger: logging.Logger | None = None,
        log_level: int = logging.INFO,
    ) -> None:
        super().__init__(app)
        self._logger = logger or logging.getLogger("switchyard.access")
        self._log_level = log_level

    async def process(self, scope: Scope, receive: Receive, send: Send) -> None:
        started = time.perf_counter()
        status_code = 0

        async def capture_status(message: dict[str, Any]) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message.get("status", 0)
            await send(message)

        try:
            await self.app(scope, receive, capture_status)
        finally:
            context = self.request_context(scope)
            client = scope.get("client")
            self._logger.log(
                self._log_level,
                "%s %s %d routes=%s %.2fms request_id=%s client=%s",
                context.method,
                context.path_info,
                status_code,
                scope.get(HANDLED_KEY, "-"),
                (time.perf_counter() - started) * 1000,
                scope.get("request_id", "-"),
                client[0] if client else "-",
            )
