"""
Error handling middleware.
"""

import logging
import uuid
from typing import Any

from switchyard.exceptions import HTTPException, InvocationError, ResolutionError
from switchyard.middleware.base import Middleware
from switchyard.response import JSONResponse
from switchyard.types import ASGIApp, Receive, Scope, Send


class ErrorHandlerMiddleware(Middleware):
    """
    Turns exceptions escaping a dispatch into error responses.

    ``HTTPException`` keeps its status. Anything else, including handler
    resolution and invocation failures, becomes a 500. Its body only names
    the exception when ``debug`` is set. Every response gets an ``X-Request-ID``.
    """

    def __init__(
        self,
        app: ASGIApp,
        debug: bool = False,
    ) -> None:
        super().__init__(app)
        self.debug = debug
        self._logger = logging.getLogger("switchyard.errors")

    async def process(self, scope: Scope, receive: Receive, send: Send) -> None:
        request_id = str(uuid.uuid4())
        scope["request_id"] = request_id

        async def send_with_request_id(message: dict[str, Any]) -> None:
            if message["type"] == "http.response.start":
                headers = list(message.get("headers", []))
                headers.append((b"x-request-id", request_id.encode()))
                message["headers"] = headers
            await send(message)

        try:
            await self.app(scope, receive, send_with_request_id)
        except HTTPException as exc:
            if exc.status_code >= 500:
                self._logger.error(
                    "request_id=%s status=%d detail=%s",
                    request_id, exc.status_code, exc.detail,
                    exc_info=True,
                )
            else:
                self._logger.warning(
                    "request_id=%s status=%d detail=%s",
                    request_id, exc.status_code, exc.detail,
                )
            response = JSONResponse(
                content={
                    "error": exc.detail,
                    "status_code": exc.status_code,
                    "request_id": request_id,
                },
                status_code=exc.status_code,
                headers=exc.headers,
            )
            await response(send_with_request_id)
        except (ResolutionError, InvocationError) as exc:
            self._logger.exception(
                "Handler failure request_id=%s: %s",
                request_id, exc,
            )
            await self._internal_error(request_id, send_with_request_id, exc)
        except Exception as exc:
            self._logger.exception(
                "Unhandled exception request_id=%s: %s",
                request_id, exc,
            )
            await self._internal_error(request_id, send_with_request_id, exc)

    async def _internal_error(self, request_id: str, send: Any, exc: Exception) -> None:
        content: dict[str, Any] = {
            "error": "Internal Server Error",
            "status_code": 500,
            "request_id": request_id,
        }
        if self.debug:
            content["detail"] = f"{type(exc).__name__}: {exc}"
        response = JSONResponse(content=content, status_code=500)
        await response(send)
