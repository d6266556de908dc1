"""
Response buffer for Switchyard.

Handlers do not return responses; they write to the router's Response,
which the host turns into ASGI messages or CGI output once dispatch ends.
"""

import json
from http import HTTPStatus
from typing import Any

from switchyard.types import Send


def reason_phrase(status_code: int) -> str:
    """Standard reason phrase for ``status_code`` (empty when unknown)."""
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return ""


class Response:
    """
    Mutable response shared by every handler of one dispatch.

    Header names are case-insensitive; setting a header twice replaces the
    earlier value, matching how servers treat repeated ``header()`` calls.
    Setting ``Location`` without an explicit redirect status promotes the
    status to 302.
    """

    media_type: str = "text/html"
    charset: str = "utf-8"

    def __init__(
        self,
        status_code: int = 200,
        headers: dict[str, str] | None = None,
    ) -> None:
        self.status_code = status_code
        # A status given up front is deliberate and survives a Location header
        self._status_explicit = status_code != 200
        self._headers: dict[str, tuple[str, str]] = {}
        self._chunks: list[bytes] = []
        for name, value in (headers or {}).items():
            self.set_header(name, value)

    @property
    def content_type(self) -> str:
        """Full content type with charset."""
        if self.media_type.startswith("text/") or "json" in self.media_type:
            return f"{self.media_type}; charset={self.charset}"
        return self.media_type

    @property
    def headers(self) -> dict[str, str]:
        """Headers as set, with their original casing."""
        return dict(self._headers.values())

    def get_header(self, name: str, default: str | None = None) -> str | None:
        entry = self._headers.get(name.lower())
        return entry[1] if entry else default

    def set_status(self, status_code: int) -> "Response":
        """Set the status code. Returns self for chaining."""
        self.status_code = status_code
        self._status_explicit = True
        return self

    def set_header(self, name: str, value: str) -> "Response":
        """Set a response header. Returns self for chaining."""
        key = name.lower()
        if key == "content-type":
            self.media_type, _, params = value.partition(";")
            self.media_type = self.media_type.strip()
            if "charset=" in params:
                self.charset = params.split("charset=", 1)[1].strip()
            return self
        self._headers[key] = (name, value)
        if key == "location" and not (
            self._status_explicit and 300 <= self.status_code < 400
        ):
            self.status_code = 302
        return self

    def write(self, data: Any) -> "Response":
        """Append to the body. ``str`` is encoded with the response charset."""
        if isinstance(data, bytes):
            self._chunks.append(data)
        else:
            self._chunks.append(str(data).encode(self.charset))
        return self

    def render(self) -> bytes:
        """The body written so far."""
        return b"".join(self._chunks)

    def _build_headers(self) -> list[tuple[bytes, bytes]]:
        """Build header list for ASGI response."""
        headers: list[tuple[bytes, bytes]] = []

        # Add content-type
        headers.append((b"content-type", self.content_type.encode("latin-1")))

        # Add custom headers
        for name, value in self._headers.values():
            headers.append((name.lower().encode("latin-1"), value.encode("latin-1")))

        return headers

    def cgi_head(self) -> str:
        """Status and header block for CGI output, blank line included."""
        lines = [f"Status: {self.status_code} {reason_phrase(self.status_code)}".rstrip()]
        lines.append(f"Content-Type: {self.content_type}")
        for name, value in self._headers.values():
            lines.append(f"{name}: {value}")
        return "\r\n".join(lines) + "\r\n\r\n"

    async def __call__(self, send: Send) -> None:
        """Send the response via ASGI."""
        body = self.render()

        await send({
            "type": "http.response.start",
            "status": self.status_code,
            "headers": self._build_headers(),
        })

        await send({
            "type": "http.response.body",
            "body": body,
        })

    def __repr__(self) -> str:
        return f"Response(status_code={self.status_code}, bytes={len(self.render())})"


class JSONResponse(Response):
    """Response whose body is ``content`` serialized as JSON."""

    media_type = "application/json"

    def __init__(
        self,
        content: Any = None,
        status_code: int = 200,
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__(status_code, headers)
        self.write(json.dumps(
            content,
            ensure_ascii=False,
            allow_nan=False,
            separators=(",", ":"),
        ))
