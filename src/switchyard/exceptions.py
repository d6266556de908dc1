"""
Switchyard exceptions.
Each exception covers one kind of failure: registration, resolution,
invocation or an HTTP-level outcome.
"""


class SwitchyardException(Exception):
    """Base exception for all Switchyard errors."""

    def __init__(self, message: str = "An error occurred") -> None:
        self.message = message
        super().__init__(self.message)


class HTTPException(SwitchyardException):
    """HTTP-related exceptions with status codes."""

    def __init__(
        self,
        status_code: int = 500,
        detail: str = "Internal Server Error",
        headers: dict[str, str] | None = None,
    ) -> None:
        self.status_code = status_code
        self.detail = detail
        self.headers = headers or {}
        super().__init__(detail)


class BadRequest(HTTPException):
    """400 Bad Request."""

    def __init__(self, detail: str = "Bad Request") -> None:
        super().__init__(400, detail)


class NotFound(HTTPException):
    """404 Not Found."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(404, detail)


class RoutingError(SwitchyardException):
    """Invalid route registration (bad method list, bad pattern)."""
    pass


class PatternError(RoutingError):
    """A route pattern does not compile to a valid regular expression."""

    def __init__(self, pattern: str, reason: str) -> None:
        self.pattern = pattern
        super().__init__(f"Invalid route pattern {pattern!r}: {reason}")


class ResolutionError(SwitchyardException):
    """A handler reference cannot be turned into a target."""
    pass


class UnknownClassError(ResolutionError):
    """A ``Class->method`` reference names a class that does not exist."""

    def __init__(self, class_name: str) -> None:
        self.class_name = class_name
        super().__init__(f"Class '{class_name}' does not exist")


class InvocationError(SwitchyardException):
    """A resolved handler target is not callable."""

    def __init__(self, target: object, reason: str = "is not callable") -> None:
        self.target = target
        super().__init__(f"'{target!r}' {reason}")


class DispatchError(SwitchyardException):
    """A dispatcher was asked to run more than once."""
    pass


class Halt(SwitchyardException):
    """
    Raised by the default termination primitive.

    Hosts catch it and finish the response with whatever the handlers
    have written so far.
    """

    def __init__(self, message: str = "Dispatch halted") -> None:
        super().__init__(message)
