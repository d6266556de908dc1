"""
Request context for Switchyard.
Derives the dispatch path from what the host server hands over.
"""

import posixpath
from dataclasses import dataclass
from functools import cached_property
from urllib.parse import parse_qs

from switchyard.types import Environ, QueryParams, Scope


def script_directory(script_name: str) -> str:
    """Directory part of the script URL path, without trailing slash."""
    directory = posixpath.dirname(script_name.replace("\\", "/"))
    return directory.rstrip("/")


def derive_path_info(
    request_uri: str,
    script_name: str,
    script_dir: str | None = None,
) -> tuple[str, str]:
    """
    Split a raw request URI into (effective script name, path info).

    When the URI starts with the script name the script is addressed
    directly (``/app/index.py/users``); otherwise a URL rewrite is assumed
    and the script directory becomes the prefix (``/app/users``). The
    query string is dropped and a single leading slash is enforced.
    """
    if script_name and request_uri.startswith(script_name):
        effective = script_name
    else:
        effective = script_directory(script_name) if script_dir is None else script_dir

    path = request_uri[len(effective):] if request_uri.startswith(effective) else request_uri
    path = path.split("?", 1)[0]
    return effective, "/" + path.lstrip("/")


@dataclass(frozen=True)
class RequestContext:
    """
    Read-only per-dispatch request state.

    Built once when a router is created and never changed afterwards.
    """

    method: str
    request_uri: str
    script_name: str
    script_dir: str
    path_info: str
    query_string: str = ""

    @classmethod
    def create(
        cls,
        method: str,
        request_uri: str,
        script_name: str = "",
        script_dir: str | None = None,
    ) -> "RequestContext":
        """
        Build a context from the values a host always knows.

        ``script_dir`` defaults to the directory part of ``script_name``.
        """
        if script_dir is None:
            script_dir = script_directory(script_name)
        effective, path_info = derive_path_info(request_uri, script_name, script_dir)
        _, _, query_string = request_uri.partition("?")
        return cls(
            method=method.upper(),
            request_uri=request_uri,
            script_name=effective,
            script_dir=script_dir,
            path_info=path_info,
            query_string=query_string,
        )

    @classmethod
    def from_environ(cls, environ: Environ) -> "RequestContext":
        """
        Build a context from a CGI / WSGI environment.

        ``REQUEST_URI`` is not part of CGI proper; when a server leaves it
        out it is rebuilt from ``SCRIPT_NAME``, ``PATH_INFO`` and
        ``QUERY_STRING``.
        """
        script_name = environ.get("SCRIPT_NAME", "")
        request_uri = environ.get("REQUEST_URI")
        if request_uri is None:
            request_uri = script_name + environ.get("PATH_INFO", "")
            query_string = environ.get("QUERY_STRING", "")
            if query_string:
                request_uri = f"{request_uri}?{query_string}"
        return cls.create(
            environ.get("REQUEST_METHOD", "GET"),
            request_uri,
            script_name,
        )

    @classmethod
    def from_scope(cls, scope: Scope, script_name: str | None = None) -> "RequestContext":
        """
        Build a context from an ASGI HTTP scope.

        ``script_name`` defaults to the scope's ``root_path``, which is a
        mount directory rather than a script, so it doubles as the script
        directory.
        """
        root_path = scope.get("root_path", "")
        raw_path = scope.get("raw_path")
        if raw_path:
            path = raw_path.decode("latin-1")
        else:
            path = scope.get("path", "/")
        if root_path and not path.startswith(root_path):
            path = root_path + path

        request_uri = path
        query_string = scope.get("query_string", b"").decode("latin-1")
        if query_string:
            request_uri = f"{request_uri}?{query_string}"

        if script_name is None:
            return cls.create(
                scope.get("method", "GET"),
                request_uri,
                root_path,
                script_dir=root_path.rstrip("/"),
            )
        return cls.create(scope.get("method", "GET"), request_uri, script_name)

    @cached_property
    def query_params(self) -> QueryParams:
        """Parsed query parameters."""
        params: dict[str, str | list[str]] = {}
        parsed = parse_qs(self.query_string, keep_blank_values=True)

        for key, values in parsed.items():
            if len(values) == 1:
                params[key] = values[0]
            else:
                params[key] = values

        return params
