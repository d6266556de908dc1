"""
CGI host for Switchyard.

One process serves one request: the router is built from the process
environment, dispatched, and the response is written to stdout.

Usage (``index.py`` behind a CGI-capable server):

    from switchyard.cgi import run_cgi

    def routes(router):
        router.get("/", "Pages->home")

    if __name__ == "__main__":
        raise SystemExit(run_cgi(routes))
"""

import logging
import os
import sys
from collections.abc import Callable, Mapping
from typing import Any, BinaryIO

from switchyard.exceptions import Halt, HTTPException
from switchyard.response import Response
from switchyard.router import Router, create_router
from switchyard.types import Environ

logger = logging.getLogger("switchyard.cgi")


def run_cgi(
    setup: Callable[[Router], Any],
    environ: Environ | None = None,
    stream: BinaryIO | None = None,
    classes: Mapping[str, type] | None = None,
) -> int:
    """
    Serve the current CGI request.

    Returns:
        Process exit status: 0 when the response was produced, 1 when a
        handler failed and a 500 was written instead.
    """
    environ = os.environ if environ is None else environ
    stream = sys.stdout.buffer if stream is None else stream

    response = Response()
    router = create_router(environ=environ, response=response, classes=classes)
    status = 0

    try:
        setup(router)
        router.run()
    except Halt:
        pass
    except HTTPException as exc:
        logger.warning("status=%d detail=%s", exc.status_code, exc.detail)
        response = Response(exc.status_code, exc.headers)
        response.set_header("Content-Type", "text/plain")
        response.write(exc.detail)
    except Exception as exc:
        logger.exception("Unhandled exception: %s", exc)
        response = Response(500)
        response.set_header("Content-Type", "text/plain")
        response.write("Internal Server Error")
        status = 1

    stream.write(response.cgi_head().encode("latin-1"))
    stream.write(response.render())
    stream.flush()
    return status
