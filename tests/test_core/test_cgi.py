"""Tests for switchyard.cgi — process-per-request host."""

import io

from switchyard.cgi import run_cgi
from switchyard.exceptions import HTTPException, NotFound

from tests.conftest import make_environ


def routes(router) -> None:
    def gone() -> None:
        raise NotFound("no such page")

    def moved() -> None:
        raise HTTPException(301, "Moved Permanently", {"Location": "/hello/there"})

    router.get("/hello/:string", lambda name: router.response.write(f"Hello {name}"))
    router.get("/go", lambda: router.redirect("/hello/there", relative=True))
    router.get("/gone", gone)
    router.get("/crash", "Ghost->boo")
    router.get("/moved", moved)


def serve(uri: str, method: str = "GET") -> tuple[int, str]:
    stream = io.BytesIO()
    status = run_cgi(
        routes,
        environ=make_environ(method, uri, "/cgi-bin/app.py"),
        stream=stream,
    )
    return status, stream.getvalue().decode()


class TestRunCgi:
    def test_ok(self) -> None:
        status, output = serve("/cgi-bin/app.py/hello/world")
        assert status == 0
        head, body = output.split("\r\n\r\n", 1)
        assert head.startswith("Status: 200 OK")
        assert body == "Hello world"

    def test_not_found(self) -> None:
        status, output = serve("/cgi-bin/app.py/nowhere")
        assert status == 0
        assert output.startswith("Status: 404 Not Found")

    def test_redirect(self) -> None:
        status, output = serve("/cgi-bin/app.py/go")
        assert status == 0
        assert output.startswith("Status: 302 Found")
        assert "Location: /cgi-bin/app.py/hello/there\r\n" in output

    def test_http_exception(self) -> None:
        status, output = serve("/cgi-bin/app.py/gone")
        assert status == 0
        assert output.startswith("Status: 404 Not Found")
        assert output.endswith("no such page")

    def test_handler_failure(self) -> None:
        status, output = serve("/cgi-bin/app.py/crash")
        assert status == 1
        assert output.startswith("Status: 500 Internal Server Error")
        assert "Ghost" not in output

    def test_http_exception_keeps_redirect_status(self) -> None:
        status, output = serve("/cgi-bin/app.py/moved")
        assert status == 0
        assert output.startswith("Status: 301 Moved Permanently")
        assert "Location: /hello/there\r\n" in output
