"""
Switchyard - Hello World sample

This demonstrates the basic usage of the Switchyard router.
Run with: uv run uvicorn sample:app --reload
"""


import logging
import time

from switchyard import Router, Switchyard
from switchyard.middleware import RequestLoggingMiddleware

# =============================================================================
# Application Setup
# =============================================================================

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-8s %(name)s  %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%S%z",
)
logger = logging.getLogger("switchyard.sample")


# =============================================================================
# Class-bound handlers ("Class->method")
# =============================================================================


class Pages:
    """One instance per request, shared by every route naming it."""

    def __init__(self, router: Router) -> None:
        self.router = router
        self.rendered = 0

    def home(self) -> None:
        self.rendered += 1
        self.router.response.write("<h1>Welcome to Switchyard</h1>")

    def about(self) -> None:
        self.rendered += 1
        self.router.response.write("<p>An ordered-pattern router.</p>")


# =============================================================================
# Routes
# =============================================================================


def routes(router: Router) -> None:
    started = time.perf_counter()

    class RequestPages(Pages):
        def __init__(self) -> None:
            super().__init__(router)

    router.resolver.register(RequestPages, name="Pages")

    @router.before("GET|POST", "/admin(/.*)?")
    def require_login(*_: str) -> None:
        if router.request.query_params.get("token") != "letmein":
            router.redirect("/login", relative=True)

    router.get("/", "Pages->home")
    router.get("/about", "Pages->about")

    @router.get("/hello/:string")
    def hello(name: str) -> None:
        router.response.write(f"Hello, {name}!")

    @router.get("/users/(:number)/posts/(:alpha)")
    def user_post(user_id: str, slug: str) -> None:
        router.response.set_header("Content-Type", "application/json")
        router.response.write(f'{{"user": {user_id}, "post": "{slug}"}}')

    @router.get("/admin")
    def admin() -> None:
        router.response.write("secret admin page")

    @router.get("/login")
    def login() -> None:
        router.response.write(
            f'<a href="{router.path("/admin")}?token=letmein">log in</a>'
            f'<link rel="stylesheet" href="{router.asset("/css/site.css")}">'
        )

    @router.after("GET", "/.*")
    def timing() -> None:
        elapsed = (time.perf_counter() - started) * 1000
        router.response.set_header("X-Dispatch-Time", f"{elapsed:.2f}ms")

    @router.not_found
    def missing() -> None:
        router.response.set_status(404)
        router.response.write(f"<h1>Nothing at {router.path_info}</h1>")


app: Switchyard = Switchyard(routes, debug=True)
app.add_middleware(RequestLoggingMiddleware)


if __name__ == "__main__":
    app.run(host="127.0.0.1", port=8000)
