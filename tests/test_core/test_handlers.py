"""Tests for switchyard.handlers — references, class lookup, instance cache."""

import threading
import time

import pytest

from switchyard.exceptions import InvocationError, ResolutionError, UnknownClassError
from switchyard.handlers import Bound, Direct, HandlerResolver, MissingMethod, parse_handler


class Counter:
    instances_created = 0

    def __init__(self) -> None:
        Counter.instances_created += 1
        self.count = 0

    def bump(self, *args: str) -> int:
        self.count += 1
        return self.count

    def also_bump(self) -> int:
        self.count += 1
        return self.count

    label = "not callable"


class TestParseHandler:
    def test_function_is_direct(self) -> None:
        def view() -> None: ...
        assert parse_handler(view) == Direct(view)

    def test_arrow_string_is_bound(self) -> None:
        assert parse_handler("Users->show") == Bound("Users", "show")

    def test_splits_on_first_separator(self) -> None:
        assert parse_handler("A->b->c") == Bound("A", "b->c")

    def test_plain_string_is_direct(self) -> None:
        assert parse_handler("just text") == Direct("just text")

    def test_reference_passes_through(self) -> None:
        ref = Bound("X", "y")
        assert parse_handler(ref) is ref

    def test_str(self) -> None:
        assert str(Bound("Users", "show")) == "Users->show"


class TestHandlerResolver:
    def test_direct_returned_as_is(self) -> None:
        def view() -> None: ...
        assert HandlerResolver().resolve(view) is view

    def test_unknown_class(self) -> None:
        with pytest.raises(UnknownClassError, match="Ghost"):
            HandlerResolver().resolve("Ghost->boo")

    def test_one_instance_per_class(self) -> None:
        resolver = HandlerResolver({"Counter": Counter})
        before = Counter.instances_created
        first = resolver.resolve("Counter->bump")
        second = resolver.resolve("Counter->also_bump")
        resolver.invoke(first, [])
        resolver.invoke(second, [])
        assert Counter.instances_created == before + 1
        assert resolver.instances["Counter"].count == 2

    def test_separate_resolvers_do_not_share(self) -> None:
        a = HandlerResolver({"Counter": Counter})
        b = HandlerResolver({"Counter": Counter})
        a.resolve("Counter->bump")
        b.resolve("Counter->bump")
        assert a.instances["Counter"] is not b.instances["Counter"]

    def test_register_decorator(self) -> None:
        resolver = HandlerResolver()

        @resolver.register
        class Pages:
            def home(self) -> str:
                return "home"

        assert resolver.invoke(resolver.resolve("Pages->home")) == "home"

    def test_register_under_alias(self) -> None:
        resolver = HandlerResolver()
        resolver.register(Counter, name="Clicks")
        assert resolver.invoke(resolver.resolve("Clicks->bump")) == 1

    def test_import_path_lookup(self) -> None:
        resolver = HandlerResolver()
        target = resolver.resolve("collections:OrderedDict->keys")
        assert list(resolver.invoke(target)) == []
        assert "collections:OrderedDict" in resolver.instances

    def test_dotted_import_path_lookup(self) -> None:
        resolver = HandlerResolver()
        target = resolver.resolve("collections.Counter->total")
        assert resolver.invoke(target) == 0

    def test_import_path_to_missing_module(self) -> None:
        with pytest.raises(UnknownClassError):
            HandlerResolver().resolve("no_such_module_xyz.Thing->run")

    def test_import_path_to_non_class(self) -> None:
        with pytest.raises(UnknownClassError):
            HandlerResolver().resolve("os.path.join->x")

    def test_missing_method_resolves_to_marker(self) -> None:
        resolver = HandlerResolver({"Counter": Counter})
        target = resolver.resolve("Counter->nope")
        assert isinstance(target, MissingMethod)
        with pytest.raises(InvocationError, match="not callable"):
            resolver.invoke(target, [])

    def test_non_callable_attribute(self) -> None:
        resolver = HandlerResolver({"Counter": Counter})
        with pytest.raises(InvocationError):
            resolver.invoke(resolver.resolve("Counter->label"), [])

    def test_invoke_passes_args(self) -> None:
        seen: list[tuple[str, ...]] = []
        HandlerResolver().invoke(lambda *a: seen.append(a), ["1", "two"])
        assert seen == [("1", "two")]

    def test_instances_view_is_read_only(self) -> None:
        resolver = HandlerResolver({"Counter": Counter})
        with pytest.raises(TypeError):
            resolver.instances["Counter"] = object()  # type: ignore[index]

    def test_invoke_rejects_coroutine_function(self) -> None:
        async def handler() -> None: ...

        with pytest.raises(InvocationError, match="coroutine"):
            HandlerResolver().invoke(handler)

    def test_invoke_rejects_async_bound_method(self) -> None:
        class Pages:
            async def show(self) -> None: ...

        resolver = HandlerResolver({"Pages": Pages})
        with pytest.raises(InvocationError, match="coroutine"):
            resolver.invoke(resolver.resolve("Pages->show"))


class TestNestedConstruction:
    def test_constructor_may_resolve_other_classes(self) -> None:
        resolver = HandlerResolver()

        @resolver.register
        class Helper:
            def ping(self) -> str:
                return "pong"

        @resolver.register
        class Page:
            def __init__(self) -> None:
                self.ping = resolver.resolve("Helper->ping")

        finished = threading.Event()

        def build() -> None:
            resolver.resolve("Page->ping")
            finished.set()

        worker = threading.Thread(target=build, daemon=True)
        worker.start()
        worker.join(timeout=5)

        assert finished.is_set()
        assert set(resolver.instances) == {"Helper", "Page"}
        assert resolver.instances["Page"].ping() == "pong"

    def test_self_resolving_constructor_is_an_error(self) -> None:
        resolver = HandlerResolver()

        @resolver.register
        class Loop:
            def __init__(self) -> None:
                resolver.resolve("Loop->run")

            def run(self) -> None: ...

        with pytest.raises(ResolutionError, match="Loop"):
            resolver.resolve("Loop->run")
        assert "Loop" not in resolver.instances

        # Not stuck: a later resolution fails the same way instead of hanging
        with pytest.raises(ResolutionError):
            resolver.resolve("Loop->run")


class TestConcurrentResolution:
    def test_one_instance_under_contention(self) -> None:
        created: list[object] = []
        start = threading.Barrier(8)

        class Slow:
            def __init__(self) -> None:
                time.sleep(0.05)
                created.append(self)

            def method(self) -> None: ...

        resolver = HandlerResolver({"Slow": Slow})
        targets: list[object] = []

        def resolve() -> None:
            start.wait()
            targets.append(resolver.resolve("Slow->method").__self__)

        threads = [threading.Thread(target=resolve) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=5)

        assert len(created) == 1
        assert len(targets) == 8
        assert all(target is created[0] for target in targets)
