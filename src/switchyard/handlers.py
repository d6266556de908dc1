"""
Handler references and their resolution.

A route stores a handler *reference*. It is either a direct target (usually
a function) or a ``"ClassName->method"`` string naming a method on an
instance of a class. Class-bound references are resolved lazily: the first
dispatch that needs ``ClassName`` creates one instance, every later
reference to the same class reuses it for the lifetime of the resolver.
"""

import importlib
import inspect
import logging
import threading
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, TypeAlias

from switchyard.exceptions import InvocationError, ResolutionError, UnknownClassError

# Separator between class name and method name in bound references
BOUND_SEPARATOR: str = "->"

logger = logging.getLogger("switchyard.handlers")


@dataclass(frozen=True, slots=True)
class Direct:
    """A target stored as-is. Callability is only checked at dispatch."""

    target: Any

    def __str__(self) -> str:
        return getattr(self.target, "__qualname__", repr(self.target))


@dataclass(frozen=True, slots=True)
class Bound:
    """A method on a lazily created, cached instance of a named class."""

    class_name: str
    method_name: str

    def __str__(self) -> str:
        return f"{self.class_name}{BOUND_SEPARATOR}{self.method_name}"


HandlerReference: TypeAlias = Direct | Bound


@dataclass(frozen=True, slots=True)
class MissingMethod:
    """Resolution result for a bound reference whose method does not exist."""

    instance: Any
    method_name: str

    def __repr__(self) -> str:
        return f"{type(self.instance).__name__}{BOUND_SEPARATOR}{self.method_name}"


def parse_handler(handler: Any) -> HandlerReference:
    """Turn whatever was registered into a HandlerReference."""
    if isinstance(handler, (Direct, Bound)):
        return handler
    if isinstance(handler, str) and BOUND_SEPARATOR in handler:
        class_name, method_name = handler.split(BOUND_SEPARATOR, 1)
        return Bound(class_name.strip(), method_name.strip())
    return Direct(handler)


class HandlerResolver:
    """
    Resolves handler references into invocable targets.

    Classes are looked up in the explicit registry first. Names that look
    like import paths (``package.module.Class`` or ``package.module:Class``)
    are imported on demand.

    Usage:
        resolver = HandlerResolver()

        @resolver.register
        class Users:
            def show(self, user_id): ...

        target = resolver.resolve("Users->show")
        resolver.invoke(target, ["42"])
    """

    def __init__(self, classes: Mapping[str, type] | None = None) -> None:
        self._classes: dict[str, type] = dict(classes or {})
        self._instances: dict[str, Any] = {}
        # Reentrant: a handler constructor may resolve other handlers
        self._lock = threading.RLock()
        self._constructing: set[str] = set()

    @property
    def instances(self) -> Mapping[str, Any]:
        """Read-only view of the instances created so far, keyed by class name."""
        return MappingProxyType(self._instances)

    def register(self, cls: type, name: str | None = None) -> type:
        """Make ``cls`` resolvable under ``name`` (its ``__name__`` by default)."""
        self._classes[name or cls.__name__] = cls
        return cls

    def resolve(self, handler: Any) -> Any:
        """
        Resolve a handler (or handler reference) into its target.

        Direct references come back unchanged. Bound references come back
        as the bound method of the cached instance, or a ``MissingMethod``
        marker when the instance has no such attribute.

        Raises:
            UnknownClassError: If a bound reference names an unknown class.
        """
        reference = parse_handler(handler)
        if isinstance(reference, Direct):
            return reference.target

        instance = self._instance_for(reference.class_name)
        target = getattr(instance, reference.method_name, None)
        if target is None:
            return MissingMethod(instance, reference.method_name)
        return target

    def invoke(self, target: Any, args: list[str] | tuple[str, ...] = ()) -> Any:
        """
        Call ``target`` with the captured path arguments.

        Raises:
            InvocationError: If ``target`` is not callable, or is a
                coroutine function (handlers run synchronously).
        """
        if not callable(target):
            raise InvocationError(target)
        if inspect.iscoroutinefunction(target):
            raise InvocationError(target, "is a coroutine function, handlers must be synchronous")
        return target(*args)

    def _instance_for(self, class_name: str) -> Any:
        instance = self._instances.get(class_name)
        if instance is not None:
            return instance

        cls = self._lookup_class(class_name)
        with self._lock:
            # Another thread may have won the race
            instance = self._instances.get(class_name)
            if instance is None:
                if class_name in self._constructing:
                    raise ResolutionError(
                        f"Class '{class_name}' resolves itself while being constructed"
                    )
                self._constructing.add(class_name)
                try:
                    instance = cls()
                finally:
                    self._constructing.discard(class_name)
                self._instances[class_name] = instance
                logger.debug("Created handler instance for %s", class_name)
        return instance

    def _lookup_class(self, class_name: str) -> type:
        cls = self._classes.get(class_name)
        if cls is not None:
            return cls

        if ":" in class_name:
            module_name, _, attr = class_name.partition(":")
        elif "." in class_name:
            module_name, _, attr = class_name.rpartition(".")
        else:
            raise UnknownClassError(class_name)

        try:
            module = importlib.import_module(module_name)
        except ImportError as exc:
            raise UnknownClassError(class_name) from exc

        cls = getattr(module, attr, None)
        if not isinstance(cls, type):
            raise UnknownClassError(class_name)
        return cls
