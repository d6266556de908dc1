"""
Route tables for Switchyard.

A RouteTable keeps, per HTTP method, the ordered list of (pattern, handler)
entries registered for one dispatch phase. Registration order is the
match-attempt order and entries are never removed.
"""

from collections.abc import Iterator
from dataclasses import dataclass, field
from http import HTTPMethod

from switchyard.exceptions import RoutingError
from switchyard.handlers import HandlerReference, parse_handler
from switchyard.patterns import CompiledPattern, compile_pattern, normalize_pattern
from switchyard.types import HandlerLike, MethodSpec, Phase

# Delimiter accepted in string method lists ("GET|POST")
METHOD_DELIMITER: str = "|"

KNOWN_METHODS: frozenset[str] = frozenset(m.value for m in HTTPMethod)


def parse_methods(spec: MethodSpec) -> tuple[str, ...]:
    """
    Parse a method specification into upper-cased method names.

    Accepts ``"GET|POST"``, a single method, an ``HTTPMethod`` or an
    iterable of those. Duplicates are dropped, order is kept.
    """
    if isinstance(spec, HTTPMethod):
        raw: list[str] = [spec.value]
    elif isinstance(spec, str):
        raw = spec.split(METHOD_DELIMITER)
    else:
        raw = []
        for item in spec:
            if isinstance(item, HTTPMethod):
                raw.append(item.value)
            else:
                raw.extend(str(item).split(METHOD_DELIMITER))

    methods: list[str] = []
    for name in raw:
        method = name.strip().upper()
        if not method:
            continue
        if method not in KNOWN_METHODS:
            raise RoutingError(f"Unknown HTTP method: {name!r}")
        if method not in methods:
            methods.append(method)

    if not methods:
        raise RoutingError(f"No HTTP method given in {spec!r}")
    return tuple(methods)


@dataclass(frozen=True, slots=True)
class RouteEntry:
    """A normalized pattern bound to a handler reference."""

    pattern: str
    handler: HandlerReference
    method: str
    matcher: CompiledPattern = field(repr=False, compare=False)

    def match(self, path: str) -> list[str] | None:
        return self.matcher.match(path)


class RouteTable:
    """
    Ordered, append-only route storage for one dispatch phase.

    Handlers are stored as references and never validated here; a handler
    that is not callable only fails when a dispatch reaches it.
    """

    def __init__(self, phase: Phase = Phase.ROUTE) -> None:
        self.phase = phase
        self._buckets: dict[str, list[RouteEntry]] = {}

    def add(
        self,
        methods: MethodSpec,
        pattern: str,
        handler: HandlerLike,
    ) -> list[RouteEntry]:
        """Register ``handler`` under ``pattern`` once per method."""
        normalized = normalize_pattern(pattern)
        matcher = compile_pattern(normalized)
        reference = parse_handler(handler)

        entries: list[RouteEntry] = []
        for method in parse_methods(methods):
            entry = RouteEntry(
                pattern=normalized,
                handler=reference,
                method=method,
                matcher=matcher,
            )
            self._buckets.setdefault(method, []).append(entry)
            entries.append(entry)
        return entries

    def entries(self, method: str) -> tuple[RouteEntry, ...]:
        """Entries registered for ``method`` in registration order."""
        return tuple(self._buckets.get(method.upper(), ()))

    @property
    def methods(self) -> tuple[str, ...]:
        return tuple(self._buckets)

    def __contains__(self, method: object) -> bool:
        return isinstance(method, str) and method.upper() in self._buckets

    def __iter__(self) -> Iterator[RouteEntry]:
        for bucket in self._buckets.values():
            yield from bucket

    def __len__(self) -> int:
        return sum(len(bucket) for bucket in self._buckets.values())

    def __repr__(self) -> str:
        return f"RouteTable(phase={self.phase.value!r}, routes={len(self)})"
