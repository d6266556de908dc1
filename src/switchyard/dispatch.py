"""
Dispatch engine for Switchyard.

One Dispatcher runs one request through the three route tables:

    before   every matching entry runs, in registration order
    route    the first matching entry runs, then matching stops
    after    every matching entry runs, whether or not a route matched

When no main route matched, the not-found handler runs if one is set and
resolves to something callable; otherwise the response gets status 404.
"""

import logging
from collections.abc import Mapping
from enum import Enum
from typing import Any

from switchyard.exceptions import DispatchError
from switchyard.handlers import HandlerResolver, parse_handler
from switchyard.request import RequestContext
from switchyard.routing import RouteEntry, RouteTable
from switchyard.types import Phase, ResponseBoundary

logger = logging.getLogger("switchyard.dispatch")


class DispatchState(str, Enum):
    IDLE = "idle"
    BEFORE = "before"
    ROUTE = "route"
    AFTER = "after"
    DONE = "done"


class Dispatcher:
    """
    Single-use, synchronous executor of the before/route/after pipeline.

    Resolution and invocation errors are not caught here; they abort the
    run and propagate to the host.
    """

    def __init__(
        self,
        tables: Mapping[Phase, RouteTable],
        resolver: HandlerResolver,
        context: RequestContext,
        response: ResponseBoundary,
        not_found: Any = None,
    ) -> None:
        self._tables = tables
        self._resolver = resolver
        self._context = context
        self._response = response
        self._not_found = not_found
        self.state = DispatchState.IDLE
        self.invoked: list[RouteEntry] = []

    def run(self) -> int:
        """
        Execute the pipeline once.

        Returns:
            The number of main routes handled, 0 or 1.

        Raises:
            DispatchError: If this dispatcher has already run.
            UnknownClassError: If a ``Class->method`` handler names an
                unknown class.
            InvocationError: If a matched handler is not callable.
        """
        if self.state is not DispatchState.IDLE:
            raise DispatchError(f"Dispatcher already {self.state.value}")

        method = self._context.method
        path = self._context.path_info

        self.state = DispatchState.BEFORE
        self._handle(Phase.BEFORE, method, path)

        self.state = DispatchState.ROUTE
        handled = self._handle(Phase.ROUTE, method, path, run_once=True)

        self.state = DispatchState.AFTER
        self._handle(Phase.AFTER, method, path)

        if handled == 0:
            self._handle_not_found(method, path)

        self.state = DispatchState.DONE
        return handled

    def _handle(
        self,
        phase: Phase,
        method: str,
        path: str,
        run_once: bool = False,
    ) -> int:
        table = self._tables.get(phase)
        if table is None or method not in table:
            return 0

        handled = 0
        for entry in table.entries(method):
            args = entry.match(path)
            if args is None:
                continue

            logger.debug(
                "%s %s matched %s pattern %s -> %s",
                method, path, phase.value, entry.pattern, entry.handler,
            )
            target = self._resolver.resolve(entry.handler)
            self._resolver.invoke(target, args)
            self.invoked.append(entry)
            handled += 1

            if run_once:
                break

        return handled

    def _handle_not_found(self, method: str, path: str) -> None:
        if self._not_found is not None:
            target = self._resolver.resolve(parse_handler(self._not_found))
            if callable(target):
                logger.debug("%s %s unmatched, calling not-found handler", method, path)
                self._resolver.invoke(target)
                return

        logger.debug("%s %s unmatched, responding 404", method, path)
        self._response.set_status(404)
