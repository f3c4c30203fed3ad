"""Route — one path pattern bound to middleware and per-method handler chains.

All registration methods return the Route itself for chaining::

    router.route("/users/:id").all(load_user).get(show_user).put(update_user)
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from pathway._internal.invoke import invoke
from pathway._internal.types import Handler
from pathway.errors import ConfigurationError
from pathway.routing.pattern import PathPattern

if TYPE_CHECKING:
    from pathway.context import RequestContext
    from pathway.http.request import Request
    from pathway.http.response import ResponseSink

METHOD_NAMES: tuple[str, ...] = (
    "CONNECT",
    "DELETE",
    "GET",
    "HEAD",
    "OPTIONS",
    "PATCH",
    "POST",
    "PUT",
    "TRACE",
)


def done_processing(ctx: RequestContext, response: ResponseSink) -> bool:
    """True once a response was written, an error recorded, or a skip requested."""
    return response.has_written() or ctx.error is not None or ctx.skip


class Route:
    """A single pattern with ordered middleware and method handlers.

    Handler order is registration order and never changes. A request runs
    the full middleware list, then the handlers registered for its method.
    """

    __slots__ = ("_frozen", "_method_handlers", "_middleware", "pattern")

    def __init__(self, pattern: PathPattern) -> None:
        self.pattern = pattern
        self._middleware: list[Handler] = []
        self._method_handlers: dict[str, list[Handler]] = {}
        self._frozen = False

    # -- Registration --

    def add_middleware(self, *handlers: Handler) -> Route:
        """Append handlers that run for every method."""
        self._check_not_frozen()
        self._middleware.extend(handlers)
        return self

    def add_method_handlers(self, method: str, *handlers: Handler) -> Route:
        """Append handlers for *method* (case-insensitive)."""
        self._check_not_frozen()
        self._method_handlers.setdefault(method.upper(), []).extend(handlers)
        return self

    def all(self, *handlers: Handler) -> Route:
        return self.add_middleware(*handlers)

    def methods(self, methods: Iterable[str], *handlers: Handler) -> Route:
        """Register *handlers* for each of *methods*."""
        for method in methods:
            self.add_method_handlers(method, *handlers)
        return self

    def get(self, *handlers: Handler) -> Route:
        return self.add_method_handlers("GET", *handlers)

    def post(self, *handlers: Handler) -> Route:
        return self.add_method_handlers("POST", *handlers)

    def put(self, *handlers: Handler) -> Route:
        return self.add_method_handlers("PUT", *handlers)

    def delete(self, *handlers: Handler) -> Route:
        return self.add_method_handlers("DELETE", *handlers)

    def patch(self, *handlers: Handler) -> Route:
        return self.add_method_handlers("PATCH", *handlers)

    def head(self, *handlers: Handler) -> Route:
        return self.add_method_handlers("HEAD", *handlers)

    def options(self, *handlers: Handler) -> Route:
        return self.add_method_handlers("OPTIONS", *handlers)

    def rest(self, *handlers: Handler) -> Route:
        """Register *handlers* for every known method that has none yet."""
        for method in METHOD_NAMES:
            if self._method_handlers.get(method):
                continue
            self.add_method_handlers(method, *handlers)
        return self

    def handlers_for(self, method: str) -> list[Handler]:
        """The full chain a *method* request runs: middleware then method handlers."""
        return [*self._middleware, *self._method_handlers.get(method.upper(), ())]

    # -- PathHandler --

    @property
    def param_names(self) -> tuple[str, ...]:
        return self.pattern.param_names

    def match(self, path: str) -> bool:
        return self.pattern.match(path)

    def extract_params(self, path: str) -> dict[str, str]:
        return self.pattern.extract_params(path)

    async def dispatch(
        self,
        ctx: RequestContext,
        request: Request,
        response: ResponseSink,
    ) -> None:
        """Run the chain, stopping after any handler that finishes the request.

        Exceptions are not caught here; recovery belongs to the Router.
        """
        for handler in self.handlers_for(request.method):
            await invoke(handler, ctx, request, response)
            if done_processing(ctx, response):
                return

    def freeze(self) -> None:
        self._frozen = True

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = f"Cannot register handlers on route {self.pattern.source!r} after the router was frozen."
            raise ConfigurationError(msg)

    def __repr__(self) -> str:
        methods = ",".join(sorted(self._method_handlers)) or "-"
        return f"<Route {self.pattern.source!r} middleware={len(self._middleware)} methods={methods}>"
