"""Router — hierarchical dispatch over mounted routes and sub-routers.

A Router holds an ordered list of entries. Entries are Routes or other
Routers; both satisfy ``PathHandler`` so the dispatch loop treats leaf
routes and mounted children the same way.

Per request, for each entry in registration order:

1. test the entry against the local path (mount prefix stripped),
2. extract its parameters into the context,
3. run parameter handlers not yet run at this level, in path order,
4. dispatch the entry,
5. stop everything once a response is written or an error recorded.

If nothing wrote a response, the error handler (if any) receives the
recorded error or a "not found" error.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Protocol

from pathway._internal.invoke import invoke
from pathway._internal.types import ErrorHandler, Handler, ParamHandler
from pathway.context import RequestContext
from pathway.errors import ConfigurationError, ErrorAlreadySetError, NotFound, PanicError
from pathway.http.request import Request
from pathway.http.response import ResponseSink
from pathway.routing.pattern import MATCH_ALL_PATTERN, PathPattern, compile_pattern
from pathway.routing.route import Route, done_processing

logger = logging.getLogger("pathway.routing")


class PathHandler(Protocol):
    """An entry a Router can mount: a Route or another Router."""

    @property
    def param_names(self) -> tuple[str, ...]: ...

    def match(self, path: str) -> bool: ...

    def extract_params(self, path: str) -> dict[str, str]: ...

    async def dispatch(
        self,
        ctx: RequestContext,
        request: Request,
        response: ResponseSink,
    ) -> None: ...

    def freeze(self) -> None: ...


class Router:
    """Dispatches requests to matching routes and sub-routers.

    Usage::

        router = Router(error_handler=std_error_handler)
        router.use(log_request)
        router.param("id", load_user)
        router.get("/users/:id", show_user)

        api = router.sub_router("/api")
        api.get("/status", status)

        ctx = await router.serve(Request("GET", "/users/42"), ResponseWriter())

    Most registration methods return the created Route (or the Router for
    ``use``/``param``) so they can be chained.
    """

    __slots__ = (
        "_entries",
        "_frozen",
        "_param_handlers",
        "_parent",
        "_path",
        "_prefix",
        "error_handler",
        "panic_recovery",
        "strict_slash",
    )

    def __init__(
        self,
        *,
        strict_slash: bool = False,
        panic_recovery: bool = False,
        error_handler: ErrorHandler | None = None,
    ) -> None:
        # When enabled, "/abc" and "/abc/" are different paths.
        self.strict_slash = strict_slash
        # When enabled, exceptions raised by handlers become a 500 error.
        self.panic_recovery = panic_recovery
        # Receives recorded errors, not-found errors, and recovered panics.
        self.error_handler: ErrorHandler | None = error_handler

        self._entries: list[PathHandler] = []
        self._param_handlers: dict[str, list[ParamHandler]] = {}
        self._path = ""
        self._prefix: PathPattern | None = None  # set when mounted
        self._parent: Router | None = None
        self._frozen = False

    # -- Introspection --

    @property
    def path(self) -> str:
        """The full mount path ("" for a top-level router)."""
        return self._path

    @property
    def parent(self) -> Router | None:
        return self._parent

    @property
    def entries(self) -> tuple[PathHandler, ...]:
        return tuple(self._entries)

    # -- Registration --

    def route(self, path: str) -> Route:
        """Create, mount, and return an empty Route for *path*."""
        self._check_not_frozen()
        route = Route(compile_pattern(path, strict_slash=self.strict_slash))
        self._entries.append(route)
        return route

    def method(self, method: str, path: str, *handlers: Handler) -> Route:
        """Register *handlers* for *method* requests to *path*."""
        return self.route(path).add_method_handlers(method, *handlers)

    def all(self, path: str, *handlers: Handler) -> Route:
        """Register *handlers* for *path* regardless of method."""
        return self.route(path).add_middleware(*handlers)

    def get(self, path: str, *handlers: Handler) -> Route:
        return self.method("GET", path, *handlers)

    def post(self, path: str, *handlers: Handler) -> Route:
        return self.method("POST", path, *handlers)

    def put(self, path: str, *handlers: Handler) -> Route:
        return self.method("PUT", path, *handlers)

    def delete(self, path: str, *handlers: Handler) -> Route:
        return self.method("DELETE", path, *handlers)

    def patch(self, path: str, *handlers: Handler) -> Route:
        return self.method("PATCH", path, *handlers)

    def head(self, path: str, *handlers: Handler) -> Route:
        return self.method("HEAD", path, *handlers)

    def options(self, path: str, *handlers: Handler) -> Route:
        return self.method("OPTIONS", path, *handlers)

    def use(self, *handlers: Handler) -> Router:
        """Register middleware that runs for every request reaching this router.

        Middleware is ordered with the other entries by registration order.
        """
        self.all(MATCH_ALL_PATTERN, *handlers)
        return self

    def param(self, name: str, handler: ParamHandler) -> Router:
        """Register a handler for parameter *name* (without the leading ":").

        Parameter handlers run with the extracted value before the first
        matching entry that declares the parameter, at most once per request
        at this router level. Handlers for the same name run in
        registration order.
        """
        self._check_not_frozen()
        self._param_handlers.setdefault(name, []).append(handler)
        return self

    def mount(self, prefix: str, child: Router) -> Router:
        """Mount *child* under *prefix* and return it.

        A router can be mounted once. Its mount path becomes this router's
        path followed by *prefix*.
        """
        self._check_not_frozen()
        if child._parent is not None:
            msg = f"Router is already mounted at {child._path!r}; a router can be mounted only once."
            raise ConfigurationError(msg)
        ancestor: Router | None = self
        while ancestor is not None:
            if ancestor is child:
                msg = "Cannot mount a router inside itself."
                raise ConfigurationError(msg)
            ancestor = ancestor._parent
        child._prefix = compile_pattern(prefix, strict_slash=self.strict_slash, prefix_only=True)
        child._parent = self
        child._set_path(_join_paths(self._path, prefix))
        self._entries.append(child)
        return child

    def sub_router(self, prefix: str) -> Router:
        """Create, mount, and return a child router.

        The child inherits ``strict_slash`` and has no error handler, so its
        errors bubble to the nearest ancestor that has one.
        """
        return self.mount(prefix, Router(strict_slash=self.strict_slash))

    def freeze(self) -> None:
        """End the setup phase. Further registration raises ConfigurationError."""
        self._frozen = True
        for entry in self._entries:
            entry.freeze()

    # -- PathHandler --

    @property
    def param_names(self) -> tuple[str, ...]:
        return self._prefix.param_names if self._prefix else ()

    def match(self, path: str) -> bool:
        return self._prefix is not None and self._prefix.match(path)

    def extract_params(self, path: str) -> dict[str, str]:
        return self._prefix.extract_params(path) if self._prefix else {}

    # -- Dispatch --

    async def serve(
        self,
        request: Request,
        response: ResponseSink,
        *,
        context_factory: Callable[[], RequestContext] = RequestContext,
    ) -> RequestContext:
        """Entry point for one inbound request. Returns the request's context."""
        ctx = context_factory()
        await self.dispatch(ctx, request, response)
        return ctx

    async def dispatch(
        self,
        ctx: RequestContext,
        request: Request,
        response: ResponseSink,
    ) -> None:
        try:
            await self._dispatch_entries(ctx, request, response)
        except ErrorAlreadySetError:
            raise
        except Exception as exc:
            if not self.panic_recovery:
                raise
            logger.exception(
                "Recovered panic in router %r while handling %s %s",
                self._path or "/",
                request.method,
                request.path,
            )
            if ctx.error is None:
                panic = PanicError(exc)
                panic.__cause__ = exc
                ctx.set_error(panic, 500)

        skipped = ctx.skip
        ctx.skip = False
        if skipped and self._parent is not None:
            logger.debug("Router %r skipped for %s %s", self._path, request.method, request.path)
            return

        if response.has_written() or ctx.handled or self.error_handler is None:
            return

        if ctx.error is None:
            logger.debug("No route wrote a response for %s %s", request.method, request.path)
            ctx.set_error(NotFound(), 404)

        ctx.handled = True
        await invoke(self.error_handler, ctx, request, response, ctx.error)

    async def _dispatch_entries(
        self,
        ctx: RequestContext,
        request: Request,
        response: ResponseSink,
    ) -> None:
        path = self._local_path(request)
        invoked: set[str] = set()

        for entry in self._entries:
            if not entry.match(path):
                continue

            names = entry.param_names
            if names:
                ctx.params.update(entry.extract_params(path))
                # Parameter handlers run in the order the parameters appear.
                for name in names:
                    if name in invoked:
                        continue
                    value = ctx.param(name)
                    for handler in self._param_handlers.get(name, ()):
                        await invoke(handler, ctx, request, response, value)
                        if done_processing(ctx, response):
                            return
                    invoked.add(name)

            await entry.dispatch(ctx, request, response)
            if done_processing(ctx, response):
                return

    def _local_path(self, request: Request) -> str:
        """The request path relative to this router's mount point."""
        if self._parent is None or self._prefix is None:
            return request.sanitized_path
        parent_path = self._parent._local_path(request)
        local = parent_path[self._prefix.prefix_length(parent_path) :]
        if not local.startswith("/"):
            local = "/" + local
        return local

    def _set_path(self, path: str) -> None:
        self._path = path
        for entry in self._entries:
            if isinstance(entry, Router) and entry._prefix is not None:
                entry._set_path(_join_paths(path, entry._prefix.source))

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = f"Cannot register on router {self._path or '/'!r} after it was frozen."
            raise ConfigurationError(msg)

    def __repr__(self) -> str:
        return f"<Router path={self._path or '/'!r} entries={len(self._entries)}>"


def _join_paths(base: str, prefix: str) -> str:
    if base.endswith("/") and prefix.startswith("/"):
        return base + prefix[1:]
    return base + prefix
