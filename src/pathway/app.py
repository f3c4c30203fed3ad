"""Pathway application class.

Mutable during setup (route registration, parameter handlers, mounts).
Frozen at runtime when ``__call__()`` is first invoked or the ASGI
lifespan starts.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterable
from typing import Any

from pathway._internal.asgi import Receive, Scope, Send
from pathway._internal.invoke import invoke
from pathway._internal.types import ErrorHandler, Handler, ParamHandler
from pathway.config import AppConfig
from pathway.errors import ConfigurationError
from pathway.routing.route import Route
from pathway.routing.router import Router
from pathway.server.errors import make_error_handler
from pathway.server.handler import handle_request


class App:
    """The pathway application: a top-level Router behind an ASGI entry point.

    Usage::

        app = App(AppConfig(panic_recovery=True))

        @app.param("id")
        async def load_user(ctx, request, response, user_id):
            ctx.set("user", await users.get(user_id))

        @app.route("/users/:id", methods=["GET"])
        def show_user(ctx, request, response):
            response.write_json(ctx.get("user"))

        api = app.sub_router("/api")
        api.get("/status", status)

    Thread safety:
        The setup phase is single-threaded (decorators at import time).
        The freeze transition uses a Lock + double-check so exactly one
        thread freezes the router tree, even when several ASGI workers
        call ``__call__()`` concurrently on first request.
    """

    __slots__ = (
        "_freeze_lock",
        "_frozen",
        "_shutdown_hooks",
        "_startup_hooks",
        "config",
        "router",
    )

    def __init__(self, config: AppConfig | None = None) -> None:
        self.config: AppConfig = config or AppConfig()
        self.router: Router = Router(
            strict_slash=self.config.strict_slash,
            panic_recovery=self.config.panic_recovery,
            error_handler=make_error_handler(debug=self.config.debug),
        )
        self._startup_hooks: list[Callable[..., Any]] = []
        self._shutdown_hooks: list[Callable[..., Any]] = []
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()

    # -- Decorators --

    def route(
        self,
        path: str,
        *,
        methods: Iterable[str] | None = None,
    ) -> Callable[[Handler], Handler]:
        """Register a handler for *path*.

        ``methods`` defaults to ``["GET"]``. Pass ``methods=["*"]`` to run
        the handler for every method.
        """
        method_list = list(methods) if methods is not None else ["GET"]

        def decorator(func: Handler) -> Handler:
            route = self.router.route(path)
            if "*" in method_list:
                route.all(func)
            else:
                route.methods(method_list, func)
            return func

        return decorator

    def param(self, name: str) -> Callable[[ParamHandler], ParamHandler]:
        """Register a handler for path parameter *name*."""

        def decorator(func: ParamHandler) -> ParamHandler:
            self.router.param(name, func)
            return func

        return decorator

    def error(self, func: ErrorHandler) -> ErrorHandler:
        """Replace the top-level error handler."""
        self._check_not_frozen()
        self.router.error_handler = func
        return func

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register a hook to run at ASGI lifespan startup (sync or async)."""
        self._check_not_frozen()
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register a hook to run at ASGI lifespan shutdown (sync or async)."""
        self._check_not_frozen()
        self._shutdown_hooks.append(func)
        return func

    # -- Router registration API --

    def get(self, path: str, *handlers: Handler) -> Route:
        return self.router.get(path, *handlers)

    def post(self, path: str, *handlers: Handler) -> Route:
        return self.router.post(path, *handlers)

    def put(self, path: str, *handlers: Handler) -> Route:
        return self.router.put(path, *handlers)

    def delete(self, path: str, *handlers: Handler) -> Route:
        return self.router.delete(path, *handlers)

    def patch(self, path: str, *handlers: Handler) -> Route:
        return self.router.patch(path, *handlers)

    def all(self, path: str, *handlers: Handler) -> Route:
        return self.router.all(path, *handlers)

    def use(self, *handlers: Handler) -> App:
        """Register middleware for every request, in registration order."""
        self.router.use(*handlers)
        return self

    def mount(self, prefix: str, router: Router) -> Router:
        return self.router.mount(prefix, router)

    def sub_router(self, prefix: str) -> Router:
        return self.router.sub_router(prefix)

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point.

        Handles the lifespan scope directly, then delegates HTTP scopes to
        the request handler pipeline.
        """
        if scope["type"] == "lifespan":
            await self._handle_lifespan(scope, receive, send)
            return

        self._ensure_frozen()

        await handle_request(
            scope,
            receive,
            send,
            router=self.router,
            debug=self.config.debug,
        )

    async def _handle_lifespan(
        self,
        scope: Scope,
        receive: Receive,
        send: Send,
    ) -> None:
        """Run the ASGI lifespan protocol.

        Freezes the app at startup (before the first HTTP request), then
        runs registered hooks and signals completion back to the server.
        """
        self._ensure_frozen()

        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    await self.run_startup_hooks()
                except Exception as exc:
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})

            elif msg_type == "lifespan.shutdown":
                await self.run_shutdown_hooks()
                await send({"type": "lifespan.shutdown.complete"})
                return

    async def run_startup_hooks(self) -> None:
        for hook in self._startup_hooks:
            await invoke(hook)

    async def run_shutdown_hooks(self) -> None:
        for hook in self._shutdown_hooks:
            await invoke(hook)

    # -- Freeze --

    @property
    def frozen(self) -> bool:
        return self._frozen

    def _ensure_frozen(self) -> None:
        """Freeze the router tree exactly once (double-checked locking)."""
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self.router.freeze()
            self._frozen = True

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = "Cannot modify the app after it has started handling requests."
            raise ConfigurationError(msg)
