"""Pathway — an embeddable HTTP request router.

Compiles path templates into matchers and dispatches requests through a
tree of routers, with parameter handlers, error handlers, and optional
panic recovery.

Basic usage::

    from pathway import App

    app = App()

    @app.route("/hello/:name")
    def hello(ctx, request, response):
        response.write_text(f"Hello, {ctx.param('name')}!")

Standalone routing, without ASGI::

    from pathway import Request, ResponseWriter, Router

    router = Router()
    router.get("/users/:id", show_user)
    ctx = await router.serve(Request("GET", "/users/42"), ResponseWriter())
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "AppConfig",
    "ConfigurationError",
    "ContextError",
    "ErrorAlreadySetError",
    "HTTPError",
    "InvalidPatternError",
    "NotFound",
    "PanicError",
    "PathPattern",
    "PathwayError",
    "Request",
    "RequestContext",
    "ResponseSink",
    "ResponseWriter",
    "Route",
    "Router",
    "compile_pattern",
    "sanitize_path",
    "std_error_handler",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import pathway`` fast while providing a clean top-level API.
    """
    if name == "App":
        from pathway.app import App

        return App

    if name == "AppConfig":
        from pathway.config import AppConfig

        return AppConfig

    if name in ("Request", "sanitize_path"):
        from pathway.http import request as _req

        return getattr(_req, name)

    if name in ("ResponseSink", "ResponseWriter"):
        from pathway.http import response as _resp

        return getattr(_resp, name)

    if name == "RequestContext":
        from pathway.context import RequestContext

        return RequestContext

    if name in ("PathPattern", "compile_pattern"):
        from pathway.routing import pattern as _pattern

        return getattr(_pattern, name)

    if name == "Route":
        from pathway.routing.route import Route

        return Route

    if name == "Router":
        from pathway.routing.router import Router

        return Router

    if name == "std_error_handler":
        from pathway.server.errors import std_error_handler

        return std_error_handler

    if name in (
        "ConfigurationError",
        "ContextError",
        "ErrorAlreadySetError",
        "HTTPError",
        "InvalidPatternError",
        "NotFound",
        "PanicError",
        "PathwayError",
    ):
        from pathway import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
