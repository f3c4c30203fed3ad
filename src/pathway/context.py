"""Per-request context, passed explicitly to every handler.

Holds:
- an arbitrary key/value store shared between handlers,
- the parameter values extracted from the path,
- the single recorded error (if any),
- the skip flag consumed by the nearest enclosing Router.

One ``RequestContext`` is created per inbound request and dropped when the
response is finished. There is no process-wide registry: whoever calls
``Router.serve()`` owns the context.

Thread safety:
    A request is processed by exactly one task, so no locking is done.
"""

from typing import Any

from pathway.errors import ContextError, ErrorAlreadySetError


class RequestContext:
    """Mutable state for a single request.

    Usage::

        def load_user(ctx, request, response, user_id):
            ctx.set("user", users.get(user_id))

        def show_user(ctx, request, response):
            user = ctx.get("user")
            if user is None:
                ctx.set_error(LookupError("no such user"), 404)
                return
            response.write_text(user.name)
    """

    __slots__ = ("_error", "_store", "handled", "params", "skip")

    def __init__(self) -> None:
        self._store: dict[str, Any] = {}
        self._error: ContextError | None = None
        self.params: dict[str, str] = {}
        self.skip: bool = False
        # Set once a Router has passed the error to its error handler.
        self.handled: bool = False

    # -- Store --

    def set(self, key: str, value: Any) -> None:
        """Set *key*, replacing any existing value."""
        self._store[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        """Return the value for *key*, or *default* if it does not exist."""
        return self._store.get(key, default)

    def delete(self, key: str) -> None:
        """Remove *key*. Missing keys are ignored."""
        self._store.pop(key, None)

    def exists(self, key: str) -> bool:
        return key in self._store

    def __contains__(self, key: str) -> bool:
        return key in self._store

    # -- Parameters --

    def param(self, name: str) -> str:
        """Return the captured value of parameter *name*, or ``""``."""
        return self.params.get(name, "")

    # -- Error --

    @property
    def error(self) -> ContextError | None:
        """The recorded error, or None."""
        return self._error

    def set_error(self, error: BaseException, status: int = 500) -> None:
        """Record *error*; all Routers and Routes stop processing.

        The error is passed to the nearest error handler up the router tree.

        Raises ``ErrorAlreadySetError`` if an error was already recorded.
        """
        if self._error is not None:
            msg = (
                f"RequestContext.set_error() called twice "
                f"(existing: {self._error!s}, new: {error!s})"
            )
            raise ErrorAlreadySetError(msg)
        self._error = ContextError(error=error, status=status)

    # -- Skip --

    def skip_router(self) -> None:
        """Stop the current Router; its parent continues with the next entry.

        Skipping in the top-level Router results in a "not found" error.
        """
        self.skip = True

    def __repr__(self) -> str:
        return f"<RequestContext params={self.params!r} error={self._error!r} skip={self.skip}>"
