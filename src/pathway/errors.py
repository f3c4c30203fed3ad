"""Pathway exception hierarchy.

Shared across the pattern compiler, Router, App, and handlers so every
module raises and catches the same types.
"""

from dataclasses import dataclass


class PathwayError(Exception):
    """Base for all pathway-specific errors."""


class ConfigurationError(PathwayError):
    """Raised when the router tree is set up incorrectly.

    Mounting a Router twice or registering handlers after the tree has
    been frozen both end up here.
    """


class InvalidPatternError(ConfigurationError, ValueError):
    """A path pattern could not be compiled.

    Raised at registration time, never per request.
    """

    def __init__(self, pattern: str, index: int, reason: str) -> None:
        self.pattern = pattern
        self.index = index
        self.reason = reason
        super().__init__(f"Invalid path pattern {pattern!r} at index {index}: {reason}")


class ErrorAlreadySetError(PathwayError, RuntimeError):
    """``RequestContext.set_error()`` was called a second time.

    This is a programming error. Panic recovery never converts it.
    """


@dataclass(frozen=True, slots=True)
class HTTPError(PathwayError):
    """An error that maps directly to an HTTP status code."""

    status: int
    detail: str = ""

    def __str__(self) -> str:
        if self.detail:
            return self.detail
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818 — conventional name in web frameworks
    """404 — no entry matched the request path or none wrote a response."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class PanicError(PathwayError):
    """An exception escaped a handler and was recovered by a Router.

    The original exception is available as ``__cause__`` and ``original``.
    """

    def __init__(self, original: BaseException) -> None:
        self.original = original
        super().__init__(f"Panic: {original}")


@dataclass(frozen=True, slots=True)
class ContextError(PathwayError):
    """The single error recorded on a request, with its status code.

    This is what error handlers receive.
    """

    error: BaseException
    status: int = 500

    def __str__(self) -> str:
        return str(self.error)

    @property
    def is_not_found(self) -> bool:
        return isinstance(self.error, NotFound)

    @property
    def is_panic(self) -> bool:
        return isinstance(self.error, PanicError)
