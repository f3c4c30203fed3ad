"""Shared type aliases for the callbacks the router invokes."""

from collections.abc import Callable
from typing import Any, TypeAlias

# (ctx, request, response) -> None | Awaitable[None]
Handler: TypeAlias = Callable[..., Any]

# (ctx, request, response, value) -> None | Awaitable[None]
ParamHandler: TypeAlias = Callable[..., Any]

# (ctx, request, response, error: ContextError) -> None | Awaitable[None]
ErrorHandler: TypeAlias = Callable[..., Any]
