"""Invoke helper — call sync or async handlers uniformly.

Handlers, parameter handlers, and error handlers can all be ``def`` or
``async def``. The sync/async check lives here and nowhere else.

Usage::

    from pathway._internal.invoke import invoke

    await invoke(handler, ctx, request, response)
"""

import inspect
from typing import Any


async def invoke(handler: Any, *args: Any) -> Any:
    """Call *handler* and await the result if it's awaitable."""
    result = handler(*args)
    if inspect.isawaitable(result):
        result = await result
    return result
