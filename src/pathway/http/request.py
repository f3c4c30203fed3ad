"""Immutable HTTP request.

Frozen metadata with async body access. The path is sanitized once at
creation; routing always works on ``sanitized_path``.
"""

from __future__ import annotations

import posixpath
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import parse_qs

from pathway._internal.asgi import Receive, Scope


def sanitize_path(path: str) -> str:
    """Return the clean version of *path*.

    Prepends ``/`` if missing, resolves ``.`` and ``..``, collapses repeated
    slashes, and keeps a trailing slash if there was one::

        sanitize_path("")            -> "/"
        sanitize_path("a/b")         -> "/a/b"
        sanitize_path("/a/../b/")    -> "/b/"
        sanitize_path("//a//b")      -> "/a/b"
    """
    if not path:
        return "/"
    if not path.startswith("/"):
        path = "/" + path

    trailing_slash = path.endswith("/")
    # normpath keeps a leading "//" (POSIX allows it), so strip it first.
    cleaned = posixpath.normpath("/" + path.lstrip("/"))

    if cleaned != "/" and trailing_slash:
        cleaned += "/"
    return cleaned


async def _no_body() -> dict[str, Any]:
    return {"type": "http.request", "body": b"", "more_body": False}


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    Only ``method`` and ``path`` are required, which keeps requests easy to
    build in tests::

        Request("GET", "/users/42")
    """

    method: str
    path: str
    headers: Mapping[str, str] = field(default_factory=dict)
    query: Mapping[str, list[str]] = field(default_factory=dict)
    http_version: str = "1.1"
    client: tuple[str, int] | None = None
    sanitized_path: str = field(init=False)

    # Private: ASGI receive callable for body streaming
    _receive: Any = field(default=_no_body, repr=False, compare=False)

    # Private: mutable cache for the body
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "sanitized_path", sanitize_path(self.path))

    # -- Accessors --

    def header(self, name: str, default: str | None = None) -> str | None:
        """Return header *name* (case-insensitive), or *default*."""
        return self.headers.get(name.lower(), default)

    def query_value(self, key: str, default: str | None = None) -> str | None:
        """Return the first query-string value for *key*, or *default*."""
        values = self.query.get(key)
        if values:
            return values[0]
        return default

    @property
    def content_type(self) -> str | None:
        return self.header("content-type")

    # -- Async body access --

    async def body(self) -> bytes:
        """Read the full request body.

        The ASGI receive is consumed once; later calls return the cache.
        """
        if "_body" in self._cache:
            return self._cache["_body"]
        chunks: list[bytes] = []
        while True:
            message = await self._receive()
            chunk = message.get("body", b"")
            if chunk:
                chunks.append(chunk)
            if not message.get("more_body", False):
                break
        result = b"".join(chunks)
        self._cache["_body"] = result
        return result

    async def json(self) -> Any:
        """Parse the body as JSON."""
        import json as json_module

        return json_module.loads(await self.body())

    async def text(self) -> str:
        """Read the body as text (UTF-8)."""
        return (await self.body()).decode("utf-8")

    # -- Factory --

    @classmethod
    def from_asgi(cls, scope: Scope, receive: Receive) -> Request:
        """Create a Request from an ASGI scope and receive callable."""
        headers: dict[str, str] = {}
        for name, value in scope.get("headers", ()):
            key = name.decode("latin-1").lower()
            # Repeated headers are joined, as RFC 9110 allows for most fields.
            if key in headers:
                headers[key] = f"{headers[key]}, {value.decode('latin-1')}"
            else:
                headers[key] = value.decode("latin-1")
        query_string = scope.get("query_string", b"").decode("latin-1")
        client = scope.get("client")
        return cls(
            method=scope["method"],
            path=scope["path"],
            headers=headers,
            query=parse_qs(query_string, keep_blank_values=True),
            http_version=scope.get("http_version", "1.1"),
            client=tuple(client) if client else None,
            _receive=receive,
        )
