"""Response sink used by the router, and its buffered implementation.

The router only needs to know whether a response has started. The
``ResponseSink`` protocol captures exactly that boundary; ``ResponseWriter``
is the in-memory implementation the ASGI layer sends once dispatch ends.
"""

import json as json_module
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class ResponseSink(Protocol):
    """What the dispatch engine requires from a response."""

    def has_written(self) -> bool: ...

    def write(self, data: bytes) -> int: ...

    def set_status(self, status: int) -> None: ...


class ResponseWriter:
    """Buffered, mutable response.

    The response counts as written as soon as a status is set or any body
    byte is written. Writing a body without a status implies 200.
    """

    __slots__ = ("_body", "_status", "headers")

    def __init__(self) -> None:
        self._status: int = 0
        self._body = bytearray()
        self.headers: list[tuple[str, str]] = []

    # -- ResponseSink --

    def has_written(self) -> bool:
        return self._status != 0

    def write(self, data: bytes | str) -> int:
        if isinstance(data, str):
            data = data.encode("utf-8")
        if not self.has_written():
            self.set_status(200)
        self._body.extend(data)
        return len(data)

    def set_status(self, status: int) -> None:
        self._status = status

    # -- Accessors --

    @property
    def status(self) -> int:
        """The status code, or 0 if nothing was written."""
        return self._status

    @property
    def body(self) -> bytes:
        return bytes(self._body)

    def get_header(self, name: str) -> str | None:
        """Return the last value set for header *name* (case-insensitive)."""
        name_lower = name.lower()
        for key, value in reversed(self.headers):
            if key.lower() == name_lower:
                return value
        return None

    def set_header(self, name: str, value: str) -> None:
        """Set header *name*, replacing any previous values."""
        name_lower = name.lower()
        self.headers = [(k, v) for k, v in self.headers if k.lower() != name_lower]
        self.headers.append((name, value))

    # -- Helpers --

    def write_text(self, text: str, status: int | None = None) -> None:
        """Write a plain text body."""
        self.set_header("Content-Type", "text/plain; charset=utf-8")
        if status is not None:
            self.set_status(status)
        self.write(text)

    def write_json(self, data: Any, status: int | None = None) -> None:
        """Write *data* encoded as JSON."""
        self.set_header("Content-Type", "application/json")
        if status is not None:
            self.set_status(status)
        self.write(json_module.dumps(data, default=str))

    def redirect(self, url: str, status: int = 302) -> None:
        """Reply with a redirect to *url*. *status* should be in the 3xx range."""
        self.set_header("Location", url)
        self.set_status(status)

    def __repr__(self) -> str:
        return f"<ResponseWriter status={self._status} bytes={len(self._body)}>"
