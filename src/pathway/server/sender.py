"""ASGI response sending — translates a ResponseWriter into ASGI messages."""

from pathway._internal.asgi import Send
from pathway.http.response import ResponseWriter

DEFAULT_CONTENT_TYPE = "text/plain; charset=utf-8"


def _body_allowed(status: int) -> bool:
    """Whether an HTTP status code permits a response body."""
    # RFC: 1xx, 204, and 304 responses do not include a message body.
    return not (100 <= status < 200 or status in {204, 304})


async def send_response(response: ResponseWriter, send: Send, *, head: bool = False) -> None:
    """Send a buffered response. HEAD requests get headers only."""
    raw_headers: list[tuple[bytes, bytes]] = []
    has_content_type = False
    for name, value in response.headers:
        name_lower = name.lower()
        if name_lower == "content-length":
            continue
        has_content_type = has_content_type or name_lower == "content-type"
        raw_headers.append((name_lower.encode("latin-1"), value.encode("latin-1")))
    if not has_content_type:
        raw_headers.append((b"content-type", DEFAULT_CONTENT_TYPE.encode("latin-1")))

    body = response.body if _body_allowed(response.status) else b""
    raw_headers.append((b"content-length", str(len(body)).encode("latin-1")))

    await send(
        {
            "type": "http.response.start",
            "status": response.status,
            "headers": raw_headers,
        }
    )
    await send(
        {
            "type": "http.response.body",
            "body": b"" if head else body,
        }
    )
