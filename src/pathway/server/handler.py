"""ASGI handler — translates ASGI scope/messages to pathway types.

The only component that touches raw ASGI request messages. Builds a
``Request``, dispatches it through the top-level ``Router`` and sends the
buffered ``ResponseWriter`` back through ASGI ``send()``.
"""

import logging
import traceback

from pathway._internal.asgi import Receive, Scope, Send
from pathway.http.request import Request
from pathway.http.response import ResponseWriter
from pathway.routing.router import Router
from pathway.server.sender import send_response

logger = logging.getLogger("pathway.server")


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    router: Router,
    debug: bool = False,
) -> None:
    """Process a single HTTP request through the router."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)
    response = ResponseWriter()

    try:
        await router.serve(request, response)
    except Exception as exc:
        # Not recovered by any router: the request fails with a bare 500.
        logger.exception("500 %s %s", request.method, request.path)
        response = ResponseWriter()
        if debug:
            response.write_text("".join(traceback.format_exception(exc)), status=500)
        else:
            response.write_text("Internal Server Error", status=500)

    if not response.has_written():
        # No router had an error handler, or it did not write.
        logger.debug("404 %s %s — nothing written", request.method, request.path)
        response.write_text("Not Found", status=404)

    await send_response(response, send, head=request.method == "HEAD")
