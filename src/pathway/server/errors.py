"""Default error handler.

Writes the recorded status and the error's message as plain text:

- ``NotFound`` -> 404 "Not Found"
- errors recorded with ``ctx.set_error(err, status)`` -> *status*, ``str(err)``
- recovered panics -> 500; the message is only shown in debug mode
"""

import logging
import traceback

from pathway._internal.types import ErrorHandler
from pathway.context import RequestContext
from pathway.errors import ContextError
from pathway.http.request import Request
from pathway.http.response import ResponseWriter

logger = logging.getLogger("pathway.server")


def make_error_handler(*, debug: bool = False) -> ErrorHandler:
    """Build the default error handler.

    With *debug* enabled, recovered panics include the original traceback.
    """

    def error_handler(
        ctx: RequestContext,
        request: Request,
        response: ResponseWriter,
        error: ContextError,
    ) -> None:
        status = 404 if error.is_not_found else error.status or 500
        logger.debug("%d %s %s — %s", status, request.method, request.path, error)

        if error.is_panic and not debug:
            body = "Internal Server Error"
        elif error.is_panic:
            original = error.error.__cause__ or error.error
            body = "".join(traceback.format_exception(original))
        else:
            body = str(error)

        response.write_text(body, status=status)

    return error_handler


std_error_handler: ErrorHandler = make_error_handler()
"""The error handler every ``App`` router starts with."""
