"""Access log and request correlation.

Each request gets a request id: the caller's X-Request-ID when it sends a
usable one, otherwise a fresh `req_<12 hex>`. The id is stored on
request.state (handlers copy it into the ApiResponse envelope), echoed in the
X-Request-ID response header, and written to the `sq.request` access log
together with the board the request targets:

    INFO POST /api/v1/boards/BRD-1/claims board=BRD-1 -> 200 in 4ms [req_a1b2c3d4e5f6]
"""

import logging
import re
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("sq.request")

REQUEST_ID_HEADER = "X-Request-ID"

_INCOMING_ID = re.compile(r"^[A-Za-z0-9_.-]{8,64}$")
_BOARD_IN_PATH = re.compile(r"/boards/(BRD-[0-9]+)")


def _request_id(request: Request) -> str:
    incoming = request.headers.get(REQUEST_ID_HEADER, "")
    if _INCOMING_ID.match(incoming):
        return incoming
    return f"req_{uuid.uuid4().hex[:12]}"


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = _request_id(request)
        request.state.request_id = request_id

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        response.headers[REQUEST_ID_HEADER] = request_id
        board = _BOARD_IN_PATH.search(request.url.path)
        logger.info(
            "%s %s board=%s -> %d in %.0fms [%s]",
            request.method,
            request.url.path,
            board.group(1) if board else "-",
            response.status_code,
            elapsed_ms,
            request_id,
        )
        return response
