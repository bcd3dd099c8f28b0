from __future__ import annotations

import logging
from typing import Callable

from starlette.datastructures import Headers
from starlette.exceptions import HTTPException
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = logging.getLogger(__name__)


def _too_large(max_bytes: int) -> dict:
    return {"error": "Payload too large", "message": f"Request body exceeds {max_bytes} bytes"}


class RequestBodyLimitMiddleware:
    """Cap the raw request body at max_bytes().

    A declared Content-Length over the cap is answered with 413 before the
    app runs. Bodies without one (chunked uploads) are counted as the app
    reads them; crossing the cap raises a 413 HTTPException out of receive,
    which the app's exception handlers turn into the same response.
    """

    def __init__(self, app: ASGIApp, max_bytes: Callable[[], int]) -> None:
        self.app = app
        self.max_bytes = max_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        limit = self.max_bytes()
        length = Headers(scope=scope).get("content-length")
        if length and length.isdigit() and int(length) > limit:
            logger.warning("Rejected %s %s: body of %s bytes", scope["method"], scope["path"], length)
            response = JSONResponse(status_code=413, content=_too_large(limit))
            await response(scope, receive, send)
            return

        received = 0

        async def limited_receive() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > limit:
                    logger.warning(
                        "Rejected %s %s: streamed body passed %d bytes", scope["method"], scope["path"], limit
                    )
                    raise HTTPException(status_code=413, detail=_too_large(limit))
            return message

        await self.app(scope, limited_receive, send)
