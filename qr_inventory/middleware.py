"""
Request body size limit for the QR Inventory service.

Bodies carry embedded images, so the limit is large, but it is enforced both
on a declared ``Content-Length`` and on the bytes actually received, which
covers chunked uploads that declare no length.
"""
import logging

from fastapi import HTTPException
from fastapi.responses import JSONResponse
from starlette.datastructures import Headers
from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = logging.getLogger(__name__)

TOO_LARGE_MESSAGE = "Request body too large"


class BodySizeLimitMiddleware:
    """Reject request bodies larger than ``max_body_bytes`` with 413."""

    def __init__(self, app: ASGIApp, max_body_bytes: int):
        self.app = app
        self.max_body_bytes = max_body_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        length = Headers(scope=scope).get("content-length")
        if length and length.isdigit() and int(length) > self.max_body_bytes:
            logger.warning(f"Rejected {scope['method']} {scope['path']}: declared body of {length} bytes")
            response = JSONResponse(status_code=413, content={"message": TOO_LARGE_MESSAGE})
            await response(scope, receive, send)
            return

        received = 0

        async def limited_receive() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_body_bytes:
                    logger.warning(f"Rejected {scope['method']} {scope['path']}: body exceeded {self.max_body_bytes} bytes")
                    raise HTTPException(status_code=413, detail=TOO_LARGE_MESSAGE)
            return message

        await self.app(scope, limited_receive, send)
