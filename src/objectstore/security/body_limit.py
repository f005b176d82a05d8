"""Hard ceiling on request body size, applied before any route runs."""

import logging

from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from src.objectstore.errors import OversizedPayload

logger = logging.getLogger("objectstore.security")


class RequestSizeLimitMiddleware:
    """
    Reject request bodies larger than *max_bytes* with 413.

    A declared Content-Length over the limit is refused without reading the
    body. Otherwise the streamed body is counted, and once the limit is
    crossed the application's own response is discarded in favour of a 413.
    """

    def __init__(self, app: ASGIApp, max_bytes: int):
        self.app = app
        self.max_bytes = max_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        declared = self._content_length(scope)
        if declared is not None and declared > self.max_bytes:
            await self._reject(scope, receive, send, OversizedPayload(declared, self.max_bytes))
            return

        received = 0
        exceeded = None
        started = False

        async def limited_receive() -> Message:
            nonlocal received, exceeded
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_bytes:
                    exceeded = OversizedPayload(received, self.max_bytes)
                    raise exceeded
            return message

        async def guarded_send(message: Message) -> None:
            nonlocal started
            if exceeded is not None:
                return
            if message["type"] == "http.response.start":
                started = True
            await send(message)

        try:
            await self.app(scope, limited_receive, guarded_send)
        except Exception:
            if exceeded is None:
                raise

        if exceeded is not None and not started:
            await self._reject(scope, receive, send, exceeded)

    @staticmethod
    def _content_length(scope: Scope):
        for key, value in scope.get("headers", []):
            if key == b"content-length":
                try:
                    return int(value)
                except ValueError:
                    return None
        return None

    async def _reject(self, scope: Scope, receive: Receive, send: Send, error: OversizedPayload) -> None:
        logger.warning(f"Rejected {scope.get('method')} {scope.get('path')}: {error.message}")
        body = error.to_dict()
        body["message"] = (
            f"Request size exceeds limit. Max request size: {self.max_bytes} bytes"
        )
        response = JSONResponse(body, status_code=error.status_code)
        await response(scope, receive, send)
