"""Request-size gate for the upload route."""

import logging

from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

logger = logging.getLogger(__name__)

# Multipart boundaries and part headers on top of the file bytes.
MULTIPART_SLACK_BYTES = 64 * 1024


class UploadSizeLimitMiddleware(BaseHTTPMiddleware):
    """
    Reject an upload whose declared Content-Length already exceeds the limit.

    Runs before the multipart body is parsed, so an oversized request is never
    spooled. Requests without Content-Length (chunked) fall through to the
    route, which still caps what it reads.
    """

    def __init__(self, app, path: str, max_bytes: int, slack_bytes: int = MULTIPART_SLACK_BYTES):
        super().__init__(app)
        self.path = path
        self.max_request_bytes = max_bytes + slack_bytes

    async def dispatch(self, request: Request, call_next) -> Response:
        if request.method == "POST" and request.url.path == self.path:
            length = request.headers.get("content-length", "")
            if length.isdigit() and int(length) > self.max_request_bytes:
                logger.info("Rejected upload on %s: Content-Length %s over limit", self.path, length)
                return JSONResponse(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    content={"message": "File too large"},
                )
        return await call_next(request)
