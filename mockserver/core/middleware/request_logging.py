"""
Request logging middleware.

Times every HTTP request and logs it through the structured logger.
Responses pass through untouched, so relayed upstream responses stay
unmodified.
"""

import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from mockserver.config import StructuredLogger

logger = StructuredLogger("mockserver.access")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware to log and time requests."""

    async def dispatch(self, request: Request, call_next):
        """
        Process HTTP request and log its outcome.

        Args:
            request: The incoming HTTP request
            call_next: The next middleware/handler in the chain

        Returns:
            Response: The HTTP response, unchanged
        """
        start_time = time.time()

        response = await call_next(request)

        process_time = time.time() - start_time

        logger.log_request(
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            response_time=process_time * 1000,
            client_ip=request.client.host if request.client else None
        )

        return response
