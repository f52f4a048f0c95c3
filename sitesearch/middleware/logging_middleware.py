import time
import uuid
import logging
from typing import Callable, Dict, Any
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from ..utils.logging.error_logger import error_logger

logger = logging.getLogger(__name__)


class ErrorLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware for logging all errors that occur during request processing.
    """

    def __init__(self, app: ASGIApp):
        super().__init__(app)

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        try:
            return await call_next(request)

        except Exception as e:
            await error_logger.log_error(
                error=e,
                request=request,
                additional_context=self._get_additional_context(request)
            )

            # Re-raise the exception to be handled by exception handlers
            raise

    def _get_additional_context(self, request: Request) -> Dict[str, Any]:
        """
        Get additional context for error logging.

        Args:
            request: The FastAPI request object

        Returns:
            Dictionary with additional context
        """
        return {
            "user_agent": request.headers.get("User-Agent"),
            "referer": request.headers.get("Referer"),
            "accept_language": request.headers.get("Accept-Language"),
            "request_id": getattr(request.state, "request_id", None),
        }


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Middleware for adding a unique request ID and timing to each request.
    """

    def __init__(self, app: ASGIApp):
        super().__init__(app)

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id

        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time"] = f"{process_time * 1000:.2f}ms"
        logger.debug(
            f"{request.method} {request.url.path} -> {response.status_code} "
            f"in {process_time * 1000:.2f}ms [{request_id}]"
        )
        return response
