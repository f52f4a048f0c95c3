import json
import logging
import traceback
from datetime import datetime
from typing import Optional, Dict, Any, Union
from pathlib import Path
from logging.handlers import RotatingFileHandler, TimedRotatingFileHandler
from fastapi import Request
from starlette.datastructures import Headers

from ...core.config import settings

# Configure logging
error_log = logging.getLogger("error_logger")
error_log.setLevel(logging.ERROR)

# Headers never written to the error log
SENSITIVE_HEADERS = [
    "authorization", "cookie", "x-api-key", "api-key",
    "x-csrf-token", "csrf-token", "x-xsrf-token"
]


class ErrorLogger:
    """
    Logger for application errors with detailed context.
    Entries are JSON lines in ERROR_LOG_DIR, rotated daily and by size.
    """

    def __init__(self, logs_dir: Optional[Union[str, Path]] = None):
        """
        Initialize the error logger.

        Args:
            logs_dir: Directory for the log files (ERROR_LOG_DIR by default)
        """
        self.logs_dir = Path(logs_dir or settings.error_log_dir)
        self.logs_dir.mkdir(parents=True, exist_ok=True)

        self.max_file_size = settings.error_log_max_size_mb * 1024 * 1024
        self.rotation_when = settings.error_log_rotation

        self._configure_handlers()

    def _configure_handlers(self):
        """Configure file handlers for logging."""
        if error_log.handlers:
            error_log.handlers.clear()

        formatter = logging.Formatter(
            '%(asctime)s [%(levelname)s] %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S %z'
        )

        timed_handler = TimedRotatingFileHandler(
            filename=self.logs_dir / "error.log",
            when=self.rotation_when,
            backupCount=30  # Keep logs for 30 days
        )
        timed_handler.setFormatter(formatter)
        error_log.addHandler(timed_handler)

        size_handler = RotatingFileHandler(
            filename=self.logs_dir / "error_size.log",
            maxBytes=self.max_file_size,
            backupCount=10  # Keep 10 backup files
        )
        size_handler.setFormatter(formatter)
        error_log.addHandler(size_handler)

    def build_entry(
        self,
        error: BaseException,
        request_info: Optional[Dict[str, Any]] = None,
        additional_context: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Build the JSON-ready log entry for an error.

        Args:
            error: The exception that occurred
            request_info: Dictionary with request information (optional)
            additional_context: Additional contextual information (optional)

        Returns:
            Dict[str, Any]: The log entry
        """
        stack_trace = traceback.format_exception(
            type(error), error, error.__traceback__
        )
        return {
            "timestamp": datetime.now().isoformat(),
            "error_type": error.__class__.__name__,
            "error_message": str(error),
            "stack_trace": "".join(stack_trace),
            "request": request_info,
            "additional_context": additional_context or {}
        }

    async def log_error(
        self,
        error: BaseException,
        request: Optional[Request] = None,
        additional_context: Optional[Dict[str, Any]] = None
    ) -> None:
        """
        Log an error with detailed context.

        Args:
            error: The exception that occurred
            request: The FastAPI request object (optional)
            additional_context: Additional contextual information (optional)
        """
        request_info = None
        if request:
            request_info = {
                "method": request.method,
                "url": str(request.url),
                "path": request.url.path,
                "query_params": dict(request.query_params),
                "client_host": request.client.host if request.client else None,
                "headers": self._safe_headers(request.headers)
            }

        error_log.error(json.dumps(self.build_entry(error, request_info, additional_context), default=str))

    def log_error_sync(
        self,
        error: BaseException,
        request_info: Optional[Dict[str, Any]] = None,
        additional_context: Optional[Dict[str, Any]] = None
    ) -> None:
        """
        Synchronous version of log_error for non-async contexts.

        Args:
            error: The exception that occurred
            request_info: Dictionary with request information (optional)
            additional_context: Additional contextual information (optional)
        """
        error_log.error(json.dumps(self.build_entry(error, request_info, additional_context), default=str))

    def _safe_headers(self, headers: Headers) -> Dict[str, str]:
        """
        Extract headers while removing sensitive information.

        Args:
            headers: Request headers

        Returns:
            Dictionary of safe headers
        """
        headers_dict = dict(headers.items())

        for header in SENSITIVE_HEADERS:
            if header in headers_dict:
                headers_dict[header] = "[REDACTED]"

        return headers_dict


# Global instance for convenience
error_logger = ErrorLogger()
