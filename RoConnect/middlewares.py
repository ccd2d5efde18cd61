import logging
import threading
from typing import Dict, Optional, Any

from .models import PreparedRequest, Response

# Middleware System
class BaseMiddleware:
    """Base class for request/response middleware."""

    def process_request(self, request: PreparedRequest) -> PreparedRequest:
        """Process the prepared request before it's sent."""
        return request

    def process_response(self, response: Response) -> Response:
        """Process the response after it's parsed."""
        return response

class LoggingMiddleware(BaseMiddleware):
    """Middleware for logging requests and responses."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    def process_request(self, request: PreparedRequest) -> PreparedRequest:
        self.logger.debug(f"Request: {request.method} {request.url} ({len(request.header_lines)} header lines, {len(request.body)} body bytes)")
        return request

    def process_response(self, response: Response) -> Response:
        if response.ok:
            self.logger.debug(f"Response: {response.status_code} {response.status_message} ({response.elapsed:.3f}s)")
        else:
            self.logger.warning(f"Request failed: {response.url} - {response.error}")
        return response

class DefaultHeadersMiddleware(BaseMiddleware):
    """Middleware for adding headers the request does not set itself."""

    def __init__(self, headers: Dict[str, str]):
        self.headers = dict(headers)

    def process_request(self, request: PreparedRequest) -> PreparedRequest:
        for name, value in self.headers.items():
            if not request.has_header(name):
                request.header_lines.append(f"{name}: {value}")
        return request

class UserAgentMiddleware(DefaultHeadersMiddleware):
    """Middleware for adding User-Agent header."""

    def __init__(self, user_agent: str):
        super().__init__({'User-Agent': user_agent})

class RefererMiddleware(DefaultHeadersMiddleware):
    """Middleware for adding Referer header."""

    def __init__(self, referer: str):
        super().__init__({'Referer': referer})

class MetricsMiddleware(BaseMiddleware):
    """Middleware for collecting exchange metrics. Safe to share between requests on different threads."""

    def __init__(self):
        self.request_count = 0
        self.transport_error_count = 0
        self.parse_error_count = 0
        self.status_counts: Dict[int, int] = {}
        self.total_response_time = 0.0
        self._lock = threading.Lock()

    def process_response(self, response: Response) -> Response:
        with self._lock:
            self.request_count += 1
            self.total_response_time += response.elapsed
            if not response.transport_ok:
                self.transport_error_count += 1
            elif response.error is not None:
                self.parse_error_count += 1
            else:
                self.status_counts[response.status_code] = self.status_counts.get(response.status_code, 0) + 1
        return response

    def get_stats(self) -> Dict[str, Any]:
        """Get current metrics."""
        with self._lock:
            return {
                'request_count': self.request_count,
                'transport_error_count': self.transport_error_count,
                'parse_error_count': self.parse_error_count,
                'status_counts': dict(self.status_counts),
                'average_response_time': (
                    self.total_response_time / self.request_count
                    if self.request_count > 0 else 0.0
                ),
                'error_rate': (
                    (self.transport_error_count + self.parse_error_count) / self.request_count
                    if self.request_count > 0 else 0.0
                )
            }
