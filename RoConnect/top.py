"""
Request object: holds the configuration of an exchange and turns it into a Response.
A Request can be executed any number of times; every call re-serializes whatever is configured at that moment.
"""

import time
from typing import Dict, List, Optional

from .base import HTTPExecutor
from .middlewares import BaseMiddleware
from .models import Body, PreparedRequest, Response
from .utils import parse_raw_result, serialize_request_headers


class Request:
    """A configurable HTTP request bound to its own executor."""

    def __init__(self, url: str, data: Body = "",
                 headers: Optional[Dict[str, str]] = None,
                 cookies: Optional[Dict[str, str]] = None,
                 executor: Optional[HTTPExecutor] = None,
                 middleware: Optional[List[BaseMiddleware]] = None,
                 verbose: bool = False):
        self.url = url
        self.body = data
        self._headers: Dict[str, str] = dict(headers or {})
        self._cookies: Dict[str, str] = dict(cookies or {})
        self.middleware = list(middleware or [])

        # Use provided executor or create (and own) a new one
        if executor is not None:
            self._executor = executor
            self._owns_executor = False
        else:
            self._executor = HTTPExecutor(debuglevel=1 if verbose else 0)
            self._owns_executor = True

    # Execution
    def get(self) -> Response:
        """Execute the request with the GET method."""
        return self._execute('GET')

    def post(self) -> Response:
        """Execute the request with the POST method; the body is sent even when empty."""
        return self._execute('POST')

    def request(self, method: str) -> Response:
        """Execute the request with any method. The verb is passed through unchecked."""
        return self._execute(method)

    def prepare(self, method: str) -> PreparedRequest:
        """Serialize the current configuration for one exchange."""
        body = self.body.encode('utf-8') if isinstance(self.body, str) else bytes(self.body)
        return PreparedRequest(
            url=self.url,
            method=method,
            body=body,
            header_lines=serialize_request_headers(self._headers, self._cookies),
        )

    def _execute(self, method: str) -> Response:
        prepared = self.prepare(method)

        # Process request through middleware
        for middleware in self.middleware:
            prepared = middleware.process_request(prepared)

        start_time = time.time()
        raw = self._executor.execute(prepared.url, prepared.method, prepared.body, prepared.header_lines)
        response = parse_raw_result(raw, url=prepared.url, elapsed=time.time() - start_time)

        # Process response through middleware
        for middleware in reversed(self.middleware):
            response = middleware.process_response(response)

        return response

    # Configuration
    def set_url(self, url: str):
        self.url = url

    def get_url(self) -> str:
        return self.url

    def set_data(self, data: Body):
        self.body = data

    def get_data(self) -> Body:
        return self.body

    def set_header(self, key: str, value: str):
        self._headers[key] = value

    def remove_header(self, key: str):
        self._headers.pop(key, None)

    def set_cookie(self, key: str, value: str):
        self._cookies[key] = value

    def remove_cookie(self, key: str):
        self._cookies.pop(key, None)

    def get_headers(self) -> Dict[str, str]:
        """Return a copy of the configured headers."""
        return dict(self._headers)

    def get_cookies(self) -> Dict[str, str]:
        """Return a copy of the configured cookies."""
        return dict(self._cookies)

    @property
    def headers(self) -> Dict[str, str]:
        return self.get_headers()

    @property
    def cookies(self) -> Dict[str, str]:
        return self.get_cookies()

    # Lifecycle
    def close(self):
        """Release the executor if this request created it."""
        if self._owns_executor:
            self._executor.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def __repr__(self):
        return f"Request(url={self.url!r}, headers={len(self._headers)}, cookies={len(self._cookies)})"
