"""RoConnect - A small HTTP request/response client for REST APIs."""

# Import key classes for easier access
from .top import Request
from .base import HTTPExecutor
from .models import PreparedRequest, RawResult, Response, TransportCode
from .exceptions import RequestError, TransportError, ParseError
from .middlewares import (
    BaseMiddleware,
    LoggingMiddleware,
    DefaultHeadersMiddleware,
    UserAgentMiddleware,
    RefererMiddleware,
    MetricsMiddleware
)
from .request_factory import ClientConfig, RequestFactory, load_config

__version__ = "0.1.0"
