from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Union
from urllib.parse import urlsplit

from .exceptions import RequestError

Body = Union[str, bytes]


class TransportCode(Enum):
    """Outcome of a single network exchange."""
    OK = "ok"
    UNSUPPORTED_PROTOCOL = "unsupported_protocol"
    URL_MALFORMAT = "url_malformat"
    COULDNT_RESOLVE_HOST = "couldnt_resolve_host"
    COULDNT_CONNECT = "couldnt_connect"
    OPERATION_TIMEDOUT = "operation_timedout"
    SSL_CONNECT_ERROR = "ssl_connect_error"
    SEND_ERROR = "send_error"
    RECV_ERROR = "recv_error"
    BAD_FUNCTION_ARGUMENT = "bad_function_argument"


# Request/Response Models
@dataclass
class PreparedRequest:
    """A request serialized into wire-ready pieces."""
    url: str
    method: str
    body: bytes = b""
    header_lines: List[str] = field(default_factory=list)

    @property
    def parsed_url(self):
        return urlsplit(self.url)

    def has_header(self, name: str) -> bool:
        """Check whether a header line with this name is present (case-insensitive)."""
        wanted = name.strip().lower()
        return any(line.partition(':')[0].strip().lower() == wanted for line in self.header_lines)


@dataclass
class RawResult:
    """What the executor hands back: raw bytes, or a failure code."""
    code: TransportCode
    body: bytes = b""
    headers: bytes = b""
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.code is TransportCode.OK


@dataclass(frozen=True)
class Response:
    """
    Result of one exchange.

    Check `transport_ok` (or `ok`) before trusting the parsed fields: on a
    transport failure they all keep their defaults, and on a parse failure
    only the raw bytes are filled in.
    """
    transport_code: TransportCode
    url: str = ""
    status_code: Optional[int] = None
    status_message: str = ""
    body: str = ""
    raw_body: bytes = b""
    raw_headers: bytes = b""
    headers: Dict[str, str] = field(default_factory=dict)
    cookies: Dict[str, str] = field(default_factory=dict)
    error: Optional[RequestError] = None
    elapsed: float = 0.0

    @property
    def transport_ok(self) -> bool:
        return self.transport_code is TransportCode.OK

    @property
    def ok(self) -> bool:
        """True when the exchange completed and the response parsed cleanly."""
        return self.transport_ok and self.error is None

    def raise_for_error(self) -> "Response":
        """Raise the stored TransportError/ParseError, if any."""
        if self.error is not None:
            raise self.error
        return self

