import logging
from typing import Dict, List, Optional, Tuple

from .exceptions import ParseError, TransportError
from .models import RawResult, Response

logger = logging.getLogger(__name__)

# Attribute names that may follow the name=value pair of a Set-Cookie header (RFC 6265 and common extensions)
COOKIE_ATTRIBUTES = frozenset({
    'path', 'domain', 'expires', 'max-age', 'secure', 'httponly',
    'samesite', 'partitioned', 'priority',
})


# Serialization
def serialize_headers(headers: Dict[str, str]) -> List[str]:
    """Turn a header map into `Key: value` lines, sorted by key."""
    return [f"{key}: {value}" for key, value in sorted(headers.items())]


def serialize_cookies(cookies: Dict[str, str]) -> str:
    """
    Build the single `Cookie` header line for a cookie map.
    Every pair is followed by `"; "`, and the line is produced even for an empty map.
    """
    return "Cookie: " + "".join(f"{key}={value}; " for key, value in sorted(cookies.items()))


def serialize_request_headers(headers: Dict[str, str], cookies: Dict[str, str]) -> List[str]:
    lines = serialize_headers(headers)
    lines.append(serialize_cookies(cookies))
    return lines


# Parsing
def split_lines(raw_headers: bytes) -> List[str]:
    """Decode a raw header section and split it on newlines, dropping the carriage returns."""
    text = raw_headers.decode('iso-8859-1')
    return [line[:-1] if line.endswith('\r') else line for line in text.split('\n')]


def parse_status_line(line: str) -> Tuple[int, str]:
    """Parse `HTTP/1.1 404 Not Found` into `(404, "Not Found")`."""
    _version, _, rest = line.partition(' ')
    code, _, message = rest.partition(' ')
    if not (code.isascii() and code.isdigit()):
        raise ParseError(f"Invalid status code {code!r} in status line", line=line)
    return int(code), message.strip()


def parse_header_line(line: str) -> Optional[Tuple[str, str]]:
    """
    Split a header line on its first colon.
    Returns the lower-cased name and the trimmed value, or None for a line that is not a header.
    """
    name, sep, value = line.partition(':')
    name = name.strip().lower()
    if not sep or not name:
        return None
    return name, value.strip()


def parse_set_cookie(value: str) -> Dict[str, str]:
    """Extract the cookies a Set-Cookie value sets, leaving out its attributes."""
    cookies = {}
    for segment in value.split(';'):
        name, sep, cookie_value = segment.partition('=')
        name = name.strip()
        # bare flags (Secure, HttpOnly) and attributes are not cookies
        if not sep or not name or name.lower() in COOKIE_ATTRIBUTES:
            continue
        cookies[name] = cookie_value.strip()
    return cookies


def parse_raw_headers(raw_headers: bytes) -> Tuple[int, str, Dict[str, str], Dict[str, str]]:
    """Parse a raw header section into status code, status message, headers and cookies."""
    lines = split_lines(raw_headers)
    if not lines[0].strip():
        raise ParseError("Empty status line", line=lines[0])
    status_code, status_message = parse_status_line(lines[0])

    headers: Dict[str, str] = {}
    cookies: Dict[str, str] = {}
    for line in lines[1:]:
        if not line:
            continue
        parsed = parse_header_line(line)
        if parsed is None:
            logger.debug(f"Skipping malformed header line: {line!r}")
            continue
        key, value = parsed
        if key == 'set-cookie':
            cookies.update(parse_set_cookie(value))
        headers[key] = value

    return status_code, status_message, headers, cookies


def decode_body(raw_body: bytes) -> str:
    return raw_body.decode('utf-8', errors='replace')


def parse_raw_result(raw: RawResult, url: str = "", elapsed: float = 0.0) -> Response:
    """Turn what the executor returned into a Response; failures end up on `Response.error`."""
    if not raw.ok:
        return Response(
            transport_code=raw.code,
            url=url,
            error=TransportError(f"Transport failure ({raw.code.value}): {raw.detail}", code=raw.code, url=url),
            elapsed=elapsed,
        )

    try:
        status_code, status_message, headers, cookies = parse_raw_headers(raw.headers)
    except ParseError as e:
        e.url = url
        logger.debug(f"Could not parse response from {url}: {e}")
        return Response(
            transport_code=raw.code,
            url=url,
            raw_body=raw.body,
            raw_headers=raw.headers,
            error=e,
            elapsed=elapsed,
        )

    return Response(
        transport_code=raw.code,
        url=url,
        status_code=status_code,
        status_message=status_message,
        body=decode_body(raw.body),
        raw_body=raw.body,
        raw_headers=raw.headers,
        headers=headers,
        cookies=cookies,
        elapsed=elapsed,
    )
