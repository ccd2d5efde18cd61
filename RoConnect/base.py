import ssl, socket, http.client, logging
from typing import List, Optional, Union
from urllib.parse import urlsplit

from .models import RawResult, TransportCode

logger = logging.getLogger(__name__)


# Transport Execution
class HTTPExecutor:
    """
    Performs exactly one blocking HTTP exchange per `execute` call.
      - No connection pooling: every exchange opens its own connection and closes it on the way out.
      - No retries, no redirects, no timeout beyond the socket default.
      - Failures come back as a RawResult carrying a TransportCode, never as an exception.
    Not safe for concurrent use; give each thread its own executor.
    """

    def __init__(self, debuglevel: int = 0, ssl_context: Optional[ssl.SSLContext] = None):
        self.debuglevel = debuglevel
        self._ssl_context = ssl_context or ssl.create_default_context()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def _create_connection(self, parsed_url) -> http.client.HTTPConnection:
        """Create a new connection for the given URL."""
        if parsed_url.scheme == 'https':
            conn = http.client.HTTPSConnection(
                parsed_url.hostname,
                parsed_url.port,
                context=self._ssl_context
            )
        else:
            conn = http.client.HTTPConnection(
                parsed_url.hostname,
                parsed_url.port
            )
        conn.set_debuglevel(self.debuglevel)
        return conn

    def execute(self, url: str, method: str, body: Union[bytes, str] = b"",
                header_lines: Optional[List[str]] = None) -> RawResult:
        """Send one request and return the raw response bytes or a failure code."""
        if self._closed:
            raise RuntimeError("Executor is closed")

        if isinstance(body, str):
            body = body.encode('utf-8')
        header_lines = header_lines or []

        try:
            parsed_url = urlsplit(url)
        except ValueError as e:
            return self._failure(TransportCode.URL_MALFORMAT, str(e), url)
        if parsed_url.scheme not in ('http', 'https'):
            return self._failure(TransportCode.UNSUPPORTED_PROTOCOL, f"Unsupported protocol: {parsed_url.scheme!r}", url)
        try:
            parsed_url.port
        except ValueError as e:
            return self._failure(TransportCode.URL_MALFORMAT, str(e), url)
        if not parsed_url.hostname:
            return self._failure(TransportCode.URL_MALFORMAT, f"No host in URL: {url!r}", url)

        path = parsed_url.path or '/'
        if parsed_url.query:
            path += '?' + parsed_url.query

        try:
            conn = self._create_connection(parsed_url)
        except http.client.InvalidURL as e:
            return self._failure(TransportCode.URL_MALFORMAT, str(e), url)

        try:
            try:
                conn.connect()
            except socket.gaierror as e:
                return self._failure(TransportCode.COULDNT_RESOLVE_HOST, str(e), url)
            except (socket.timeout, TimeoutError) as e:
                return self._failure(TransportCode.OPERATION_TIMEDOUT, str(e), url)
            except ssl.SSLError as e:
                return self._failure(TransportCode.SSL_CONNECT_ERROR, str(e), url)
            except OSError as e:
                return self._failure(TransportCode.COULDNT_CONNECT, str(e), url)

            try:
                self._send(conn, method, path, body, header_lines)
            except http.client.InvalidURL as e:
                return self._failure(TransportCode.URL_MALFORMAT, str(e), url)
            except ValueError as e:
                # http.client rejects illegal methods and header names/values before writing
                return self._failure(TransportCode.BAD_FUNCTION_ARGUMENT, str(e), url)
            except (socket.timeout, TimeoutError) as e:
                return self._failure(TransportCode.OPERATION_TIMEDOUT, str(e), url)
            except OSError as e:
                return self._failure(TransportCode.SEND_ERROR, str(e), url)

            try:
                response = conn.getresponse()
                response_body = response.read()
            except http.client.RemoteDisconnected as e:
                return self._failure(TransportCode.RECV_ERROR, str(e), url)
            except http.client.BadStatusLine as e:
                # Only a non-numeric status code is left to the parser; other protocols are not HTTP.
                status = e.line.split(None, 2)[1:2]
                if status and status[0].isascii() and status[0].isdigit():
                    return self._failure(TransportCode.RECV_ERROR, f"Not an HTTP response: {e.line.strip()!r}", url)
                logger.debug(f"Unparseable status line from {url}: {e.line!r}")
                return RawResult(
                    code=TransportCode.OK,
                    headers=(e.line.rstrip('\r\n') + '\r\n\r\n').encode('iso-8859-1', errors='replace'),
                )
            except (socket.timeout, TimeoutError) as e:
                return self._failure(TransportCode.OPERATION_TIMEDOUT, str(e), url)
            except (http.client.HTTPException, OSError) as e:
                return self._failure(TransportCode.RECV_ERROR, str(e), url)

            return RawResult(
                code=TransportCode.OK,
                body=response_body,
                headers=self._raw_header_section(response),
            )
        finally:
            conn.close()

    def _send(self, conn: http.client.HTTPConnection, method: str, path: str,
              body: bytes, header_lines: List[str]):
        """Write the request line, the given header lines and the body."""
        headers = []
        for line in header_lines:
            name, _, value = line.partition(':')
            name = name.strip()
            if not name:
                logger.debug(f"Dropping header line without a name: {line!r}")
                continue
            headers.append((name, value.lstrip()))
        names = {name.lower() for name, _ in headers}

        conn.putrequest(method, path, skip_host='host' in names, skip_accept_encoding=True)
        for name, value in headers:
            conn.putheader(name, value)

        # The body goes out whatever the method; POST always announces its length.
        if (body or method.upper() == 'POST') and 'content-length' not in names:
            conn.putheader('Content-Length', str(len(body)))
        conn.endheaders(body if body else None)

    @staticmethod
    def _raw_header_section(response: http.client.HTTPResponse) -> bytes:
        """Rebuild the status line and header block as it came off the wire."""
        version = 'HTTP/1.0' if response.version == 10 else 'HTTP/1.1'
        lines = [f"{version} {response.status} {response.reason}"]
        lines.extend(f"{name}: {value}" for name, value in response.getheaders())
        return ('\r\n'.join(lines) + '\r\n\r\n').encode('iso-8859-1', errors='replace')

    @staticmethod
    def _failure(code: TransportCode, detail: str, url: str) -> RawResult:
        logger.debug(f"Transport failure ({code.value}) for {url}: {detail}")
        return RawResult(code=code, detail=detail)

    def close(self):
        """Release the executor; further `execute` calls raise RuntimeError."""
        self._closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
