"""Test helpers: a canned raw-socket HTTP server and a fake executor."""

import socketserver

from RoConnect.models import RawResult, TransportCode


def http_reply(status_line="HTTP/1.1 200 OK", headers=(), body=b""):
    """Build raw response bytes that close the connection after the body."""
    lines = [status_line]
    lines.extend(f"{name}: {value}" for name, value in headers)
    lines.append(f"Content-Length: {len(body)}")
    lines.append("Connection: close")
    return ("\r\n".join(lines) + "\r\n\r\n").encode("iso-8859-1") + body


class _CannedHandler(socketserver.BaseRequestHandler):
    def handle(self):
        data = b""
        while b"\r\n\r\n" not in data:
            chunk = self.request.recv(65536)
            if not chunk:
                break
            data += chunk
        if not data:
            return
        head, _, rest = data.partition(b"\r\n\r\n")

        length = 0
        for line in head.split(b"\r\n")[1:]:
            name, _, value = line.partition(b":")
            if name.strip().lower() == b"content-length":
                length = int(value.strip())
        while len(rest) < length:
            chunk = self.request.recv(65536)
            if not chunk:
                break
            rest += chunk

        self.server.received.append((head.decode("iso-8859-1"), rest))
        self.request.sendall(self.server.reply)


class CannedServer(socketserver.ThreadingTCPServer):
    """Replies to every request with `reply` and records what it received."""
    daemon_threads = True
    allow_reuse_address = True

    def __init__(self):
        super().__init__(("127.0.0.1", 0), _CannedHandler)
        self.reply = http_reply()
        self.received = []

    @property
    def url(self):
        host, port = self.server_address
        return f"http://{host}:{port}"

    def request_line(self, index=-1):
        return self.received[index][0].split("\r\n")[0]

    def request_lines(self, index=-1):
        """Header lines (without the request line) of a received request."""
        return self.received[index][0].split("\r\n")[1:]

    def request_body(self, index=-1):
        return self.received[index][1]


class FakeExecutor:
    """Executor stand-in that records calls and returns queued results."""

    def __init__(self, *results):
        self.results = list(results)
        self.calls = []
        self.closed = False

    def execute(self, url, method, body=b"", header_lines=None):
        self.calls.append({
            "url": url,
            "method": method,
            "body": body,
            "header_lines": list(header_lines or []),
        })
        if self.results:
            return self.results.pop(0)
        return RawResult(code=TransportCode.OK, headers=b"HTTP/1.1 200 OK\r\n\r\n")

    def close(self):
        self.closed = True
