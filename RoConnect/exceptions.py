from typing import Optional

# Exceptions
class RequestError(Exception):
    """Base exception for errors produced while performing a request."""
    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.url = url

class TransportError(RequestError):
    """Raised (or returned) when the exchange fails before a response is received."""
    def __init__(self, message: str, code=None, url: Optional[str] = None):
        super().__init__(message, url=url)
        self.code = code

class ParseError(RequestError):
    """Raised (or returned) when a received response cannot be parsed."""
    def __init__(self, message: str, line: Optional[str] = None, url: Optional[str] = None):
        super().__init__(message, url=url)
        self.line = line
