""" Request Factory with Client Configuration """

import os, json
from dataclasses import dataclass, field, fields
from typing import Dict, List, Optional, Any

from .middlewares import BaseMiddleware, DefaultHeadersMiddleware, LoggingMiddleware
from .models import Body
from .top import Request

DEFAULT_USER_AGENT = "RoConnect/0.1.0"
ENV_PREFIX = "ROCONNECT_"

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class ClientConfig:
    """Settings shared by every request a factory creates."""
    base_url: str = ""
    user_agent: str = DEFAULT_USER_AGENT
    referer: Optional[str] = None
    default_headers: Dict[str, str] = field(default_factory=dict)
    verbose: bool = False

    def headers(self) -> Dict[str, str]:
        """Headers added to a request unless it sets them itself."""
        headers = {'User-Agent': self.user_agent}
        if self.referer:
            headers['Referer'] = self.referer
        headers.update(self.default_headers)
        return headers

    @classmethod
    def from_env(cls, base: Optional["ClientConfig"] = None) -> "ClientConfig":
        """Get configuration from environment variables, falling back to `base` (or the defaults)."""
        config = base or cls()
        env = {
            'base_url': os.getenv(ENV_PREFIX + "BASE_URL"),
            'user_agent': os.getenv(ENV_PREFIX + "USER_AGENT"),
            'referer': os.getenv(ENV_PREFIX + "REFERER"),
        }
        values = {f.name: getattr(config, f.name) for f in fields(cls)}
        values['default_headers'] = dict(config.default_headers)
        values.update({key: value for key, value in env.items() if value})

        verbose = os.getenv(ENV_PREFIX + "VERBOSE")
        if verbose is not None:
            values['verbose'] = verbose.strip().lower() in _TRUTHY
        return cls(**values)


def load_config(path: Optional[str] = None) -> ClientConfig:
    """Load configuration from a JSON file (if given), then apply environment overrides."""
    if path is None:
        return ClientConfig.from_env()

    try:
        with open(path, 'r') as f: raw_config = json.load(f)
    except FileNotFoundError:
        raise FileNotFoundError(f"Client configuration file not found at {path}")
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in client configuration file: {e}")

    if not isinstance(raw_config, dict):
        raise ValueError(f"Client configuration must be a JSON object, got {type(raw_config).__name__}")
    known = {f.name for f in fields(ClientConfig)}
    unknown = set(raw_config) - known
    if unknown:
        raise ValueError(f"Unknown client configuration keys: {', '.join(sorted(unknown))}")

    return ClientConfig.from_env(ClientConfig(**raw_config))


class RequestFactory:
    """Factory for creating requests that share a base URL, default headers and logging."""

    def __init__(self, config: Optional[ClientConfig] = None,
                 middleware: Optional[List[BaseMiddleware]] = None):
        self.config = config or ClientConfig.from_env()
        self.extra_middleware = list(middleware or [])

    def build_url(self, path: str) -> str:
        """Join `path` onto the base URL; absolute URLs are returned unchanged."""
        if '://' in path or not self.config.base_url:
            return path
        return f"{self.config.base_url.rstrip('/')}/{path.lstrip('/')}"

    def create_request(self, path: str, data: Body = "",
                       headers: Optional[Dict[str, str]] = None,
                       cookies: Optional[Dict[str, str]] = None) -> Request:
        """Create a Request for `path` with the configured defaults applied."""
        middleware: List[BaseMiddleware] = [DefaultHeadersMiddleware(self.config.headers())]
        middleware.extend(self.extra_middleware)
        middleware.append(LoggingMiddleware())

        return Request(
            self.build_url(path),
            data,
            headers=headers,
            cookies=cookies,
            middleware=middleware,
            verbose=self.config.verbose,
        )

    def get_info(self) -> Dict[str, Any]:
        """Get the effective configuration."""
        return {
            "base_url": self.config.base_url,
            "user_agent": self.config.user_agent,
            "referer": self.config.referer,
            "default_headers": dict(self.config.default_headers),
            "verbose": self.config.verbose,
        }
