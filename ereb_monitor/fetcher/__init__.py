# ereb_monitor/fetcher/__init__.py
from .client import ErebHttpClient
from .exceptions import (
    FetchError,
    EndpointParseError,
    EndpointConnectionError,
    HTTPStatusError,
    DecodeError,
)

__all__ = [
    'ErebHttpClient',
    'FetchError',
    'EndpointParseError',
    'EndpointConnectionError',
    'HTTPStatusError',
    'DecodeError'
]

__version__ = '1.0.0'
