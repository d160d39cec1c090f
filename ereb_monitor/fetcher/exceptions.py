# ereb_monitor/fetcher/exceptions.py
from typing import Optional


class FetchError(Exception):
    """Base exception for ereb fetch operations"""

    def __init__(self, url: str, message: str):
        super().__init__(message)
        self.url = url


class EndpointParseError(FetchError):
    """Raised when a server address cannot be parsed"""

    pass


class EndpointConnectionError(FetchError):
    """Raised when the request cannot be sent or times out"""

    pass


class HTTPStatusError(FetchError):
    """Raised when the server answers with anything but 200"""

    def __init__(self, url: str, status: int, message: Optional[str] = None):
        super().__init__(
            url,
            message
            or f"Unable to get valid stat result from '{url}', http response code : {status}",
        )
        self.status = status


class DecodeError(FetchError):
    """Raised when the response body is not the expected JSON document"""

    pass
