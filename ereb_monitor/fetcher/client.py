# ereb_monitor/fetcher/client.py
import asyncio
from typing import Any, Optional, Tuple

import aiohttp
from pydantic import TypeAdapter, ValidationError
from yarl import URL

from ereb_monitor.log_handler.logging_config import get_logger
from .exceptions import (
    DecodeError,
    EndpointConnectionError,
    EndpointParseError,
    HTTPStatusError,
)

logger = get_logger(__name__)


class ErebHttpClient:
    """
    Shared HTTP client for talking to ereb servers.

    One ``aiohttp.ClientSession`` is created on first use and reused by every
    request until ``close()`` is called. Concurrent first calls are funneled
    through a lock so only one session is ever built.

    A session belongs to the event loop that created it. When the client is
    used from a different loop, e.g. one ``asyncio.run`` per cycle, the session
    and its lock are rebuilt for the new loop.

    ``request_timeout`` bounds the whole request. ``response_header_timeout``
    is applied as aiohttp's ``sock_read`` timeout: the longest the client waits
    for the next chunk of the response, headers or body, so it also catches a
    server that stalls before sending headers.
    """

    SUPPORTED_SCHEMES = ("http", "https")
    DEFAULT_TIMEOUT = 30.0  # seconds

    def __init__(
        self,
        request_timeout: float = DEFAULT_TIMEOUT,
        response_header_timeout: float = DEFAULT_TIMEOUT,
    ):
        self.request_timeout = request_timeout
        self.response_header_timeout = response_header_timeout
        self._session: Optional[aiohttp.ClientSession] = None
        self._session_lock = asyncio.Lock()
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    @property
    def is_open(self) -> bool:
        return self._session is not None and not self._session.closed

    def _bind_to_running_loop(self) -> None:
        loop = asyncio.get_running_loop()
        if self._loop is loop:
            return
        if self._session is not None:
            # the owning loop is gone or elsewhere, the session cannot be closed from here
            logger.debug("Event loop changed, dropping HTTP session of the previous loop")
        self._session = None
        self._session_lock = asyncio.Lock()
        self._loop = loop

    async def get_session(self) -> aiohttp.ClientSession:
        """Return the shared session, creating it once per event loop."""
        self._bind_to_running_loop()
        if self.is_open:
            return self._session

        async with self._session_lock:
            if not self.is_open:
                timeout = aiohttp.ClientTimeout(
                    total=self.request_timeout,
                    sock_read=self.response_header_timeout,
                )
                self._session = aiohttp.ClientSession(timeout=timeout)
                logger.debug(
                    f"Created HTTP session (total timeout {self.request_timeout}s, "
                    f"read timeout {self.response_header_timeout}s)"
                )
        return self._session

    async def close(self) -> None:
        """Release the shared session."""
        if (
            self._session is not None
            and not self._session.closed
            and self._loop is asyncio.get_running_loop()
        ):
            await self._session.close()
        self._session = None

    def prepare_request(self, request_url: str) -> Tuple[URL, Optional[aiohttp.BasicAuth]]:
        """
        Split a request URL into the URL to send and its basic-auth credentials.

        Raises:
            EndpointParseError: if the URL is malformed
        """
        try:
            url = URL(request_url)
        except (ValueError, TypeError) as e:
            raise EndpointParseError(
                request_url, f"Unable parse server address '{request_url}': {e}"
            ) from e

        if url.scheme not in self.SUPPORTED_SCHEMES or not url.host:
            raise EndpointParseError(
                request_url,
                f"Unable parse server address '{request_url}': "
                f"URL must start with http:// or https:// and name a host",
            )

        auth = None
        if url.user is not None:
            auth = aiohttp.BasicAuth(url.user, url.password or "")
            url = url.with_user(None)

        return url, auth

    async def get_json(self, request_url: str, target: Any) -> Any:
        """
        GET ``request_url`` and validate its JSON body into ``target``.

        Args:
            request_url: Absolute URL, optionally with ``user:password@``
            target: A pydantic model class, a type understood by
                ``TypeAdapter``, or a ready-made ``TypeAdapter``

        Returns:
            The validated document

        Raises:
            EndpointParseError: malformed URL
            EndpointConnectionError: request failed or timed out
            HTTPStatusError: response status other than 200
            DecodeError: body is not valid JSON for ``target``
        """
        url, auth = self.prepare_request(request_url)
        session = await self.get_session()

        try:
            async with session.get(url, auth=auth) as response:
                if response.status != 200:
                    raise HTTPStatusError(request_url, response.status)
                body = await response.read()
        except aiohttp.ClientError as e:
            raise EndpointConnectionError(
                request_url,
                f"Unable to connect to ereb server '{request_url}': {e}",
            ) from e
        except asyncio.TimeoutError as e:
            raise EndpointConnectionError(
                request_url,
                f"Unable to connect to ereb server '{request_url}': "
                f"timed out after {self.request_timeout} seconds",
            ) from e

        adapter = target if isinstance(target, TypeAdapter) else TypeAdapter(target)
        try:
            return adapter.validate_json(body)
        except ValidationError as e:
            raise DecodeError(
                request_url,
                f"Unable to decode response from '{request_url}': "
                f"{e.error_count()} validation error(s)",
            ) from e
