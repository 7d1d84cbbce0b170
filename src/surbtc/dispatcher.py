"""Single signed HTTP round trip, normalized into an ``Envelope``."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Mapping

import aiohttp

from .envelope import Envelope, normalize
from .errors import API_KEY_REQUIRED, ConfigurationError
from .signing import BODY_METHODS, SUPPORTED_METHODS, build_auth_headers, encode_body

logger = logging.getLogger(__name__)

DEFAULT_API = "https://www.surbtc.com/api/v2"
DEFAULT_HEADERS = {
    "Accept": "application/json",
    "Content-Type": "application/json",
}


class ProxyConfig:
    """HTTP proxy configuration."""

    def __init__(self, url: str | None = None, username: str | None = None, password: str | None = None):
        self.url = url
        self.username = username
        self.password = password

    @property
    def proxy_url(self) -> str | None:
        if not self.url:
            return None
        if self.username and self.password:
            protocol = self.url.split("://")[0] if "://" in self.url else "http"
            rest = self.url.split("://")[1] if "://" in self.url else self.url
            return f"{protocol}://{self.username}:{self.password}@{rest}"
        return self.url


class RequestDispatcher:
    """Performs one HTTP call per ``request`` and returns an ``Envelope``.

    Holds only read-only configuration plus a lazily created session, so
    concurrent calls on one dispatcher are independent.
    """

    def __init__(
        self,
        api: str = DEFAULT_API,
        api_key: str = "",
        api_secret: str = "",
        *,
        headers: Mapping[str, str] | None = None,
        proxy: ProxyConfig | None = None,
        request_timeout: float | None = None,
    ):
        self.api = api
        self.api_key = api_key
        self.api_secret = api_secret
        self.headers = dict(headers) if headers else dict(DEFAULT_HEADERS)
        self.proxy = proxy or ProxyConfig()
        self.request_timeout = request_timeout
        self.session: aiohttp.ClientSession | None = None

    @property
    def authenticated(self) -> bool:
        return bool(self.api_secret)

    def full_url(self, path: str) -> str:
        return f"{self.api}{path}"

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self.session is None:
            timeout = aiohttp.ClientTimeout(total=self.request_timeout)
            self.session = aiohttp.ClientSession(timeout=timeout)
        return self.session

    async def request(
        self,
        method: str,
        path: str,
        body: Any = None,
        *,
        auth: bool = True,
    ) -> Envelope:
        """Issue one request.

        Args:
            method: GET, DELETE, POST or PUT
            path: Path relative to the API base URL, query string included
            body: JSON-serializable payload for POST/PUT
            auth: Whether the endpoint requires signed headers

        Raises:
            ConfigurationError: If the method is not supported
        """
        method = method.upper()
        if method not in SUPPORTED_METHODS:
            raise ConfigurationError(f"Unsupported HTTP method: {method}")

        if auth and not self.authenticated:
            logger.warning("%s %s requires an API secret", method, path)
            return Envelope.fail(API_KEY_REQUIRED)

        url = self.full_url(path)
        payload = encode_body(body) if method in BODY_METHODS and body is not None else None

        if auth:
            headers = build_auth_headers(
                self.api_key,
                self.api_secret,
                method,
                url,
                payload,
                base_headers=self.headers,
            )
        else:
            headers = dict(self.headers)

        logger.debug("%s %s", method, path)
        session = await self._ensure_session()
        try:
            async with session.request(
                method,
                url,
                data=payload,
                headers=headers,
                proxy=self.proxy.proxy_url,
            ) as resp:
                status = resp.status
                data = await _read_json(resp)
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            return normalize(None, None, exc)

        return normalize(status, data)

    async def close(self) -> None:
        if self.session:
            await self.session.close()
            self.session = None


async def _read_json(resp: aiohttp.ClientResponse) -> Any:
    try:
        return await resp.json(content_type=None)
    except (aiohttp.ContentTypeError, ValueError):
        return None
