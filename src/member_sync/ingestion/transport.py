"""
HTTP transport shared by the source adapters.

Requests to the same upstream host are serialized with a short cool-down
between them to stay clear of rate limits. The engine itself applies no
timeout; the one configured here is the transport's own.
"""
import asyncio
import logging
import time
from collections import defaultdict
from typing import Dict, Optional
from urllib.parse import urlparse

import httpx

from member_sync.config.settings import settings
from member_sync.errors import UpstreamUnavailable

logger = logging.getLogger(__name__)


class HttpTransport:
    """
    Fetch raw bytes from upstream URLs.
    
    Usage:
        async with HttpTransport() as transport:
            body = await transport.fetch("https://bioguide.congress.gov/...")
    """
    
    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
        cool_down: Optional[float] = None
    ):
        self.timeout = settings.HTTP_TIMEOUT if timeout is None else timeout
        self.cool_down = settings.REQUEST_COOL_DOWN if cool_down is None else cool_down
        self._client = client
        self._owns_client = client is None
        self._locks: Dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)
        self._last_request: Dict[str, float] = {}
    
    async def __aenter__(self) -> "HttpTransport":
        return self
    
    async def __aexit__(self, *exc_info) -> None:
        await self.close()
    
    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
    
    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout, follow_redirects=True)
        return self._client
    
    async def fetch(
        self,
        url: str,
        headers: Optional[dict] = None,
        params: Optional[dict] = None
    ) -> bytes:
        """
        GET a URL and return the response body.
        
        Raises:
            UpstreamUnavailable: on transport errors or any non-200 status
        """
        host = urlparse(url).netloc
        
        async with self._locks[host]:
            # Respect the per-host cool-down
            elapsed = time.monotonic() - self._last_request.get(host, 0.0)
            if elapsed < self.cool_down:
                await asyncio.sleep(self.cool_down - elapsed)
            
            logger.debug(f"Fetching {url}")
            try:
                response = await self._get_client().get(url, headers=headers, params=params)
            except httpx.HTTPError as e:
                raise UpstreamUnavailable(host, f"{type(e).__name__} fetching {url}: {e}") from e
            finally:
                self._last_request[host] = time.monotonic()
        
        if response.status_code != 200:
            raise UpstreamUnavailable(host, f"HTTP {response.status_code} for {url}")
        
        return response.content
