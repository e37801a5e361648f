"""
Single-attempt HTTP client for the device status page.
"""

from __future__ import annotations

import asyncio
import time
from typing import Optional

import aiohttp
import structlog

from tinymonitor.config.config import UpstreamConfig
from tinymonitor.errors import FetchError
from tinymonitor.observability import histogram

logger = structlog.get_logger(__name__)


class UpstreamFetcher:
    """Fetches the configured URL once, with hard connect and total timeouts.

    A fresh ``aiohttp.ClientSession`` is opened per call and closed on every
    exit path, so nothing is shared between requests. There is no retry.
    """

    def __init__(self, config: Optional[UpstreamConfig] = None):
        self.config = config or UpstreamConfig()
        self.timeout = aiohttp.ClientTimeout(
            total=self.config.total_timeout,
            connect=self.config.connect_timeout,
        )

    @property
    def url(self) -> str:
        return self.config.url

    async def fetch(self) -> bytes:
        """
        Fetch the status page.

        Returns:
            The raw response body.

        Raises:
            FetchError: on connection errors, timeouts, too many redirects,
                a final status >= 400 or an empty body.
        """
        url = self.config.url
        start_time = time.monotonic()
        try:
            async with aiohttp.ClientSession(
                timeout=self.timeout, headers={"User-Agent": self.config.user_agent}
            ) as session:
                async with session.get(
                    url,
                    allow_redirects=True,
                    # aiohttp fails once the redirect count reaches its limit
                    max_redirects=self.config.max_redirects + 1,
                ) as response:
                    if response.status >= 400:
                        logger.warning("Upstream returned error status", url=url, status=response.status)
                        raise FetchError(f"upstream answered {response.status}", url=url, status=response.status)
                    body = await response.read()
                    status = response.status
        except asyncio.TimeoutError as e:
            logger.warning("Upstream fetch timed out", url=url, timeout=self.config.total_timeout)
            raise FetchError("upstream timed out", url=url) from e
        except aiohttp.ClientError as e:
            logger.warning("Upstream fetch failed", url=url, error=str(e) or type(e).__name__)
            raise FetchError(f"upstream request failed: {e}", url=url) from e
        finally:
            histogram("upstream_fetch_seconds", time.monotonic() - start_time)

        if not body:
            raise FetchError("upstream returned an empty body", url=url, status=status)

        logger.debug("Upstream fetched", url=url, status=status, size=len(body))
        return body
