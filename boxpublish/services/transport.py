"""
HTTP access to a remote metadata.json.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

import httpx

from boxpublish.domain.errors import TransportError

# Statuses treated as "no index published yet". Anything else that is not
# 2xx is a transport failure.
NOT_FOUND_STATUSES = frozenset({404, 410})


class IndexTransport(ABC):
    """
    Abstract capability for a single blocking GET.
    """

    @abstractmethod
    async def get(self, url: str) -> Optional[bytes]:
        """
        Return the response body, or None if the resource does not exist.

        Raises TransportError for every other failure.
        """
        pass


class HttpxTransport(IndexTransport):
    """GET over httpx. No timeout is applied."""

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        # Underlying httpx transport; tests pass an httpx.MockTransport.
        self._transport = transport

    async def get(self, url: str) -> Optional[bytes]:
        try:
            async with httpx.AsyncClient(follow_redirects=True, timeout=None, transport=self._transport) as client:
                response = await client.get(url)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise TransportError(f"request failed: {e}", url=url) from e

        if response.status_code in NOT_FOUND_STATUSES:
            return None

        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise TransportError(
                f"unexpected status {response.status_code}",
                status_code=response.status_code,
                url=url,
            ) from e

        return response.content
