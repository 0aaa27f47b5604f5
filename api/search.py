"""
Pass-through proxy to the Open Library search API.
"""

from typing import Any, List, Optional, Tuple

import httpx
import structlog

from utilities.exceptions import UpstreamError

logger = structlog.get_logger(__name__)


class BookSearchClient:
    """Forwards search queries to the external catalog and returns its JSON untouched."""

    def __init__(
        self,
        search_url: str,
        timeout: float = 10.0,
        default_query: str = "bestsellers",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.search_url = search_url
        self.default_query = default_query
        self.client_config = {
            "timeout": timeout,
            "headers": {"User-Agent": "Bookworm/1.0", "Accept": "application/json"},
            "follow_redirects": True,
        }
        if transport is not None:
            self.client_config["transport"] = transport

    def build_params(self, params: List[Tuple[str, str]]) -> List[Tuple[str, str]]:
        """Keep the caller's params as-is, supplying ``q`` when it is absent or empty."""
        forwarded = [(key, value) for key, value in params if not (key == "q" and not value)]
        if not any(key == "q" for key, _ in forwarded):
            forwarded.append(("q", self.default_query))
        return forwarded

    async def search(self, params: List[Tuple[str, str]]) -> Any:
        """
        Run a search against the catalog.

        Args:
            params: Query parameters exactly as received from the client

        Returns:
            Decoded JSON body of the upstream response

        Raises:
            UpstreamError: On any transport, status or decoding failure
        """
        forwarded = self.build_params(params)
        try:
            async with httpx.AsyncClient(**self.client_config) as client:
                response = await client.get(self.search_url, params=forwarded)
                response.raise_for_status()
                return response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Search proxy error", error=str(e), url=self.search_url)
            raise UpstreamError("Failed to fetch books", detail=str(e))
