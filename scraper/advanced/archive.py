"""
Archive Lookup - Find the most recent Wayback Machine snapshot of a URL.

Queries the Internet Archive availability API once per call. There are no
retries; any failure is reported to the caller, which decides whether to
fall back further.
"""

import asyncio
import json
import logging
from urllib.parse import quote

import aiohttp

from ..exceptions import ArchiveLookupError, ParseError
from ..models import ArchiveSnapshot

logger = logging.getLogger(__name__)

WAYBACK_AVAILABILITY_URL = "https://archive.org/wayback/available"


class ArchiveLookup:
    """
    Client for the Wayback Machine availability API.

    Response shape on a hit:
        {"archived_snapshots": {"closest": {"available": true,
         "url": "http://web.archive.org/web/2020.../https://example.com",
         "timestamp": "2020...", "status": "200"}}}

    On a miss ``archived_snapshots`` is empty.
    """

    def __init__(
        self,
        timeout: int = 30,
        endpoint: str = WAYBACK_AVAILABILITY_URL,
        user_agent: str | None = None,
        session: aiohttp.ClientSession | None = None,
    ):
        """
        Initialize the lookup client.

        Args:
            timeout: Request timeout in seconds
            endpoint: Availability API endpoint
            user_agent: Optional User-Agent header override
            session: Optional shared session; it is used as-is and never closed here
        """
        self.timeout = timeout
        self.endpoint = endpoint
        self.user_agent = user_agent or "ArticleScraper/1.0 (+archive availability lookup)"
        self.headers = {
            "User-Agent": self.user_agent,
            "Accept": "application/json",
        }
        self._session = session

    def build_query_url(self, url: str) -> str:
        """Availability API URL keyed by the URL-encoded target."""
        return f"{self.endpoint}?url={quote(url, safe='')}"

    async def lookup(self, url: str) -> ArchiveSnapshot:
        """
        Look up the most recent snapshot of ``url``.

        Returns:
            ArchiveSnapshot; ``available`` is False when no snapshot exists

        Raises:
            ArchiveLookupError: If the API is unreachable or returns an error status
            ParseError: If the response body is not a JSON object
        """
        query_url = self.build_query_url(url)
        logger.info(f"Looking up archived snapshot for {url}")

        try:
            if self._session is not None:
                body = await self._get(self._session, query_url)
            else:
                async with aiohttp.ClientSession(headers=self.headers) as session:
                    body = await self._get(session, query_url)
        except aiohttp.ClientError as e:
            raise ArchiveLookupError(f"Archive lookup failed for {url}: {e}") from e
        except asyncio.TimeoutError as e:
            raise ArchiveLookupError(f"Archive lookup timed out for {url}") from e

        snapshot = self.parse_response(body)
        if snapshot.available:
            logger.info(f"Found archived snapshot {snapshot.snapshot_url}")
        else:
            logger.info(f"No archived snapshot available for {url}")
        return snapshot

    async def _get(self, session: aiohttp.ClientSession, query_url: str) -> bytes:
        async with session.get(
            query_url,
            headers=self.headers,
            timeout=aiohttp.ClientTimeout(total=self.timeout),
            allow_redirects=True,
        ) as resp:
            if resp.status != 200:
                raise ArchiveLookupError(f"Availability API error (status {resp.status})")
            return await resp.read()

    @staticmethod
    def parse_response(body: str | bytes) -> ArchiveSnapshot:
        """
        Parse an availability API body.

        Raw bytes are decoded as UTF-8 regardless of the declared charset.

        Raises:
            ParseError: If the body is not a UTF-8 encoded JSON object
        """
        try:
            if isinstance(body, bytes):
                body = body.decode("utf-8")
            data = json.loads(body)
        except (UnicodeDecodeError, json.JSONDecodeError, TypeError) as e:
            raise ParseError(f"Malformed availability response: {e}") from e

        if not isinstance(data, dict):
            raise ParseError("Availability response is not a JSON object")

        snapshots = data.get("archived_snapshots")
        closest = snapshots.get("closest") if isinstance(snapshots, dict) else None
        if not isinstance(closest, dict):
            return ArchiveSnapshot(available=False)

        snapshot_url = closest.get("url")
        if not snapshot_url or not isinstance(snapshot_url, str) or closest.get("available") is False:
            return ArchiveSnapshot(available=False)

        # The API reports http:// snapshot URLs
        if snapshot_url.startswith("http://"):
            snapshot_url = "https://" + snapshot_url[len("http://"):]

        timestamp = closest.get("timestamp")
        return ArchiveSnapshot(
            available=True,
            snapshot_url=snapshot_url,
            timestamp=timestamp if isinstance(timestamp, str) else None,
        )
