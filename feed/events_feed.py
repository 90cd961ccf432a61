"""HTTP client for the external events feed."""
import logging
from typing import Any, Dict, List

import requests

logger = logging.getLogger(__name__)


class FeedDecodeError(ValueError):
    """Raised when the feed body is not a JSON array."""


class EventsFeedClient:
    """Client for the external events JSON feed."""

    DEFAULT_URL = "https://eksponent.com/sites/default/files/sample-api/events.json"

    def __init__(
        self,
        url: str = DEFAULT_URL,
        timeout: int = 30,
        image_indirection: bool = False,
        session: requests.Session = None
    ):
        """
        Initialize the feed client.

        Args:
            url: Feed URL (default: DEFAULT_URL)
            timeout: HTTP request timeout in seconds (default: 30)
            image_indirection: Treat an event's image value as a pointer
                to the real image URL (default: False)
            session: Optional requests session to send requests with
        """
        self.url = url
        self.timeout = timeout
        self.image_indirection = image_indirection
        self.session = session or requests.Session()

    def fetch_events(self) -> List[Dict[str, Any]]:
        """
        Fetch the event list from the feed.

        Returns:
            List of raw event dictionaries, in feed order

        Raises:
            requests.RequestException: On transport failure or HTTP error
                status. An HTTP error carries the response in
                ``exc.response``; a transport failure does not.
            FeedDecodeError: If the body is not a JSON array
        """
        logger.info(f"Fetching events feed from {self.url}")

        response = self.session.get(self.url, timeout=self.timeout)
        response.raise_for_status()

        try:
            events = response.json()
        except ValueError as e:
            raise FeedDecodeError(f"Feed body is not valid JSON: {e}") from e

        if not isinstance(events, list):
            raise FeedDecodeError(
                f"Feed body is not a JSON array: {type(events).__name__}"
            )

        logger.info(f"Fetched {len(events)} events from feed")
        return events

    def download_image(self, url: str) -> bytes:
        """
        Download an image into memory.

        With image indirection enabled, the body of the first response is
        the URL of the image and is fetched in a second request.

        Args:
            url: Image URL taken from the feed

        Returns:
            Raw image bytes

        Raises:
            requests.RequestException: If a download fails
        """
        if self.image_indirection:
            target = self._get(url).decode('utf-8').strip()
            logger.debug(f"Resolved image pointer {url} to {target}")
            url = target

        return self._get(url)

    def _get(self, url: str) -> bytes:
        response = self.session.get(url, timeout=self.timeout)
        response.raise_for_status()
        return response.content
