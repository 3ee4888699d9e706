"""Client for the remote video catalog (StreamP2P video manage API)."""
import logging
import threading
import time
from typing import Any, Callable

import requests

from .config import STREAM_API_BASE
from .errors import CatalogError
from .models import CatalogEntry

log = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30
PER_PAGE = 200
PAGE_BATCH = 3  # pages fetched before pausing
PAGE_BATCH_DELAY = 0.5


class StreamCatalogClient:
    """Search and rename videos in the remote catalog.

    Requests rotate round-robin through the configured API keys.
    """

    def __init__(
        self,
        api_keys: list[str],
        base_url: str = STREAM_API_BASE,
        timeout: float = DEFAULT_TIMEOUT,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if not api_keys:
            raise CatalogError("No catalog API keys configured (STREAM_API_KEYS)")
        self.api_keys = list(api_keys)
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._sleep = sleep
        self._key_index = 0
        self._key_lock = threading.Lock()

    def _next_key(self) -> str:
        with self._key_lock:
            key = self.api_keys[self._key_index]
            self._key_index = (self._key_index + 1) % len(self.api_keys)
        return key

    def _get_page(self, query: str, page: int) -> dict[str, Any]:
        response = requests.get(
            self.base_url,
            params={"page": page, "perPage": PER_PAGE, "search": query},
            headers={"api-token": self._next_key()},
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response.json()

    def search(self, query: str = "") -> list[CatalogEntry]:
        """
        Fetch every catalog entry matching *query*, across all pages.

        Args:
            query: Search text; empty returns the whole catalog

        Raises:
            CatalogError: If any page request fails
        """
        try:
            first = self._get_page(query, 1)
            items = list(first.get("data") or [])
            max_page = (first.get("metadata") or {}).get("maxPage") or 1

            for page in range(2, max_page + 1):
                items.extend(self._get_page(query, page).get("data") or [])
                if (page - 1) % PAGE_BATCH == 0 and page < max_page:
                    self._sleep(PAGE_BATCH_DELAY)
        except (requests.exceptions.RequestException, ValueError) as e:
            log.error(f"Error searching videos for '{query}': {e}")
            raise CatalogError(f"Catalog search failed: {e}") from e

        entries = [CatalogEntry.from_api(item) for item in items]
        log.info(f"Found {len(entries)} videos for search: '{query}'")
        return entries

    def fetch_all(self) -> list[CatalogEntry]:
        """Fetch the whole catalog."""
        return self.search("")

    def rename(self, video_id: str, new_name: str) -> bool:
        """Rename a video. Returns False on any failure."""
        try:
            response = requests.patch(
                f"{self.base_url}/{video_id}",
                json={"name": new_name},
                headers={
                    "api-token": self._next_key(),
                    "Content-Type": "application/json",
                },
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            log.error(f"Rename failed [{video_id}]: {e}")
            return False

        log.info(f"Video renamed: {new_name}")
        return True
