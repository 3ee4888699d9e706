"""TMDB API client module."""
import logging
import time
from typing import Any

import requests

from .models import MetadataMatch, ParsedTitle
from .errors import TMDBError
from .config import TMDB_BASE_URL


DEFAULT_TIMEOUT = 10
RATE_LIMIT_DELAY = 0.25  # 250ms between requests to avoid rate limiting
DEFAULT_LANGUAGE = "en-US"

log = logging.getLogger(__name__)


def _describe_error(error: Exception) -> str:
    """Error summary without the request URL, which carries the api key."""
    response = getattr(error, "response", None)
    if response is not None:
        return f"HTTP {response.status_code}"
    return type(error).__name__


def choose_best_match(results: list[dict], title: str) -> dict | None:
    """
    Choose the best search result for *title*.

    Exact (case-insensitive) title first, then the first result containing
    the title, then simply the first result.
    """
    if not results:
        return None

    wanted = title.lower()

    def result_title(result: dict) -> str:
        return (result.get("title") or result.get("name") or "").lower()

    for result in results:
        if result_title(result) == wanted:
            return result
    for result in results:
        if wanted in result_title(result):
            return result
    return results[0]


class TMDBClient:
    """Client for TMDB API."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str = TMDB_BASE_URL,
        language: str | None = None,
        rate_limit_delay: float = RATE_LIMIT_DELAY,
    ):
        """
        Initialize TMDB client.

        Args:
            api_key: TMDB API key.
            base_url: API root, without trailing slash.
            language: TMDB API language tag (e.g. "en-US").
            rate_limit_delay: Minimum seconds between two requests.

        Raises:
            TMDBError: If API key is not given
        """
        if not api_key:
            raise TMDBError(
                "TMDB API key not found.\n"
                "Set it using one of these methods:\n"
                "  1. Environment variable: export TMDB_API_KEY=your_key\n"
                "  2. Create a .env file with: TMDB_API_KEY=your_key\n"
                "Get your free API key at: https://www.themoviedb.org/settings/api"
            )
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.language = language or DEFAULT_LANGUAGE
        self.rate_limit_delay = rate_limit_delay
        self._last_request_time = 0.0

    def _rate_limit(self) -> None:
        """Apply rate limiting between requests."""
        elapsed = time.time() - self._last_request_time
        if elapsed < self.rate_limit_delay:
            time.sleep(self.rate_limit_delay - elapsed)
        self._last_request_time = time.time()

    def _request(
        self,
        endpoint: str,
        params: dict | None = None,
        retries: int = 3
    ) -> dict | None:
        """
        Make a request to the TMDB API.

        Args:
            endpoint: API endpoint (e.g., '/search/movie')
            params: Query parameters
            retries: Number of retries on failure

        Returns:
            JSON response or None on error
        """
        self._rate_limit()

        url = f"{self.base_url}{endpoint}"
        all_params = {
            "api_key": self.api_key,
            "language": self.language,
            **(params or {})
        }

        # Log the request (hide API key)
        log_params = {k: v for k, v in all_params.items() if k != "api_key"}
        log.debug(f"GET {endpoint} params={log_params}")

        for attempt in range(retries):
            try:
                response = requests.get(url, params=all_params, timeout=DEFAULT_TIMEOUT)

                if response.status_code == 429:  # Rate limited
                    retry_after = int(response.headers.get("Retry-After", 1))
                    log.warning(f"TMDB rate limited, waiting {retry_after}s")
                    time.sleep(retry_after)
                    continue

                if response.status_code == 404:
                    log.debug(f"TMDB 404 for {endpoint}")
                    return None

                response.raise_for_status()
                return response.json()

            except requests.exceptions.Timeout:
                log.warning(f"TMDB timeout on {endpoint} (attempt {attempt + 1}/{retries})")
                if attempt < retries - 1:
                    time.sleep(1)
                    continue
                return None
            except (requests.exceptions.RequestException, ValueError) as e:
                log.error(
                    f"TMDB request error on {endpoint}: {_describe_error(e)} "
                    f"(attempt {attempt + 1}/{retries})"
                )
                if attempt < retries - 1:
                    time.sleep(1)
                    continue
                return None

        return None

    def get_imdb_id(self, tmdb_id: int, is_series: bool) -> str | None:
        """Fetch the IMDb id cross-reference for a TMDB movie or show."""
        endpoint = "tv" if is_series else "movie"
        data = self._request(f"/{endpoint}/{tmdb_id}/external_ids")
        if not data:
            return None
        return data.get("imdb_id") or None

    def get_episode_name(self, series_id: int, season: int, episode: int) -> str:
        """Episode title, or ``Episode N`` when TMDB has none."""
        data = self._request(f"/tv/{series_id}/season/{season}/episode/{episode}")
        if data and data.get("name"):
            return data["name"]
        return f"Episode {episode}"

    def get_series_info(self, series_id: int) -> dict[str, Any] | None:
        """
        Get season layout of a series.

        Returns:
            ``{"name", "total_seasons", "total_episodes", "seasons"}`` where
            *seasons* maps season number to ``{"episode_count", "name",
            "air_date"}``; specials (season 0) are left out.
        """
        data = self._request(f"/tv/{series_id}")
        if not data:
            return None

        seasons = {}
        for season in data.get("seasons") or []:
            number = season.get("season_number") or 0
            if number > 0:
                seasons[number] = {
                    "episode_count": season.get("episode_count") or 0,
                    "name": season.get("name", ""),
                    "air_date": season.get("air_date"),
                }
        return {
            "name": data.get("name", ""),
            "total_seasons": data.get("number_of_seasons") or 0,
            "total_episodes": data.get("number_of_episodes") or 0,
            "seasons": seasons,
        }

    def search_metadata(self, info: ParsedTitle | None) -> MetadataMatch | None:
        """
        Look up a parsed title on TMDB.

        Args:
            info: Parsed title to search for

        Returns:
            MetadataMatch if found, None otherwise
        """
        if info is None or not info.title:
            log.warning("search_metadata called without a title")
            return None

        media = "tv" if info.is_series else "movie"
        params: dict[str, Any] = {"query": info.title}
        if info.year and not info.is_series:
            params["year"] = info.year

        data = self._request(f"/search/{media}", params)
        if not data or not data.get("results"):
            log.info(f"TMDB found nothing for '{info.title}'")
            return None

        best = choose_best_match(data["results"], info.title)
        imdb_id = self.get_imdb_id(best["id"], info.is_series)

        if not info.is_series:
            release_date = best.get("release_date") or ""
            year = None
            if len(release_date) >= 4 and release_date[:4].isdigit():
                year = int(release_date[:4])
            return MetadataMatch(
                external_id=best["id"],
                cross_ref_id=imdb_id,
                title=best.get("title") or best.get("name"),
                year=year,
            )

        return MetadataMatch(
            external_id=best["id"],
            cross_ref_id=imdb_id,
            series_name=best.get("name"),
            episode_name=self.get_episode_name(best["id"], info.season, info.episode),
            season=info.season,
            episode=info.episode,
        )
