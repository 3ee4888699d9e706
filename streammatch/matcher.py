"""Stream match: find the catalog video answering a slug and/or TMDB id."""
import logging
from typing import Protocol

from .cache import MatchCache, make_cache_key
from .config import PLAYER_BASE_URL
from .errors import CatalogError
from .models import CatalogEntry, MatchResult
from .parser import parse_filename, slug_to_query
from .scorer import MatchScorer

log = logging.getLogger(__name__)


class CatalogSearch(Protocol):
    def search(self, query: str = "") -> list[CatalogEntry]: ...


class StreamMatcher:
    """Cached matching of requests against catalog search results."""

    def __init__(
        self,
        catalog: CatalogSearch,
        cache: MatchCache | None = None,
        scorer: MatchScorer | None = None,
        player_base_url: str = PLAYER_BASE_URL,
    ):
        self.catalog = catalog
        self.cache = cache if cache is not None else MatchCache()
        self.scorer = scorer or MatchScorer()
        self.player_base_url = player_base_url

    def stream_url(self, entry: CatalogEntry) -> str:
        return f"{self.player_base_url}#{entry.id}"

    def match(self, slug: str | None = None, external_id: str | None = None) -> MatchResult:
        """
        Find the catalog entry for a request.

        Args:
            slug: URL slug of the requested title (``show-name/s01e02``)
            external_id: TMDB id of the requested title

        Returns:
            MatchResult; successful results are cached

        Raises:
            ValueError: If neither slug nor external_id is given
        """
        if not slug and not external_id:
            raise ValueError("Missing slug or external id")
        external_id = str(external_id) if external_id else None
        key = make_cache_key(external_id, slug)
        return self.cache.get_or_compute(key, lambda: self._compute(slug, external_id))

    def _search(self, query: str) -> list[CatalogEntry]:
        try:
            return self.catalog.search(query)
        except CatalogError as e:
            log.error(f"Catalog search for '{query}' failed: {e}")
            return []

    def _compute(self, slug: str | None, external_id: str | None) -> MatchResult:
        candidates: list[CatalogEntry] = []
        if external_id:
            log.info(f"Stream match: searching with TMDB id {external_id}")
            candidates = self._search(f"{{{external_id}}}")

        query = slug_to_query(slug) if slug else None
        if not candidates and query:
            log.info(f"Stream match: searching by slug '{query}'")
            candidates = self._search(query)

        request = parse_filename(query) if query else None
        outcome = self.scorer.match(request, candidates, external_id)
        if not outcome.found:
            log.info(f"No stream match for slug={slug!r} id={external_id!r}: {outcome.message}")
            return MatchResult(success=False, message=outcome.message, score=outcome.score)

        entry = outcome.entry
        url = self.stream_url(entry)
        return MatchResult(
            success=True,
            entry=entry,
            stream_url=url,
            download_url=f"{url}&dl=1",
            message=outcome.message,
            score=outcome.score,
        )
