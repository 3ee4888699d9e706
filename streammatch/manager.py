"""Facade wiring the matching engine to its collaborators.

``StreamManager`` is what an outer layer (HTTP routes, CLI) talks to. It
owns the match cache, the approval queue and the job registry; the
catalog, metadata and AI collaborators are injected.
"""
from __future__ import annotations

import logging
import time
from typing import Any, Callable

from .ai import GeminiParser
from .approval import ApprovalQueue
from .cache import CacheSweeper, MatchCache
from .catalog import StreamCatalogClient
from .config import Settings
from .duplicates import run_duplicate_scan
from .episodes import missing_episodes, organize_series
from .jobs import DUPLICATE_SCAN_JOB, RENAME_JOB, JobContext, JobRegistry
from .matcher import StreamMatcher
from .models import CatalogEntry, MatchResult, ParsedTitle, PendingRename
from .parser import parse_filename
from .renamer import AIParser, Catalog, MetadataLookup, run_rename_batch
from .scorer import MatchOutcome, MatchScorer, ScoringWeights
from .tmdb import TMDBClient

log = logging.getLogger(__name__)


class StreamManager:
    """Entry point for matching, caching, rename approval and batch jobs."""

    def __init__(
        self,
        catalog: Catalog,
        metadata: MetadataLookup,
        ai: AIParser | None = None,
        cache: MatchCache | None = None,
        weights: ScoringWeights | None = None,
        player_base_url: str | None = None,
        rename_delay: float = 0.5,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.catalog = catalog
        self.metadata = metadata
        self.ai = ai
        self.cache = cache if cache is not None else MatchCache()
        self.scorer = MatchScorer(weights)
        self.approvals = ApprovalQueue()
        self.jobs = JobRegistry()
        self.rename_delay = rename_delay
        self._sleep = sleep
        matcher_kwargs: dict[str, Any] = {}
        if player_base_url:
            matcher_kwargs["player_base_url"] = player_base_url
        self.matcher = StreamMatcher(catalog, self.cache, self.scorer, **matcher_kwargs)
        self.sweeper: CacheSweeper | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> StreamManager:
        """Build a manager with the real HTTP collaborators."""
        cache = MatchCache(ttl=settings.cache_ttl)
        gemini = GeminiParser(settings.gemini_api_key, settings.gemini_api_url)
        if not gemini.enabled:
            log.warning("Gemini API key not configured; AI fallback disabled")
        manager = cls(
            catalog=StreamCatalogClient(settings.stream_api_keys, settings.stream_api_base),
            metadata=TMDBClient(settings.tmdb_api_key, settings.tmdb_base_url),
            ai=gemini if gemini.enabled else None,
            cache=cache,
            player_base_url=settings.player_base_url,
            rename_delay=settings.rename_delay,
        )
        manager.sweeper = CacheSweeper(cache, settings.cache_sweep_interval)
        return manager

    # -- parsing and matching -------------------------------------

    def parse_filename(self, filename: str) -> ParsedTitle | None:
        parsed = parse_filename(filename)
        if parsed is None:
            log.info(f"Unparsable name: '{filename}'")
        return parsed

    def match_candidates(
        self,
        request: ParsedTitle | None,
        candidates: list[CatalogEntry],
        external_id: str | None = None,
    ) -> MatchOutcome:
        return self.scorer.match(request, candidates, external_id)

    def match_stream(self, slug: str | None = None, external_id: str | None = None) -> MatchResult:
        return self.matcher.match(slug, external_id)

    def cache_lookup(self, key: str) -> MatchResult | None:
        return self.cache.get(key)

    def cache_put(self, key: str, data: MatchResult) -> None:
        self.cache.put(key, data)

    # -- rename approval ------------------------------------------

    def propose_ai_rename(self, item: PendingRename) -> None:
        self.approvals.propose(item)

    def pending_ai_renames(self) -> list[PendingRename]:
        return self.approvals.items()

    def approve_rename(self, entry_id: str) -> bool:
        return self.approvals.approve(entry_id, self.catalog.rename)

    def reject_rename(self, entry_id: str) -> PendingRename:
        return self.approvals.reject(entry_id)

    def manual_rename(self, entry_id: str, new_name: str) -> bool:
        """Rename immediately, outside any batch."""
        if not entry_id or not new_name:
            raise ValueError("entry id and new name are required")
        return self.catalog.rename(entry_id, new_name)

    # -- batch jobs -----------------------------------------------

    def run_rename_batch(self, background: bool = True) -> JobContext:
        """
        Start the batch rename job.

        Raises:
            ConcurrentJobError: If a rename batch is already running
        """
        def job(ctx: JobContext) -> None:
            run_rename_batch(
                ctx, self.catalog, self.metadata, self.ai, self.approvals,
                delay=self.rename_delay, sleep=self._sleep,
            )

        return self.jobs.start(
            RENAME_JOB, job, background=background,
            status="Starting AI-powered rename...",
        )

    def scan_duplicates(self, background: bool = True) -> JobContext:
        """
        Start the duplicate-scan job.

        Raises:
            ConcurrentJobError: If a duplicate scan is already running
        """
        return self.jobs.start(
            DUPLICATE_SCAN_JOB,
            lambda ctx: run_duplicate_scan(ctx, self.catalog.fetch_all),
            background=background,
        )

    def series_report(self) -> dict[str, dict[str, Any]]:
        """Missing-episode report for every tagged series in the catalog."""
        organized = organize_series(self.catalog.fetch_all())
        log.info(f"Checking {len(organized)} series for missing episodes")
        return missing_episodes(organized, self.metadata)

    def get_batch_progress(self, job_id: str) -> dict[str, Any] | None:
        """Progress of a job by id, or None for an unknown id."""
        ctx = self.jobs.get(job_id)
        if ctx is None:
            return None
        progress = ctx.state.to_dict()
        progress["jobId"] = ctx.job_id
        progress["jobType"] = ctx.job_type
        return progress

    def cancel_job(self, job_id: str) -> bool:
        ctx = self.jobs.get(job_id)
        if ctx is None or not ctx.state.running:
            return False
        ctx.cancel()
        return True

    # -- lifecycle ------------------------------------------------

    def start(self) -> None:
        """Start background cache sweeping."""
        if self.sweeper is None:
            self.sweeper = CacheSweeper(self.cache)
        self.sweeper.start()

    def stop(self) -> None:
        if self.sweeper is not None:
            self.sweeper.stop()
