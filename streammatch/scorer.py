"""Selection of the best catalog entry for a parsed request.

Two mutually exclusive branches:

* series requests with a known season and episode only accept candidates
  whose own parse has the identical season and episode, no scoring;
* everything else is scored (external id, exact/partial title, year) and
  the best candidate is accepted only above ``ScoringWeights.threshold``.

Both branches break ties by candidate order: the first candidate seen wins.
"""
import logging
from dataclasses import dataclass
from enum import Enum

from .cleaner import normalize
from .models import CatalogEntry, MatchCandidateScore, ParsedTitle
from .parser import parse_filename

log = logging.getLogger(__name__)


class MatchStatus(Enum):
    NO_CANDIDATES = "no_candidates"
    NO_MATCH = "no_match"
    EXACT = "exact"
    SCORED = "scored"


@dataclass(frozen=True)
class ScoringWeights:
    """Weights of the movie scoring branch and its acceptance threshold."""
    external_id: int = 100
    exact_title: int = 50
    partial_title: int = 20
    year: int = 40
    # A match is accepted only when the best score is strictly above this.
    threshold: int = 50


DEFAULT_WEIGHTS = ScoringWeights()


@dataclass
class MatchOutcome:
    """Result of ``MatchScorer.match``."""
    status: MatchStatus
    entry: CatalogEntry | None = None
    score: int | None = None
    message: str = ""

    @property
    def found(self) -> bool:
        return self.entry is not None


class MatchScorer:
    """Pick the catalog entry that best answers a parsed request."""

    def __init__(self, weights: ScoringWeights | None = None):
        self.weights = weights or DEFAULT_WEIGHTS

    def match(
        self,
        request: ParsedTitle | None,
        candidates: list[CatalogEntry],
        external_id: str | None = None,
    ) -> MatchOutcome:
        if not candidates:
            return MatchOutcome(MatchStatus.NO_CANDIDATES, message="No candidates found.")

        if request is not None and request.is_series and request.season and request.episode:
            return self._match_episode(request, candidates)
        return self._match_scored(request, candidates, external_id)

    def _match_episode(
        self, request: ParsedTitle, candidates: list[CatalogEntry]
    ) -> MatchOutcome:
        log.info(f"Precise series match for S{request.season}E{request.episode}")
        for entry in candidates:
            parsed = parse_filename(entry.name)
            if (
                parsed is not None
                and parsed.is_series
                and parsed.season == request.season
                and parsed.episode == request.episode
            ):
                log.info(f"Exact series match found: {entry.name}")
                return MatchOutcome(MatchStatus.EXACT, entry=entry, message="Exact match.")

        log.info(f"No exact S/E match for S{request.season}E{request.episode}")
        return MatchOutcome(MatchStatus.NO_MATCH, message="Exact episode not found.")

    def score(
        self,
        request: ParsedTitle | None,
        entry: CatalogEntry,
        external_id: str | None = None,
    ) -> int | None:
        """
        Score one candidate against the request.

        Returns None when the candidate name does not parse.
        """
        parsed = parse_filename(entry.name)
        if parsed is None:
            return None

        w = self.weights
        total = 0
        if external_id and f"{{{external_id}}}" in entry.name:
            total += w.external_id

        if request is not None:
            request_title = normalize(request.title)
            entry_title = normalize(parsed.title)
            if request_title == entry_title:
                total += w.exact_title
            elif request_title in entry_title:
                total += w.partial_title

            if (
                not request.is_series
                and not parsed.is_series
                and request.year
                and request.year == parsed.year
            ):
                total += w.year
        return total

    def _match_scored(
        self,
        request: ParsedTitle | None,
        candidates: list[CatalogEntry],
        external_id: str | None,
    ) -> MatchOutcome:
        best: MatchCandidateScore | None = None
        for entry in candidates:
            score = self.score(request, entry, external_id)
            if score is None:
                continue
            # Strictly greater: on equal scores the earlier candidate stays.
            if best is None or score > best.score:
                best = MatchCandidateScore(entry=entry, score=score)

        if best is not None and best.score > self.weights.threshold:
            log.info(f"Scored match with {best.score}: {best.entry.name}")
            return MatchOutcome(
                MatchStatus.SCORED,
                entry=best.entry,
                score=best.score,
                message="Match found.",
            )

        best_score = best.score if best is not None else None
        log.info(f"No confident match (best score: {best_score})")
        return MatchOutcome(
            MatchStatus.NO_MATCH,
            score=best_score,
            message="No confident match found.",
        )
