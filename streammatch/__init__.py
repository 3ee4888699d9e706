"""
streammatch - Catalog matching engine

Parses messy video names, matches them against a remote video catalog and
renames catalog entries to canonical TMDB-tagged names.
"""
from .models import (
    ParsedTitle,
    CatalogEntry,
    MetadataMatch,
    MatchResult,
    PendingRename,
    RenameFailure,
    BatchJobState,
)
from .cleaner import clean_title, normalize
from .parser import parse_filename, slug_to_query
from .scorer import MatchScorer, MatchOutcome, MatchStatus, ScoringWeights
from .cache import MatchCache, CacheSweeper, make_cache_key
from .approval import ApprovalQueue
from .jobs import JobRegistry, JobContext
from .errors import (
    StreamMatchError,
    TMDBError,
    CatalogError,
    ConcurrentJobError,
    PendingRenameNotFound,
)
from .manager import StreamManager

__version__ = "2.4.0"
__all__ = [
    "ParsedTitle",
    "CatalogEntry",
    "MetadataMatch",
    "MatchResult",
    "PendingRename",
    "RenameFailure",
    "BatchJobState",
    "clean_title",
    "normalize",
    "parse_filename",
    "slug_to_query",
    "MatchScorer",
    "MatchOutcome",
    "MatchStatus",
    "ScoringWeights",
    "MatchCache",
    "CacheSweeper",
    "make_cache_key",
    "ApprovalQueue",
    "JobRegistry",
    "JobContext",
    "StreamMatchError",
    "TMDBError",
    "CatalogError",
    "ConcurrentJobError",
    "PendingRenameNotFound",
    "StreamManager",
]
