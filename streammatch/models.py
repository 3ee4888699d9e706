"""Data models for the streammatch package."""
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ParsedTitle:
    """Structured media information parsed from a filename or slug."""
    title: str
    year: int | None = None
    is_series: bool = False
    season: int | None = None
    episode: int | None = None

    def __post_init__(self):
        if self.is_series:
            if not self.season or not self.episode or self.season < 1 or self.episode < 1:
                raise ValueError("series titles need a positive season and episode")
            if self.year is not None:
                raise ValueError("series titles carry no year")
        elif self.season is not None or self.episode is not None:
            raise ValueError("movie titles carry no season or episode")

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "year": self.year,
            "isSeries": self.is_series,
            "season": self.season,
            "episode": self.episode,
        }


@dataclass
class CatalogEntry:
    """One video in the remote catalog."""
    id: str
    name: str
    size: int = 0
    duration: float | None = None
    resolution: str | None = None
    created_at: str | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "CatalogEntry":
        return cls(
            id=str(data.get("id", "")),
            name=data.get("name", ""),
            size=data.get("size") or 0,
            duration=data.get("duration"),
            resolution=data.get("resolution"),
            created_at=data.get("createdAt"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "size": self.size,
            "duration": self.duration,
            "resolution": self.resolution,
            "createdAt": self.created_at,
        }


@dataclass
class MatchCandidateScore:
    """Score accumulated for one candidate during movie scoring."""
    entry: CatalogEntry
    score: int


@dataclass
class MetadataMatch:
    """Result of a metadata catalog lookup."""
    external_id: int
    cross_ref_id: str | None = None
    title: str | None = None
    series_name: str | None = None
    year: int | None = None
    episode_name: str | None = None
    season: int | None = None
    episode: int | None = None

    @property
    def display_title(self) -> str:
        return self.title or self.series_name or ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.display_title,
            "year": self.year,
            "tmdbId": self.external_id,
            "imdbId": self.cross_ref_id,
        }


@dataclass
class MatchResult:
    """Outcome of a stream match request, as returned to callers."""
    success: bool
    entry: CatalogEntry | None = None
    stream_url: str | None = None
    download_url: str | None = None
    message: str | None = None
    score: int | None = None

    def to_dict(self) -> dict[str, Any]:
        data: list[dict[str, Any]] = []
        if self.entry is not None:
            item = self.entry.to_dict()
            item["streamUrl"] = self.stream_url
            item["downloadUrl"] = self.download_url
            data.append(item)
        result: dict[str, Any] = {"success": self.success, "data": data}
        if self.message:
            result["message"] = self.message
        return result


@dataclass
class CacheEntry:
    """A memoized match result and the time it was stored."""
    key: str
    data: MatchResult
    timestamp: float


@dataclass
class PendingRename:
    """An AI-derived rename waiting for operator approval."""
    id: str
    original_name: str
    suggested_name: str
    parsed_by_ai: ParsedTitle
    matched_with_tmdb: MetadataMatch

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "originalName": self.original_name,
            "suggestedName": self.suggested_name,
            "parsedByAI": self.parsed_by_ai.to_dict(),
            "matchedWithTMDB": self.matched_with_tmdb.to_dict(),
        }


@dataclass
class RenameFailure:
    """A catalog entry the batch could not rename."""
    id: str
    name: str
    reason: str


@dataclass
class BatchJobState:
    """Progress record of one batch job, polled while the job runs."""
    running: bool = False
    current: int = 0
    total: int = 0
    status: str = ""
    failures: list[RenameFailure] = field(default_factory=list)
    pending_ai_count: int = 0
    results: list[Any] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "running": self.running,
            "current": self.current,
            "total": self.total,
            "status": self.status,
            "failures": [
                {"id": f.id, "name": f.name, "reason": f.reason}
                for f in self.failures
            ],
            "pendingAI": self.pending_ai_count,
        }
