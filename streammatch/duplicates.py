"""Duplicate detection across the catalog."""
import logging
from dataclasses import dataclass, field
from typing import Any, Callable

from .cleaner import normalize
from .jobs import JobContext
from .models import CatalogEntry

log = logging.getLogger(__name__)


@dataclass
class DuplicateGroup:
    """Catalog entries whose names normalise to the same string."""
    original_name: str
    entries: list[CatalogEntry] = field(default_factory=list)

    @property
    def total_size(self) -> int:
        return sum(e.size or 0 for e in self.entries)

    def to_dict(self) -> dict[str, Any]:
        return {
            "originalName": self.original_name,
            "videos": [e.to_dict() for e in self.entries],
            "totalSize": self.total_size,
        }


def find_duplicates(entries: list[CatalogEntry]) -> list[DuplicateGroup]:
    """
    Group entries with identical normalised names.

    Groups keep catalog order; the first entry seen names the group.
    Names that occur once are not reported.
    """
    groups: dict[str, DuplicateGroup] = {}
    for entry in entries:
        key = normalize(entry.name)
        group = groups.get(key)
        if group is None:
            groups[key] = DuplicateGroup(original_name=entry.name, entries=[entry])
        else:
            group.entries.append(entry)
    return [g for g in groups.values() if len(g.entries) > 1]


def run_duplicate_scan(
    ctx: JobContext,
    fetch_all: Callable[[], list[CatalogEntry]],
) -> list[DuplicateGroup]:
    """Duplicate-scan job body; stores the groups in ``ctx.state.results``."""
    state = ctx.state
    state.status = "Fetching all videos..."
    entries = fetch_all()
    state.total = len(entries)
    state.status = "Analyzing for duplicates..."

    duplicates = find_duplicates(entries)
    state.current = state.total
    state.results = list(duplicates)
    state.status = f"Found {len(duplicates)} duplicate groups"
    log.info(f"Duplicate scan: {len(duplicates)} groups in {len(entries)} videos")
    return duplicates
