"""Batch rename of the remote catalog into canonical names.

Per catalog entry:

1. skip names that already carry both ``{tmdb}`` and ``{tt...}`` markers;
2. parse locally and look the result up on TMDB;
3. if that found nothing, ask the AI fallback and look its answer up;
4. with a match, build the canonical name: local matches are renamed
   right away, AI matches are queued for approval;
5. without a match, record a failure saying which parsers failed.

Entries are processed one at a time with a fixed pause between them.
"""
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Protocol

import requests

from .approval import ApprovalQueue
from .errors import StreamMatchError
from .formatter import format_canonical_name
from .jobs import JobContext
from .models import CatalogEntry, MetadataMatch, ParsedTitle, PendingRename, RenameFailure
from .parser import has_canonical_ids, parse_filename

log = logging.getLogger(__name__)

RENAME_DELAY = 0.5  # seconds between entries

REASON_LOCAL_FAILED = "Local parser failed"
REASON_ALL_FAILED = "Local parser and AI fallback failed"
REASON_RENAME_FAILED = "API rename failed"

# Errors a collaborator may raise that count as "no result" for one entry.
COLLABORATOR_ERRORS = (
    requests.exceptions.RequestException,
    StreamMatchError,
    ValueError,
    KeyError,
)


class Catalog(Protocol):
    def fetch_all(self) -> list[CatalogEntry]: ...

    def rename(self, video_id: str, new_name: str) -> bool: ...


class MetadataLookup(Protocol):
    def search_metadata(self, info: ParsedTitle) -> MetadataMatch | None: ...

    def get_series_info(self, series_id: int) -> dict[str, Any] | None: ...


class AIParser(Protocol):
    def parse_with_ai(self, filename: str) -> ParsedTitle | None: ...


class Outcome(Enum):
    RENAMED = "renamed"
    SKIPPED = "skipped"
    PENDING_AI = "pending_ai"
    FAILED = "failed"


@dataclass
class EntryResult:
    """What happened to one catalog entry."""
    entry: CatalogEntry
    outcome: Outcome
    new_name: str | None = None
    reason: str | None = None


def _lookup(metadata: MetadataLookup, info: ParsedTitle) -> MetadataMatch | None:
    try:
        return metadata.search_metadata(info)
    except COLLABORATOR_ERRORS as e:
        log.error(f"Metadata lookup failed for '{info.title}': {e}")
        return None


def _ask_ai(ai: AIParser, filename: str) -> ParsedTitle | None:
    try:
        return ai.parse_with_ai(filename)
    except COLLABORATOR_ERRORS as e:
        log.error(f"AI fallback failed for '{filename}': {e}")
        return None


def _rename(catalog: Catalog, entry_id: str, new_name: str) -> bool:
    try:
        return catalog.rename(entry_id, new_name)
    except COLLABORATOR_ERRORS as e:
        log.error(f"Rename failed [{entry_id}]: {e}")
        return False


def process_entry(
    entry: CatalogEntry,
    catalog: Catalog,
    metadata: MetadataLookup,
    ai: AIParser | None,
    approvals: ApprovalQueue,
    on_ai: Callable[[], None] | None = None,
) -> EntryResult:
    """
    Rename one catalog entry or queue its AI suggestion.

    Args:
        entry: Catalog entry to process
        catalog: Catalog collaborator used for the rename
        metadata: Metadata lookup collaborator
        ai: AI fallback parser, or None to disable the fallback
        approvals: Queue receiving AI-derived renames
        on_ai: Called just before the AI fallback is invoked

    Returns:
        EntryResult describing the outcome
    """
    if has_canonical_ids(entry.name):
        return EntryResult(entry, Outcome.SKIPPED, reason="Already canonical")

    match = None
    info = parse_filename(entry.name)
    if info is not None:
        match = _lookup(metadata, info)

    used_ai = False
    if match is None and ai is not None:
        used_ai = True
        if on_ai is not None:
            on_ai()
        ai_info = _ask_ai(ai, entry.name)
        if ai_info is not None:
            info = ai_info
            match = _lookup(metadata, ai_info)

    if match is None or info is None:
        reason = REASON_ALL_FAILED if used_ai else REASON_LOCAL_FAILED
        return EntryResult(entry, Outcome.FAILED, reason=reason)

    new_name = format_canonical_name(info, match)

    if used_ai:
        approvals.propose(PendingRename(
            id=entry.id,
            original_name=entry.name,
            suggested_name=new_name,
            parsed_by_ai=info,
            matched_with_tmdb=match,
        ))
        return EntryResult(entry, Outcome.PENDING_AI, new_name=new_name)

    if _rename(catalog, entry.id, new_name):
        return EntryResult(entry, Outcome.RENAMED, new_name=new_name)
    return EntryResult(entry, Outcome.FAILED, new_name=new_name, reason=REASON_RENAME_FAILED)


def run_rename_batch(
    ctx: JobContext,
    catalog: Catalog,
    metadata: MetadataLookup,
    ai: AIParser | None,
    approvals: ApprovalQueue,
    delay: float = RENAME_DELAY,
    sleep: Callable[[float], None] = time.sleep,
) -> dict[str, int]:
    """
    Run the batch rename over the whole catalog, updating ``ctx.state``.

    Returns:
        Counts of renamed, skipped and errored entries
    """
    state = ctx.state
    # A new batch starts from an empty approval queue.
    approvals.clear()
    state.status = "Fetching catalog..."

    entries = catalog.fetch_all()
    state.total = len(entries)
    state.status = "Processing videos..."

    count = {"renamed": 0, "skipped": 0, "errors": 0}

    def mark_ai():
        state.status = f"Processing: {entry.name} (using AI fallback)"

    for entry in entries:
        if ctx.cancelled:
            state.status = (
                f"Cancelled after {state.current} of {state.total}: "
                f"{count['renamed']} renamed, {count['skipped']} skipped, "
                f"{count['errors']} errors, {state.pending_ai_count} pending AI approval"
            )
            log.info(f"Batch rename cancelled: {count}")
            return count

        state.current += 1
        state.status = f"Processing: {entry.name}"

        result = process_entry(entry, catalog, metadata, ai, approvals, on_ai=mark_ai)

        if result.outcome is Outcome.SKIPPED:
            count["skipped"] += 1
            continue
        if result.outcome is Outcome.RENAMED:
            count["renamed"] += 1
        elif result.outcome is Outcome.PENDING_AI:
            state.pending_ai_count += 1
        else:
            count["errors"] += 1
            state.failures.append(RenameFailure(entry.id, entry.name, result.reason or ""))

        sleep(delay)

    state.status = (
        f"Completed: {count['renamed']} renamed, {count['skipped']} skipped, "
        f"{count['errors']} errors, {state.pending_ai_count} pending AI approval"
    )
    log.info(f"Batch rename completed: {count}")
    return count
