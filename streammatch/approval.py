"""Approval queue for renames suggested through the AI fallback.

An AI-derived rename is never applied directly. It waits here as a
``PendingRename`` until an operator approves it (the rename is executed
and the entry leaves the queue) or rejects it (the entry leaves the queue
and nothing else happens). There is at most one pending rename per
catalog entry id; a newer suggestion replaces the older one in place.
"""
import logging
import threading
from typing import Callable

from .errors import PendingRenameNotFound
from .models import PendingRename

log = logging.getLogger(__name__)

RenameFunc = Callable[[str, str], bool]


class ApprovalQueue:
    """In-memory queue of pending AI renames, ordered by first proposal."""

    def __init__(self):
        self._pending: dict[str, PendingRename] = {}
        self._lock = threading.Lock()

    def propose(self, item: PendingRename) -> None:
        """Queue *item*, replacing any pending rename for the same id."""
        with self._lock:
            replaced = item.id in self._pending
            self._pending[item.id] = item
        if replaced:
            log.info(f"AI suggestion for '{item.original_name}' replaced the pending one")
        else:
            log.info(f"AI suggestion for '{item.original_name}' sent for manual approval")

    def get(self, entry_id: str) -> PendingRename | None:
        with self._lock:
            return self._pending.get(entry_id)

    def items(self) -> list[PendingRename]:
        with self._lock:
            return list(self._pending.values())

    def approve(self, entry_id: str, rename: RenameFunc) -> bool:
        """
        Execute the pending rename for *entry_id*.

        Args:
            entry_id: Catalog entry id
            rename: Catalog rename call ``(id, new_name) -> success``

        Returns:
            True if renamed; on False the entry stays pending.

        Raises:
            PendingRenameNotFound: If nothing is pending for *entry_id*
        """
        item = self.get(entry_id)
        if item is None:
            raise PendingRenameNotFound(entry_id)

        if not rename(item.id, item.suggested_name):
            log.error(f"Approved rename failed for {entry_id}; keeping it pending")
            return False

        with self._lock:
            # Only drop the entry we executed; a newer proposal may have replaced it.
            if self._pending.get(entry_id) is item:
                del self._pending[entry_id]
        log.info(f"Approved AI rename: {item.suggested_name}")
        return True

    def reject(self, entry_id: str) -> PendingRename:
        """
        Drop the pending rename for *entry_id* without touching the catalog.

        Raises:
            PendingRenameNotFound: If nothing is pending for *entry_id*
        """
        with self._lock:
            item = self._pending.pop(entry_id, None)
        if item is None:
            raise PendingRenameNotFound(entry_id)
        log.info(f"Rejected AI rename for '{item.original_name}'")
        return item

    def clear(self) -> None:
        with self._lock:
            self._pending.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._pending)

    def __contains__(self, entry_id: str) -> bool:
        with self._lock:
            return entry_id in self._pending
