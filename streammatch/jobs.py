"""Batch job bookkeeping.

Each job type (rename, duplicate-scan, ...) may have a single running
instance. Starting a job returns a ``JobContext`` whose ``state`` is the
progress record pollers read by job id while the job runs.
"""
from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import dataclass, field
from typing import Callable

from .errors import ConcurrentJobError
from .models import BatchJobState

log = logging.getLogger(__name__)

RENAME_JOB = "rename"
DUPLICATE_SCAN_JOB = "duplicate-scan"


@dataclass
class JobContext:
    """One job instance: its id, type, progress and cancel flag."""
    job_id: str
    job_type: str
    state: BatchJobState = field(default_factory=BatchJobState)
    _cancel: threading.Event = field(default_factory=threading.Event, repr=False)
    _thread: threading.Thread | None = field(default=None, repr=False)

    def cancel(self) -> None:
        """Ask the job to stop before its next item."""
        self._cancel.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel.is_set()

    def join(self, timeout: float | None = None) -> None:
        """Wait for a background job to finish."""
        if self._thread is not None:
            self._thread.join(timeout)


JobFunc = Callable[[JobContext], None]


class JobRegistry:
    """Tracks job contexts by id and enforces one running job per type."""

    def __init__(self):
        self._jobs: dict[str, JobContext] = {}
        self._latest: dict[str, str] = {}
        self._lock = threading.Lock()

    def start(
        self,
        job_type: str,
        target: JobFunc,
        background: bool = True,
        status: str = "Starting...",
    ) -> JobContext:
        """
        Start a job of *job_type* running *target*.

        Args:
            job_type: Job type; only one of each type runs at a time
            target: Job body, called with the new context
            background: Run on a worker thread instead of the caller's
            status: Initial status text

        Returns:
            The new job context

        Raises:
            ConcurrentJobError: If a job of this type is still running
        """
        with self._lock:
            current = self._current(job_type)
            if current is not None and current.state.running:
                raise ConcurrentJobError(job_type)
            if current is not None:
                # Only the latest job of each type stays pollable.
                del self._jobs[current.job_id]
            ctx = JobContext(
                job_id=uuid.uuid4().hex[:12],
                job_type=job_type,
                state=BatchJobState(running=True, status=status),
            )
            self._jobs[ctx.job_id] = ctx
            self._latest[job_type] = ctx.job_id

        log.info(f"Started {job_type} job {ctx.job_id}")
        if background:
            ctx._thread = threading.Thread(
                target=self._run, args=(ctx, target),
                name=f"{job_type}-{ctx.job_id}", daemon=True,
            )
            ctx._thread.start()
        else:
            self._run(ctx, target)
        return ctx

    def _run(self, ctx: JobContext, target: JobFunc) -> None:
        try:
            target(ctx)
        except Exception as e:
            ctx.state.status = f"Error: {e}"
            log.exception(f"{ctx.job_type} job {ctx.job_id} failed")
        finally:
            ctx.state.running = False

    def _current(self, job_type: str) -> JobContext | None:
        job_id = self._latest.get(job_type)
        return self._jobs.get(job_id) if job_id else None

    def get(self, job_id: str) -> JobContext | None:
        with self._lock:
            return self._jobs.get(job_id)

    def latest(self, job_type: str) -> JobContext | None:
        """Most recently started job of *job_type*."""
        with self._lock:
            return self._current(job_type)

    def is_running(self, job_type: str) -> bool:
        ctx = self.latest(job_type)
        return ctx is not None and ctx.state.running
