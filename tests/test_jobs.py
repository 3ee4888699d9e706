#!/usr/bin/env python3
"""
Test suite for streammatch/jobs.py: one running job per type
"""

import threading

import pytest

from streammatch.errors import ConcurrentJobError
from streammatch.jobs import DUPLICATE_SCAN_JOB, RENAME_JOB, JobRegistry


@pytest.fixture
def registry():
    return JobRegistry()


def blocking_job(release):
    def run(ctx):
        ctx.state.total = 10
        ctx.state.current = 3
        release.wait(5)
    return run


class TestSingleRunning:

    def test_second_start_rejected_while_running(self, registry):
        release = threading.Event()
        first = registry.start(RENAME_JOB, blocking_job(release))
        try:
            with pytest.raises(ConcurrentJobError) as exc:
                registry.start(RENAME_JOB, lambda ctx: None)
            assert exc.value.job_type == RENAME_JOB
            assert registry.latest(RENAME_JOB) is first
            assert first.state.running
        finally:
            release.set()
            first.join(5)
        assert not first.state.running

    def test_other_type_may_run(self, registry):
        release = threading.Event()
        first = registry.start(RENAME_JOB, blocking_job(release))
        try:
            other = registry.start(DUPLICATE_SCAN_JOB, lambda ctx: None, background=False)
            assert not other.state.running
        finally:
            release.set()
            first.join(5)

    def test_restart_after_finish(self, registry):
        first = registry.start(RENAME_JOB, lambda ctx: None, background=False)
        second = registry.start(RENAME_JOB, lambda ctx: None, background=False)
        assert first.job_id != second.job_id
        assert registry.latest(RENAME_JOB) is second

    def test_finished_job_evicted_on_restart(self, registry):
        first = registry.start(RENAME_JOB, lambda ctx: None, background=False)
        scan = registry.start(DUPLICATE_SCAN_JOB, lambda ctx: None, background=False)
        second = registry.start(RENAME_JOB, lambda ctx: None, background=False)
        assert registry.get(first.job_id) is None
        assert registry.get(second.job_id) is second
        assert registry.get(scan.job_id) is scan


class TestLookup:

    def test_get_by_id(self, registry):
        ctx = registry.start(RENAME_JOB, lambda ctx: None, background=False)
        assert registry.get(ctx.job_id) is ctx
        assert registry.get("unknown") is None

    def test_is_running(self, registry):
        assert not registry.is_running(RENAME_JOB)
        registry.start(RENAME_JOB, lambda ctx: None, background=False)
        assert not registry.is_running(RENAME_JOB)


class TestFailure:

    def test_exception_sets_error_status(self, registry):
        def boom(ctx):
            raise RuntimeError("catalog unreachable")

        ctx = registry.start(RENAME_JOB, boom, background=False)
        assert ctx.state.status == "Error: catalog unreachable"
        assert not ctx.state.running


class TestCancel:

    def test_cancel_flag(self, registry):
        seen = []

        def run(ctx):
            ctx.cancel()
            seen.append(ctx.cancelled)

        registry.start(RENAME_JOB, run, background=False)
        assert seen == [True]
