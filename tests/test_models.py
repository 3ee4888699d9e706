#!/usr/bin/env python3
"""
Test suite for streammatch/models.py: title invariants and serialisation
"""

import pytest

from streammatch.models import BatchJobState, CatalogEntry, ParsedTitle, RenameFailure


class TestParsedTitle:

    @pytest.mark.parametrize("kwargs", [
        {"is_series": True, "season": None, "episode": 1},
        {"is_series": True, "season": 1, "episode": 0},
        {"is_series": True, "season": 1, "episode": 1, "year": 2001},
        {"is_series": False, "season": 1},
    ])
    def test_invalid_combinations(self, kwargs):
        with pytest.raises(ValueError):
            ParsedTitle(title="X", **kwargs)

    def test_frozen(self):
        parsed = ParsedTitle(title="X")
        with pytest.raises(AttributeError):
            parsed.title = "Y"


class TestCatalogEntry:

    def test_from_api(self):
        e = CatalogEntry.from_api({"id": 7, "name": "a.mkv", "size": None, "createdAt": "2024-01-01"})
        assert (e.id, e.size, e.created_at) == ("7", 0, "2024-01-01")
        assert e.to_dict()["createdAt"] == "2024-01-01"


class TestBatchJobState:

    def test_to_dict(self):
        state = BatchJobState(running=True, current=2, total=5, status="Processing: a.mkv")
        state.failures.append(RenameFailure("9", "b.mkv", "API rename failed"))
        state.pending_ai_count = 1
        assert state.to_dict() == {
            "running": True,
            "current": 2,
            "total": 5,
            "status": "Processing: a.mkv",
            "failures": [{"id": "9", "name": "b.mkv", "reason": "API rename failed"}],
            "pendingAI": 1,
        }
