"""Shared fixtures: in-memory collaborators and a controllable clock."""
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from streammatch.models import CatalogEntry, MetadataMatch, ParsedTitle


class FakeCatalog:
    """Catalog collaborator backed by a list of entries."""

    def __init__(self, entries=None, rename_ok=True):
        self.entries = list(entries or [])
        self.rename_ok = rename_ok
        self.searches = []
        self.renames = []

    def search(self, query=""):
        self.searches.append(query)
        if query.startswith("{") and query.endswith("}"):
            return [e for e in self.entries if query in e.name]
        words = query.lower().split()
        return [e for e in self.entries if all(w in e.name.lower() for w in words)]

    def fetch_all(self):
        return list(self.entries)

    def rename(self, video_id, new_name):
        self.renames.append((video_id, new_name))
        return self.rename_ok


class FakeMetadata:
    """Metadata collaborator answering from a title -> match mapping."""

    def __init__(self, matches=None, series=None):
        self.matches = matches or {}
        self.series = series or {}
        self.calls = []

    def search_metadata(self, info):
        self.calls.append(info)
        return self.matches.get(info.title.lower())

    def get_series_info(self, series_id):
        return self.series.get(series_id)


class FakeAI:
    """AI collaborator answering from a filename -> ParsedTitle mapping."""

    def __init__(self, answers=None):
        self.answers = answers or {}
        self.calls = []

    def parse_with_ai(self, filename):
        self.calls.append(filename)
        return self.answers.get(filename)


class FakeClock:
    def __init__(self, now=1_000_000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


def entry(video_id, name, size=0):
    return CatalogEntry(id=video_id, name=name, size=size)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def movie_match():
    return MetadataMatch(external_id=27205, cross_ref_id="tt1375666", title="Inception", year=2010)


@pytest.fixture
def series_match():
    return MetadataMatch(
        external_id=1396,
        cross_ref_id="tt0903747",
        series_name="Breaking Bad",
        episode_name="Pilot",
        season=1,
        episode=1,
    )


@pytest.fixture
def ai_movie():
    return ParsedTitle(title="Inception", year=2010)
