#!/usr/bin/env python3
"""
Test suite for streammatch/episodes.py: series grouping and missing episodes
"""

from unittest.mock import MagicMock

from conftest import entry
from streammatch.episodes import missing_episodes, organize_series, series_name_from


EPISODES = [
    entry("e1", "Breaking Bad S01-E01-Pilot {1396} {tt0903747}.mkv"),
    entry("e2", "Breaking Bad S01-E03-And the Bag's in the River {1396} {tt0903747}.mkv"),
    entry("e3", "Breaking Bad S03-E01-No Mas {1396} {tt0903747}.mkv"),
    entry("m1", "Heat 1995 {949} {tt0113277}.mkv"),
    entry("x1", "Untagged Show S01E01.mkv"),
]

SERIES_INFO = {
    "name": "Breaking Bad",
    "total_seasons": 3,
    "total_episodes": 23,
    "seasons": {
        1: {"episode_count": 4, "name": "Season 1", "air_date": "2008-01-20"},
        2: {"episode_count": 13, "name": "Season 2", "air_date": "2009-03-08"},
        3: {"episode_count": 2, "name": "Season 3", "air_date": "2010-03-21"},
    },
}


class TestOrganize:

    def test_only_tagged_episodes(self):
        organized = organize_series(EPISODES)
        assert list(organized) == ["1396"]
        series = organized["1396"]
        assert series["series_name"] == "Breaking Bad"
        assert sorted(series["seasons"]) == [1, 3]
        assert sorted(series["seasons"][1]) == [1, 3]

    def test_series_name_without_markers(self):
        assert series_name_from("Some Name {12}") == "Some Name"


class TestMissing:

    def test_report(self):
        source = MagicMock()
        source.get_series_info.return_value = SERIES_INFO
        report = missing_episodes(organize_series(EPISODES), source)

        source.get_series_info.assert_called_once_with(1396)
        seasons = report["1396"]["seasons"]
        assert seasons[1]["missing_episodes"] == [2, 4]
        assert seasons[1]["available_episodes"] == 2
        assert seasons[2]["missing_episodes"] == list(range(1, 14))
        assert seasons[3]["missing_episodes"] == [2]
        assert [e.id for e in seasons[1]["episodes"]] == ["e1", "e2"]
        assert report["1396"]["summary"] == {
            "total_seasons": 3,
            "seasons_available": 2,
            "missing_seasons": [2],
        }

    def test_unknown_series_left_out(self):
        source = MagicMock()
        source.get_series_info.return_value = None
        assert missing_episodes(organize_series(EPISODES), source) == {}

    def test_null_season_counts(self):
        source = MagicMock()
        source.get_series_info.return_value = {
            "name": "Breaking Bad",
            "total_seasons": None,
            "total_episodes": None,
            "seasons": {1: {"episode_count": None}},
        }
        report = missing_episodes(organize_series(EPISODES), source)
        assert report["1396"]["seasons"] == {}
        assert report["1396"]["summary"]["total_seasons"] == 0
