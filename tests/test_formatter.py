#!/usr/bin/env python3
"""
Test suite for streammatch/formatter.py: canonical catalog names
"""

from streammatch.formatter import (
    format_canonical_name,
    format_id_markers,
    format_movie_name,
    format_series_name,
)
from streammatch.models import MetadataMatch, ParsedTitle


class TestMovie:

    def test_full_name(self, movie_match):
        assert format_movie_name(movie_match) == "Inception 2010 {27205} {tt1375666}.mkv"

    def test_without_imdb(self):
        match = MetadataMatch(external_id=949, title="Heat", year=1995)
        assert format_movie_name(match) == "Heat 1995 {949}.mkv"

    def test_without_year(self):
        match = MetadataMatch(external_id=1, title="Untitled")
        assert format_movie_name(match) == "Untitled {1}.mkv"

    def test_custom_extension(self, movie_match):
        assert format_movie_name(movie_match, ".mp4").endswith("{tt1375666}.mp4")


class TestSeries:

    def test_full_name(self, series_match):
        assert format_series_name(series_match, 1, 1) == \
            "Breaking Bad S01-E01-Pilot {1396} {tt0903747}.mkv"

    def test_two_digit_padding(self, series_match):
        assert "S10-E12-" in format_series_name(series_match, 10, 12)

    def test_missing_episode_title(self):
        match = MetadataMatch(external_id=5, series_name="Show")
        assert format_series_name(match, 2, 3) == "Show S02-E03-Episode 3 {5}.mkv"


class TestCanonical:

    def test_dispatch_movie(self, movie_match):
        info = ParsedTitle(title="inception", year=2010)
        assert format_canonical_name(info, movie_match) == "Inception 2010 {27205} {tt1375666}.mkv"

    def test_dispatch_series(self, series_match):
        info = ParsedTitle(title="breaking bad", is_series=True, season=1, episode=1)
        assert format_canonical_name(info, series_match).startswith("Breaking Bad S01-E01-Pilot")

    def test_markers(self, movie_match):
        assert format_id_markers(movie_match) == "{27205} {tt1375666}"
