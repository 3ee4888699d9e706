"""Parser module for extracting media information from catalog names and slugs.

Parsing is an ordered cascade of rules. Each rule either produces a
``ParsedTitle`` or declines, and the first rule that produces one wins:

1. series patterns (``S01E02``, ``Season 1 Episode 2``, ``1x02``)
2. movie with the last plausible release year
3. fallback: the whole cleaned name as a movie without year

Series rules run before the year rule because episode names often carry
an air date that would otherwise be read as a release year.
"""
import re
from dataclasses import dataclass
from typing import Callable

from .cleaner import clean_title
from .models import ParsedTitle


# Series patterns (order matters - most explicit first)
SERIES_PATTERNS = [
    # S01E01, S01.E01, S01_E01, S01-E01, S01 E01
    re.compile(r'(.*?)s(\d{1,2})[._\s-]?e(\d{1,3})', re.IGNORECASE),
    # Season 01 Episode 01
    re.compile(
        r'(.*?)season[._\s-]?(\d{1,2})[._\s-]?episode[._\s-]?(\d{1,3})',
        re.IGNORECASE,
    ),
    # 1x01
    re.compile(r'(.*?)(\d{1,2})x(\d{1,3})', re.IGNORECASE),
]

# Release years 1900-2099
YEAR_PATTERN = re.compile(r'\b(19\d{2}|20\d{2})\b')

# Season/episode extraction from catalog names; the last form has no season.
EPISODE_PATTERNS = [
    re.compile(r's(\d{1,2})[.\-_\s]?e(\d{1,3})', re.IGNORECASE),
    re.compile(r'season[\s\-_]*(\d{1,2})[\s\-_]*episode[\s\-_]*(\d{1,3})', re.IGNORECASE),
    re.compile(r'(\d{1,2})x(\d{1,3})', re.IGNORECASE),
    re.compile(r'ep[\s\-_]*(\d{1,3})', re.IGNORECASE),
]

_EXTENSION = re.compile(r'\.[^.]+$')
_AKA = re.compile(r'\sAKA\s', re.IGNORECASE)
_SLUG_SEPARATORS = re.compile(r'[/-]')
_EXTERNAL_ID = re.compile(r'\{(\d+)\}')
_CANONICAL_IDS = (
    re.compile(r'\{\d+\}.*\{tt\d+\}'),
    re.compile(r'\{tt\d+\}.*\{\d+\}'),
)


@dataclass(frozen=True)
class ParseRule:
    """One step of the parse cascade."""
    name: str
    apply: Callable[[str], ParsedTitle | None]


def _parse_series(raw: str) -> ParsedTitle | None:
    for pattern in SERIES_PATTERNS:
        match = pattern.search(raw)
        if not match:
            continue
        title = clean_title(match.group(1))
        season = int(match.group(2))
        episode = int(match.group(3))
        # A match with no title in front of it, or a zero season/episode,
        # is not usable; try the next pattern.
        if title and season > 0 and episode > 0:
            return ParsedTitle(
                title=title,
                is_series=True,
                season=season,
                episode=episode,
            )
    return None


def _parse_movie_year(raw: str) -> ParsedTitle | None:
    matches = list(YEAR_PATTERN.finditer(raw))
    if not matches:
        return None
    # Titles may contain years themselves; the release year is the last one.
    last = matches[-1]
    title = clean_title(raw[:last.start()])
    if not title:
        return None
    return ParsedTitle(title=title, year=int(last.group(1)))


def _parse_fallback(raw: str) -> ParsedTitle | None:
    title = clean_title(raw)
    if not title:
        return None
    return ParsedTitle(title=title)


PARSE_RULES: list[ParseRule] = [
    ParseRule("series", _parse_series),
    ParseRule("movie_year", _parse_movie_year),
    ParseRule("fallback", _parse_fallback),
]


def strip_extension(filename: str) -> str:
    """Remove the file extension and any " AKA " alternate-title suffix."""
    raw = _EXTENSION.sub('', filename)
    return _AKA.split(raw, maxsplit=1)[0]


def parse_filename(filename: str | None) -> ParsedTitle | None:
    """
    Parse a catalog name, filename or normalised slug.

    Args:
        filename: The raw name

    Returns:
        ParsedTitle, or None when nothing title-like is left
    """
    if not filename:
        return None
    raw = strip_extension(filename)
    for rule in PARSE_RULES:
        parsed = rule.apply(raw)
        if parsed is not None:
            return parsed
    return None


def slug_to_query(slug: str) -> str:
    """Turn a URL slug (``show-name/s01e02``) into a search string."""
    return _SLUG_SEPARATORS.sub(' ', slug)


def extract_external_id(name: str) -> str | None:
    """Return the ``{digits}`` external id marker embedded in *name*."""
    match = _EXTERNAL_ID.search(name)
    return match.group(1) if match else None


def has_canonical_ids(name: str) -> bool:
    """True when *name* already carries both ``{id}`` and ``{tt...}`` markers."""
    return any(pattern.search(name) for pattern in _CANONICAL_IDS)


def extract_season_episode(name: str = '') -> tuple[int | None, int | None]:
    """
    Extract season and episode numbers from a catalog name.

    Returns (season, episode); season is None for bare ``Ep 5`` names and
    both are None when nothing matches.
    """
    for pattern in EPISODE_PATTERNS:
        match = pattern.search(name)
        if not match:
            continue
        if pattern.groups == 2:
            return int(match.group(1)), int(match.group(2))
        return None, int(match.group(1))
    return None, None
