"""Formatter module for generating canonical catalog names.

Movie:  ``{Title} {Year} {{tmdb_id}} {{imdb_id}}.mkv``
Series: ``{Series} S{ss}-E{ee}-{Episode Title} {{tmdb_id}} {{imdb_id}}.mkv``

The IMDb part is left out when no cross-reference id is known.
"""
import re

from .models import MetadataMatch, ParsedTitle


DEFAULT_EXTENSION = ".mkv"


def _squash(name: str) -> str:
    return re.sub(r'\s+', ' ', name).strip()


def format_id_markers(match: MetadataMatch) -> str:
    """Format the ``{tmdb} {imdb}`` markers of a match."""
    markers = f"{{{match.external_id}}}"
    if match.cross_ref_id:
        markers += f" {{{match.cross_ref_id}}}"
    return markers


def format_movie_name(match: MetadataMatch, extension: str = DEFAULT_EXTENSION) -> str:
    """
    Format a movie name.

    Args:
        match: TMDB movie match
        extension: Extension to append (including dot)

    Returns:
        Canonical name
    """
    parts = [match.title or ""]
    if match.year:
        parts.append(str(match.year))
    parts.append(format_id_markers(match))
    return f"{_squash(' '.join(parts))}{extension}"


def format_series_name(
    match: MetadataMatch,
    season: int,
    episode: int,
    extension: str = DEFAULT_EXTENSION,
) -> str:
    """
    Format a series episode name.

    Args:
        match: TMDB series match (with episode name)
        season: Season number
        episode: Episode number
        extension: Extension to append (including dot)

    Returns:
        Canonical name
    """
    episode_title = match.episode_name or f"Episode {episode}"
    name = (
        f"{match.series_name or ''} S{season:02d}-E{episode:02d}-{episode_title} "
        f"{format_id_markers(match)}"
    )
    return f"{_squash(name)}{extension}"


def format_canonical_name(
    info: ParsedTitle,
    match: MetadataMatch,
    extension: str = DEFAULT_EXTENSION,
) -> str:
    """Canonical name for a parsed title and its TMDB match."""
    if info.is_series:
        return format_series_name(match, info.season, info.episode, extension)
    return format_movie_name(match, extension)
