"""Series organisation and missing-episode reports."""
import logging
import re
from typing import Any, Protocol

from .models import CatalogEntry
from .parser import extract_external_id, extract_season_episode, parse_filename

log = logging.getLogger(__name__)

_ID_MARKERS = re.compile(r"\{[^}]*\}")


class SeriesInfoSource(Protocol):
    def get_series_info(self, series_id: int) -> dict[str, Any] | None: ...


def series_name_from(name: str) -> str:
    """Series title of an episode name, without ``{id}`` markers."""
    parsed = parse_filename(name)
    if parsed is not None and parsed.is_series:
        return parsed.title
    return _ID_MARKERS.sub("", name).strip()


def organize_series(entries: list[CatalogEntry]) -> dict[str, dict[str, Any]]:
    """
    Group series episodes by TMDB id.

    Only entries carrying a ``{id}`` marker, a season and an episode are
    kept. Returns ``{tmdb_id: {"series_name", "tmdb_id", "seasons":
    {season: {episode: entry}}}}``; a later duplicate of the same episode
    replaces the earlier one.
    """
    organized: dict[str, dict[str, Any]] = {}
    for entry in entries:
        season, episode = extract_season_episode(entry.name)
        tmdb_id = extract_external_id(entry.name)
        if not (season and episode and tmdb_id):
            continue

        series = organized.setdefault(tmdb_id, {
            "series_name": series_name_from(entry.name),
            "tmdb_id": tmdb_id,
            "seasons": {},
        })
        series["seasons"].setdefault(season, {})[episode] = entry
    return organized


def missing_episodes(
    organized: dict[str, dict[str, Any]],
    source: SeriesInfoSource,
) -> dict[str, dict[str, Any]]:
    """
    Compare organised series with the TMDB season layout.

    Series TMDB does not know are left out of the report.
    """
    report: dict[str, dict[str, Any]] = {}
    for tmdb_id, series in organized.items():
        info = source.get_series_info(int(tmdb_id))
        if not info:
            log.warning(f"No TMDB series info for {tmdb_id}")
            continue

        seasons_report = {}
        missing_seasons = []
        total_seasons = info.get("total_seasons") or 0
        for number in range(1, total_seasons + 1):
            season_info = info["seasons"].get(number, {})
            expected = season_info.get("episode_count") or 0
            available = series["seasons"].get(number, {})
            if not available:
                missing_seasons.append(number)
            seasons_report[number] = {
                "name": season_info.get("name") or f"Season {number}",
                "expected_episodes": expected,
                "available_episodes": len(available),
                "missing_episodes": [
                    ep for ep in range(1, expected + 1) if ep not in available
                ],
                "episodes": [available[ep] for ep in sorted(available)],
            }

        report[tmdb_id] = {
            "series_name": series["series_name"],
            "tmdb_id": tmdb_id,
            "seasons": seasons_report,
            "summary": {
                "total_seasons": total_seasons,
                "seasons_available": len(series["seasons"]),
                "missing_seasons": missing_seasons,
            },
        }
    return report
