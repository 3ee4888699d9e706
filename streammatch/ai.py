"""AI fallback parser backed by the Google Gemini REST API.

Only called after the local parser and the metadata lookup have both
failed. Every failure (missing key, HTTP error, malformed JSON, answer
that is not a usable title) is logged and returned as ``None``.
"""
import json
import logging
import re

import requests

from .config import GEMINI_API_URL, GEMINI_PLACEHOLDER_KEY
from .models import ParsedTitle

log = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30

_CODE_FENCE = re.compile(r'```(?:json)?')

PROMPT_TEMPLATE = """\
You are an expert media file name parser. Your task is to extract structured information from a given filename.
Analyze the following filename and return a JSON object with the media's type, title, and year (for movies) or season/episode (for TV shows).

**RULES:**
1.  The output MUST be a single, valid JSON object. Do not include any other text or markdown formatting.
2.  For 'type', use "movie" or "tv".
3.  If it's a movie, provide 'title' and 'year'. If the year is not present, set 'year' to null.
4.  If it's a TV show, provide 'title', 'season', and 'episode'.
5.  Clean the title by removing all junk like quality (1080p), source (BluRay), release groups (YIFY), and websites (MoviesMod).
6.  Do not invent information. If a value cannot be determined, set it to null.

**EXAMPLE 1:**
Input: "Master.And.Commander.The.Far.Side.Of.The.World.2003.1080p.BluRay.x264.mkv"
Output:
{{"type": "movie", "title": "Master and Commander The Far Side of the World", "year": 2003, "season": null, "episode": null}}

**EXAMPLE 2:**
Input: "DAN.DA.DAN.Season.2.S02E09.Episode.21.-.I.Want.to.Rebuild.the.House.1080p.AMZN.WEB-DL.mkv"
Output:
{{"type": "tv", "title": "Dan Da Dan", "year": null, "season": 2, "episode": 9}}

**FILENAME TO PARSE:**
Input: "{filename}"
Output:
"""


def _as_int(value) -> int | None:
    try:
        return int(value) if value is not None else None
    except (TypeError, ValueError):
        return None


def to_parsed_title(data: dict) -> ParsedTitle | None:
    """Convert the model's JSON answer into a ParsedTitle, or None if unusable."""
    title = data.get("title")
    if not isinstance(title, str) or not title.strip():
        return None
    title = title.strip()

    if data.get("type") == "tv":
        season = _as_int(data.get("season"))
        episode = _as_int(data.get("episode"))
        if not season or not episode or season < 1 or episode < 1:
            return None
        return ParsedTitle(title=title, is_series=True, season=season, episode=episode)

    return ParsedTitle(title=title, year=_as_int(data.get("year")) or None)


class GeminiParser:
    """Parse difficult filenames with Gemini ``generateContent``."""

    def __init__(
        self,
        api_key: str | None,
        api_url: str = GEMINI_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.api_key = api_key
        self.api_url = api_url
        self.timeout = timeout

    @property
    def enabled(self) -> bool:
        return bool(self.api_key) and self.api_key != GEMINI_PLACEHOLDER_KEY

    def parse_with_ai(self, filename: str) -> ParsedTitle | None:
        """
        Ask Gemini to parse *filename*.

        Returns:
            ParsedTitle, or None when the key is missing or the answer is unusable
        """
        if not self.enabled:
            log.warning("Gemini API key is missing or a placeholder; skipping AI fallback")
            return None

        log.info(f'Using Gemini AI fallback for filename: "{filename}"')
        payload = {
            "contents": [
                {"parts": [{"text": PROMPT_TEMPLATE.format(filename=filename)}]}
            ]
        }
        try:
            response = requests.post(
                self.api_url,
                json=payload,
                headers={
                    "Content-Type": "application/json",
                    "x-goog-api-key": self.api_key,
                },
                timeout=self.timeout,
            )
            response.raise_for_status()
            text = response.json()["candidates"][0]["content"]["parts"][0]["text"]
            data = json.loads(_CODE_FENCE.sub("", text).strip())
        except requests.exceptions.RequestException as e:
            log.error(f"Gemini API request failed: {e}")
            return None
        except (KeyError, IndexError, TypeError, ValueError) as e:
            log.error(f"Invalid response from Gemini API: {e}")
            return None

        if not isinstance(data, dict):
            log.error("Gemini answer is not a JSON object")
            return None

        parsed = to_parsed_title(data)
        if parsed is None:
            log.warning(f'Gemini could not parse "{filename}"')
        return parsed
