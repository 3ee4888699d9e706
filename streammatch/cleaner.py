"""Junk-token removal for titles pulled out of catalog names and slugs.

The parser hands this module the part of a filename that should hold the
title; everything that is not title text (quality, source, codec, audio
language, release group and site names, edition adjectives, bracketed
ids) is stripped and the separators are normalised to single spaces.
"""

import re

# ---------------------------------------------------------------------------
# Junk vocabulary
# ---------------------------------------------------------------------------

# Quality / resolution
_QUALITY = ['4k', 'uhd', '2160p', '1080p', '720p', '480p', 'hd']

# Source / rip type
_SOURCE = [
    'blu-ray', 'bluray', 'brrip', 'bdrip', 'web-dl', 'webrip', 'web',
    'hdrip', 'dvdrip', 'hdts', 'hdcam', 'camrip', 'predvdrip', 'hdtc',
    'amzn', 'nf', 'hbo', 'hc',
]

# Video / audio codec
_CODEC = [
    'x264', 'h264', 'x265', 'h265', 'hevc', 'avc', '10bit', '8bit',
    'dts-hd', 'dts', 'ac3', 'dd5.1', 'ddp 5.1', 'ddp2.0', 'aac', 'mp3',
]

# Audio language / subtitles
_LANGUAGE = [
    'dual audio', 'dual-audio', 'multi-audio', 'hindi', 'english',
    'korean', 'japanese', 'tamil', 'telugu', 'french', 'spanish',
    'ukrainian', 'turkish', 'dubbed', 'org', 'esub', 'esubs', 'msub',
    'msubs', 'hc-esub', 'hc-sub',
]

# Release groups and sites
_GROUPS = [
    'bollyflix', 'moviesmod', 'themoviesflix', 'moonflix', 'vegamovies',
    '1337x', 'topmovies', 'yify', 'yts', 'rarbg', 'torrent', 'saon', 'tfa',
]

# Edition adjectives and other noise
_OTHER = [
    'uncut', 'unrated', 'extended', 'remastered', 'special edition',
    'x-rated', 'reloaded version', 'joint economic area',
]

# Leftover extensions and domain suffixes
_DOMAINS = ['mkv', 'mp4', 'avi', 'com', 'in', 'net', 'info', 'email']

JUNK_KEYWORDS = (
    _QUALITY + _SOURCE + _CODEC + _LANGUAGE + _GROUPS + _OTHER + _DOMAINS
)

# Longest alternatives first so "web-dl" wins over "web" and "dts-hd" over "dts".
_JUNK_RE = re.compile(
    r'\b(' + '|'.join(
        re.escape(k) for k in sorted(set(JUNK_KEYWORDS), key=len, reverse=True)
    ) + r')\b',
    re.IGNORECASE,
)

_BRACKETS = re.compile(r'\[[^\]]*\]')
_BRACES = re.compile(r'\{[^}]*\}')
_SEPARATORS = re.compile(r'[._\-]+')
_EMPTY_PARENS = re.compile(r'\(\s*\)')
_SPACES = re.compile(r'\s+')
_DANGLING = re.compile(r'^[\s(\[]+|[\s(\[]+$')
_NON_ALNUM = re.compile(r'[^a-z0-9]')


def clean_title(raw: str | None) -> str:
    """Strip junk tokens and bracketed metadata from *raw*.

    Always returns a string, possibly empty.
    """
    if not raw:
        return ''

    title = _BRACKETS.sub('', raw)
    title = _BRACES.sub('', title)
    title = _JUNK_RE.sub('', title)
    title = _SEPARATORS.sub(' ', title)
    # Junk removal can bring new junk tokens together ("dual.audio" -> "dual audio").
    title = _JUNK_RE.sub('', title)
    title = _EMPTY_PARENS.sub('', title)
    title = _SPACES.sub(' ', title)
    # A year cut off the end can leave its opening bracket behind.
    title = _DANGLING.sub('', title)
    return title.strip()


def normalize(text: str | None) -> str:
    """Case-fold and keep only ASCII letters and digits."""
    if not text:
        return ''
    return _NON_ALNUM.sub('', text.lower())
