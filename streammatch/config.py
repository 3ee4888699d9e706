"""Settings loaded from the environment and .env files."""
import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv


TMDB_BASE_URL = "https://api.themoviedb.org/3"
STREAM_API_BASE = "https://streamp2p.com/api/v1/video/manage"
GEMINI_API_URL = (
    "https://generativelanguage.googleapis.com/v1beta/models/"
    "gemini-pro:generateContent"
)
PLAYER_BASE_URL = "https://moonflix.p2pplay.pro/"
GEMINI_PLACEHOLDER_KEY = "YOUR_GEMINI_API_KEY_HERE"


def load_env_files() -> None:
    """
    Load .env files into the process environment.

    Priority:
    1. Variables already set in the environment
    2. .env file in current directory
    3. .env file in user home directory
    """
    for env_path in (Path.cwd() / ".env", Path.home() / ".env"):
        if env_path.exists():
            # override=False keeps values that are already set.
            load_dotenv(env_path, override=False)


def _split_keys(value: str | None) -> list[str]:
    if not value:
        return []
    return [k.strip() for k in value.split(",") if k.strip()]


@dataclass
class Settings:
    """Runtime configuration."""
    tmdb_api_key: str | None = None
    gemini_api_key: str | None = None
    stream_api_keys: list[str] = field(default_factory=list)
    stream_api_base: str = STREAM_API_BASE
    tmdb_base_url: str = TMDB_BASE_URL
    gemini_api_url: str = GEMINI_API_URL
    player_base_url: str = PLAYER_BASE_URL
    cache_ttl_days: float = 15
    cache_sweep_hours: float = 6
    rename_delay: float = 0.5
    log_file: Path | None = None

    @property
    def cache_ttl(self) -> float:
        return self.cache_ttl_days * 24 * 60 * 60

    @property
    def cache_sweep_interval(self) -> float:
        return self.cache_sweep_hours * 60 * 60

    @property
    def has_gemini_key(self) -> bool:
        return bool(self.gemini_api_key) and self.gemini_api_key != GEMINI_PLACEHOLDER_KEY

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "Settings":
        """Build settings from *environ* (defaults to ``os.environ`` after loading .env)."""
        if environ is None:
            load_env_files()
            environ = dict(os.environ)

        log_file = environ.get("LOG_FILE")
        return cls(
            tmdb_api_key=environ.get("TMDB_API_KEY") or None,
            gemini_api_key=environ.get("GEMINI_API_KEY") or None,
            stream_api_keys=_split_keys(environ.get("STREAM_API_KEYS")),
            stream_api_base=environ.get("STREAM_API_BASE", STREAM_API_BASE),
            tmdb_base_url=environ.get("TMDB_BASE_URL", TMDB_BASE_URL),
            gemini_api_url=environ.get("GEMINI_API_URL", GEMINI_API_URL),
            player_base_url=environ.get("PLAYER_BASE_URL", PLAYER_BASE_URL),
            cache_ttl_days=float(environ.get("CACHE_TTL_DAYS", 15)),
            cache_sweep_hours=float(environ.get("CACHE_SWEEP_HOURS", 6)),
            rename_delay=float(environ.get("RENAME_DELAY", 0.5)),
            log_file=Path(log_file) if log_file else None,
        )
