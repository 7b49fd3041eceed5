"""Source locations and fetch limits for a collection run."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Final

from .env import optional_env_int, optional_env_var
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy

if TYPE_CHECKING:
    from .storage import StorageConfig

UN_MEMBERS_URL: Final[str] = "https://www.un.org/en/about-us/member-states"
SOVEREIGN_STATES_URL: Final[str] = "https://en.wikipedia.org/wiki/List_of_sovereign_states"
ISO_3166_URL: Final[str] = "https://en.wikipedia.org/wiki/List_of_ISO_3166_country_codes"
FLAGS_URL: Final[str] = "https://en.wikipedia.org/wiki/Gallery_of_sovereign_state_flags"
CURRENCIES_URL: Final[str] = "https://en.wikipedia.org/wiki/List_of_circulating_currencies"
EMOJIS_URL: Final[str] = "https://en.wikipedia.org/wiki/Regional_indicator_symbol"
CALLING_CODES_URL: Final[str] = "https://en.wikipedia.org/wiki/List_of_country_calling_codes"
LANGUAGE_CODES_URL: Final[str] = "https://en.wikipedia.org/wiki/List_of_ISO_639_language_codes"
LANGUAGE_ZONES_URL: Final[str] = (
    "https://en.wikipedia.org/wiki/List_of_official_languages_by_country_and_territory"
)
CAPITALS_URL: Final[str] = (
    "https://en.wikipedia.org/wiki/"
    "List_of_countries_and_dependencies_and_their_capitals_in_native_languages"
)

DEFAULT_ALIASES_PATH: Final[Path] = Path("input") / "countries.json"
DEFAULT_MAX_CONCURRENCY: Final[int] = 4
DEFAULT_USER_AGENT: Final[str] = "geofacts/0.1 (reference data collector)"


@dataclass(frozen=True, slots=True)
class SourceUrls:
    un_members: str = UN_MEMBERS_URL
    sovereign_states: str = SOVEREIGN_STATES_URL
    regions: str = ISO_3166_URL
    flags: str = FLAGS_URL
    currencies: str = CURRENCIES_URL
    emojis: str = EMOJIS_URL
    calling_codes: str = CALLING_CODES_URL
    language_codes: str = LANGUAGE_CODES_URL
    language_zones: str = LANGUAGE_ZONES_URL
    capitals: str = CAPITALS_URL


@dataclass(frozen=True, slots=True)
class SourcesConfig:
    aliases_path: Path = DEFAULT_ALIASES_PATH
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY
    urls: SourceUrls = field(default_factory=SourceUrls)
    wikipedia: ResilienceConfig = field(
        default_factory=lambda: wikipedia_resilience(user_agent=DEFAULT_USER_AGENT)
    )
    un: ResilienceConfig = field(
        default_factory=lambda: un_resilience(user_agent=DEFAULT_USER_AGENT)
    )


def wikipedia_resilience(
    *, user_agent: str, cache_path: Path | None = None
) -> ResilienceConfig:
    return ResilienceConfig(
        name="wikipedia",
        ratelimit=RateLimit(max_calls=5, per_seconds=1.0),
        retry=RetryPolicy(total=5),
        cache=_cache_config(cache_path),
        default_headers={"User-Agent": user_agent},
    )


def un_resilience(*, user_agent: str, cache_path: Path | None = None) -> ResilienceConfig:
    return ResilienceConfig(
        name="un",
        ratelimit=RateLimit(max_calls=1, per_seconds=1.0),
        cache=_cache_config(cache_path),
        default_headers={"User-Agent": user_agent},
    )


def _cache_config(cache_path: Path | None) -> CacheConfig:
    if cache_path is None:
        return CacheConfig(backend="memory")
    return CacheConfig(backend="sqlite", sqlite_path=str(cache_path))


def get_sources_config(
    *,
    storage: StorageConfig | None = None,
    aliases_path: Path | None = None,
    max_concurrency: int | None = None,
) -> SourcesConfig:
    user_agent = optional_env_var("GEOFACTS_USER_AGENT") or DEFAULT_USER_AGENT
    cache_path = storage.http_cache_path() if storage is not None else None
    env_aliases = optional_env_var("GEOFACTS_ALIASES")
    return SourcesConfig(
        aliases_path=aliases_path or (Path(env_aliases) if env_aliases else DEFAULT_ALIASES_PATH),
        max_concurrency=max_concurrency
        or optional_env_int("GEOFACTS_MAX_CONCURRENCY", default=DEFAULT_MAX_CONCURRENCY),
        wikipedia=wikipedia_resilience(user_agent=user_agent, cache_path=cache_path),
        un=un_resilience(user_agent=user_agent, cache_path=cache_path),
    )
