"""Pydantic configuration models with validation."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import (
    AliasChoices,
    AliasPath,
    BaseModel,
    Field,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

Environment = Literal["dev", "test", "prod"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
LogFormat = Literal["json", "console"]
CacheBackendName = Literal["memory", "diskcache", "redis"]


def _normalize_path(value: Any) -> Path:
    """Normalize a path-like value. MUST NOT touch the filesystem."""
    if isinstance(value, Path):
        return value.expanduser()
    if isinstance(value, str):
        return Path(value).expanduser()
    raise TypeError(f"Expected path-like value, got: {type(value)!r}")


class CacheConfig(BaseModel):
    """Cache configuration (backend-agnostic)."""

    backend: CacheBackendName = Field(
        default="diskcache",
        description="Cache backend: 'memory', 'diskcache' (SQLite) or 'redis'.",
    )
    directory: Path = Field(
        default=Path("./.cache/arflix"),
        validation_alias=AliasChoices("dir", "directory"),
        description="Diskcache directory (only when backend=diskcache).",
    )
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL (only when backend=redis).",
    )
    ttl_seconds: int = Field(
        default=3600,
        description="Default TTL for cache entries (seconds).",
    )

    @field_validator("directory", mode="before")
    @classmethod
    def _validate_dir(cls, v: Any) -> Path:
        return _normalize_path(v)

    @field_validator("ttl_seconds")
    @classmethod
    def _validate_ttl(cls, v: int) -> int:
        if v < 0:
            raise ValueError("cache ttl_seconds must be >= 0")
        return v


class StreamsConfig(BaseModel):
    """Stream aggregation settings (YAML section: streams.*)."""

    addon_timeout_seconds: float = Field(
        default=10.0,
        description="Per-request timeout for addon stream lookups.",
    )
    manifest_timeout_seconds: float = Field(
        default=10.0,
        description="Timeout for fetching an addon manifest at registration.",
    )
    max_concurrent_addons: int = Field(
        default=8,
        description="Max addons queried in parallel for one request.",
    )
    max_manifest_redirects: int = Field(
        default=5,
        description="Redirects followed when probing an addon manifest.",
    )
    identifier_cache_ttl_seconds: int = Field(
        default=3600,
        description="TTL for resolved identifier bundles (seconds).",
    )
    preferred_direct_markers: list[str] = Field(
        default_factory=lambda: ["mediafusion", "comet", "/playback/"],
        description=(
            "Substrings of the original stream URL that mark a directly "
            "playable source; matching streams are ranked first."
        ),
    )
    relay_base_url: str = Field(
        default="",
        description="Video relay endpoint. Empty disables URL rewriting.",
    )
    relay_host_markers: list[str] = Field(
        default_factory=lambda: ["real-debrid.com", "torrentio.strem.fun/resolve/"],
        description="URL substrings that are always routed through the relay.",
    )

    @field_validator("addon_timeout_seconds", "manifest_timeout_seconds")
    @classmethod
    def _validate_timeouts(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("timeouts must be > 0")
        return v

    @field_validator("max_concurrent_addons")
    @classmethod
    def _validate_concurrency(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_concurrent_addons must be >= 1")
        return v


class AppConfig(BaseModel):
    """
    Canonical application configuration (validated, final).

    YAML is sectioned (http/logging/tmdb/cache/streams). Environment
    variables go through EnvOverrides so load.py can enforce
    defaults < YAML < ENV < CLI.
    """

    app_name: str = Field(default="arflix", description="Application name.")
    environment: Environment = Field(
        default="dev",
        description="Runtime environment (affects defaults like log format).",
    )

    http_timeout_seconds: float = Field(
        default=15.0,
        validation_alias=AliasChoices(
            "http_timeout_seconds",
            AliasPath("http", "timeout_seconds"),
        ),
        description="Default timeout for outgoing HTTP requests.",
    )
    http_user_agent: str = Field(
        default="Arflix/0.1.0",
        validation_alias=AliasChoices(
            "http_user_agent",
            AliasPath("http", "user_agent"),
        ),
        description="User-Agent for outgoing HTTP requests.",
    )

    log_level: LogLevel = Field(
        default="INFO",
        validation_alias=AliasChoices(
            "log_level",
            AliasPath("logging", "level"),
        ),
    )
    log_format: Optional[LogFormat] = Field(
        default=None,
        validation_alias=AliasChoices(
            "log_format",
            AliasPath("logging", "format"),
        ),
        description="console/json. If unset, derived from environment.",
    )

    tmdb_api_key: str | None = Field(
        default=None,
        description="TMDB API key. Without it tmdb: ids resolve to the TMDB id only.",
    )
    tmdb_base_url: str = Field(
        default="https://api.themoviedb.org/3",
        validation_alias=AliasChoices(
            "tmdb_base_url",
            AliasPath("tmdb", "base_url"),
        ),
    )

    cache: CacheConfig = Field(default_factory=CacheConfig)
    streams: StreamsConfig = Field(default_factory=StreamsConfig)

    @field_validator("http_timeout_seconds")
    @classmethod
    def _validate_http_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("http_timeout_seconds must be > 0")
        return v

    @model_validator(mode="after")
    def _derive_defaults(self) -> "AppConfig":
        if self.log_format is None:
            self.log_format = "json" if self.environment == "prod" else "console"
        return self

    def to_sectioned_dict(self) -> dict[str, Any]:
        """Dump configuration in the sectioned shape used by config.yaml."""
        return {
            "app_name": self.app_name,
            "environment": self.environment,
            "http": {
                "timeout_seconds": self.http_timeout_seconds,
                "user_agent": self.http_user_agent,
            },
            "logging": {"level": self.log_level, "format": self.log_format},
            "tmdb": {"base_url": self.tmdb_base_url},
            "cache": {
                "backend": self.cache.backend,
                "dir": str(self.cache.directory),
                "redis_url": self.cache.redis_url,
                "ttl_seconds": self.cache.ttl_seconds,
            },
            "streams": self.streams.model_dump(),
        }


class EnvOverrides(BaseSettings):
    """
    Environment-variable overrides (all optional).

    load.py reads ARFLIX_* variables, keeps the ones that are set and
    merges them over YAML/defaults before validating AppConfig.

    Examples:
    - ARFLIX_LOG_LEVEL
    - ARFLIX_TMDB_API_KEY
    - ARFLIX_CACHE_BACKEND
    - ARFLIX_STREAMS_RELAY_BASE_URL
    """

    model_config = SettingsConfigDict(
        env_prefix="ARFLIX_",
        extra="ignore",
        case_sensitive=False,
    )

    app_name: Optional[str] = None
    environment: Optional[Environment] = None

    http_timeout_seconds: Optional[float] = None
    http_user_agent: Optional[str] = None

    log_level: Optional[LogLevel] = None
    log_format: Optional[LogFormat] = None

    tmdb_api_key: Optional[str] = None
    tmdb_base_url: Optional[str] = None

    cache_backend: Optional[CacheBackendName] = None
    cache_dir: Optional[Path] = None
    cache_redis_url: Optional[str] = None
    cache_ttl_seconds: Optional[int] = None

    streams_addon_timeout_seconds: Optional[float] = None
    streams_max_concurrent_addons: Optional[int] = None
    streams_identifier_cache_ttl_seconds: Optional[int] = None
    streams_relay_base_url: Optional[str] = None

    @field_validator("cache_dir", mode="before")
    @classmethod
    def _validate_paths(cls, v: Any) -> Any:
        if v is None:
            return None
        return _normalize_path(v)

    def to_update_dict(self) -> dict[str, Any]:
        """Return only values that were actually provided (non-None)."""
        return self.model_dump(exclude_none=True)
