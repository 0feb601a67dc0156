from __future__ import annotations

from .load import load_config
from .schema import AppConfig, CacheConfig, EnvOverrides, StreamsConfig

__all__ = ["AppConfig", "CacheConfig", "EnvOverrides", "StreamsConfig", "load_config"]
