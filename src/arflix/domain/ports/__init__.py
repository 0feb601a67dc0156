from .addon_repository import AddonRepositoryPort
from .cache import CachePort
from .manifest import ManifestProbePort
from .tmdb import TmdbClientPort, TmdbMediaType

__all__ = [
    "AddonRepositoryPort",
    "CachePort",
    "ManifestProbePort",
    "TmdbClientPort",
    "TmdbMediaType",
]
