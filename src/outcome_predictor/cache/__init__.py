"""TTL-bounded caching in front of rate-limited upstream providers."""

from outcome_predictor.cache.cached_fetch import CachedFetcher
from outcome_predictor.cache.ttl_cache import CacheEntry, CacheStats, TTLCache

__all__ = ["CacheEntry", "CacheStats", "CachedFetcher", "TTLCache"]
